"""Assertions over HTTP responses (status, headers, timing, JSON body)."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any, NamedTuple

from assertkit.assertions.base import BaseAssertions, FailureKind
from assertkit.assertions.capabilities import HttpResponse, Page, RequestClient
from assertkit.assertions.schema import validate_schema
from assertkit.config import ApiAssertionOptions, AssertionOptions, SchemaNode

SECURITY_HEADERS = (
    "x-content-type-options",
    "x-frame-options",
    "x-xss-protection",
    "strict-transport-security",
)


_MISSING = object()


def get_nested_value(data: Any, path: str, default: Any = None) -> Any:
    """Resolve a dotted path such as ``"data.user.id"``; ``default`` when absent.

    Numeric segments index into lists (``"items.0.name"``).
    """
    current = data
    for key in path.split("."):
        if isinstance(current, Mapping):
            if key not in current:
                return default
            current = current[key]
        elif isinstance(current, list) and key.isdigit() and int(key) < len(current):
            current = current[int(key)]
        else:
            return default
    return current


def _strict_equal(actual: Any, expected: Any) -> bool:
    if actual is _MISSING:
        return False
    # True == 1 in Python but not in JSON
    if isinstance(actual, bool) or isinstance(expected, bool):
        return type(actual) is type(expected) and actual == expected
    return actual == expected


def _lower_headers(response: HttpResponse) -> dict[str, str]:
    return {name.lower(): value for name, value in response.headers.items()}


class _Check(NamedTuple):
    passed: bool
    message: str
    kind: FailureKind


class ApiAssertions(BaseAssertions):
    """Validates HTTP responses, aggregating every mismatch per call.

    A report that includes an unparseable body is always raised, even in soft
    mode: nothing else about such a response can be trusted.
    """

    def __init__(
        self,
        page: Page | None = None,
        *,
        request: RequestClient | None = None,
        screenshot_dir: str | Path = "test-results/screenshots",
        logger: logging.Logger | None = None,
    ):
        super().__init__(page, screenshot_dir=screenshot_dir, logger=logger)
        self.request = request

    def assert_response(self, response: HttpResponse, options: ApiAssertionOptions | None = None) -> None:
        options = options or ApiAssertionOptions()
        headers = _lower_headers(response)
        checks: list[_Check] = []

        if options.status_code is not None:
            checks.append(
                _Check(
                    response.status == options.status_code,
                    f"Expected status code {options.status_code}, got {response.status}",
                    FailureKind.STATUS_MISMATCH,
                )
            )

        actual_content_type = headers.get("content-type", "")
        if options.content_type is not None:
            checks.append(
                _Check(
                    options.content_type in actual_content_type,
                    f'Expected content type to contain "{options.content_type}", '
                    f'got "{actual_content_type}"',
                    FailureKind.HEADER_MISMATCH,
                )
            )

        if options.response_time is not None:
            actual_time = response.response_time or 0
            checks.append(
                _Check(
                    actual_time <= options.response_time,
                    f"Expected response time <= {options.response_time:g}ms, got {actual_time:g}ms",
                    FailureKind.TIMING_VIOLATION,
                )
            )

        for header_name, expected_value in (options.expected_headers or {}).items():
            actual_value = headers.get(header_name.lower())
            checks.append(
                _Check(
                    actual_value == expected_value,
                    f'Expected header "{header_name}" to be "{expected_value}", got "{actual_value}"',
                    FailureKind.HEADER_MISMATCH,
                )
            )

        if options.validate_json and "application/json" in actual_content_type:
            checks.extend(self._json_checks(response, options.expected_schema))

        self.logger.info(
            f"Evaluated {len(checks)} response check(s) against status {response.status}"
        )
        self._report(checks, "API Response assertion failed", options)

    def assert_endpoint_available(
        self,
        url: str,
        method: str = "GET",
        options: ApiAssertionOptions | None = None,
    ) -> HttpResponse:
        """Request ``url`` and check the response (status 200 unless given).

        Transport errors are recorded and then re-raised in both modes.
        """
        if self.request is None:
            raise ValueError("assert_endpoint_available needs a request client; pass request=...")

        options = options or ApiAssertionOptions()
        if options.status_code is None:
            options = options.model_copy(update={"status_code": 200})
        timeout = options.timeout if options.timeout is not None else 30000

        self.logger.info(f"Checking endpoint {method} {url} (timeout={timeout:g}ms)")
        try:
            response = self.request.fetch(url, method=method, timeout=timeout)
        except Exception as exc:
            self.assert_that(
                False,
                f"Endpoint {method} {url} is not available: {exc}",
                options,
                kind=FailureKind.TRANSPORT_FAILURE,
            )
            raise

        self.assert_response(response, options)
        return response

    def assert_response_contains(
        self,
        response: HttpResponse,
        expected_fields: Mapping[str, Any],
        options: AssertionOptions | None = None,
    ) -> None:
        body = self._parse_or_raise(response, "Failed to validate response data", options)
        for key, expected_value in expected_fields.items():
            actual_value = get_nested_value(body, key, _MISSING)
            shown = "undefined" if actual_value is _MISSING else f'"{actual_value}"'
            self.assert_that(
                _strict_equal(actual_value, expected_value),
                f'Response should contain {key}: "{expected_value}", got: {shown}',
                options,
            )

    def assert_response_array_length(
        self,
        response: HttpResponse,
        expected_length: int,
        array_path: str = "data",
        options: AssertionOptions | None = None,
    ) -> None:
        body = self._parse_or_raise(response, "Failed to validate array length", options)
        array = body if array_path == "" else get_nested_value(body, array_path)
        if not isinstance(array, list):
            self.assert_that(False, f'Response should contain array at path "{array_path}"', options)
            return
        self.assert_that(
            len(array) == expected_length,
            f"Expected array length {expected_length}, got {len(array)}",
            options,
        )

    def assert_api_error(
        self,
        response: HttpResponse,
        *,
        status_code: int | None = None,
        code: str | int | None = None,
        message: str | None = None,
        options: AssertionOptions | None = None,
    ) -> None:
        """Check an error-shaped response.

        ``code`` is read from ``body.code`` or ``body.error.code`` and
        ``message`` (a substring) from ``body.message`` or
        ``body.error.message``.
        """
        checks: list[_Check] = []

        if status_code is not None:
            checks.append(
                _Check(
                    response.status == status_code,
                    f"Expected error status code {status_code}, got {response.status}",
                    FailureKind.STATUS_MISMATCH,
                )
            )

        try:
            body = response.json()
        except Exception as exc:
            checks.append(
                _Check(False, f"Failed to parse error response: {exc}", FailureKind.MALFORMED_BODY)
            )
        else:
            if code is not None:
                actual_code = self._error_field(body, "code")
                checks.append(
                    _Check(
                        _strict_equal(actual_code, code),
                        f'Expected error code "{code}", got "{actual_code}"',
                        FailureKind.ASSERTION,
                    )
                )
            if message is not None:
                actual_message = self._error_field(body, "message")
                checks.append(
                    _Check(
                        isinstance(actual_message, str) and message in actual_message,
                        f'Expected error message to contain "{message}", got "{actual_message}"',
                        FailureKind.ASSERTION,
                    )
                )

        self._report(checks, "API Error assertion failed", options or AssertionOptions())

    def assert_response_performance(
        self,
        response: HttpResponse,
        max_response_time: float,
        options: AssertionOptions | None = None,
    ) -> None:
        response_time = response.response_time or 0
        self.assert_that(
            response_time <= max_response_time,
            f"Response time {response_time:g}ms exceeds maximum {max_response_time:g}ms",
            options,
            kind=FailureKind.TIMING_VIOLATION,
        )

    def assert_response_size(
        self,
        response: HttpResponse,
        max_size_bytes: int,
        options: AssertionOptions | None = None,
    ) -> None:
        raw = _lower_headers(response).get("content-length")
        try:
            size = int(raw) if raw else 0
        except ValueError:
            self.assert_that(
                False,
                f'Response has an invalid content-length header: "{raw}"',
                options,
                kind=FailureKind.HEADER_MISMATCH,
            )
            return
        self.assert_that(
            size <= max_size_bytes,
            f"Response size {size} bytes exceeds maximum {max_size_bytes} bytes",
            options,
        )

    def assert_caching_headers(
        self,
        response: HttpResponse,
        expected_cache_control: str | None = None,
        options: AssertionOptions | None = None,
    ) -> None:
        cache_control = _lower_headers(response).get("cache-control")
        if expected_cache_control is not None:
            self.assert_that(
                cache_control == expected_cache_control,
                f'Expected cache-control "{expected_cache_control}", got "{cache_control}"',
                options,
                kind=FailureKind.HEADER_MISMATCH,
            )
        else:
            self.assert_that(
                bool(cache_control),
                "Response should have cache-control header",
                options,
                kind=FailureKind.HEADER_MISMATCH,
            )

    def assert_security_headers(self, response: HttpResponse, options: AssertionOptions | None = None) -> None:
        headers = _lower_headers(response)
        missing = [name for name in SECURITY_HEADERS if not headers.get(name)]
        self.assert_that(
            not missing,
            f"Missing security headers: {', '.join(missing)}",
            options,
            kind=FailureKind.HEADER_MISMATCH,
        )

    def assert_json_schema(
        self,
        data: Any,
        schema: SchemaNode | Mapping[str, Any],
        options: AssertionOptions | None = None,
    ) -> None:
        result = validate_schema(data, schema)
        self.assert_that(
            result.is_valid,
            "JSON Schema validation failed:\n" + "\n".join(result.errors),
            options,
            kind=FailureKind.SCHEMA_VIOLATION,
        )

    # -- internals --

    def _json_checks(self, response: HttpResponse, schema: SchemaNode | None) -> list[_Check]:
        try:
            data = response.json()
        except Exception as exc:
            return [_Check(False, f"Failed to parse JSON response: {exc}", FailureKind.MALFORMED_BODY)]

        checks = [
            _Check(
                isinstance(data, (dict, list)),
                "Response should be valid JSON object",
                FailureKind.MALFORMED_BODY,
            )
        ]
        if schema is not None:
            result = validate_schema(data, schema)
            checks.append(
                _Check(
                    result.is_valid,
                    f"Schema validation failed: {', '.join(result.errors)}",
                    FailureKind.SCHEMA_VIOLATION,
                )
            )
        return checks

    def _report(self, checks: list[_Check], title: str, options: AssertionOptions) -> None:
        failed = [c for c in checks if not c.passed]
        if not failed:
            return

        for check in failed:
            self.logger.info(f"Response check failed ({check.kind.value}): {check.message}")

        reasons = "\n".join(f"- {c.message}" for c in failed)
        kind = failed[0].kind
        if any(c.kind is FailureKind.MALFORMED_BODY for c in failed):
            kind = FailureKind.MALFORMED_BODY
            options = options.model_copy(update={"soft": False})
        self.assert_that(False, f"{title}:\n{reasons}", options, kind=kind)

    def _parse_or_raise(self, response: HttpResponse, context: str, options: AssertionOptions | None) -> Any:
        try:
            return response.json()
        except Exception as exc:
            hard = (options or AssertionOptions()).model_copy(update={"soft": False})
            self.assert_that(False, f"{context}: {exc}", hard, kind=FailureKind.MALFORMED_BODY)
            raise  # unreachable: hard failures always raise

    @staticmethod
    def _error_field(body: Any, name: str) -> Any:
        if not isinstance(body, Mapping):
            return None
        value = body.get(name)
        if value is None and isinstance(body.get("error"), Mapping):
            value = body["error"].get(name)
        return value
