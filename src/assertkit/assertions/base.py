"""Core check-and-report primitive shared by every assertion engine."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Sequence, Union

from assertkit.assertions.capabilities import Page, UIElement
from assertkit.config import AssertionOptions

DEFAULT_TIMEOUT = 10000.0

Locator = Union[UIElement, str]
Expected = Union[str, re.Pattern]


class FailureKind(str, Enum):
    ASSERTION = "assertion"
    SOFT_SUMMARY = "soft_summary"
    SCHEMA_VIOLATION = "schema_violation"
    STATUS_MISMATCH = "status_mismatch"
    HEADER_MISMATCH = "header_mismatch"
    TIMING_VIOLATION = "timing_violation"
    MALFORMED_BODY = "malformed_body"
    TRANSPORT_FAILURE = "transport_failure"


class AssertionFailedError(AssertionError):
    """A failed check raised in hard mode."""

    def __init__(self, message: str, kind: FailureKind = FailureKind.ASSERTION):
        super().__init__(message)
        self.message = message
        self.kind = kind


class SoftAssertionsError(AssertionFailedError):
    """Raised when deferred failures are flushed at the end of a test."""

    def __init__(self, failures: Sequence[SoftFailure]):
        self.failures = tuple(failures)
        super().__init__(summarize_soft_failures(self.failures), FailureKind.SOFT_SUMMARY)


@dataclass(frozen=True)
class SoftFailure:
    """A failed soft assertion.

    Attributes:
        message: Final failure text (the per-call override if one was given).
        timestamp: UTC time the failure was recorded.
    """

    message: str
    timestamp: datetime


def summarize_soft_failures(failures: Sequence[SoftFailure]) -> str:
    lines = "\n".join(f"- {f.message}" for f in failures)
    return f"Soft assertions failed:\n{lines}"


def text_matches(actual: str, expected: Expected) -> bool:
    if isinstance(expected, re.Pattern):
        return expected.search(actual) is not None
    return actual == expected


def show_expected(expected: Expected) -> str:
    return f"/{expected.pattern}/" if isinstance(expected, re.Pattern) else f'"{expected}"'


def _to_datetime(value: datetime | str) -> datetime:
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


class BaseAssertions:
    """Evaluates conditions and either raises or records failures.

    Each instance owns its soft-failure buffer. Build one per test so that
    failures from concurrently running tests never interleave.
    """

    def __init__(
        self,
        page: Page | None = None,
        *,
        screenshot_dir: str | Path = "test-results/screenshots",
        logger: logging.Logger | None = None,
    ):
        self.page = page
        self.screenshot_dir = Path(screenshot_dir)
        self.logger = logger or logging.getLogger(__name__)
        self._soft_failures: list[SoftFailure] = []

    def assert_that(
        self,
        condition: bool,
        message: str,
        options: AssertionOptions | None = None,
        *,
        kind: FailureKind = FailureKind.ASSERTION,
    ) -> None:
        """Raise (hard) or record (soft) ``message`` when ``condition`` is false."""
        if condition:
            return

        options = options or AssertionOptions()
        error_message = options.message or message

        if options.screenshot:
            self._capture_screenshot("assertion-failed")

        if options.soft:
            self.logger.info(f"Soft assertion failed ({kind.value}): {error_message}")
            self._soft_failures.append(
                SoftFailure(message=error_message, timestamp=datetime.now(timezone.utc))
            )
            return

        self.logger.warning(f"Assertion failed ({kind.value}): {error_message}")
        raise AssertionFailedError(error_message, kind)

    def get_soft_failures(self) -> tuple[SoftFailure, ...]:
        return tuple(self._soft_failures)

    def clear_soft_failures(self) -> None:
        self._soft_failures.clear()

    def assert_all_soft_assertions_passed(self) -> None:
        failures = self.get_soft_failures()
        if failures:
            self.logger.warning(f"{len(failures)} soft assertion(s) failed")
            raise SoftAssertionsError(failures)

    # -- value helpers --

    def assert_array_length(
        self,
        array: Sequence[Any],
        expected_length: int,
        options: AssertionOptions | None = None,
    ) -> None:
        actual_length = len(array)
        self.logger.info(f"Checking array length: expected {expected_length}, got {actual_length}")
        self.assert_that(
            actual_length == expected_length,
            f"Array length mismatch\nExpected: {expected_length}\nActual: {actual_length}",
            options,
        )

    def assert_array_contains(
        self,
        array: Sequence[Any],
        expected_item: Any,
        options: AssertionOptions | None = None,
    ) -> None:
        contents = ", ".join(str(item) for item in array)
        self.assert_that(
            expected_item in array,
            f'Array should contain "{expected_item}"\nArray contents: [{contents}]',
            options,
        )

    def assert_date_equals(
        self,
        actual_date: datetime | str,
        expected_date: datetime | str,
        tolerance_ms: float = 1000,
        options: AssertionOptions | None = None,
    ) -> None:
        """Compare two instants within ``tolerance_ms``.

        Strings are parsed as ISO-8601; naive values are taken as UTC.
        """
        try:
            actual = _to_datetime(actual_date)
            expected = _to_datetime(expected_date)
        except ValueError as exc:
            self.assert_that(
                False,
                f"Date mismatch\nExpected: {expected_date}\nActual: {actual_date}\nError: {exc}",
                options,
            )
            return
        difference = abs((actual - expected).total_seconds()) * 1000
        self.assert_that(
            difference <= tolerance_ms,
            f"Date mismatch\nExpected: {expected.isoformat()}\n"
            f"Actual: {actual.isoformat()}\nDifference: {difference:g}ms",
            options,
        )

    # -- page helpers --

    def assert_text_content(
        self,
        locator: Locator,
        expected_text: Expected,
        options: AssertionOptions | None = None,
    ) -> None:
        element = self._resolve(locator)
        options = options or AssertionOptions()

        def _text() -> str:
            return (element.text_content() or "").strip()

        passed, actual, error = self._poll_value(
            element, _text, lambda t: text_matches(t, expected_text), options
        )
        self.assert_that(
            passed,
            f"Text content mismatch for {self._describe(element)}\n"
            f'Expected: {show_expected(expected_text)}\nActual: "{actual}"{error}',
            options,
        )

    def assert_url(self, expected_url: Expected, options: AssertionOptions | None = None) -> None:
        current_url = self._require_page().url
        self.logger.info(f"Checking URL {current_url} against {show_expected(expected_url)}")
        self.assert_that(
            text_matches(current_url, expected_url),
            f'URL mismatch\nExpected: {show_expected(expected_url)}\nActual: "{current_url}"',
            options,
        )

    def assert_page_title(self, expected_title: Expected, options: AssertionOptions | None = None) -> None:
        actual_title = self._require_page().title()
        self.assert_that(
            text_matches(actual_title, expected_title),
            f'Page title mismatch\nExpected: {show_expected(expected_title)}\nActual: "{actual_title}"',
            options,
        )

    def assert_form_field(
        self,
        locator: Locator,
        expected_value: str,
        options: AssertionOptions | None = None,
    ) -> None:
        element = self._resolve(locator)
        options = options or AssertionOptions()
        passed, actual, error = self._poll_value(
            element, element.input_value, lambda v: v == expected_value, options
        )
        self.assert_that(
            passed,
            f"Form field value mismatch for {self._describe(element)}\n"
            f'Expected: "{expected_value}"\nActual: "{actual}"{error}',
            options,
        )

    def assert_file_downloaded(self, file_name: Expected, options: AssertionOptions | None = None) -> None:
        options = options or AssertionOptions()
        timeout = options.timeout if options.timeout is not None else 30000
        page = self._require_page()
        try:
            actual = page.wait_for_download(timeout)
        except Exception as exc:
            self.assert_that(
                False,
                f"File download assertion failed\nExpected: {show_expected(file_name)}\nError: {exc}",
                options,
            )
            return
        self.assert_that(
            text_matches(actual, file_name),
            f'File download assertion failed\nExpected: {show_expected(file_name)}\nActual: "{actual}"',
            options,
        )

    # -- internals --

    def _timeout(self, options: AssertionOptions) -> float:
        return options.timeout if options.timeout is not None else DEFAULT_TIMEOUT

    def _require_page(self) -> Page:
        if self.page is None:
            raise ValueError("This assertion needs a page; construct the engine with page=...")
        return self.page

    def _resolve(self, locator: Locator) -> UIElement:
        if isinstance(locator, str):
            return self._require_page().locator(locator)
        return locator

    def _poll(self, element: UIElement, predicate: Callable[[], bool], options: AssertionOptions) -> tuple[bool, str]:
        """Wait for ``predicate``; returns (passed, error suffix for messages)."""
        timeout = self._timeout(options)
        try:
            return element.wait_until(predicate, timeout), ""
        except Exception as exc:
            self.logger.debug(f"Polling raised {type(exc).__name__}: {exc}")
            return False, f"\nError: {exc}"

    def _poll_value(
        self,
        element: UIElement,
        read: Callable[[], Any],
        check: Callable[[Any], bool],
        options: AssertionOptions,
    ) -> tuple[bool, Any, str]:
        """Poll until ``check(read())`` holds; returns the last value read."""
        last: Any = "N/A"

        def _predicate() -> bool:
            nonlocal last
            last = read()
            return check(last)

        passed, error = self._poll(element, _predicate, options)
        return passed, last, error

    def _describe(self, element: UIElement) -> str:
        try:
            info = f"<{element.tag_name().lower()}"
            element_id = element.get_attribute("id")
            class_name = element.get_attribute("class")
            if element_id:
                info += f' id="{element_id}"'
            if class_name:
                info += f' class="{class_name}"'
            info += ">"
            text = (element.text_content() or "").strip()
            if text:
                info += f' "{text[:50]}{"..." if len(text) > 50 else ""}"'
            return info
        except Exception as exc:
            self.logger.debug(f"Could not describe element: {exc}")
            return "element"

    def _capture_screenshot(self, name: str) -> None:
        if self.page is None:
            return
        stamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H-%M-%S-%f")
        path = self.screenshot_dir / f"{name}-{stamp}.png"
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            self.page.screenshot(path=str(path), full_page=True)
            self.logger.info(f"Saved failure screenshot: {path}")
        except Exception as exc:
            self.logger.warning(f"Failed to capture screenshot: {exc}")
