"""Single entry point composing the base, API and UI engines."""

from __future__ import annotations

import logging
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Sequence

from assertkit.assertions.api import ApiAssertions
from assertkit.assertions.base import (
    BaseAssertions,
    Expected,
    Locator,
    SoftAssertionsError,
    SoftFailure,
)
from assertkit.assertions.capabilities import HttpResponse, Page, RequestClient
from assertkit.assertions.ui import UIAssertions
from assertkit.config import (
    ApiAssertionOptions,
    AssertionOptions,
    AssertionsConfig,
    UIAssertionOptions,
    merge_options,
)


class Check(str, Enum):
    VISIBLE = "visible"
    NOT_VISIBLE = "not_visible"
    TEXT = "text"
    URL = "url"
    TITLE = "title"
    FIELD = "field"
    API_RESPONSE = "api_response"
    COUNT = "count"
    ENABLED = "enabled"
    DISABLED = "disabled"
    CHECKED = "checked"
    NOT_CHECKED = "not_checked"
    CONTAINS_TEXT = "contains_text"
    EXACT_TEXT = "exact_text"
    VALUE = "value"
    ATTRIBUTE = "attribute"
    CSS = "css"
    FOCUSED = "focused"
    IN_VIEWPORT = "in_viewport"
    NOT_IN_VIEWPORT = "not_in_viewport"
    EMPTY = "empty"
    NOT_EMPTY = "not_empty"
    ARRAY_LENGTH = "array_length"
    ARRAY_CONTAINS = "array_contains"
    DATE_EQUALS = "date_equals"
    FILE_DOWNLOADED = "file_downloaded"


# check -> (engine attribute, engine method, options model)
_ROUTES: dict[Check, tuple[str, str, type[AssertionOptions]]] = {
    Check.VISIBLE: ("ui", "assert_element_visible", UIAssertionOptions),
    Check.NOT_VISIBLE: ("ui", "assert_element_not_visible", UIAssertionOptions),
    Check.TEXT: ("base", "assert_text_content", AssertionOptions),
    Check.URL: ("base", "assert_url", AssertionOptions),
    Check.TITLE: ("base", "assert_page_title", AssertionOptions),
    Check.FIELD: ("base", "assert_form_field", AssertionOptions),
    Check.API_RESPONSE: ("api", "assert_response", ApiAssertionOptions),
    Check.COUNT: ("ui", "assert_element_count", UIAssertionOptions),
    Check.ENABLED: ("ui", "assert_element_enabled", UIAssertionOptions),
    Check.DISABLED: ("ui", "assert_element_disabled", UIAssertionOptions),
    Check.CHECKED: ("ui", "assert_element_checked", UIAssertionOptions),
    Check.NOT_CHECKED: ("ui", "assert_element_not_checked", UIAssertionOptions),
    Check.CONTAINS_TEXT: ("ui", "assert_element_contains_text", UIAssertionOptions),
    Check.EXACT_TEXT: ("ui", "assert_element_exact_text", UIAssertionOptions),
    Check.VALUE: ("ui", "assert_element_value", UIAssertionOptions),
    Check.ATTRIBUTE: ("ui", "assert_element_attribute", UIAssertionOptions),
    Check.CSS: ("ui", "assert_element_css_property", UIAssertionOptions),
    Check.FOCUSED: ("ui", "assert_element_focused", UIAssertionOptions),
    Check.IN_VIEWPORT: ("ui", "assert_element_in_viewport", UIAssertionOptions),
    Check.NOT_IN_VIEWPORT: ("ui", "assert_element_not_in_viewport", UIAssertionOptions),
    Check.EMPTY: ("ui", "assert_element_empty", UIAssertionOptions),
    Check.NOT_EMPTY: ("ui", "assert_element_not_empty", UIAssertionOptions),
    Check.ARRAY_LENGTH: ("base", "assert_array_length", AssertionOptions),
    Check.ARRAY_CONTAINS: ("base", "assert_array_contains", AssertionOptions),
    Check.DATE_EQUALS: ("base", "assert_date_equals", AssertionOptions),
    Check.FILE_DOWNLOADED: ("base", "assert_file_downloaded", AssertionOptions),
}


class AssertionFactory:
    """Per-test facade over the three engines.

    Shorthand methods merge call-site options over the facade defaults
    (call site wins) and forward to the matching engine. Build a fresh
    factory for every test; the soft-failure buffers live on its engines.
    """

    def __init__(
        self,
        page: Page | None = None,
        *,
        request: RequestClient | None = None,
        default_timeout: float = 10000,
        default_soft: bool = False,
        screenshot_on_failure: bool = True,
        screenshot_dir: str | Path = "test-results/screenshots",
        logger: logging.Logger | None = None,
    ):
        self.page = page
        self.default_timeout = default_timeout
        self.default_soft = default_soft
        self.screenshot_on_failure = screenshot_on_failure
        self.logger = logger or logging.getLogger(__name__)
        self._owns_logger = False

        self.base = BaseAssertions(page, screenshot_dir=screenshot_dir, logger=self.logger)
        self.api = ApiAssertions(
            page, request=request, screenshot_dir=screenshot_dir, logger=self.logger
        )
        self.ui = UIAssertions(page, screenshot_dir=screenshot_dir, logger=self.logger)

    @classmethod
    def from_config(
        cls,
        config: AssertionsConfig,
        page: Page | None = None,
        *,
        request: RequestClient | None = None,
        logger: logging.Logger | None = None,
        logger_name: str = "assertkit.factory",
    ) -> AssertionFactory:
        """Build a factory from ``config``.

        Without an explicit ``logger``, ``config.log_file`` gets a file logger
        named ``logger_name``. Reusing a name replaces its handlers, and
        ``close()`` releases them.
        """
        owns_logger = False
        if logger is None and config.log_file is not None:
            from assertkit.verbose import setup_logger

            logger = setup_logger(Path(config.log_file), logger_name=logger_name)
            owns_logger = True
        factory = cls(
            page,
            request=request,
            default_timeout=config.default_timeout,
            default_soft=config.default_soft,
            screenshot_on_failure=config.screenshot_on_failure,
            screenshot_dir=config.screenshot_dir,
            logger=logger,
        )
        factory._owns_logger = owns_logger
        return factory

    def _dispatch(
        self,
        check: Check,
        *args: Any,
        message: str | None = None,
        options: AssertionOptions | None = None,
    ) -> Any:
        engine_name, method_name, options_cls = _ROUTES[check]
        defaults: dict[str, Any] = {
            "timeout": self.default_timeout,
            "soft": self.default_soft,
            "screenshot": self.screenshot_on_failure,
        }
        if message is not None:
            defaults["message"] = message
        merged = merge_options(options_cls, defaults, options)
        self.logger.debug(f"Dispatching {check.value} to {engine_name}.{method_name}")
        return getattr(getattr(self, engine_name), method_name)(*args, merged)

    def close(self) -> None:
        """Close log handlers opened by ``from_config``; soft buffers are kept."""
        if not self._owns_logger:
            return
        for handler in list(self.logger.handlers):
            handler.close()
            self.logger.removeHandler(handler)
        self.logger.addHandler(logging.NullHandler())
        self._owns_logger = False

    # -- shorthand checks --

    def visible(self, locator: Locator, message: str | None = None, options: AssertionOptions | None = None) -> None:
        self._dispatch(Check.VISIBLE, locator, message=message, options=options)

    def not_visible(self, locator: Locator, message: str | None = None, options: AssertionOptions | None = None) -> None:
        self._dispatch(Check.NOT_VISIBLE, locator, message=message, options=options)

    def text(
        self,
        locator: Locator,
        expected_text: Expected,
        message: str | None = None,
        options: AssertionOptions | None = None,
    ) -> None:
        self._dispatch(Check.TEXT, locator, expected_text, message=message, options=options)

    def url(self, expected_url: Expected, message: str | None = None, options: AssertionOptions | None = None) -> None:
        self._dispatch(Check.URL, expected_url, message=message, options=options)

    def title(self, expected_title: Expected, message: str | None = None, options: AssertionOptions | None = None) -> None:
        self._dispatch(Check.TITLE, expected_title, message=message, options=options)

    def field(
        self,
        locator: Locator,
        expected_value: str,
        message: str | None = None,
        options: AssertionOptions | None = None,
    ) -> None:
        self._dispatch(Check.FIELD, locator, expected_value, message=message, options=options)

    def api_response(self, response: HttpResponse, options: ApiAssertionOptions | None = None) -> None:
        self._dispatch(Check.API_RESPONSE, response, options=options)

    def count(
        self,
        locator: Locator,
        expected_count: int,
        message: str | None = None,
        options: AssertionOptions | None = None,
    ) -> None:
        self._dispatch(Check.COUNT, locator, expected_count, message=message, options=options)

    def enabled(self, locator: Locator, message: str | None = None, options: AssertionOptions | None = None) -> None:
        self._dispatch(Check.ENABLED, locator, message=message, options=options)

    def disabled(self, locator: Locator, message: str | None = None, options: AssertionOptions | None = None) -> None:
        self._dispatch(Check.DISABLED, locator, message=message, options=options)

    def checked(self, locator: Locator, message: str | None = None, options: AssertionOptions | None = None) -> None:
        self._dispatch(Check.CHECKED, locator, message=message, options=options)

    def not_checked(self, locator: Locator, message: str | None = None, options: AssertionOptions | None = None) -> None:
        self._dispatch(Check.NOT_CHECKED, locator, message=message, options=options)

    def contains_text(
        self,
        locator: Locator,
        expected_text: Expected,
        message: str | None = None,
        options: AssertionOptions | None = None,
    ) -> None:
        self._dispatch(Check.CONTAINS_TEXT, locator, expected_text, message=message, options=options)

    def exact_text(
        self,
        locator: Locator,
        expected_text: Expected,
        message: str | None = None,
        options: AssertionOptions | None = None,
    ) -> None:
        self._dispatch(Check.EXACT_TEXT, locator, expected_text, message=message, options=options)

    def value(
        self,
        locator: Locator,
        expected_value: str,
        message: str | None = None,
        options: AssertionOptions | None = None,
    ) -> None:
        self._dispatch(Check.VALUE, locator, expected_value, message=message, options=options)

    def attribute(
        self,
        locator: Locator,
        attribute: str,
        expected_value: Expected,
        message: str | None = None,
        options: AssertionOptions | None = None,
    ) -> None:
        self._dispatch(
            Check.ATTRIBUTE, locator, attribute, expected_value, message=message, options=options
        )

    def css(
        self,
        locator: Locator,
        prop: str,
        expected_value: Expected,
        message: str | None = None,
        options: AssertionOptions | None = None,
    ) -> None:
        self._dispatch(Check.CSS, locator, prop, expected_value, message=message, options=options)

    def focused(self, locator: Locator, message: str | None = None, options: AssertionOptions | None = None) -> None:
        self._dispatch(Check.FOCUSED, locator, message=message, options=options)

    def in_viewport(self, locator: Locator, message: str | None = None, options: AssertionOptions | None = None) -> None:
        self._dispatch(Check.IN_VIEWPORT, locator, message=message, options=options)

    def not_in_viewport(
        self, locator: Locator, message: str | None = None, options: AssertionOptions | None = None
    ) -> None:
        self._dispatch(Check.NOT_IN_VIEWPORT, locator, message=message, options=options)

    def empty(self, locator: Locator, message: str | None = None, options: AssertionOptions | None = None) -> None:
        self._dispatch(Check.EMPTY, locator, message=message, options=options)

    def not_empty(self, locator: Locator, message: str | None = None, options: AssertionOptions | None = None) -> None:
        self._dispatch(Check.NOT_EMPTY, locator, message=message, options=options)

    def array_length(
        self,
        array: Sequence[Any],
        expected_length: int,
        message: str | None = None,
        options: AssertionOptions | None = None,
    ) -> None:
        self._dispatch(Check.ARRAY_LENGTH, array, expected_length, message=message, options=options)

    def array_contains(
        self,
        array: Sequence[Any],
        expected_item: Any,
        message: str | None = None,
        options: AssertionOptions | None = None,
    ) -> None:
        self._dispatch(Check.ARRAY_CONTAINS, array, expected_item, message=message, options=options)

    def date_equals(
        self,
        actual_date: datetime | str,
        expected_date: datetime | str,
        tolerance_ms: float = 1000,
        message: str | None = None,
        options: AssertionOptions | None = None,
    ) -> None:
        self._dispatch(
            Check.DATE_EQUALS,
            actual_date,
            expected_date,
            tolerance_ms,
            message=message,
            options=options,
        )

    def file_downloaded(
        self, file_name: Expected, message: str | None = None, options: AssertionOptions | None = None
    ) -> None:
        self._dispatch(Check.FILE_DOWNLOADED, file_name, message=message, options=options)

    # -- soft failure buffers --

    def get_soft_assertion_failures(self) -> list[SoftFailure]:
        """Failures from base, API and UI engines, in that order."""
        return [
            *self.base.get_soft_failures(),
            *self.api.get_soft_failures(),
            *self.ui.get_soft_failures(),
        ]

    def clear_soft_assertions(self) -> None:
        for engine in (self.base, self.api, self.ui):
            engine.clear_soft_failures()

    def assert_all_soft_assertions_passed(self) -> None:
        """Raise one combined failure if any soft assertion failed."""
        failures = self.get_soft_assertion_failures()
        if failures:
            self.logger.warning(f"{len(failures)} soft assertion(s) failed")
            raise SoftAssertionsError(failures)

    def write_junit_report(self, path: Path, suite_name: str = "soft-assertions") -> Path:
        from assertkit.reporting.junit import soft_failures_suite, write_junit

        suites = [
            soft_failures_suite(f"{suite_name} / {name}", engine.get_soft_failures())
            for name, engine in (("base", self.base), ("api", self.api), ("ui", self.ui))
        ]
        return write_junit(path, suites)
