"""Assertions over the observable state of UI elements.

Every check polls the element through ``UIElement.wait_until`` for at most
``options.timeout`` milliseconds, then reports through the base engine.
"""

from __future__ import annotations

from typing import Callable, Mapping

from assertkit.assertions.base import (
    BaseAssertions,
    Expected,
    Locator,
    show_expected,
    text_matches,
)
from assertkit.assertions.capabilities import UIElement
from assertkit.config import AssertionOptions, UIAssertionOptions


def is_in_viewport(element: UIElement) -> bool:
    """True when any part of the element's box intersects the viewport."""
    box = element.bounding_box()
    viewport = element.viewport_size()
    if not box or not viewport:
        return False
    visible_width = min(box["x"] + box["width"], viewport["width"]) - max(box["x"], 0)
    visible_height = min(box["y"] + box["height"], viewport["height"]) - max(box["y"], 0)
    return visible_width > 0 and visible_height > 0


def _is_empty(element: UIElement) -> bool:
    return not (element.text_content() or "").strip()


def _ui_options(options: AssertionOptions | None) -> UIAssertionOptions:
    if options is None:
        return UIAssertionOptions()
    if isinstance(options, UIAssertionOptions):
        return options
    return UIAssertionOptions(**options.model_dump(exclude_unset=True))


class UIAssertions(BaseAssertions):
    """Element state checks: visibility, text, attributes, geometry."""

    def _expect_state(
        self,
        locator: Locator,
        check: Callable[[UIElement], bool],
        failure: str,
        options: AssertionOptions | None,
    ) -> None:
        element = self._resolve(locator)
        options = _ui_options(options)
        passed, error = self._poll(element, lambda: check(element), options)
        self.logger.info(f"Checked '{failure}': passed={passed}")
        self.assert_that(passed, f"{failure}: {self._describe(element)}{error}", options)

    def assert_element_visible(self, locator: Locator, options: AssertionOptions | None = None) -> None:
        self._expect_state(locator, lambda el: el.is_visible(), "Element should be visible", options)

    def assert_element_not_visible(self, locator: Locator, options: AssertionOptions | None = None) -> None:
        self._expect_state(
            locator, lambda el: not el.is_visible(), "Element should not be visible", options
        )

    def assert_element_present(self, locator: Locator, options: AssertionOptions | None = None) -> None:
        self._expect_state(
            locator, lambda el: el.count() == 1, "Element should be present in DOM", options
        )

    def assert_element_enabled(self, locator: Locator, options: AssertionOptions | None = None) -> None:
        self._expect_state(locator, lambda el: el.is_enabled(), "Element should be enabled", options)

    def assert_element_disabled(self, locator: Locator, options: AssertionOptions | None = None) -> None:
        self._expect_state(
            locator, lambda el: not el.is_enabled(), "Element should be disabled", options
        )

    def assert_element_checked(self, locator: Locator, options: AssertionOptions | None = None) -> None:
        self._expect_state(locator, lambda el: el.is_checked(), "Element should be checked", options)

    def assert_element_not_checked(self, locator: Locator, options: AssertionOptions | None = None) -> None:
        self._expect_state(
            locator, lambda el: not el.is_checked(), "Element should not be checked", options
        )

    def assert_element_focused(self, locator: Locator, options: AssertionOptions | None = None) -> None:
        self._expect_state(locator, lambda el: el.is_focused(), "Element should be focused", options)

    def assert_element_in_viewport(self, locator: Locator, options: AssertionOptions | None = None) -> None:
        self._expect_state(locator, is_in_viewport, "Element should be in viewport", options)

    def assert_element_not_in_viewport(self, locator: Locator, options: AssertionOptions | None = None) -> None:
        self._expect_state(
            locator, lambda el: not is_in_viewport(el), "Element should not be in viewport", options
        )

    def assert_element_empty(self, locator: Locator, options: AssertionOptions | None = None) -> None:
        self._expect_state(locator, _is_empty, "Element should be empty", options)

    def assert_element_not_empty(self, locator: Locator, options: AssertionOptions | None = None) -> None:
        self._expect_state(
            locator, lambda el: not _is_empty(el), "Element should not be empty", options
        )

    def assert_element_count(
        self,
        locator: Locator,
        expected_count: int,
        options: AssertionOptions | None = None,
    ) -> None:
        element = self._resolve(locator)
        options = _ui_options(options)
        passed, actual, error = self._poll_value(
            element, element.count, lambda n: n == expected_count, options
        )
        self.assert_that(
            passed,
            f"Element count mismatch for {self._describe(element)}\n"
            f"Expected: {expected_count}\nActual: {actual}{error}",
            options,
        )

    def assert_element_contains_text(
        self,
        locator: Locator,
        expected_text: Expected,
        options: AssertionOptions | None = None,
    ) -> None:
        self._compare_text(locator, expected_text, options, contains=True)

    def assert_element_exact_text(
        self,
        locator: Locator,
        expected_text: Expected,
        options: AssertionOptions | None = None,
    ) -> None:
        self._compare_text(locator, expected_text, options, contains=False)

    def assert_element_value(
        self,
        locator: Locator,
        expected_value: str,
        options: AssertionOptions | None = None,
    ) -> None:
        """Compare an input's value; ``options.exact=False`` means substring."""
        element = self._resolve(locator)
        options = _ui_options(options)

        def _check(actual: str) -> bool:
            return actual == expected_value if options.exact else expected_value in actual

        passed, actual, error = self._poll_value(element, element.input_value, _check, options)
        self.assert_that(
            passed,
            f"Element value mismatch for {self._describe(element)}\n"
            f'Expected: "{expected_value}"\nActual: "{actual}"{error}',
            options,
        )

    def assert_element_attribute(
        self,
        locator: Locator,
        attribute: str,
        expected_value: Expected,
        options: AssertionOptions | None = None,
    ) -> None:
        element = self._resolve(locator)
        options = _ui_options(options)
        passed, actual, error = self._poll_value(
            element,
            lambda: element.get_attribute(attribute),
            lambda v: v is not None and text_matches(v, expected_value),
            options,
        )
        self.assert_that(
            passed,
            f'Attribute "{attribute}" mismatch for {self._describe(element)}\n'
            f'Expected: {show_expected(expected_value)}\nActual: "{actual}"{error}',
            options,
        )

    def assert_element_css_property(
        self,
        locator: Locator,
        prop: str,
        expected_value: Expected,
        options: AssertionOptions | None = None,
    ) -> None:
        element = self._resolve(locator)
        options = _ui_options(options)
        passed, actual, error = self._poll_value(
            element,
            lambda: element.computed_style(prop),
            lambda v: text_matches(v, expected_value),
            options,
        )
        self.assert_that(
            passed,
            f'CSS property "{prop}" mismatch for {self._describe(element)}\n'
            f'Expected: {show_expected(expected_value)}\nActual: "{actual}"{error}',
            options,
        )

    def assert_element_dimensions(
        self,
        locator: Locator,
        expected_width: float,
        expected_height: float,
        tolerance: float = 5,
        options: AssertionOptions | None = None,
    ) -> None:
        element = self._resolve(locator)
        options = _ui_options(options)

        def _check(box: dict[str, float] | None) -> bool:
            return (
                box is not None
                and abs(box["width"] - expected_width) <= tolerance
                and abs(box["height"] - expected_height) <= tolerance
            )

        passed, box, error = self._poll_value(element, element.bounding_box, _check, options)
        if not isinstance(box, dict):
            message = f"Failed to get element dimensions: {self._describe(element)}{error}"
        else:
            message = (
                f"Element dimensions mismatch for {self._describe(element)}\n"
                f"Expected: {expected_width:g}x{expected_height:g}\n"
                f"Actual: {box['width']:g}x{box['height']:g}"
            )
        self.assert_that(passed, message, options)

    def assert_element_position(
        self,
        locator: Locator,
        expected_x: float,
        expected_y: float,
        tolerance: float = 5,
        options: AssertionOptions | None = None,
    ) -> None:
        element = self._resolve(locator)
        options = _ui_options(options)

        def _check(box: dict[str, float] | None) -> bool:
            return (
                box is not None
                and abs(box["x"] - expected_x) <= tolerance
                and abs(box["y"] - expected_y) <= tolerance
            )

        passed, box, error = self._poll_value(element, element.bounding_box, _check, options)
        if not isinstance(box, dict):
            message = f"Failed to get element position: {self._describe(element)}{error}"
        else:
            message = (
                f"Element position mismatch for {self._describe(element)}\n"
                f"Expected: ({expected_x:g}, {expected_y:g})\n"
                f"Actual: ({box['x']:g}, {box['y']:g})"
            )
        self.assert_that(passed, message, options)

    def assert_form_validation_error(
        self,
        locator: Locator,
        expected_error: str,
        options: AssertionOptions | None = None,
    ) -> None:
        element = self._resolve(locator)
        options = _ui_options(options)
        passed, actual, error = self._poll_value(
            element, element.validation_message, lambda m: expected_error in (m or ""), options
        )
        self.assert_that(
            passed,
            f"Form validation error not found for {self._describe(element)}\n"
            f'Expected: "{expected_error}"\nActual: "{actual}"{error}',
            options,
        )

    def assert_accessibility(
        self,
        locator: Locator,
        expected_attributes: Mapping[str, str],
        options: AssertionOptions | None = None,
    ) -> None:
        """Check ARIA-style attributes, reporting every mismatch at once."""
        element = self._resolve(locator)
        options = _ui_options(options)

        def _mismatches() -> list[str]:
            found = []
            for attribute, expected_value in expected_attributes.items():
                actual_value = element.get_attribute(attribute)
                if actual_value != expected_value:
                    found.append(
                        f'Accessibility attribute "{attribute}": '
                        f'expected "{expected_value}", got "{actual_value}"'
                    )
            return found

        passed, mismatches, error = self._poll_value(element, _mismatches, lambda m: not m, options)
        details = "\n".join(f"- {m}" for m in mismatches) if isinstance(mismatches, list) else ""
        self.assert_that(
            passed,
            f"Accessibility check failed for {self._describe(element)}\n{details}{error}",
            options,
        )

    # -- internals --

    def _compare_text(
        self,
        locator: Locator,
        expected_text: Expected,
        options: AssertionOptions | None,
        *,
        contains: bool,
    ) -> None:
        element = self._resolve(locator)
        options = _ui_options(options)

        def _normalize(text: str) -> str:
            if options.trim:
                text = text.strip()
            if not options.case_sensitive:
                text = text.lower()
            return text

        def _check(actual: str | None) -> bool:
            processed = _normalize(actual or "")
            if not isinstance(expected_text, str):
                return expected_text.search(processed) is not None
            wanted = _normalize(expected_text)
            return wanted in processed if contains else processed == wanted

        passed, actual, error = self._poll_value(element, element.text_content, _check, options)
        if contains:
            headline = f"Element should contain text {show_expected(expected_text)}"
        else:
            headline = f"Element should have exact text {show_expected(expected_text)}"
        self.assert_that(
            passed,
            f'{headline}\nElement: {self._describe(element)}\nActual text: "{actual}"{error}',
            options,
        )
