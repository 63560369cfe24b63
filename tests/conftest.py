"""Pytest configuration and fixtures."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable

import pytest


@pytest.fixture(autouse=True)
def cleanup_loggers():
    """Clean up assertkit loggers after each test to prevent name collisions."""
    yield

    loggers_to_remove = [
        name
        for name in logging.Logger.manager.loggerDict.keys()
        if name.startswith("assertkit")
    ]

    for name in loggers_to_remove:
        logger = logging.getLogger(name)
        for handler in logger.handlers:
            handler.close()
        logger.handlers.clear()
        del logging.Logger.manager.loggerDict[name]


# ---------------------------------------------------------------------------
# Fake driver capabilities
# ---------------------------------------------------------------------------


class MalformedBody(ValueError):
    pass


@dataclass
class FakeResponse:
    status: int = 200
    headers: dict[str, str] = field(default_factory=dict)
    body: Any = None
    response_time: float | None = None
    malformed: bool = False

    def json(self) -> Any:
        if self.malformed:
            raise MalformedBody("Unexpected token < in JSON at position 0")
        return self.body


def json_response(body: Any, status: int = 200, **headers: str) -> FakeResponse:
    all_headers = {"Content-Type": "application/json; charset=utf-8"}
    all_headers.update({k.replace("_", "-"): v for k, v in headers.items()})
    return FakeResponse(status=status, headers=all_headers, body=body)


@dataclass
class FakeElement:
    """In-memory element; ``changes`` are applied one per failed poll."""

    visible: bool = True
    enabled: bool = True
    checked: bool = False
    focused: bool = False
    text: str | None = ""
    value: str = ""
    attributes: dict[str, str] = field(default_factory=dict)
    styles: dict[str, str] = field(default_factory=dict)
    box: dict[str, float] | None = field(
        default_factory=lambda: {"x": 10, "y": 10, "width": 100, "height": 40}
    )
    viewport: dict[str, float] | None = field(
        default_factory=lambda: {"width": 1280, "height": 720}
    )
    matches: int = 1
    validation: str = ""
    tag: str = "DIV"
    changes: list[dict[str, Any]] = field(default_factory=list)
    max_polls: int = 5
    fail_with: Exception | None = None
    waits: list[float] = field(default_factory=list)

    def is_visible(self) -> bool:
        self._maybe_fail()
        return self.visible

    def is_enabled(self) -> bool:
        return self.enabled

    def is_checked(self) -> bool:
        return self.checked

    def is_focused(self) -> bool:
        return self.focused

    def text_content(self) -> str | None:
        self._maybe_fail()
        return self.text

    def input_value(self) -> str:
        return self.value

    def get_attribute(self, name: str) -> str | None:
        return self.attributes.get(name)

    def computed_style(self, prop: str) -> str:
        return self.styles.get(prop, "")

    def bounding_box(self) -> dict[str, float] | None:
        return self.box

    def viewport_size(self) -> dict[str, float] | None:
        return self.viewport

    def count(self) -> int:
        return self.matches

    def validation_message(self) -> str:
        return self.validation

    def tag_name(self) -> str:
        return self.tag

    def wait_until(self, predicate: Callable[[], bool], timeout: float) -> bool:
        self.waits.append(timeout)
        for _ in range(self.max_polls):
            if predicate():
                return True
            if self.changes:
                for key, value in self.changes.pop(0).items():
                    setattr(self, key, value)
        return False

    def _maybe_fail(self) -> None:
        if self.fail_with is not None:
            raise self.fail_with


@dataclass
class FakePage:
    url: str = "https://example.test/"
    page_title: str = "Example"
    elements: dict[str, FakeElement] = field(default_factory=dict)
    screenshots: list[str] = field(default_factory=list)
    download: str | Exception = "report.csv"
    screenshot_error: Exception | None = None

    def title(self) -> str:
        return self.page_title

    def locator(self, selector: str) -> FakeElement:
        return self.elements.setdefault(selector, FakeElement(matches=0, visible=False))

    def screenshot(self, path: str, full_page: bool = True) -> None:
        if self.screenshot_error is not None:
            raise self.screenshot_error
        self.screenshots.append(path)

    def wait_for_download(self, timeout: float) -> str:
        if isinstance(self.download, Exception):
            raise self.download
        return self.download


@dataclass
class FakeRequestClient:
    response: FakeResponse | None = None
    error: Exception | None = None
    calls: list[tuple[str, str, float]] = field(default_factory=list)

    def fetch(self, url: str, *, method: str, timeout: float) -> FakeResponse:
        self.calls.append((url, method, timeout))
        if self.error is not None:
            raise self.error
        assert self.response is not None
        return self.response


@pytest.fixture
def page() -> FakePage:
    return FakePage()
