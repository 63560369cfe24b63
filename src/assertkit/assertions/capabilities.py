"""Driver capabilities consumed by the assertion engines.

The engines never talk to a browser or an HTTP client directly. Whatever
driver located the element or issued the request hands over objects that
satisfy these protocols; Playwright's sync ``Locator`` and ``APIResponse``
need only thin wrappers.
"""

from __future__ import annotations

import time
from typing import Any, Callable, Mapping, Protocol, runtime_checkable


@runtime_checkable
class HttpResponse(Protocol):
    """Read-only view of a completed HTTP exchange."""

    @property
    def status(self) -> int: ...

    @property
    def headers(self) -> Mapping[str, str]: ...

    @property
    def response_time(self) -> float | None:
        """Time to last byte in milliseconds, if the client measured it."""
        ...

    def json(self) -> Any:
        """Parse the body as JSON, raising on a malformed body."""
        ...


@runtime_checkable
class UIElement(Protocol):
    """State queries for a located element (or a collection of matches)."""

    def is_visible(self) -> bool: ...

    def is_enabled(self) -> bool: ...

    def is_checked(self) -> bool: ...

    def is_focused(self) -> bool: ...

    def text_content(self) -> str | None: ...

    def input_value(self) -> str: ...

    def get_attribute(self, name: str) -> str | None: ...

    def computed_style(self, prop: str) -> str: ...

    def bounding_box(self) -> dict[str, float] | None: ...

    def viewport_size(self) -> dict[str, float] | None: ...

    def count(self) -> int: ...

    def validation_message(self) -> str: ...

    def tag_name(self) -> str: ...

    def wait_until(self, predicate: Callable[[], bool], timeout: float) -> bool:
        """Poll ``predicate`` until it holds or ``timeout`` ms elapse."""
        ...


@runtime_checkable
class Page(Protocol):
    @property
    def url(self) -> str: ...

    def title(self) -> str: ...

    def locator(self, selector: str) -> UIElement: ...

    def screenshot(self, path: str, full_page: bool = True) -> Any: ...

    def wait_for_download(self, timeout: float) -> str:
        """Wait for a download to start and return its suggested filename."""
        ...


@runtime_checkable
class RequestClient(Protocol):
    """Issues requests; mirrors ``APIRequestContext.fetch``."""

    def fetch(self, url: str, *, method: str, timeout: float) -> HttpResponse: ...


def poll_until(
    predicate: Callable[[], bool],
    timeout: float,
    interval: float = 100.0,
    *,
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], None] = time.sleep,
) -> bool:
    """Evaluate ``predicate`` until it returns True or ``timeout`` ms pass.

    The predicate is always evaluated at least once, so a zero timeout is a
    single immediate check. Drivers can back ``UIElement.wait_until`` with
    this loop.
    """
    deadline = clock() + max(timeout, 0.0) / 1000.0
    while True:
        if predicate():
            return True
        remaining = deadline - clock()
        if remaining <= 0:
            return False
        sleep(min(interval / 1000.0, remaining))
