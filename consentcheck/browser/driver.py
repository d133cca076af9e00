"""
Browser capability contract used by the capture session.

The session only decides *which* selectors to try and *when*; everything
that touches a real page goes through this protocol.  ``PlaywrightDriver``
is the production implementation, tests use an in-memory fake.
"""

from __future__ import annotations

from collections.abc import Callable
from types import TracebackType
from typing import Protocol

RequestHandler = Callable[[str], None]


class BrowserDriver(Protocol):
    """A browser page that can be navigated, observed, queried and clicked.

    Used as an async context manager: entering acquires the browser,
    exiting releases it on every path.
    """

    async def __aenter__(self) -> BrowserDriver: ...

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None: ...

    def on_request(self, handler: RequestHandler) -> None:
        """Register *handler* to receive the URL of every outbound request."""
        ...

    async def open(self, url: str, timeout_ms: int) -> None:
        """Navigate to *url* and wait for network quiescence.

        Raises:
            NavigationError: If the page does not settle within *timeout_ms*.
        """
        ...

    async def wait_for_settle(self, timeout_ms: int) -> bool:
        """Wait for a navigation and network quiescence; ``False`` on timeout.

        Must not return early just because the current document is already
        idle: requests fired after the accept click are only counted if
        they arrive before this returns.
        """
        ...

    async def exists(self, selector: str) -> bool:
        """Return ``True`` if *selector* resolves to an element."""
        ...

    async def count_buttons(self, container_selector: str) -> int:
        """Return the number of ``<button>`` elements inside the container."""
        ...

    async def click(self, selector: str) -> str | None:
        """Click the element matching *selector* in page context.

        Returns:
            The element's visible label, or ``None`` if nothing matched.
        """
        ...

    async def click_last_button(self, container_selector: str) -> str | None:
        """Click the last ``<button>`` inside the container.

        Returns:
            The button's visible label, or ``None`` if there was none.
        """
        ...

    async def close(self) -> None:
        """Release all browser resources."""
        ...
