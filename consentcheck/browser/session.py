"""
Playwright-backed browser driver.

Each ``PlaywrightDriver`` instance owns its own Playwright, browser,
context and page, so concurrent audits never share browser state.
Selector probing and clicking run inside the page (``page.evaluate``)
so that clicks do not wait on Playwright's visibility/actionability
checks, which consent overlays frequently fail.
"""

from __future__ import annotations

import time
from types import TracebackType

from playwright import async_api

from consentcheck.browser import driver
from consentcheck.utils import errors, logger

log = logger.create_logger("BrowserSession")

# ============================================================================
# Page-context scripts
# ============================================================================

_CLICK_SCRIPT = """
(selector) => {
    const el = document.querySelector(selector);
    if (!el) return null;
    el.click();
    return (el.textContent || '').trim();
}
"""

_COUNT_BUTTONS_SCRIPT = """
(selector) => {
    const container = document.querySelector(selector);
    return container ? container.querySelectorAll('button').length : 0;
}
"""

_CLICK_LAST_BUTTON_SCRIPT = """
(selector) => {
    const container = document.querySelector(selector);
    if (!container) return null;
    const buttons = container.querySelectorAll('button');
    if (buttons.length === 0) return null;
    const lastButton = buttons[buttons.length - 1];
    lastButton.click();
    return (lastButton.textContent || '').trim();
}
"""


class PlaywrightDriver:
    """
    Implements :class:`~consentcheck.browser.driver.BrowserDriver` with Chromium.
    """

    def __init__(self, *, headless: bool = True) -> None:
        """Create an unlaunched driver; the browser starts on ``__aenter__``."""
        self._headless = headless
        self._playwright: async_api.Playwright | None = None
        self._browser: async_api.Browser | None = None
        self._context: async_api.BrowserContext | None = None
        self._page: async_api.Page | None = None
        self._handlers: list[driver.RequestHandler] = []

    # ==========================================================================
    # Lifecycle
    # ==========================================================================

    async def __aenter__(self) -> PlaywrightDriver:
        try:
            await self.launch()
        except BaseException:
            # __aexit__ is not called when __aenter__ raises.
            await self.close()
            raise
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def launch(self) -> None:
        """Launch Chromium and open a fresh page with request tracking."""
        log.info("Launching browser", {"headless": self._headless})
        self._playwright = await async_api.async_playwright().start()
        self._browser = await self._playwright.chromium.launch(headless=self._headless)
        self._context = await self._browser.new_context(locale="en-GB", java_script_enabled=True)
        self._page = await self._context.new_page()
        self._page.on("request", self._on_request)
        log.debug("Browser launched")

    def _require_page(self) -> async_api.Page:
        if not self._page:
            raise RuntimeError("No browser session active")
        return self._page

    # ==========================================================================
    # Request observation
    # ==========================================================================

    def on_request(self, handler: driver.RequestHandler) -> None:
        self._handlers.append(handler)

    def _on_request(self, request: async_api.Request) -> None:
        """Fan each intercepted request URL out to the registered handlers."""
        for handler in self._handlers:
            handler(request.url)

    # ==========================================================================
    # Navigation
    # ==========================================================================

    async def open(self, url: str, timeout_ms: int) -> None:
        page = self._require_page()
        log.debug("Navigating", {"url": url, "timeout": timeout_ms})
        try:
            await page.goto(url, wait_until="networkidle", timeout=timeout_ms)
        except async_api.TimeoutError as exc:
            raise errors.NavigationError(url, f"page did not settle within {timeout_ms}ms") from exc
        except async_api.Error as exc:
            raise errors.NavigationError(url, exc.message) from exc

        if page.url != url:
            log.info("Redirected", {"from": url, "to": page.url})

    async def wait_for_settle(self, timeout_ms: int) -> bool:
        """Wait for a main-frame navigation, then network idle.

        Accepting a banner rarely navigates, so this usually blocks for the
        whole *timeout_ms* while post-consent trackers fire, then returns
        ``False``.  A non-positive timeout returns ``False`` at once.
        """
        page = self._require_page()
        if timeout_ms <= 0:
            return False

        deadline = time.monotonic() + timeout_ms / 1000
        try:
            await page.wait_for_event(
                "framenavigated",
                predicate=lambda frame: frame == page.main_frame,
                timeout=timeout_ms,
            )
            remaining_ms = max(1, int((deadline - time.monotonic()) * 1000))
            await page.wait_for_load_state("networkidle", timeout=remaining_ms)
            return True
        except async_api.TimeoutError:
            log.debug("No navigation or network idle after consent", {"timeoutMs": timeout_ms})
            return False

    # ==========================================================================
    # DOM queries and clicks
    # ==========================================================================

    async def exists(self, selector: str) -> bool:
        return await self._require_page().query_selector(selector) is not None

    async def count_buttons(self, container_selector: str) -> int:
        count = await self._require_page().evaluate(_COUNT_BUTTONS_SCRIPT, container_selector)
        return int(count or 0)

    async def click(self, selector: str) -> str | None:
        return await self._require_page().evaluate(_CLICK_SCRIPT, selector)

    async def click_last_button(self, container_selector: str) -> str | None:
        return await self._require_page().evaluate(_CLICK_LAST_BUTTON_SCRIPT, container_selector)

    # ==========================================================================
    # Cleanup
    # ==========================================================================

    async def close(self) -> None:
        """Close the browser and clean up all resources."""
        log.debug("Closing browser session")
        if self._page:
            self._page.remove_listener("request", self._on_request)
            self._page = None
        self._handlers.clear()

        if self._context:
            try:
                await self._context.close()
            except async_api.Error as exc:
                log.debug("Context close error (non-fatal)", {"error": str(exc)})
            self._context = None

        if self._browser:
            try:
                await self._browser.close()
            except async_api.Error as exc:
                log.debug("Browser close error (non-fatal)", {"error": str(exc)})
            self._browser = None

        if self._playwright:
            try:
                await self._playwright.stop()
            except Exception as exc:
                log.debug("Playwright stop error (non-fatal)", {"error": str(exc)})
            self._playwright = None

        log.debug("Browser session closed")
