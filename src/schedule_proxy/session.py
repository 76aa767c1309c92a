"""Playwright browser session owning one Chromium process and one page.

BrowserSession is created explicitly and injected into the fetcher. The
browser, context and page are created lazily on first use and reused for the
life of the session. Page access goes through ``lease()``, which holds a lock
so concurrent fetches never interleave navigations on the shared page.

If the browser is found dead when a lease is requested, the session is
relaunched (when ``relaunch_on_crash`` is set) instead of handing out a page
bound to a dead process.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, AsyncIterator, Callable

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from src.schedule_proxy.config import ScheduleProxyConfig, get_config
from src.schedule_proxy.errors import BrowserUnavailableError
from src.schedule_proxy.logging import get_logger
from src.schedule_proxy.utils import configure_page_for_scraping, set_portal_cookies

if TYPE_CHECKING:
    from playwright.async_api import Browser, BrowserContext, Page, Playwright

logger = get_logger(__name__)

LAUNCH_ARGS = ["--no-sandbox", "--disable-setuid-sandbox", "--disable-dev-shm-usage"]


class BrowserSession:
    """Owns the headless browser and the single page all navigations use."""

    def __init__(
        self,
        config: ScheduleProxyConfig | None = None,
        *,
        playwright_factory: Callable = async_playwright,
    ) -> None:
        """Initialize BrowserSession. Nothing is launched until first use.

        Args:
            config: Proxy configuration; defaults to the global config.
            playwright_factory: Returns an object whose ``start()`` yields a
                Playwright instance.
        """
        self.config = config or get_config()
        self._playwright_factory = playwright_factory
        self._playwright: "Playwright | None" = None
        self._browser: "Browser | None" = None
        self._context: "BrowserContext | None" = None
        self._page: "Page | None" = None
        self._lock = asyncio.Lock()

    @property
    def page(self) -> "Page | None":
        return self._page

    @property
    def is_started(self) -> bool:
        return self._page is not None

    async def ensure_browser(self) -> "Browser":
        """Launch headless Chromium unless a browser already exists."""
        if self._browser is not None:
            return self._browser

        try:
            if self._playwright is None:
                self._playwright = await self._playwright_factory().start()
            self._browser = await self._playwright.chromium.launch(
                headless=self.config.headless,
                args=LAUNCH_ARGS,
            )
        except PlaywrightError as e:
            logger.error("browser_launch_failed", error=str(e))
            raise BrowserUnavailableError(f"Browser launch failed: {e}") from e

        self._browser.on("disconnected", self._on_disconnected)
        logger.info("browser_launched", headless=self.config.headless)
        return self._browser

    async def ensure_page(self) -> "Page":
        """Create the shared page unless it already exists.

        The page blocks image, media, font and stylesheet requests and
        carries the portal view cookies.
        """
        if self._page is not None:
            return self._page

        browser = await self.ensure_browser()
        context = None
        try:
            context = await browser.new_context()
            await set_portal_cookies(context, self.config.portal_domain)
            page = await context.new_page()
            await configure_page_for_scraping(
                page, timeout_ms=self.config.navigation_timeout_ms
            )
        except PlaywrightError as e:
            logger.error("page_setup_failed", error=str(e))
            if context is not None:
                await self._close_quietly("context", context)
            raise BrowserUnavailableError(f"Page setup failed: {e}") from e

        self._context = context
        self._page = page
        logger.info("page_created", domain=self.config.portal_domain)
        return self._page

    async def start(self) -> None:
        await self.ensure_page()

    def health_check(self) -> bool:
        """True when the browser is connected and the page is still open."""
        if self._browser is None or self._page is None:
            return False
        return self._browser.is_connected() and not self._page.is_closed()

    async def shutdown(self) -> None:
        """Close page, context, browser and the Playwright driver.

        Safe to call before start and more than once. Close errors from an
        already dead browser are logged and ignored.
        """
        for name, target in (
            ("page", self._page),
            ("context", self._context),
            ("browser", self._browser),
        ):
            if target is not None:
                await self._close_quietly(name, target)

        if self._playwright is not None:
            try:
                await self._playwright.stop()
            except PlaywrightError as e:
                logger.warning("close_failed", target="playwright", error=str(e))

        was_started = self._page is not None
        self._page = self._context = self._browser = self._playwright = None
        if was_started:
            logger.info("browser_session_closed")

    async def restart(self) -> None:
        """Tear down and relaunch, retrying failed launches.

        Raises:
            BrowserUnavailableError: If every launch attempt failed.
        """
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(max(1, self.config.launch_attempts)),
            wait=wait_fixed(1),
            retry=retry_if_exception_type(BrowserUnavailableError),
            reraise=True,
        ):
            with attempt:
                await self.shutdown()
                await self.start()
                logger.info(
                    "browser_relaunched",
                    attempt=attempt.retry_state.attempt_number,
                )

    def _browser_dead(self) -> bool:
        if self._browser is not None and not self._browser.is_connected():
            return True
        return self._page is not None and not self.health_check()

    async def _acquire(self) -> "Page":
        if self._browser_dead():
            logger.warning("browser_unhealthy", relaunch=self.config.relaunch_on_crash)
            if not self.config.relaunch_on_crash:
                raise BrowserUnavailableError("Browser is not running")
            await self.restart()
        return await self.ensure_page()

    @asynccontextmanager
    async def lease(self) -> AsyncIterator["Page"]:
        """Exclusive use of the shared page for one navigation + extraction."""
        async with self._lock:
            yield await self._acquire()

    def _on_disconnected(self, _browser: object) -> None:
        logger.warning("browser_disconnected")

    async def _close_quietly(self, name: str, target: object) -> None:
        try:
            await target.close()
        except PlaywrightError as e:
            logger.warning("close_failed", target=name, error=str(e))
