"""ScheduleFetcher - renders the portal schedule page and extracts the week.

One call is one navigation plus one extraction pass:

  Idle -> Navigating -> Extracting -> Success | NotFound | Timeout

There is no automatic retry; a failed call raises and the caller decides.

Outbound URL (confirmed against the portal):
  {portal_url}/psuti/schedule-open/list?type=group&value=501[&dateStart=..][&dateEnd=..]
Absent dates are omitted from the URL entirely, never sent empty.
"""

from urllib.parse import quote

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from src.schedule_proxy.config import ScheduleProxyConfig, get_config
from src.schedule_proxy.errors import (
    BrowserUnavailableError,
    NavigationTimeoutError,
    ScheduleNotFoundError,
)
from src.schedule_proxy.extraction import PageText, extract_schedule
from src.schedule_proxy.logging import get_logger
from src.schedule_proxy.models import ScheduleDocument, ScheduleQuery
from src.schedule_proxy.session import BrowserSession

log = get_logger(__name__)

# Characters encodeURIComponent leaves untouched besides alphanumerics and "-_.~"
_URI_COMPONENT_SAFE = "!*'()"

# Inline scripts only; external scripts have no text content.
_SCRIPT_TEXTS_JS = "els => els.filter(e => !e.src).map(e => e.textContent || '')"


def encode_component(value: str) -> str:
    """Percent-encode a query value like JavaScript's encodeURIComponent."""
    return quote(value, safe=_URI_COMPONENT_SAFE)


class ScheduleFetcher:
    """Turns a ScheduleQuery into the portal's ``week`` document."""

    def __init__(
        self, session: BrowserSession, config: ScheduleProxyConfig | None = None
    ) -> None:
        self.session = session
        self.config = config or get_config()

    def build_url(self, query: ScheduleQuery) -> str:
        url = (
            f"{self.config.schedule_url}"
            f"?type={query.type}&value={encode_component(query.value)}"
        )
        if query.date_start:
            url += f"&dateStart={encode_component(query.date_start)}"
        if query.date_end:
            url += f"&dateEnd={encode_component(query.date_end)}"
        return url

    async def fetch(self, query: ScheduleQuery) -> ScheduleDocument:
        """Navigate to the schedule page for query and extract the week.

        Raises:
            NavigationTimeoutError: Page did not reach network idle in time.
            BrowserUnavailableError: Browser or page is dead or unlaunchable.
            ScheduleNotFoundError: No parseable ``week`` literal on the page.
        """
        url = self.build_url(query)

        async with self.session.lease() as page:
            await self._navigate(page, url)
            page_text = await self._read_page_text(page)

        document = extract_schedule(page_text)
        if document is None:
            log.warning("schedule_not_found", type=query.type, value=query.value, url=url)
            raise ScheduleNotFoundError(
                f"Schedule not found for {query.type} {query.value}"
            )

        log.info("schedule_extracted", type=query.type, value=query.value)
        return document

    async def _navigate(self, page: Page, url: str) -> None:
        timeout = self.config.navigation_timeout_ms
        log.info("navigating", url=url, timeout_ms=timeout)
        try:
            await page.goto(url, wait_until="networkidle", timeout=timeout)
        except PlaywrightTimeoutError as e:
            log.warning("navigation_timeout", url=url, timeout_ms=timeout)
            raise NavigationTimeoutError(
                f"Navigation to {url} exceeded {timeout} ms"
            ) from e
        except PlaywrightError as e:
            log.error("navigation_failed", url=url, error=str(e))
            raise BrowserUnavailableError(f"Navigation failed: {e}") from e
        log.debug("page_loaded", url=url)

    async def _read_page_text(self, page: Page) -> PageText:
        try:
            scripts = await page.eval_on_selector_all("script", _SCRIPT_TEXTS_JS)
            body_text = await page.evaluate(
                "() => document.body ? document.body.innerText : ''"
            )
        except PlaywrightError as e:
            log.error("page_read_failed", error=str(e))
            raise BrowserUnavailableError(f"Reading rendered page failed: {e}") from e
        return PageText(scripts=list(scripts or []), body_text=body_text or "")
