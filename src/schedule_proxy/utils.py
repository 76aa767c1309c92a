"""Page setup for portal scraping: resource blocking and view cookies."""

from playwright.async_api import BrowserContext, Page, Route

from src.schedule_proxy.logging import get_logger

log = get_logger(__name__)

# Only the inline scripts matter, so rendering assets are never fetched.
BLOCKED_RESOURCE_TYPES: frozenset[str] = frozenset(
    {"image", "media", "font", "stylesheet"}
)

# Cookies selecting the full schedule in the light theme.
PORTAL_COOKIES: dict[str, str] = {
    "scheduleType": "full",
    "theme": "light",
    "theme_system": "1",
}


async def block_resources(route: Route) -> None:
    """Abort requests for blocked resource types, continue everything else."""
    if route.request.resource_type in BLOCKED_RESOURCE_TYPES:
        await route.abort()
    else:
        await route.continue_()


async def configure_page_for_scraping(page: Page, *, timeout_ms: int) -> None:
    """Install request interception and default timeouts on a page.

    Args:
        page: Playwright Page instance.
        timeout_ms: Default navigation and action timeout.
    """
    await page.route("**/*", block_resources)
    page.set_default_timeout(timeout_ms)
    page.set_default_navigation_timeout(timeout_ms)


def portal_cookies(domain: str) -> list[dict[str, str]]:
    """Cookie dicts in the shape ``BrowserContext.add_cookies`` expects."""
    return [
        {"name": name, "value": value, "domain": domain, "path": "/"}
        for name, value in PORTAL_COOKIES.items()
    ]


async def set_portal_cookies(context: BrowserContext, domain: str) -> None:
    await context.add_cookies(portal_cookies(domain))
    log.debug("portal_cookies_set", domain=domain, names=sorted(PORTAL_COOKIES))
