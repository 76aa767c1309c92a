"""Portal schedule proxy.

Renders the portal's public schedule page in headless Chromium, extracts the
embedded ``week`` document and serves it over HTTP with a short-lived cache.
"""

from src.schedule_proxy.cache import ResponseCache
from src.schedule_proxy.extraction import PageText, extract_schedule
from src.schedule_proxy.fetcher import ScheduleFetcher
from src.schedule_proxy.models import ScheduleQuery
from src.schedule_proxy.service import ScheduleService
from src.schedule_proxy.session import BrowserSession

__all__ = [
    "BrowserSession",
    "PageText",
    "ResponseCache",
    "ScheduleFetcher",
    "ScheduleQuery",
    "ScheduleService",
    "extract_schedule",
]
