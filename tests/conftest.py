"""Shared fakes standing in for Playwright objects."""

import asyncio
import json
from contextlib import asynccontextmanager
from pathlib import Path

import pytest

from src.schedule_proxy.cache import ResponseCache
from src.schedule_proxy.config import ScheduleProxyConfig
from src.schedule_proxy.fetcher import ScheduleFetcher
from src.schedule_proxy.service import ScheduleService

FIXTURES = Path(__file__).parent / "fixtures"

WEEK = {"week": 3, "days": [{"date": "2024-01-15", "lessons": [{"name": "Physics"}]}]}


def week_script(document_json: str) -> str:
    return f"\n  let week = {document_json};\n  renderWeek(week);\n"


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakePage:
    """Rendered-page stand-in for ScheduleFetcher."""

    def __init__(self, scripts=None, body_text="", goto_error=None, goto_delay=0.0):
        self.scripts = list(scripts or [])
        self.body_text = body_text
        self.goto_error = goto_error
        self.goto_delay = goto_delay
        self.visited: list[str] = []
        self.goto_kwargs: list[dict] = []

    async def goto(self, url, **kwargs):
        self.visited.append(url)
        self.goto_kwargs.append(kwargs)
        if self.goto_delay:
            await asyncio.sleep(self.goto_delay)
        if self.goto_error is not None:
            raise self.goto_error

    async def eval_on_selector_all(self, selector, expression):
        assert selector == "script"
        return list(self.scripts)

    async def evaluate(self, expression):
        return self.body_text


class FakeSession:
    """BrowserSession stand-in handing out a single FakePage."""

    def __init__(self, page: FakePage, healthy: bool = True) -> None:
        self.page = page
        self.healthy = healthy
        self.leases = 0

    @asynccontextmanager
    async def lease(self):
        self.leases += 1
        yield self.page

    def health_check(self) -> bool:
        return self.healthy

    async def start(self) -> None:
        pass

    async def shutdown(self) -> None:
        pass


@pytest.fixture
def config():
    return ScheduleProxyConfig(
        portal_url="https://portal.psuti.ru",
        cache_ttl_seconds=60,
        cache_sweep_interval_seconds=0,
        navigation_timeout_ms=10000,
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def page():
    return FakePage(scripts=["var analytics = 1;", week_script(json.dumps(WEEK))])


@pytest.fixture
def session(page):
    return FakeSession(page)


@pytest.fixture
def service(session, config, clock):
    cache = ResponseCache(ttl=config.cache_ttl_seconds, clock=clock)
    return ScheduleService(ScheduleFetcher(session, config), cache)
