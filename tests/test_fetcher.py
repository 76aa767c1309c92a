import pytest
from conftest import WEEK, FakePage, FakeSession
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from src.schedule_proxy.errors import (
    BrowserUnavailableError,
    NavigationTimeoutError,
    ScheduleNotFoundError,
)
from src.schedule_proxy.fetcher import ScheduleFetcher, encode_component
from src.schedule_proxy.models import ScheduleQuery

LIST_URL = "https://portal.psuti.ru/psuti/schedule-open/list"


@pytest.fixture
def fetcher(session, config):
    return ScheduleFetcher(session, config)


def test_url_without_dates(fetcher):
    query = ScheduleQuery(type="group", value="501")
    assert fetcher.build_url(query) == f"{LIST_URL}?type=group&value=501"


def test_url_with_both_dates(fetcher):
    query = ScheduleQuery(
        type="group", value="501", date_start="2024-01-01", date_end="2024-01-07"
    )
    assert fetcher.build_url(query) == (
        f"{LIST_URL}?type=group&value=501&dateStart=2024-01-01&dateEnd=2024-01-07"
    )


def test_url_with_only_end_date(fetcher):
    query = ScheduleQuery(type="group", value="501", date_end="2024-01-07")
    assert fetcher.build_url(query) == f"{LIST_URL}?type=group&value=501&dateEnd=2024-01-07"


def test_value_is_encoded(fetcher):
    query = ScheduleQuery(type="teacher", value="Ivanov I.I. & co")
    assert fetcher.build_url(query).endswith("value=Ivanov%20I.I.%20%26%20co")


@pytest.mark.parametrize(
    "raw, encoded",
    [
        ("501", "501"),
        ("a b", "a%20b"),
        ("a/b?c=d", "a%2Fb%3Fc%3Dd"),
        ("it's(ok)!*~", "it's(ok)!*~"),
        ("ИВТ-21", "%D0%98%D0%92%D0%A2-21"),
    ],
)
def test_encode_component_matches_encode_uri_component(raw, encoded):
    assert encode_component(raw) == encoded


@pytest.mark.asyncio
async def test_fetch_returns_document(fetcher, page):
    document = await fetcher.fetch(ScheduleQuery(type="group", value="501"))

    assert document == WEEK
    assert page.visited == [f"{LIST_URL}?type=group&value=501"]
    assert page.goto_kwargs == [{"wait_until": "networkidle", "timeout": 10000}]


@pytest.mark.asyncio
async def test_fetch_uses_body_text_fallback(config):
    page = FakePage(scripts=["var x = 1;"], body_text='let week = {"n": 1};')
    fetcher = ScheduleFetcher(FakeSession(page), config)
    assert await fetcher.fetch(ScheduleQuery(type="group", value="501")) == {"n": 1}


@pytest.mark.asyncio
async def test_fetch_without_schedule_raises_not_found(config):
    page = FakePage(scripts=["var x = 1;"], body_text="Группа не найдена")
    fetcher = ScheduleFetcher(FakeSession(page), config)

    with pytest.raises(ScheduleNotFoundError):
        await fetcher.fetch(ScheduleQuery(type="group", value="999"))


@pytest.mark.asyncio
async def test_fetch_with_broken_json_raises_not_found(config):
    page = FakePage(scripts=["let week = {broken};"])
    fetcher = ScheduleFetcher(FakeSession(page), config)

    with pytest.raises(ScheduleNotFoundError):
        await fetcher.fetch(ScheduleQuery(type="group", value="501"))


@pytest.mark.asyncio
async def test_navigation_timeout(config):
    page = FakePage(goto_error=PlaywrightTimeoutError("Timeout 10000ms exceeded."))
    fetcher = ScheduleFetcher(FakeSession(page), config)

    with pytest.raises(NavigationTimeoutError):
        await fetcher.fetch(ScheduleQuery(type="group", value="501"))
    assert page.goto_kwargs[0]["timeout"] == 10000


@pytest.mark.asyncio
async def test_dead_browser_is_unavailable(config):
    page = FakePage(goto_error=PlaywrightError("Target page, context or browser has been closed"))
    fetcher = ScheduleFetcher(FakeSession(page), config)

    with pytest.raises(BrowserUnavailableError):
        await fetcher.fetch(ScheduleQuery(type="group", value="501"))
