"""ScheduleService - answers schedule queries from cache or a fresh fetch."""

import asyncio

from src.schedule_proxy.cache import ResponseCache
from src.schedule_proxy.fetcher import ScheduleFetcher
from src.schedule_proxy.logging import get_logger
from src.schedule_proxy.models import ScheduleDocument, ScheduleQuery

log = get_logger(__name__)


class ScheduleService:
    """Cache-first schedule lookups.

    Identical queries that miss the cache at the same time share a single
    fetch. Failed fetches are never cached, so the next request tries again.
    """

    def __init__(
        self,
        fetcher: ScheduleFetcher,
        cache: ResponseCache,
    ) -> None:
        self.fetcher = fetcher
        self.cache = cache
        self._in_flight: dict[str, asyncio.Future] = {}

    async def get_schedule(self, query: ScheduleQuery) -> ScheduleDocument:
        key = query.cache_key

        cached = self.cache.get(key)
        if cached is not None:
            log.info("schedule_cache_hit", type=query.type, value=query.value)
            return cached

        pending = self._in_flight.get(key)
        if pending is not None:
            log.debug("schedule_fetch_joined", key=key)
            return await asyncio.shield(pending)

        future: asyncio.Future = asyncio.get_running_loop().create_future()
        self._in_flight[key] = future
        try:
            document = await self.fetcher.fetch(query)
        except asyncio.CancelledError:
            future.cancel()
            raise
        except Exception as e:
            future.set_exception(e)
            # Nobody may be waiting; mark retrieved to avoid a loop warning.
            future.exception()
            raise
        else:
            self.cache.set(key, document)
            future.set_result(document)
            return document
        finally:
            del self._in_flight[key]

    def stats(self) -> dict[str, int]:
        return {
            "cache_entries": len(self.cache),
            "in_flight": len(self._in_flight),
        }
