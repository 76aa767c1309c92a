"""In-memory response cache for fetched schedules.

Validity is computed on read: an entry is served while
``now - fetched_at < ttl``. Expired entries are ignored by ``get`` and
removed by ``sweep``, which the API runs periodically. The cache is bounded:
inserting into a full cache evicts the least recently used entry.

All operations are synchronous, so within a single event loop no locking is
needed.
"""

import time
from collections import OrderedDict
from typing import Callable

from src.schedule_proxy.logging import get_logger
from src.schedule_proxy.models import CacheEntry, ScheduleDocument

log = get_logger(__name__)


class ResponseCache:
    """Maps a query cache key to the last fetched schedule document."""

    def __init__(
        self,
        ttl: float = 60.0,
        max_entries: int = 0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize ResponseCache.

        Args:
            ttl: Default validity window in seconds.
            max_entries: Maximum number of entries; 0 means unbounded.
            clock: Monotonic time source (overridable in tests).
        """
        self.ttl = ttl
        self.max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def entry(self, key: str) -> CacheEntry | None:
        """Return the raw entry for key regardless of age."""
        return self._entries.get(key)

    def get(self, key: str, ttl: float | None = None) -> ScheduleDocument | None:
        """Return the cached payload if present and younger than ttl.

        A stale entry is left in place; it is either overwritten by the next
        fetch for the same key or removed by ``sweep``.
        """
        entry = self._entries.get(key)
        if entry is None:
            return None

        ttl = self.ttl if ttl is None else ttl
        if entry.age(self._clock()) >= ttl:
            return None

        self._entries.move_to_end(key)
        return entry.payload

    def set(self, key: str, payload: ScheduleDocument) -> None:
        """Insert or overwrite the entry for key, stamped with the current time."""
        self._entries[key] = CacheEntry(payload=payload, fetched_at=self._clock())
        self._entries.move_to_end(key)

        if self.max_entries > 0:
            while len(self._entries) > self.max_entries:
                evicted, _ = self._entries.popitem(last=False)
                log.debug("cache_evicted", key=evicted)

    def invalidate(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def sweep(self) -> int:
        """Remove every entry older than the default ttl.

        Returns:
            Number of entries removed.
        """
        now = self._clock()
        expired = [
            key for key, entry in self._entries.items() if entry.age(now) >= self.ttl
        ]
        for key in expired:
            del self._entries[key]

        if expired:
            log.debug("cache_swept", removed=len(expired), remaining=len(self._entries))
        return len(expired)
