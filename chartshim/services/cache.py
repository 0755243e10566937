"""In-memory freshness cache for candle sequences."""
from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Dict, List, Optional, Sequence, Tuple

from ..providers.base import Candle
from ..utils.logging import get_logger
from ..utils.time import Clock, now_ms

LOGGER = get_logger(__name__)

CacheKey = Tuple[str, str]
Loader = Callable[[], Awaitable[Sequence[Candle]]]


@dataclass(slots=True)
class CacheEntry:
    data: List[Candle] = field(default_factory=list)
    fetched_at_ms: int = 0


class FreshnessCache:
    """Serve cached candles until ``ttl_seconds`` elapse, then refresh on demand.

    A refresh that yields no candles keeps the previous data and leaves the
    timestamp untouched so the next lookup retries. When nothing was cached
    yet an empty entry is stamped to hold off retries for one TTL window.

    There is no locking: concurrent lookups of a stale key may each refresh,
    and the last write wins. Entries are never evicted.
    """

    def __init__(self, ttl_seconds: float, *, clock: Clock = time.time) -> None:
        self.ttl_ms = int(max(0.0, float(ttl_seconds)) * 1000)
        self._clock = clock
        self._entries: Dict[CacheKey, CacheEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def peek(self, key: CacheKey) -> Optional[CacheEntry]:
        return self._entries.get(key)

    def is_fresh(self, key: CacheKey) -> bool:
        entry = self._entries.get(key)
        if entry is None:
            return False
        return now_ms(self._clock) - entry.fetched_at_ms <= self.ttl_ms

    def clear(self) -> None:
        self._entries.clear()

    async def get(self, key: CacheKey, loader: Loader) -> List[Candle]:
        """Return a copy of the cached candles for ``key``, refreshing if stale."""

        if self.is_fresh(key):
            return list(self._entries[key].data)

        fresh = list(await loader())
        stamp = now_ms(self._clock)
        if fresh:
            self._entries[key] = CacheEntry(data=fresh, fetched_at_ms=stamp)
            return list(fresh)

        current = self._entries.get(key)
        if current is None:
            self._entries[key] = CacheEntry(data=[], fetched_at_ms=stamp)
            return []
        LOGGER.warning(
            "Refresh for %s/%s returned nothing; serving %s stale candles",
            key[0],
            key[1],
            len(current.data),
        )
        return list(current.data)
