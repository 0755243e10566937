import asyncio
from typing import List

import pytest

from chartshim.services.cache import FreshnessCache

KEY = ("BTC-USDT", "1H")
CANDLES = [(0, 1.0, 2.0, 0.5, 1.5, 1.0, None), (60_000, 1.5, 2.5, 1.0, 2.0, 2.0, None)]


class FakeClock:
    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class CountingLoader:
    def __init__(self, *results: List[tuple]) -> None:
        self.results = list(results)
        self.calls = 0

    async def __call__(self) -> List[tuple]:
        self.calls += 1
        if self.results:
            return list(self.results.pop(0))
        return []


def test_second_lookup_within_ttl_is_served_from_cache() -> None:
    clock = FakeClock()
    cache = FreshnessCache(60, clock=clock)
    loader = CountingLoader(CANDLES)

    first = asyncio.run(cache.get(KEY, loader))
    clock.advance(60)
    second = asyncio.run(cache.get(KEY, loader))

    assert loader.calls == 1
    assert first == second == CANDLES


def test_callers_receive_copies() -> None:
    cache = FreshnessCache(60, clock=FakeClock())
    loader = CountingLoader(CANDLES)

    data = asyncio.run(cache.get(KEY, loader))
    data.clear()

    assert cache.peek(KEY).data == CANDLES


def test_stale_entry_triggers_exactly_one_refresh() -> None:
    clock = FakeClock()
    cache = FreshnessCache(30, clock=clock)
    newer = CANDLES + [(120_000, 2.0, 3.0, 1.5, 2.5, 1.0, None)]
    loader = CountingLoader(CANDLES, newer)

    asyncio.run(cache.get(KEY, loader))
    clock.advance(31)
    refreshed = asyncio.run(cache.get(KEY, loader))

    assert loader.calls == 2
    assert refreshed == newer
    assert cache.peek(KEY).fetched_at_ms == int(clock.now * 1000)


def test_failed_refresh_keeps_stale_data_and_retries() -> None:
    clock = FakeClock()
    cache = FreshnessCache(30, clock=clock)
    loader = CountingLoader(CANDLES, [], [])

    asyncio.run(cache.get(KEY, loader))
    stamped = cache.peek(KEY).fetched_at_ms
    clock.advance(45)

    assert asyncio.run(cache.get(KEY, loader)) == CANDLES
    assert cache.peek(KEY).fetched_at_ms == stamped
    assert asyncio.run(cache.get(KEY, loader)) == CANDLES
    assert loader.calls == 3


def test_empty_first_fetch_is_stamped() -> None:
    clock = FakeClock()
    cache = FreshnessCache(60, clock=clock)
    loader = CountingLoader()

    assert asyncio.run(cache.get(KEY, loader)) == []
    assert asyncio.run(cache.get(KEY, loader)) == []
    assert loader.calls == 1
    assert KEY in cache and len(cache) == 1

    clock.advance(61)
    asyncio.run(cache.get(KEY, loader))
    assert loader.calls == 2


def test_loader_exception_propagates_and_keeps_entry() -> None:
    clock = FakeClock()
    cache = FreshnessCache(10, clock=clock)
    asyncio.run(cache.get(KEY, CountingLoader(CANDLES)))
    clock.advance(11)

    async def boom():
        raise RuntimeError("upstream exploded")

    with pytest.raises(RuntimeError, match="upstream exploded"):
        asyncio.run(cache.get(KEY, boom))
    assert cache.peek(KEY).data == CANDLES
    assert not cache.is_fresh(KEY)
