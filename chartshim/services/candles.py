"""Candle lookup: normalisation, freshness cache and provider fallback."""
from __future__ import annotations

import time
from typing import List, Optional, Sequence

from ..config import Settings
from ..providers import build_adapters
from ..providers.base import Candle, ClientFactory, ProviderAdapter
from ..utils.logging import get_logger
from ..utils.time import Clock
from .cache import CacheKey, FreshnessCache
from .fallback import fetch_with_fallback

LOGGER = get_logger(__name__)

DEFAULT_LIMIT = 100


class CandleService:
    """Resolve ``(instrument, period)`` requests into cached candle sequences."""

    def __init__(
        self,
        adapters: Sequence[ProviderAdapter],
        cache: FreshnessCache,
        *,
        limit: int = DEFAULT_LIMIT,
    ) -> None:
        if not adapters:
            raise ValueError("CandleService requires at least one provider")
        self.adapters = list(adapters)
        self.cache = cache
        self.limit = max(1, int(limit))

    @property
    def primary(self) -> ProviderAdapter:
        return self.adapters[0]

    def cache_key(self, instrument: str, period: object) -> CacheKey:
        return (
            self.primary.normalize_symbol(instrument),
            self.primary.normalize_interval(period),
        )

    async def get_candles(self, instrument: str, period: object) -> List[Candle]:
        """Return ascending candles for the instrument, possibly from cache."""

        key = self.cache_key(instrument, period)

        async def _load() -> List[Candle]:
            result = await fetch_with_fallback(self.adapters, instrument, period, self.limit)
            return result.candles

        return await self.cache.get(key, _load)


def build_candle_service(
    settings: Settings,
    *,
    client_factory: Optional[ClientFactory] = None,
    clock: Clock = time.time,
) -> CandleService:
    adapters = build_adapters(settings, client_factory=client_factory)
    ttl = settings.cache.ttl_for(adapters[0].name)
    LOGGER.info(
        "Candle service using providers=%s ttl=%ss limit=%s",
        ",".join(adapter.name for adapter in adapters),
        ttl,
        settings.chart.limit,
    )
    return CandleService(adapters, FreshnessCache(ttl, clock=clock), limit=settings.chart.limit)
