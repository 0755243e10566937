"""Shared plumbing for upstream candle providers.

Every adapter turns a provider specific kline payload into the legacy
seven column candle ``[open_ms, open, high, low, close, volume, None]``.
Network failures, non-2xx responses and malformed envelopes are reported as
an empty sequence so callers can fall back to other spellings or providers.
"""
from __future__ import annotations

import math
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

import httpx

from ..errors import ProviderError
from ..utils.logging import get_logger
from ..utils.timeframes import normalize_period

LOGGER = get_logger(__name__)

Candle = Tuple[int, float, float, float, float, float, None]
ClientFactory = Callable[[], httpx.AsyncClient]

# Longest suffix first so that ``BTCUSDT`` splits as BTC/USDT rather than BTCUSD/T.
QUOTE_SUFFIXES: Tuple[str, ...] = ("USDT", "USDC", "BUSD", "USD", "EUR", "GBP", "JPY", "BTC", "ETH")
SEPARATORS: Tuple[str, ...] = ("/", "-", "_")


def split_pair(symbol: str) -> Optional[Tuple[str, str]]:
    """Split ``BTC/USD``, ``BTC-USDT`` or ``BTCUSDT`` into base and quote."""

    value = (symbol or "").strip().upper()
    for sep in SEPARATORS:
        if sep in value:
            base, _, quote = value.partition(sep)
            if base and quote:
                return base, quote
            return None
    for quote in QUOTE_SUFFIXES:
        if value.endswith(quote) and len(value) > len(quote):
            return value[: -len(quote)], quote
    return None


def display_symbol(symbol: str) -> str:
    """Map a provider native symbol back to the slash display form."""

    pair = split_pair(symbol)
    if pair is None:
        return (symbol or "").strip().upper()
    return f"{pair[0]}/{pair[1]}"


def to_candle(row: Sequence[object]) -> Candle | None:
    """Convert ``[ts, open, high, low, close, volume, ...]`` into a candle."""

    try:
        open_time = int(float(row[0]))  # type: ignore[arg-type]
        open_price = float(row[1])  # type: ignore[arg-type]
        high_price = float(row[2])  # type: ignore[arg-type]
        low_price = float(row[3])  # type: ignore[arg-type]
        close_price = float(row[4])  # type: ignore[arg-type]
        volume = float(row[5]) if len(row) > 5 and row[5] is not None else 0.0  # type: ignore[arg-type]
    except (IndexError, TypeError, ValueError):
        return None

    if not all(math.isfinite(value) for value in (open_price, high_price, low_price, close_price)):
        return None
    if not math.isfinite(volume):
        volume = 0.0
    return (open_time, open_price, high_price, low_price, close_price, volume, None)


def finalize_candles(candles: Iterable[Candle], limit: int | None = None) -> List[Candle]:
    """Deduplicate by open time (last wins), sort ascending and keep the tail."""

    by_time: Dict[int, Candle] = {}
    for candle in candles:
        by_time[candle[0]] = candle
    ordered = [by_time[ts] for ts in sorted(by_time)]
    if limit is not None and limit > 0:
        ordered = ordered[-limit:]
    return ordered


class ProviderAdapter(ABC):
    """One upstream REST API: symbol/interval vocabulary plus kline parsing."""

    name: str = ""
    intervals: Dict[str, str] = {}
    symbol_mapping: Dict[str, str] = {}
    max_limit: int = 1000

    def __init__(
        self,
        *,
        timeout: float = 15.0,
        client_factory: Optional[ClientFactory] = None,
    ) -> None:
        self.timeout = float(timeout)
        self._client_factory = client_factory or (lambda: httpx.AsyncClient(timeout=self.timeout))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"

    def normalize_interval(self, period: object) -> str:
        return self.intervals[normalize_period(period)]

    def normalize_symbol(self, symbol: str) -> str:
        raw = (symbol or "").strip()
        mapped = self.symbol_mapping.get(raw) or self.symbol_mapping.get(raw.upper())
        if mapped:
            return mapped
        return self._native_symbol(raw)

    def clamp_limit(self, limit: int | None) -> int:
        try:
            value = int(limit) if limit is not None else 100
        except (TypeError, ValueError):
            value = 100
        return max(1, min(value, self.max_limit))

    @abstractmethod
    def _native_symbol(self, raw: str) -> str:
        """Best-effort conversion of a symbol not found in the mapping table."""

    @abstractmethod
    def build_request(self, symbol: str, interval: str, limit: int) -> Tuple[str, Dict[str, Any]]:
        """Return the URL and query parameters for a kline request."""

    @abstractmethod
    def parse_payload(self, payload: Any, interval: str) -> List[Candle]:
        """Convert the decoded JSON body into candles, raising ProviderError."""

    async def fetch_candles(self, symbol: str, interval: str, limit: int | None = 100) -> List[Candle]:
        """Fetch the most recent ``limit`` candles in ascending time order."""

        safe_limit = self.clamp_limit(limit)
        url, params = self.build_request(symbol, interval, safe_limit)
        try:
            async with self._client_factory() as client:
                response = await client.get(url, params=params)
            response.raise_for_status()
            payload = response.json()
            candles = self.parse_payload(payload, interval)
        except httpx.HTTPStatusError as exc:
            LOGGER.warning(
                "[%s] %s %s rejected with status %s: %s",
                self.name,
                symbol,
                interval,
                exc.response.status_code,
                exc.response.text[:200],
            )
            return []
        except httpx.HTTPError as exc:
            LOGGER.warning("[%s] %s %s request failed: %s", self.name, symbol, interval, exc)
            return []
        except (ProviderError, ValueError) as exc:
            LOGGER.warning("[%s] %s %s unusable payload: %s", self.name, symbol, interval, exc)
            return []

        result = finalize_candles(candles, safe_limit)
        LOGGER.info("[%s] %s %s -> %s candles", self.name, symbol, interval, len(result))
        return result
