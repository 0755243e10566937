"""Try alternate symbol spellings and providers until one returns candles."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence

from ..providers.base import Candle, ProviderAdapter
from ..utils.logging import get_logger

LOGGER = get_logger(__name__)


@dataclass(slots=True)
class FallbackResult:
    candles: List[Candle] = field(default_factory=list)
    provider: Optional[str] = None
    symbol: Optional[str] = None
    attempts: int = 0


def _with_quote_suffix(symbol: str) -> str:
    if symbol.upper().endswith("USD"):
        return symbol + "T"
    return symbol


def _dedupe(values: Iterable[str]) -> List[str]:
    seen: set[str] = set()
    ordered: List[str] = []
    for value in values:
        if not value or value in seen:
            continue
        seen.add(value)
        ordered.append(value)
    return ordered


def symbol_variants(symbol: str) -> List[str]:
    """Return the alternate spellings tried for ``symbol``, in priority order.

    ``BTC/USD`` yields ``BTC/USD``, ``BTC-USD``, ``BTC-USDT`` and ``BTCUSDT``;
    ``btc-usdt`` yields ``btc-usdt``, ``btc/usdt``, ``BTCUSDT`` and ``BTC-USDT``.
    """

    base = (symbol or "").strip()
    dashed = base.replace("/", "-")
    stripped = base.replace("/", "").replace("-", "")
    return _dedupe(
        [
            base,
            base.replace("-", "/"),
            dashed,
            _with_quote_suffix(dashed),
            _with_quote_suffix(stripped).upper(),
            base.upper(),
        ]
    )


async def fetch_with_fallback(
    adapters: Sequence[ProviderAdapter],
    symbol: str,
    period: object,
    limit: int | None = 100,
) -> FallbackResult:
    """Return the first non-empty candle sequence across providers and spellings.

    Each provider is tried with its own normalised symbol first and then with
    every entry of :func:`symbol_variants`. An exhausted search yields an
    empty result rather than an exception.
    """

    attempts = 0
    for adapter in adapters:
        interval = adapter.normalize_interval(period)
        primary = adapter.normalize_symbol(symbol)
        for candidate in _dedupe([primary, *symbol_variants(symbol)]):
            attempts += 1
            LOGGER.info(
                "[%s] requesting input=%s resolved=%s interval=%s",
                adapter.name,
                symbol,
                candidate,
                interval,
            )
            candles = await adapter.fetch_candles(candidate, interval, limit)
            if candles:
                if candidate != primary:
                    LOGGER.info("[%s] %s served via alternate spelling %s", adapter.name, symbol, candidate)
                return FallbackResult(candles=candles, provider=adapter.name, symbol=candidate, attempts=attempts)

    LOGGER.warning(
        "No candles for %s period=%s after %s attempts across %s",
        symbol,
        period,
        attempts,
        ", ".join(adapter.name for adapter in adapters) or "no providers",
    )
    return FallbackResult(attempts=attempts)
