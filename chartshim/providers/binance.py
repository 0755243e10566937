"""Binance spot klines (``/api/v3/klines``)."""
from __future__ import annotations

from typing import Any, Dict, List, Tuple

from ..errors import ProviderError
from .base import SEPARATORS, Candle, ProviderAdapter, split_pair, to_candle

BINANCE_SPOT_REST = "https://api.binance.com"

BINANCE_SYMBOLS: Dict[str, str] = {
    "BTC/USD": "BTCUSDT",
    "ETH/USD": "ETHUSDT",
    "LTC/USD": "LTCUSDT",
    "XRP/USD": "XRPUSDT",
    "DOGE/USD": "DOGEUSDT",
    "ADA/USD": "ADAUSDT",
    "SOL/USD": "SOLUSDT",
    "EUR/USD": "EURUSDT",
}

BINANCE_INTERVALS: Dict[str, str] = {
    "1": "1m",
    "5": "5m",
    "15": "15m",
    "30": "30m",
    "60": "1h",
    "240": "4h",
    "1440": "1d",
}


class BinanceAdapter(ProviderAdapter):
    """Binance returns ``[openTime, o, h, l, c, v, closeTime, ...]`` oldest first."""

    name = "binance"
    intervals = BINANCE_INTERVALS
    symbol_mapping = BINANCE_SYMBOLS
    max_limit = 1000

    def _native_symbol(self, raw: str) -> str:
        if any(sep in raw for sep in SEPARATORS):
            pair = split_pair(raw)
            if pair is None:
                return raw.upper()
            base, quote = pair
            # Binance has no USD spot book; USDT is the closest quote.
            if quote == "USD":
                quote = "USDT"
            return f"{base}{quote}"
        return raw.upper()

    def build_request(self, symbol: str, interval: str, limit: int) -> Tuple[str, Dict[str, Any]]:
        url = f"{BINANCE_SPOT_REST}/api/v3/klines"
        return url, {"symbol": symbol, "interval": interval, "limit": limit}

    def parse_payload(self, payload: Any, interval: str) -> List[Candle]:
        if isinstance(payload, dict):
            raise ProviderError(f"Binance error code={payload.get('code')} msg={payload.get('msg', '')}")
        if not isinstance(payload, list):
            raise ProviderError("Binance payload is not a list")
        candles: List[Candle] = []
        for row in payload:
            if not isinstance(row, (list, tuple)):
                continue
            candle = to_candle(row)
            if candle is not None:
                candles.append(candle)
        return candles
