"""OKX public market candles (``/api/v5/market/candles``)."""
from __future__ import annotations

from typing import Any, Dict, List, Tuple

from ..errors import ProviderError
from .base import Candle, ProviderAdapter, split_pair, to_candle

OKX_REST_BASE = "https://www.okx.com"

OKX_SYMBOLS: Dict[str, str] = {
    "XAU/USD": "XAU-USD",
    "EUR/USD": "EUR-USD",
    "BTC/USD": "BTC-USDT",
    "ETH/USD": "ETH-USDT",
    "LTC/USD": "LTC-USDT",
    "XRP/USD": "XRP-USDT",
    "DOGE/USD": "DOGE-USDT",
    "ADA/USD": "ADA-USDT",
    "SOL/USD": "SOL-USDT",
}

OKX_INTERVALS: Dict[str, str] = {
    "1": "1m",
    "5": "5m",
    "15": "15m",
    "30": "30m",
    "60": "1H",
    "240": "4H",
    "1440": "1D",
}


class OkxAdapter(ProviderAdapter):
    """OKX returns ``[ts, o, h, l, c, vol, volCcy, volCcyQuote, confirm]`` newest first."""

    name = "okx"
    intervals = OKX_INTERVALS
    symbol_mapping = OKX_SYMBOLS
    max_limit = 300

    def _native_symbol(self, raw: str) -> str:
        if "/" in raw:
            symbol = raw.replace("/", "-").upper()
        else:
            pair = split_pair(raw)
            if pair is None:
                return raw.upper()
            mapped = OKX_SYMBOLS.get(f"{pair[0]}/{pair[1]}")
            if mapped:
                return mapped
            symbol = f"{pair[0]}-{pair[1]}"
        # unmapped USD pairs trade against USDT on OKX
        if symbol.endswith("-USD"):
            symbol += "T"
        return symbol

    def build_request(self, symbol: str, interval: str, limit: int) -> Tuple[str, Dict[str, Any]]:
        url = f"{OKX_REST_BASE}/api/v5/market/candles"
        return url, {"instId": symbol, "bar": interval, "limit": limit}

    def parse_payload(self, payload: Any, interval: str) -> List[Candle]:
        if not isinstance(payload, dict):
            raise ProviderError("OKX envelope is not an object")
        code = str(payload.get("code", ""))
        if code != "0":
            raise ProviderError(f"OKX error code={code} msg={payload.get('msg', '')}")
        data = payload.get("data")
        if not isinstance(data, list):
            raise ProviderError("OKX envelope missing data array")
        candles: List[Candle] = []
        for row in reversed(data):
            if not isinstance(row, (list, tuple)):
                continue
            candle = to_candle(row)
            if candle is not None:
                candles.append(candle)
        return candles
