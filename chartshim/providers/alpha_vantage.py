"""Alpha Vantage intraday and daily time series.

Alpha Vantage splits its candles across three families of endpoints: FX
pairs, digital currencies and listed equities. The native symbol used for
cache keys is ``BASE/QUOTE`` for pairs and the bare ticker for equities.
Four hour bars are not offered upstream and are resampled from ``60min``.
"""
from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Tuple

import pandas as pd

from ..errors import ProviderError
from ..utils.logging import get_logger
from ..utils.time import check_timezone, to_epoch_ms
from .base import Candle, ClientFactory, ProviderAdapter, split_pair, to_candle

LOGGER = get_logger(__name__)

ALPHA_VANTAGE_URL = "https://www.alphavantage.co/query"

ALPHA_VANTAGE_INTERVALS: Dict[str, str] = {
    "1": "1min",
    "5": "5min",
    "15": "15min",
    "30": "30min",
    "60": "60min",
    "240": "240min",
    "1440": "daily",
}

# Tokens that Alpha Vantage cannot serve natively: (requested interval, bars per candle).
RESAMPLED_INTERVALS: Dict[str, Tuple[str, int]] = {
    "240min": ("60min", 4),
}

ALPHA_VANTAGE_SYMBOLS: Dict[str, str] = {
    "XAU/USD": "XAU/USD",
    "EUR/USD": "EUR/USD",
    "BTC/USD": "BTC/USD",
    "ETH/USD": "ETH/USD",
}

FX_CODES = frozenset(
    {"USD", "EUR", "GBP", "JPY", "CHF", "AUD", "CAD", "NZD", "CNY", "HKD", "SEK", "NOK", "XAU", "XAG"}
)

# Envelopes that carry no series: rate limit notes, premium hints and errors.
_MESSAGE_KEYS = ("Error Message", "Note", "Information")


def _field(fields: Mapping[str, Any], name: str) -> Any:
    for key, value in fields.items():
        if name in key.lower():
            return value
    return None


class AlphaVantageAdapter(ProviderAdapter):
    name = "alphavantage"
    intervals = ALPHA_VANTAGE_INTERVALS
    symbol_mapping = ALPHA_VANTAGE_SYMBOLS
    max_limit = 5000

    def __init__(
        self,
        *,
        api_key: str = "demo",
        timeout: float = 15.0,
        client_factory: Optional[ClientFactory] = None,
    ) -> None:
        super().__init__(timeout=timeout, client_factory=client_factory)
        self.api_key = api_key

    def _native_symbol(self, raw: str) -> str:
        value = raw.upper()
        if any(sep in value for sep in ("/", "-", "_")):
            pair = split_pair(value)
            if pair is not None:
                return f"{pair[0]}/{pair[1]}"
            return value
        pair = split_pair(value)
        if pair is not None and pair[1] in {"USD", "USDT", "EUR"} and len(pair[0]) >= 3:
            return f"{pair[0]}/{pair[1]}"
        return value

    def build_request(self, symbol: str, interval: str, limit: int) -> Tuple[str, Dict[str, Any]]:
        upstream_interval, factor = RESAMPLED_INTERVALS.get(interval, (interval, 1))
        params: Dict[str, Any] = {
            "apikey": self.api_key,
            "outputsize": "compact" if limit * factor <= 100 else "full",
        }
        daily = upstream_interval == "daily"
        pair = split_pair(symbol) if "/" in symbol else None
        if pair is None:
            params["function"] = "TIME_SERIES_DAILY" if daily else "TIME_SERIES_INTRADAY"
            params["symbol"] = symbol
        elif pair[0] in FX_CODES:
            params["function"] = "FX_DAILY" if daily else "FX_INTRADAY"
            params["from_symbol"] = pair[0]
            params["to_symbol"] = pair[1]
        else:
            params["function"] = "DIGITAL_CURRENCY_DAILY" if daily else "CRYPTO_INTRADAY"
            params["symbol"] = pair[0]
            params["market"] = pair[1]
        if not daily:
            params["interval"] = upstream_interval
        return ALPHA_VANTAGE_URL, params

    def parse_payload(self, payload: Any, interval: str) -> List[Candle]:
        if not isinstance(payload, dict):
            raise ProviderError("Alpha Vantage payload is not an object")
        for key in _MESSAGE_KEYS:
            if key in payload:
                raise ProviderError(f"{key}: {payload[key]}")

        series_key = next((key for key in payload if key.startswith("Time Series")), None)
        if series_key is None:
            raise ProviderError("Alpha Vantage response missing time series")
        series = payload[series_key]
        if not isinstance(series, dict):
            raise ProviderError("Alpha Vantage time series is not an object")

        meta = payload.get("Meta Data") or {}
        try:
            tz = check_timezone(_field(meta, "time zone") or "UTC")
        except ValueError as exc:
            raise ProviderError(f"Alpha Vantage metadata: {exc}") from exc

        candles: List[Candle] = []
        for stamp, fields in series.items():
            if not isinstance(fields, dict):
                continue
            try:
                open_ms = to_epoch_ms(stamp, tz)
            except ValueError:
                LOGGER.debug("Skipping unparseable Alpha Vantage stamp %s (%s)", stamp, tz)
                continue
            candle = to_candle(
                [
                    open_ms,
                    _field(fields, "open"),
                    _field(fields, "high"),
                    _field(fields, "low"),
                    _field(fields, "close"),
                    _field(fields, "volume"),
                ]
            )
            if candle is not None:
                candles.append(candle)

        # Series keys arrive newest first.
        candles.sort(key=lambda candle: candle[0])
        if interval in RESAMPLED_INTERVALS:
            candles = self._resample(candles, interval)
        return candles

    @staticmethod
    def _resample(candles: List[Candle], rule: str) -> List[Candle]:
        if not candles:
            return []
        frame = pd.DataFrame(
            [candle[:6] for candle in candles],
            columns=["open_time", "open", "high", "low", "close", "volume"],
        )
        frame.index = pd.to_datetime(frame.pop("open_time"), unit="ms", utc=True)
        resampled = frame.resample(rule, label="left", closed="left").agg(
            {"open": "first", "high": "max", "low": "min", "close": "last", "volume": "sum"}
        )
        resampled = resampled.dropna(subset=["open", "close"])
        result: List[Candle] = []
        for stamp, row in resampled.iterrows():
            result.append(
                (
                    int(stamp.value // 1_000_000),
                    float(row["open"]),
                    float(row["high"]),
                    float(row["low"]),
                    float(row["close"]),
                    float(row["volume"]),
                    None,
                )
            )
        return result
