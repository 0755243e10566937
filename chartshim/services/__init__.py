"""Service layer exports for the chart shim."""

from .cache import CacheEntry, CacheKey, FreshnessCache
from .candles import CandleService, build_candle_service
from .fallback import FallbackResult, fetch_with_fallback, symbol_variants
from .jsonp import DEFAULT_CALLBACK, resolve_callback, wrap_jsonp
from .metadata import disclaimer_payload, instruments_payload, timezones_payload

__all__ = [
    "CacheEntry",
    "CacheKey",
    "CandleService",
    "DEFAULT_CALLBACK",
    "FallbackResult",
    "FreshnessCache",
    "build_candle_service",
    "disclaimer_payload",
    "fetch_with_fallback",
    "instruments_payload",
    "resolve_callback",
    "symbol_variants",
    "timezones_payload",
    "wrap_jsonp",
]
