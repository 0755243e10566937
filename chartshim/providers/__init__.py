"""Upstream candle providers and the registry used to build them from settings."""
from __future__ import annotations

from typing import Dict, List, Optional, Type

from ..config import Settings
from ..errors import ConfigError
from .alpha_vantage import AlphaVantageAdapter
from .base import Candle, ClientFactory, ProviderAdapter, display_symbol, split_pair
from .binance import BinanceAdapter
from .okx import OkxAdapter

PROVIDERS: Dict[str, Type[ProviderAdapter]] = {
    OkxAdapter.name: OkxAdapter,
    BinanceAdapter.name: BinanceAdapter,
    AlphaVantageAdapter.name: AlphaVantageAdapter,
}


def build_adapter(
    name: str,
    settings: Settings,
    *,
    client_factory: Optional[ClientFactory] = None,
) -> ProviderAdapter:
    key = (name or "").strip().lower()
    adapter_cls = PROVIDERS.get(key)
    if adapter_cls is None:
        raise ConfigError(f"Unknown provider: {name}")
    timeout = settings.providers.timeout_seconds
    if adapter_cls is AlphaVantageAdapter:
        return AlphaVantageAdapter(
            api_key=settings.providers.alphavantage_api_key,
            timeout=timeout,
            client_factory=client_factory,
        )
    return adapter_cls(timeout=timeout, client_factory=client_factory)


def build_adapters(
    settings: Settings,
    *,
    client_factory: Optional[ClientFactory] = None,
) -> List[ProviderAdapter]:
    """Instantiate the configured providers in priority order."""

    return [build_adapter(name, settings, client_factory=client_factory) for name in settings.providers.order]


__all__ = [
    "AlphaVantageAdapter",
    "BinanceAdapter",
    "Candle",
    "ClientFactory",
    "OkxAdapter",
    "PROVIDERS",
    "ProviderAdapter",
    "build_adapter",
    "build_adapters",
    "display_symbol",
    "split_pair",
]
