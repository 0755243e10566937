"""Configuration loading utilities for the chart shim."""
from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

from .errors import ConfigError

PROJECT_ROOT = Path(__file__).resolve().parents[1]
DEFAULT_CONFIG_PATH = PROJECT_ROOT / "configs" / "settings.yaml"

KNOWN_PROVIDERS = ("okx", "binance", "alphavantage")


class ServerSettings(BaseModel):
    host: str = "127.0.0.1"
    port: int = Field(8000, ge=1, le=65535)
    log_level: str = "INFO"


class ProviderSettings(BaseModel):
    # The first entry is the primary provider; the rest are fallbacks.
    order: List[str] = Field(default_factory=lambda: ["okx", "binance"])
    timeout_seconds: float = Field(15.0, gt=0.0)
    alphavantage_api_key: str = "demo"


class CacheSettings(BaseModel):
    ttl_seconds: Dict[str, float] = Field(
        default_factory=lambda: {"okx": 60.0, "binance": 30.0, "alphavantage": 300.0}
    )
    default_ttl_seconds: float = Field(60.0, ge=0.0)

    def ttl_for(self, provider: str) -> float:
        return float(self.ttl_seconds.get(provider, self.default_ttl_seconds))


class Instrument(BaseModel):
    id: str
    name: str


class ChartSettings(BaseModel):
    limit: int = Field(100, ge=1)
    default_callback: str = "callback"
    default_timezone: str = "UTC"
    instruments: List[Instrument] = Field(
        default_factory=lambda: [
            Instrument(id=symbol, name=symbol)
            for symbol in ("BTC/USD", "ETH/USD", "LTC/USD", "XRP/USD", "DOGE/USD", "ADA/USD", "SOL/USD")
        ]
    )
    timezones: List[str] = Field(
        default_factory=lambda: ["UTC", "Europe/London", "America/New_York", "Asia/Shanghai", "Asia/Tokyo"]
    )

    @field_validator("default_callback")
    @classmethod
    def _check_callback(cls, value: str) -> str:
        from .services.jsonp import is_callback_name

        value = value.strip()
        if not is_callback_name(value):
            raise ValueError(f"{value!r} is not a JavaScript callback name")
        return value


class Settings(BaseModel):
    server: ServerSettings = Field(default_factory=ServerSettings)
    providers: ProviderSettings = Field(default_factory=ProviderSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    chart: ChartSettings = Field(default_factory=ChartSettings)


def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")
    with path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def _validate_providers(order: List[str]) -> List[str]:
    cleaned = [name.strip().lower() for name in order if name and name.strip()]
    if not cleaned:
        raise ConfigError("At least one upstream provider must be configured")
    unknown = [name for name in cleaned if name not in KNOWN_PROVIDERS]
    if unknown:
        raise ConfigError(f"Unknown providers: {', '.join(unknown)}")
    return cleaned


def load_settings(path: Path | str | None = None) -> Settings:
    """Load application settings from YAML and environment variables."""
    load_dotenv()
    if path is None:
        path = os.getenv("CHARTSHIM_CONFIG")
    if path is None and not DEFAULT_CONFIG_PATH.exists():
        # installed without the repository configs; run on built-in defaults
        raw = {}
    else:
        raw = _load_yaml(Path(path or DEFAULT_CONFIG_PATH))
    try:
        settings = Settings.model_validate(raw)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc

    # allow overriding via environment variables
    providers = os.getenv("CHARTSHIM_PROVIDERS")
    api_key = os.getenv("ALPHAVANTAGE_API_KEY")
    log_level = os.getenv("CHARTSHIM_LOG_LEVEL")
    if providers:
        settings.providers.order = providers.split(",")
    if api_key:
        settings.providers.alphavantage_api_key = api_key
    if log_level:
        settings.server.log_level = log_level
    settings.providers.order = _validate_providers(settings.providers.order)
    return settings


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()
