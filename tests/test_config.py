from pathlib import Path

import pytest

from chartshim.config import DEFAULT_CONFIG_PATH, load_settings
from chartshim.errors import ConfigError
from chartshim.providers import AlphaVantageAdapter, BinanceAdapter, build_adapters
from chartshim.services import build_candle_service, resolve_callback


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("CHARTSHIM_CONFIG", "CHARTSHIM_PROVIDERS", "ALPHAVANTAGE_API_KEY", "CHARTSHIM_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


def write_config(tmp_path: Path, body: str) -> Path:
    path = tmp_path / "settings.yaml"
    path.write_text(body, encoding="utf-8")
    return path


def test_repository_settings_load() -> None:
    settings = load_settings(DEFAULT_CONFIG_PATH)
    assert settings.providers.order[0] == "okx"
    assert settings.cache.ttl_for("okx") == 60
    assert settings.chart.limit == 100
    assert any(item.id == "XAU/USD" for item in settings.chart.instruments)


def test_yaml_and_env_overrides(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    path = write_config(
        tmp_path,
        "providers:\n  order: [okx]\ncache:\n  ttl_seconds: {binance: 45}\nchart:\n  limit: 50\n",
    )
    monkeypatch.setenv("CHARTSHIM_PROVIDERS", "Binance, alphavantage")
    monkeypatch.setenv("ALPHAVANTAGE_API_KEY", "k3y")

    settings = load_settings(path)

    assert settings.providers.order == ["binance", "alphavantage"]
    assert settings.providers.alphavantage_api_key == "k3y"
    assert settings.cache.ttl_for("binance") == 45
    assert settings.cache.ttl_for("alphavantage") == settings.cache.default_ttl_seconds
    adapters = build_adapters(settings)
    assert isinstance(adapters[0], BinanceAdapter)
    assert isinstance(adapters[1], AlphaVantageAdapter) and adapters[1].api_key == "k3y"

    service = build_candle_service(settings)
    assert service.cache.ttl_ms == 45_000
    assert service.limit == 50


def test_config_path_from_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    path = write_config(tmp_path, "chart:\n  default_callback: dc\n")
    monkeypatch.setenv("CHARTSHIM_CONFIG", str(path))
    assert load_settings().chart.default_callback == "dc"


def test_unknown_provider_is_rejected(tmp_path: Path) -> None:
    path = write_config(tmp_path, "providers:\n  order: [okx, kraken]\n")
    with pytest.raises(ConfigError, match="kraken"):
        load_settings(path)


def test_empty_provider_list_is_rejected(tmp_path: Path) -> None:
    path = write_config(tmp_path, "providers:\n  order: []\n")
    with pytest.raises(ConfigError):
        load_settings(path)


def test_missing_file_is_rejected(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="not found"):
        load_settings(tmp_path / "missing.yaml")


@pytest.mark.parametrize("name", ["alert(1)//", "a b", "1cb"])
def test_unsafe_default_callback_is_rejected(tmp_path: Path, name: str) -> None:
    path = write_config(tmp_path, f"chart:\n  default_callback: '{name}'\n")
    with pytest.raises(ConfigError, match="default_callback"):
        load_settings(path)


def test_configured_default_callback_is_used_for_unsafe_names(tmp_path: Path) -> None:
    path = write_config(tmp_path, "chart:\n  default_callback: ' app.onChart '\n")
    settings = load_settings(path)
    assert settings.chart.default_callback == "app.onChart"
    assert resolve_callback("alert(1)//", settings.chart.default_callback) == "app.onChart"
