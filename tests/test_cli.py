import json

import pytest

import chartshim.cli as cli
from chartshim.config import DEFAULT_CONFIG_PATH


class StubService:
    def __init__(self) -> None:
        self.calls = []

    async def get_candles(self, instrument, period):
        self.calls.append((instrument, period))
        return [(60_000, 1.0, 2.0, 0.5, 1.5, 3.0, None)]


def test_fetch_prints_jsonp(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture) -> None:
    stub = StubService()
    monkeypatch.setattr(cli, "build_candle_service", lambda settings: stub)

    cli.main(["--config", str(DEFAULT_CONFIG_PATH), "fetch", "--instrument", "ETH/USD", "--period", "5", "--jsonp", "cb"])

    out = capsys.readouterr().out.strip()
    assert out.startswith("cb(")
    assert json.loads(out[3:-1]) == [[60_000, 1.0, 2.0, 0.5, 1.5, 3.0, None]]
    assert stub.calls == [("ETH/USD", "5")]


def test_command_is_required() -> None:
    with pytest.raises(SystemExit):
        cli.main([])


def test_fetch_limit_overrides_configured_limit(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture) -> None:
    limits = []

    def build(settings):
        limits.append(settings.chart.limit)
        return StubService()

    monkeypatch.setattr(cli, "build_candle_service", build)

    cli.main(["--config", str(DEFAULT_CONFIG_PATH), "fetch", "--instrument", "BTC/USD", "--limit", "25"])
    cli.main(["--config", str(DEFAULT_CONFIG_PATH), "fetch", "--instrument", "BTC/USD"])

    assert limits == [25, 100]
    assert capsys.readouterr().out.startswith("callback(")


@pytest.mark.parametrize("value", ["0", "-3", "many"])
def test_fetch_limit_must_be_positive(value: str) -> None:
    with pytest.raises(SystemExit):
        cli.main(["fetch", "--limit", value])
