import pytest

from chartshim.services.jsonp import DEFAULT_CALLBACK, resolve_callback, wrap_jsonp


def test_wraps_payload_compactly() -> None:
    assert wrap_jsonp([{"id": "BTC-USDT"}], "cb") == 'cb([{"id":"BTC-USDT"}])'


def test_default_callback_when_absent() -> None:
    assert wrap_jsonp({}, None) == "callback({})"
    assert DEFAULT_CALLBACK == "callback"


def test_candles_serialise_null_reserved_column() -> None:
    body = wrap_jsonp([[60_000, 1.0, 2.0, 0.5, 1.5, 3.0, None]], "cb")
    assert body == "cb([[60000,1.0,2.0,0.5,1.5,3.0,null]])"


@pytest.mark.parametrize("name", ["cb", "_dc", "$jsonp", "jQuery1234_567", "window.app.onData"])
def test_identifier_callbacks_are_kept(name: str) -> None:
    assert resolve_callback(name) == name


@pytest.mark.parametrize("name", ["", "  ", "alert(1)//", "a b", "1cb", "cb;", "a..b", "x" * 200])
def test_unsafe_callbacks_are_replaced(name: str) -> None:
    assert resolve_callback(name) == DEFAULT_CALLBACK
    assert resolve_callback(name, "fallback") == "fallback"
