"""Command line interface for the chart shim."""
from __future__ import annotations

import argparse
import asyncio
from pathlib import Path

from .config import load_settings
from .providers import display_symbol
from .services import build_candle_service, resolve_callback, wrap_jsonp
from .utils.logging import configure_logging, get_logger

LOGGER = get_logger(__name__)


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError("must be a positive integer")
    return number


def cmd_serve(config: Path | None, host: str | None, port: int | None) -> None:
    import uvicorn

    from .api.app import create_app

    settings = load_settings(config)
    configure_logging(settings.server.log_level)
    app = create_app(settings)
    uvicorn.run(
        app,
        host=host or settings.server.host,
        port=port or settings.server.port,
        log_level=settings.server.log_level.lower(),
    )


def cmd_fetch(
    config: Path | None,
    instrument: str,
    period: str,
    callback: str | None,
    limit: int | None = None,
) -> str:
    settings = load_settings(config)
    if limit is not None:
        settings.chart.limit = limit
    service = build_candle_service(settings)
    candles = asyncio.run(service.get_candles(instrument, period))
    LOGGER.info("Fetched %s candles for %s period=%s", len(candles), display_symbol(instrument), period)
    name = resolve_callback(callback, settings.chart.default_callback)
    return wrap_jsonp([list(candle) for candle in candles], name)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Legacy chart feed shim")
    parser.add_argument("--config", type=Path, default=None)
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve")
    serve.add_argument("--host", default=None)
    serve.add_argument("--port", type=int, default=None)

    fetch = sub.add_parser("fetch")
    fetch.add_argument("--instrument", default="BTC/USD")
    fetch.add_argument("--period", default="60")
    fetch.add_argument("--limit", type=_positive_int, default=None)
    fetch.add_argument("--jsonp", dest="callback", default=None)

    args = parser.parse_args(argv)

    if args.command == "serve":
        cmd_serve(args.config, args.host, args.port)
    elif args.command == "fetch":
        print(cmd_fetch(args.config, args.instrument, args.period, args.callback, args.limit))


if __name__ == "__main__":
    main()
