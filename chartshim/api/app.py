"""FastAPI app emulating the legacy Dukascopy ``index.php`` JSONP feed."""
from __future__ import annotations

from pathlib import Path
from typing import Any

from fastapi import FastAPI, HTTPException, Query, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse

from ..config import Settings, get_settings
from ..services import (
    CandleService,
    build_candle_service,
    disclaimer_payload,
    instruments_payload,
    resolve_callback,
    timezones_payload,
    wrap_jsonp,
)
from ..utils.logging import get_logger
from ..version import APP_VERSION

LOGGER = get_logger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parents[2]
TEMPLATES_DIR = PROJECT_ROOT / "templates"

JSONP_MEDIA_TYPE = "application/javascript"

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}


async def _dispatch(
    app: FastAPI,
    path: str,
    instrument: str | None,
    period: str | None,
    timezone: str | None,
) -> Any:
    settings: Settings = app.state.settings
    service: CandleService = app.state.candles

    route = path.strip().strip("/").lower()
    if route == "chart/json3":
        if not instrument or not instrument.strip():
            return []
        candles = await service.get_candles(instrument.strip(), period)
        return [list(candle) for candle in candles]
    if route == "common/instruments":
        return instruments_payload(settings.chart.instruments)
    if route == "common/disclaimer":
        return disclaimer_payload()
    if route == "common/timezones":
        return timezones_payload(
            settings.chart.timezones,
            timezone,
            default=settings.chart.default_timezone,
        )
    return {}


def create_app(
    settings: Settings | None = None,
    service: CandleService | None = None,
) -> FastAPI:
    """Build the app with one candle service shared by every request."""

    settings = settings or get_settings()
    app = FastAPI(title="Chart Shim API", version=APP_VERSION)
    app.state.settings = settings
    app.state.candles = service or build_candle_service(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    # Registered last so it wraps CORSMiddleware: every OPTIONS is a 200.
    @app.middleware("http")
    async def legacy_cors(request: Request, call_next):
        if request.method == "OPTIONS":
            return Response(status_code=200, headers=CORS_HEADERS)
        response = await call_next(request)
        for name, value in CORS_HEADERS.items():
            response.headers.setdefault(name, value)
        return response

    @app.get("/index.php")
    async def legacy_index(
        path: str = Query("", description="Legacy route, e.g. chart/json3"),
        instrument: str | None = Query(None, description="Instrument such as BTC/USD"),
        period: str | None = Query(None, description="Period in minutes"),
        jsonp: str | None = Query(None, description="Callback function name"),
        timezone: str | None = Query(None, description="Requested display timezone"),
    ) -> Response:
        callback = resolve_callback(jsonp, settings.chart.default_callback)
        try:
            payload = await _dispatch(app, path, instrument, period, timezone)
        except Exception as exc:
            LOGGER.exception(
                "Failed to serve legacy path",
                extra={"path": path, "instrument": instrument, "period": period},
            )
            payload = {"error": str(exc)}
        return Response(content=wrap_jsonp(payload, callback), media_type=JSONP_MEDIA_TYPE)

    @app.get("/favicon.{ext}")
    async def favicon(ext: str) -> Response:
        return Response(status_code=204)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/version")
    async def version() -> dict[str, str]:
        return {"version": APP_VERSION}

    @app.get("/", response_class=HTMLResponse)
    async def index() -> HTMLResponse:
        try:
            template = TEMPLATES_DIR.joinpath("index.html").read_text(encoding="utf-8")
        except FileNotFoundError as exc:  # pragma: no cover - deployment guard
            raise HTTPException(status_code=500, detail="Index template is missing") from exc
        providers = ", ".join(adapter.name for adapter in app.state.candles.adapters)
        html = (
            template.replace("%(version)s", APP_VERSION)
            .replace("%(providers)s", providers)
            .replace("%(callback)s", settings.chart.default_callback)
        )
        return HTMLResponse(content=html)

    return app


app = create_app()
