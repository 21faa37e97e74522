"""Forecast API: FastAPI app exposing weather, timezone and geocoding lookups."""

import logging
from datetime import UTC, datetime

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from forecaster.config.schema import ServiceConfig
from forecaster.errors import ForecastUnavailable, GeocodingUnavailable, TimezoneUnresolved
from forecaster.geo.geocoder import GeoService
from forecaster.service.weather_service import WeatherService, build_weather_service
from forecaster.storage.cache_store import create_cache_store

logger = logging.getLogger(__name__)


def _error_body(request: Request, status_code: int, message) -> dict:
    return {
        "status_code": status_code,
        "timestamp": datetime.now(UTC).isoformat(),
        "path": request.url.path,
        "message": message,
    }


def create_app(
    config: ServiceConfig | None = None,
    weather_service: WeatherService | None = None,
    geo_service: GeoService | None = None,
) -> FastAPI:
    """Build the app. Services not passed in are wired from ``config``."""
    config = config or ServiceConfig()
    if weather_service is None or geo_service is None:
        store = create_cache_store(config.cache.redis_url)
        if weather_service is None:
            weather_service = build_weather_service(config, store=store)
        if geo_service is None:
            geo_service = GeoService(
                store,
                base_url=config.geocoding.base_url,
                user_agent=config.geocoding.user_agent,
                timeout=config.geocoding.timeout_seconds,
            )

    app = FastAPI(title="Weather Forecast API", version="1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.weather = weather_service
    app.state.geo = geo_service

    @app.exception_handler(ForecastUnavailable)
    @app.exception_handler(GeocodingUnavailable)
    async def _unavailable(request: Request, exc: Exception) -> JSONResponse:
        logger.error("Request failed: %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=500, content=_error_body(request, 500, str(exc)))

    @app.exception_handler(RequestValidationError)
    async def _invalid(request: Request, exc: RequestValidationError) -> JSONResponse:
        messages = [f"{'.'.join(str(p) for p in e['loc'])}: {e['msg']}" for e in exc.errors()]
        return JSONResponse(status_code=400, content=_error_body(request, 400, messages))

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(request, exc.status_code, exc.detail),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def _unhandled(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            "Unhandled error: %s %s", request.method, request.url.path, exc_info=exc
        )
        return JSONResponse(
            status_code=500, content=_error_body(request, 500, "Internal server error")
        )

    # ── Endpoints ──────────────────────────────────────────────

    @app.get("/health")
    def health():
        """Liveness probe."""
        return {"status": "ok"}

    @app.get("/api/v1/weather")
    def get_weather(
        lat: float = Query(..., ge=-90, le=90),
        lon: float = Query(..., ge=-180, le=180),
    ):
        """Daily forecast closest to 14:00 local time."""
        result = app.state.weather.get_weather(lat, lon)
        return {
            "data": [entry.to_dict() for entry in result.entries],
            "metadata": result.metadata.to_dict(),
        }

    @app.get("/api/v1/timezone")
    def get_timezone(
        lat: float = Query(..., ge=-90, le=90),
        lon: float = Query(..., ge=-180, le=180),
    ):
        """Resolved IANA timezone for a coordinate."""
        try:
            tz_id = app.state.weather.resolver.resolve(lat, lon)
        except TimezoneUnresolved:
            raise HTTPException(status_code=404, detail="Timezone not found") from None
        return {"data": {"timezone_id": tz_id}}

    @app.get("/api/v1/geo/search")
    def search_location(
        name: str = Query(..., min_length=1),
        limit: int = Query(config.geocoding.default_limit, ge=1, le=50),
    ):
        """Places matching a name, with coordinates."""
        results = app.state.geo.search(name, limit)
        return {
            "data": [loc.to_dict() for loc in results],
            "metadata": {"limit": limit, "count": len(results)},
        }

    return app
