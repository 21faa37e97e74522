"""Weather retrieval service: timezone + cached series + daily selection."""

import logging
from collections.abc import Callable
from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

from forecaster.config.schema import ServiceConfig
from forecaster.errors import ForecastUnavailable
from forecaster.ingest.rate_limiter import AdmissionGate
from forecaster.ingest.timezone_resolver import TimezoneResolver
from forecaster.ingest.yr_client import YrClient
from forecaster.models.common import format_utc_offset, utc_now
from forecaster.models.forecast import RetrievalMetadata, RetrievalResult
from forecaster.selection.forecast_selector import (
    FORECAST_TARGET_HOUR,
    MAX_HOUR_DISTANCE,
    select_daily_forecasts,
)
from forecaster.storage.cache_store import CacheStore, create_cache_store
from forecaster.storage.forecast_cache import ForecastCacheManager

logger = logging.getLogger(__name__)


def utc_offset_label(timezone_id: str, at: datetime) -> str:
    """Offset of ``timezone_id`` at instant ``at``, e.g. ``+01:00``."""
    return format_utc_offset(at.astimezone(ZoneInfo(timezone_id)).utcoffset())


class WeatherService:
    def __init__(
        self,
        cache: ForecastCacheManager,
        resolver: TimezoneResolver,
        target_hour: int = FORECAST_TARGET_HOUR,
        max_hour_distance: int = MAX_HOUR_DISTANCE,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.cache = cache
        self.resolver = resolver
        self.target_hour = target_hour
        self.max_hour_distance = max_hour_distance
        self._clock = clock

    def get_weather(self, lat: float, lon: float) -> RetrievalResult:
        """Daily forecast for a coordinate pair.

        Every failure is logged with its cause and re-raised as
        ForecastUnavailable; no partial result is returned.
        """
        try:
            timezone_id = self.resolver.resolve(lat, lon)
            series = self.cache.get_forecast_series(lat, lon)
            entries = select_daily_forecasts(
                series, timezone_id, self.target_hour, self.max_hour_distance
            )
            offset = utc_offset_label(timezone_id, self._clock())
        except Exception as e:
            logger.exception("Failed to fetch weather for %s, %s", lat, lon)
            raise ForecastUnavailable() from e

        return RetrievalResult(
            entries=entries,
            metadata=RetrievalMetadata(
                day_count=len(entries),
                timezone_id=timezone_id,
                utc_offset_label=offset,
            ),
        )


def build_weather_service(
    config: ServiceConfig,
    store: CacheStore | None = None,
    gate: AdmissionGate | None = None,
) -> WeatherService:
    """Wire a WeatherService from config. One gate per process."""
    if store is None:
        store = create_cache_store(config.cache.redis_url)
    if gate is None:
        gate = AdmissionGate.from_config(
            config.rate_limit.min_interval_ms, config.rate_limit.max_concurrent
        )
    client = YrClient(
        gate,
        base_url=config.upstream.base_url,
        user_agent=config.upstream.user_agent,
        timeout=config.upstream.timeout_seconds,
        default_expiry=timedelta(minutes=config.cache.default_expiry_minutes),
    )
    cache = ForecastCacheManager(
        store,
        client,
        precision=config.cache.coordinate_precision,
        outer_ttl=timedelta(hours=config.cache.outer_ttl_hours),
    )
    return WeatherService(
        cache,
        TimezoneResolver(),
        target_hour=config.forecast.target_hour,
        max_hour_distance=config.forecast.max_hour_distance,
    )
