"""Pydantic v2 configuration schema with strict validation."""

from pydantic import BaseModel, Field

YR_FORECAST_URL = "https://api.met.no/weatherapi/locationforecast/2.0/compact"
NOMINATIM_URL = "https://nominatim.openstreetmap.org"


class UpstreamConfig(BaseModel):
    model_config = {"extra": "forbid"}

    base_url: str = YR_FORECAST_URL
    user_agent: str = "BelgradeWeatherService/1.0 (test@example.com)"
    timeout_seconds: float = Field(default=30.0, gt=0.0)


class RateLimitConfig(BaseModel):
    model_config = {"extra": "forbid"}

    # Yr publishes ~20 req/s per account; 66ms keeps us near 15 req/s
    min_interval_ms: int = Field(default=66, ge=0)
    max_concurrent: int = Field(default=5, ge=1)


class CacheConfig(BaseModel):
    model_config = {"extra": "forbid"}

    redis_url: str = ""
    outer_ttl_hours: float = Field(default=48.0, gt=0.0)
    coordinate_precision: int = Field(default=4, ge=0, le=8)
    default_expiry_minutes: int = Field(default=30, gt=0)


class ForecastConfig(BaseModel):
    model_config = {"extra": "forbid"}

    target_hour: int = Field(default=14, ge=0, le=23)
    max_hour_distance: int = Field(default=3, ge=0, le=12)


class GeocodingConfig(BaseModel):
    model_config = {"extra": "forbid"}

    base_url: str = NOMINATIM_URL
    user_agent: str = "WeatherService/1.0"
    default_limit: int = Field(default=10, ge=1, le=50)
    timeout_seconds: float = Field(default=30.0, gt=0.0)


class ServerConfig(BaseModel):
    model_config = {"extra": "forbid"}

    host: str = "0.0.0.0"
    port: int = Field(default=3000, ge=1, le=65535)


class ServiceConfig(BaseModel):
    model_config = {"extra": "forbid"}

    upstream: UpstreamConfig = UpstreamConfig()
    rate_limit: RateLimitConfig = RateLimitConfig()
    cache: CacheConfig = CacheConfig()
    forecast: ForecastConfig = ForecastConfig()
    geocoding: GeocodingConfig = GeocodingConfig()
    server: ServerConfig = ServerConfig()
