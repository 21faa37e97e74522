"""Yr (MET Norway) locationforecast client with admission control and revalidation."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from email.utils import format_datetime, parsedate_to_datetime
from enum import StrEnum

import httpx
from pydantic import ValidationError

from forecaster.config.schema import YR_FORECAST_URL
from forecaster.ingest.rate_limiter import AdmissionGate
from forecaster.models.common import utc_now
from forecaster.models.forecast import TimeSeriesPoint
from forecaster.models.yr import YrResponse

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "BelgradeWeatherService/1.0 (test@example.com)"
DEFAULT_EXPIRY = timedelta(minutes=30)


class FetchStatus(StrEnum):
    FRESH = "fresh"
    NOT_MODIFIED = "not_modified"
    THROTTLED = "throttled"
    FAILED = "failed"


@dataclass(frozen=True)
class FetchResult:
    status: FetchStatus
    series: list[TimeSeriesPoint] | None = None
    revalidation_token: str | None = None
    expires_at: datetime | None = None
    status_code: int | None = None


class YrClient:
    def __init__(
        self,
        gate: AdmissionGate,
        base_url: str = YR_FORECAST_URL,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout: float = 30.0,
        default_expiry: timedelta = DEFAULT_EXPIRY,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.gate = gate
        self.base_url = base_url
        self.user_agent = user_agent
        self.timeout = timeout
        self.default_expiry = default_expiry
        self._clock = clock

    def fetch(
        self, lat: float, lon: float, revalidation_token: str | None = None
    ) -> FetchResult:
        """Fetch the forecast series for a coordinate pair.

        When ``revalidation_token`` is given it is sent as If-Modified-Since and
        the provider may answer 304. HTTP outcomes are reported through
        ``FetchResult.status``; nothing is retried here.
        """
        headers = {"User-Agent": self.user_agent}
        if revalidation_token:
            headers["If-Modified-Since"] = revalidation_token

        try:
            with self.gate.admit():
                resp = httpx.get(
                    self.base_url,
                    params={"lat": lat, "lon": lon},
                    headers=headers,
                    timeout=self.timeout,
                )
        except httpx.RequestError as e:
            logger.error("Yr request failed for %s, %s: %s", lat, lon, e)
            return FetchResult(FetchStatus.FAILED)

        if resp.status_code == 304:
            return FetchResult(
                FetchStatus.NOT_MODIFIED,
                expires_at=_parse_http_date(resp.headers.get("expires")),
                status_code=304,
            )
        if resp.status_code == 429:
            logger.warning("Rate limit hit on Yr API for %s, %s", lat, lon)
            return FetchResult(FetchStatus.THROTTLED, status_code=429)
        if not 200 <= resp.status_code < 300:
            logger.error(
                "Yr API returned %d for %s, %s: %s",
                resp.status_code, lat, lon, resp.text[:200],
            )
            return FetchResult(FetchStatus.FAILED, status_code=resp.status_code)
        if resp.status_code == 203:
            logger.warning("Yr API returned 203: product is deprecated")

        try:
            payload = YrResponse.model_validate_json(resp.content)
        except ValidationError as e:
            logger.error(
                "Malformed Yr payload for %s, %s (%d errors): %s",
                lat, lon, e.error_count(), e.errors()[:3],
            )
            return FetchResult(FetchStatus.FAILED, status_code=resp.status_code)

        now = self._clock()
        expires_at = _parse_http_date(resp.headers.get("expires"))
        if expires_at is None:
            expires_at = now + self.default_expiry
        token = resp.headers.get("last-modified") or format_datetime(now, usegmt=True)

        return FetchResult(
            FetchStatus.FRESH,
            series=payload.to_points(),
            revalidation_token=token,
            expires_at=expires_at,
            status_code=resp.status_code,
        )


def _parse_http_date(value: str | None) -> datetime | None:
    """Parse an RFC 7231 HTTP date header. Returns None if absent or invalid."""
    if not value:
        return None
    try:
        dt = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        logger.warning("Ignoring unparseable HTTP date: %r", value)
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)
