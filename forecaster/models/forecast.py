"""Forecast data models."""

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any

from forecaster.models.common import format_utc_instant, parse_utc_instant


@dataclass(frozen=True)
class TimeSeriesPoint:
    time: datetime  # UTC instant
    temperature: float

    def to_dict(self) -> dict[str, Any]:
        return {"time": format_utc_instant(self.time), "air_temperature": self.temperature}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TimeSeriesPoint":
        return cls(
            time=parse_utc_instant(data["time"]),
            temperature=float(data["air_temperature"]),
        )


@dataclass(frozen=True)
class ForecastEntry:
    date: datetime  # timestamp of the chosen point
    temperature: float

    def to_dict(self) -> dict[str, Any]:
        return {"date": format_utc_instant(self.date), "temperature": self.temperature}


@dataclass(frozen=True)
class RetrievalMetadata:
    day_count: int
    timezone_id: str
    utc_offset_label: str  # "+01:00"

    @property
    def timezone_label(self) -> str:
        return f"{self.timezone_id} ({self.utc_offset_label})"

    def to_dict(self) -> dict[str, Any]:
        return {
            "forecast_days": self.day_count,
            "timezone": self.timezone_label,
            "timezone_id": self.timezone_id,
            "utc_offset": self.utc_offset_label,
        }


@dataclass(frozen=True)
class RetrievalResult:
    entries: list[ForecastEntry]
    metadata: RetrievalMetadata


@dataclass(frozen=True)
class CachedForecastState:
    """Cached provider series for one rounded coordinate pair.

    ``expires_at`` drives revalidation; the backing store's own TTL is only
    an outer eviction bound.
    """

    series: list[TimeSeriesPoint]
    expires_at: datetime
    revalidation_token: str

    def is_fresh(self, now: datetime) -> bool:
        return now < self.expires_at

    def with_expiry(self, expires_at: datetime | None) -> "CachedForecastState":
        """Copy with expiry advanced to ``expires_at``; never moves it backward."""
        if expires_at is None or expires_at <= self.expires_at:
            return self
        return replace(self, expires_at=expires_at)

    def to_dict(self) -> dict[str, Any]:
        return {
            "series": [p.to_dict() for p in self.series],
            "expires_at": self.expires_at.isoformat(),
            "revalidation_token": self.revalidation_token,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CachedForecastState":
        return cls(
            series=[TimeSeriesPoint.from_dict(p) for p in data["series"]],
            expires_at=parse_utc_instant(data["expires_at"]),
            revalidation_token=str(data["revalidation_token"]),
        )
