"""Reduce a provider time series to one reading per day near a local target hour."""

from collections.abc import Iterable
from datetime import UTC, datetime
from zoneinfo import ZoneInfo

from forecaster.models.forecast import ForecastEntry, TimeSeriesPoint

FORECAST_TARGET_HOUR = 14
MAX_HOUR_DISTANCE = 3


def circular_hour_distance(hour: int, target_hour: int = FORECAST_TARGET_HOUR) -> int:
    """Distance between two clock hours, going whichever way round is shorter."""
    diff = abs(hour - target_hour)
    return min(diff, 24 - diff)


def local_hour_distance(
    instant: datetime, tz: ZoneInfo, target_hour: int = FORECAST_TARGET_HOUR
) -> int:
    return circular_hour_distance(instant.astimezone(tz).hour, target_hour)


def select_daily_forecasts(
    series: Iterable[TimeSeriesPoint],
    timezone_id: str,
    target_hour: int = FORECAST_TARGET_HOUR,
    max_distance: int = MAX_HOUR_DISTANCE,
) -> list[ForecastEntry]:
    """Pick the point closest to ``target_hour`` local time for each day.

    Days are keyed by the point's UTC calendar date while the distance is
    measured in local time. Only a strictly closer point replaces the current
    pick, so the first of equally close points wins. Days whose best point is
    more than ``max_distance`` hours away are omitted.
    """
    tz = ZoneInfo(timezone_id)
    best: dict[str, tuple[TimeSeriesPoint, int]] = {}

    for point in series:
        date_key = point.time.astimezone(UTC).date().isoformat()
        distance = local_hour_distance(point.time, tz, target_hour)
        current = best.get(date_key)
        if current is None or distance < current[1]:
            best[date_key] = (point, distance)

    return [
        ForecastEntry(date=point.time, temperature=point.temperature)
        for _, (point, distance) in sorted(best.items())
        if distance <= max_distance
    ]
