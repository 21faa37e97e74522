"""Common types and helpers shared across models."""

from datetime import UTC, datetime, timedelta

DEFAULT_PRECISION = 4


def utc_now() -> datetime:
    return datetime.now(UTC)


def utc_now_iso() -> str:
    return utc_now().isoformat()


def round_coordinate(value: float, precision: int = DEFAULT_PRECISION) -> float:
    return round(float(value), precision)


def weather_cache_key(lat: float, lon: float, precision: int = DEFAULT_PRECISION) -> str:
    """Cache key for a coordinate pair, e.g. ``weather:44.8178:20.4568``."""
    return f"weather:{lat:.{precision}f}:{lon:.{precision}f}"


def format_utc_offset(offset: timedelta | None) -> str:
    """Render a UTC offset as ``+HH:MM`` / ``-HH:MM``."""
    if offset is None:
        offset = timedelta(0)
    total_minutes = int(offset.total_seconds() // 60)
    sign = "-" if total_minutes < 0 else "+"
    hours, minutes = divmod(abs(total_minutes), 60)
    return f"{sign}{hours:02d}:{minutes:02d}"


def format_utc_instant(dt: datetime) -> str:
    """ISO-8601 in UTC with a ``Z`` suffix, e.g. ``2026-01-30T13:00:00Z``."""
    return dt.astimezone(UTC).isoformat().replace("+00:00", "Z")


def parse_utc_instant(iso_str: str) -> datetime:
    """Parse an ISO timestamp; naive values are taken as UTC."""
    dt = datetime.fromisoformat(iso_str)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt
