"""Builders shared by the test modules."""

from datetime import UTC, datetime

from forecaster.models.forecast import TimeSeriesPoint

YR_TEST_URL = "https://test-yr.example.com/locationforecast/2.0/compact"
NOW = datetime(2026, 1, 30, 9, 0, 0, tzinfo=UTC)


class FakeClock:
    """Settable UTC clock for code that takes a ``clock`` callable."""

    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


def make_series(
    times: list[str], base_date: str = "2026-01-30", temperature: float = 20.5
) -> list[TimeSeriesPoint]:
    return [
        TimeSeriesPoint(
            time=datetime.fromisoformat(f"{base_date}T{t}"),
            temperature=temperature,
        )
        for t in times
    ]


def make_payload(
    times: list[str], base_date: str = "2026-01-30", temperature: float = 20.5
) -> dict:
    """Nested Yr response body with one point per time."""
    return {
        "properties": {
            "timeseries": [
                {
                    "time": f"{base_date}T{t}",
                    "data": {"instant": {"details": {"air_temperature": temperature}}},
                }
                for t in times
            ]
        }
    }
