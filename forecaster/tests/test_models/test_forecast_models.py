"""Tests for forecast models, payload validation and formatting helpers."""

from datetime import UTC, datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from forecaster.models.common import (
    format_utc_instant,
    format_utc_offset,
    round_coordinate,
    weather_cache_key,
)
from forecaster.models.forecast import CachedForecastState, TimeSeriesPoint
from forecaster.models.yr import YrResponse


class TestCommon:
    def test_cache_key_precision(self):
        assert weather_cache_key(44.8178, 20.4568) == "weather:44.8178:20.4568"
        assert weather_cache_key(44.8, -74.0) == "weather:44.8000:-74.0000"

    def test_round_coordinate(self):
        assert round_coordinate(44.81781234) == 44.8178
        assert round_coordinate(20.45689) == 20.4569

    def test_offset_format(self):
        assert format_utc_offset(timedelta(hours=1)) == "+01:00"
        assert format_utc_offset(timedelta(hours=-5)) == "-05:00"
        assert format_utc_offset(timedelta(hours=5, minutes=45)) == "+05:45"
        assert format_utc_offset(None) == "+00:00"

    def test_instant_format_uses_z(self):
        local = datetime(2026, 1, 30, 14, 0, tzinfo=timezone(timedelta(hours=1)))
        assert format_utc_instant(local) == "2026-01-30T13:00:00Z"


class TestCachedForecastState:
    def test_round_trip(self):
        state = CachedForecastState(
            series=[TimeSeriesPoint(datetime(2026, 1, 30, 13, tzinfo=UTC), -1.5)],
            expires_at=datetime(2026, 1, 30, 9, 30, tzinfo=UTC),
            revalidation_token="Fri, 30 Jan 2026 08:12:44 GMT",
        )
        assert CachedForecastState.from_dict(state.to_dict()) == state

    def test_freshness_boundary(self):
        expires = datetime(2026, 1, 30, 9, 30, tzinfo=UTC)
        state = CachedForecastState(series=[], expires_at=expires, revalidation_token="t")
        assert state.is_fresh(expires - timedelta(seconds=1))
        assert not state.is_fresh(expires)


class TestYrResponse:
    def test_parses_fixture(self, belgrade_payload: dict):
        points = YrResponse.model_validate(belgrade_payload).to_points()
        assert len(points) == 7
        assert points[0] == TimeSeriesPoint(datetime(2026, 1, 30, 10, tzinfo=UTC), 3.1)

    def test_offset_times_normalized_to_utc(self):
        payload = {
            "properties": {
                "timeseries": [
                    {
                        "time": "2026-01-30T14:00:00+01:00",
                        "data": {"instant": {"details": {"air_temperature": 1}}},
                    }
                ]
            }
        }
        (point,) = YrResponse.model_validate(payload).to_points()
        assert point.time == datetime(2026, 1, 30, 13, tzinfo=UTC)
        assert point.time.utcoffset() == timedelta(0)

    @pytest.mark.parametrize(
        "payload",
        [
            {},
            {"properties": {}},
            {"properties": {"timeseries": [{"time": "2026-01-30T13:00:00Z"}]}},
            {
                "properties": {
                    "timeseries": [
                        {
                            "time": "2026-01-30T13:00:00Z",
                            "data": {"instant": {"details": {"air_temperature": None}}},
                        }
                    ]
                }
            },
            {
                "properties": {
                    "timeseries": [
                        {
                            "time": "2026-01-30T13:00:00",
                            "data": {"instant": {"details": {"air_temperature": 1.0}}},
                        }
                    ]
                }
            },
        ],
    )
    def test_rejects_incomplete_payloads(self, payload: dict):
        with pytest.raises(ValidationError):
            YrResponse.model_validate(payload)
