"""Validated shape of the Yr locationforecast payload.

Only the fields we read are modelled; everything else in the response is
ignored. A payload missing any of them fails validation at the client
boundary instead of leaking ``None`` into selection.
"""

from datetime import UTC, datetime

from pydantic import AwareDatetime, BaseModel

from forecaster.models.forecast import TimeSeriesPoint


class YrDetails(BaseModel):
    air_temperature: float


class YrInstant(BaseModel):
    details: YrDetails


class YrData(BaseModel):
    instant: YrInstant


class YrTimeSeries(BaseModel):
    time: AwareDatetime
    data: YrData


class YrProperties(BaseModel):
    timeseries: list[YrTimeSeries]


class YrResponse(BaseModel):
    properties: YrProperties

    def to_points(self) -> list[TimeSeriesPoint]:
        return [
            TimeSeriesPoint(
                time=_as_utc(entry.time),
                temperature=entry.data.instant.details.air_temperature,
            )
            for entry in self.properties.timeseries
        ]


def _as_utc(dt: datetime) -> datetime:
    return dt.astimezone(UTC)
