"""Geocoding result models."""

from dataclasses import asdict, dataclass
from typing import Any


@dataclass(frozen=True)
class GeoLocation:
    location_name: str
    lat: float
    lon: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GeoLocation":
        return cls(
            location_name=data["location_name"],
            lat=float(data["lat"]),
            lon=float(data["lon"]),
        )
