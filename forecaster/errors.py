"""Error taxonomy for forecast retrieval.

Component errors are logged where they originate and collapsed into
ForecastUnavailable by the weather service; callers never see the others.
"""


class ForecastError(Exception):
    """Base class for every error raised by this package."""


class TimezoneUnresolved(ForecastError):
    def __init__(self, lat: float, lon: float):
        super().__init__(f"No timezone found for {lat}, {lon}")
        self.lat = lat
        self.lon = lon


class UpstreamError(ForecastError):
    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class UpstreamThrottled(UpstreamError):
    """Provider answered 429."""


class UpstreamFailed(UpstreamError):
    """Transport error, unexpected status or malformed body."""


class RevalidationWithoutBaseline(ForecastError):
    """Provider answered 304 but there is no cached series to reuse."""


class ForecastUnavailable(ForecastError):
    def __init__(self, message: str = "Failed to fetch weather data"):
        super().__init__(message)


class GeocodingUnavailable(ForecastError):
    def __init__(self, message: str = "Geocoding service unavailable"):
        super().__init__(message)
