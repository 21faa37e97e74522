"""Offline coordinate -> IANA timezone lookup."""

import logging
import threading

from timezonefinder import TimezoneFinder

from forecaster.errors import TimezoneUnresolved

logger = logging.getLogger(__name__)


class TimezoneResolver:
    """Resolves coordinates against the bundled timezone boundary dataset.

    No network access; the same coordinate always yields the same zone,
    including ``Etc/GMT±N`` zones over open ocean.
    """

    def __init__(self, finder: TimezoneFinder | None = None):
        self._finder = finder
        self._lock = threading.Lock()

    def resolve(self, lat: float, lon: float) -> str:
        """Return the IANA timezone id for a coordinate pair.

        Raises TimezoneUnresolved if the coordinate is out of range or falls
        outside every known zone.
        """
        with self._lock:
            if self._finder is None:
                self._finder = TimezoneFinder()
            try:
                tz_id = self._finder.timezone_at(lat=lat, lng=lon)
            except ValueError as e:
                logger.error("Timezone lookup rejected %s, %s: %s", lat, lon, e)
                raise TimezoneUnresolved(lat, lon) from e

        if not tz_id:
            logger.error("No timezone found for %s, %s", lat, lon)
            raise TimezoneUnresolved(lat, lon)
        return tz_id
