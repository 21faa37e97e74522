"""Nominatim place search with a non-expiring cache."""

import logging

import httpx

from forecaster.config.schema import NOMINATIM_URL
from forecaster.errors import GeocodingUnavailable
from forecaster.models.common import round_coordinate
from forecaster.models.geo import GeoLocation
from forecaster.storage.cache_store import CacheStore

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "WeatherService/1.0"
CACHE_VERSION = "v4"


def geo_cache_key(name: str, limit: int) -> str:
    return f"geo:search:{name.lower().strip()}:{limit}:{CACHE_VERSION}"


class GeoService:
    def __init__(
        self,
        store: CacheStore,
        base_url: str = NOMINATIM_URL,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout: float = 30.0,
    ):
        self.store = store
        self.base_url = base_url
        self.user_agent = user_agent
        self.timeout = timeout

    def search(self, name: str, limit: int = 10) -> list[GeoLocation]:
        """Search places by name. Results are cached without expiry."""
        cache_key = geo_cache_key(name, limit)
        cached = self.store.get(cache_key)
        if cached is not None:
            logger.debug('Geocoding cache HIT for "%s" with limit %d', name, limit)
            return [GeoLocation.from_dict(item) for item in cached]

        logger.debug(
            'Geocoding cache MISS for "%s". Requesting Nominatim with limit %d.',
            name, limit,
        )
        try:
            resp = httpx.get(
                f"{self.base_url}/search",
                params={"q": name, "format": "json", "limit": limit},
                headers={"User-Agent": self.user_agent},
                timeout=self.timeout,
            )
            resp.raise_for_status()
            data = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error('Failed to search location "%s": %s', name, e)
            raise GeocodingUnavailable() from e

        if data is None:
            return []
        if not isinstance(data, list):
            logger.error('Unexpected Nominatim payload for "%s": %r', name, data)
            raise GeocodingUnavailable()

        results = [loc for loc in (_to_location(item) for item in data) if loc is not None]
        self.store.set(cache_key, [loc.to_dict() for loc in results], 0)
        return results


def _to_location(item: dict) -> GeoLocation | None:
    try:
        return GeoLocation(
            location_name=item["display_name"],
            lat=round_coordinate(float(item["lat"])),
            lon=round_coordinate(float(item["lon"])),
        )
    except (KeyError, TypeError, ValueError):
        logger.warning("Skipping malformed Nominatim result: %r", item)
        return None
