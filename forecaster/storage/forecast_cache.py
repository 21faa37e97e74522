"""Forecast cache manager: freshness checks, revalidation and write-back."""

import logging
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import datetime, timedelta

from forecaster.errors import RevalidationWithoutBaseline, UpstreamFailed, UpstreamThrottled
from forecaster.ingest.yr_client import FetchResult, FetchStatus, YrClient
from forecaster.models.common import (
    DEFAULT_PRECISION,
    round_coordinate,
    utc_now,
    weather_cache_key,
)
from forecaster.models.forecast import CachedForecastState, TimeSeriesPoint
from forecaster.storage.cache_store import CacheStore

logger = logging.getLogger(__name__)

# Outer store TTL, well past any provider expiry, so the store never evicts
# an entry the expires_at logic still wants to revalidate.
WEATHER_CACHE_TTL = timedelta(hours=48)


class _KeyLock:
    __slots__ = ("lock", "holders")

    def __init__(self):
        self.lock = threading.Lock()
        self.holders = 0


class ForecastCacheManager:
    def __init__(
        self,
        store: CacheStore,
        client: YrClient,
        precision: int = DEFAULT_PRECISION,
        outer_ttl: timedelta = WEATHER_CACHE_TTL,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.client = client
        self.precision = precision
        self.outer_ttl = outer_ttl
        self._clock = clock
        self._key_locks: dict[str, _KeyLock] = {}
        self._key_locks_guard = threading.Lock()

    def get_forecast_series(self, lat: float, lon: float) -> list[TimeSeriesPoint]:
        """Return the provider series for a coordinate, from cache or upstream.

        Raises UpstreamThrottled, UpstreamFailed or RevalidationWithoutBaseline;
        the cached entry is left untouched on failure.
        """
        lat = round_coordinate(lat, self.precision)
        lon = round_coordinate(lon, self.precision)
        key = weather_cache_key(lat, lon, self.precision)

        state = self._load(key)
        if state is not None and state.is_fresh(self._clock()):
            logger.debug("Weather cache HIT for %s, %s", lat, lon)
            return state.series

        # One refresher per key; late arrivals reuse its result.
        with self._lock_for(key):
            state = self._load(key)
            if state is not None and state.is_fresh(self._clock()):
                logger.debug("Weather cache HIT for %s, %s after refresh", lat, lon)
                return state.series

            if state is not None:
                logger.debug(
                    "Cache stale for %s, %s. Validating with If-Modified-Since", lat, lon
                )
                result = self.client.fetch(lat, lon, state.revalidation_token)
            else:
                logger.debug("Weather cache MISS for %s, %s", lat, lon)
                result = self.client.fetch(lat, lon)

            new_state = self._apply(result, state, lat, lon)
            self.store.set(key, new_state.to_dict(), self._outer_ttl_ms())
            return new_state.series

    def _apply(
        self,
        result: FetchResult,
        state: CachedForecastState | None,
        lat: float,
        lon: float,
    ) -> CachedForecastState:
        if result.status == FetchStatus.FRESH:
            if result.series is None or result.expires_at is None:
                raise UpstreamFailed(
                    f"Incomplete fresh result for {lat}, {lon}", status_code=result.status_code
                )
            expires_at = result.expires_at
            if state is not None and state.expires_at > expires_at:
                expires_at = state.expires_at
            return CachedForecastState(
                series=result.series,
                expires_at=expires_at,
                revalidation_token=result.revalidation_token or "",
            )

        if result.status == FetchStatus.NOT_MODIFIED:
            if state is None:
                logger.error("Received 304 for %s, %s but no cache available", lat, lon)
                raise RevalidationWithoutBaseline(
                    f"304 Not Modified for {lat}, {lon} without a cached baseline"
                )
            return state.with_expiry(result.expires_at)

        if result.status == FetchStatus.THROTTLED:
            raise UpstreamThrottled("Weather API throttling", status_code=result.status_code)

        raise UpstreamFailed(
            f"Weather API request failed for {lat}, {lon}", status_code=result.status_code
        )

    def _load(self, key: str) -> CachedForecastState | None:
        raw = self.store.get(key)
        if raw is None:
            return None
        try:
            return CachedForecastState.from_dict(raw)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Discarding undecodable cache entry %s: %s", key, e)
            return None

    @contextmanager
    def _lock_for(self, key: str) -> Iterator[None]:
        # Entries live only while some caller holds or waits on them.
        with self._key_locks_guard:
            entry = self._key_locks.get(key)
            if entry is None:
                entry = self._key_locks[key] = _KeyLock()
            entry.holders += 1
        try:
            with entry.lock:
                yield
        finally:
            with self._key_locks_guard:
                entry.holders -= 1
                if entry.holders == 0:
                    del self._key_locks[key]

    def _outer_ttl_ms(self) -> int:
        return int(self.outer_ttl.total_seconds() * 1000)
