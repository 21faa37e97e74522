"""Key/value cache backends with per-entry TTL.

Values are JSON-compatible structures. ``ttl_ms == 0`` stores without expiry.
"""

import copy
import json
import logging
import threading
import time
from collections.abc import Callable
from typing import Any, Protocol

import redis

logger = logging.getLogger(__name__)


class CacheStore(Protocol):
    def get(self, key: str) -> Any | None: ...

    def set(self, key: str, value: Any, ttl_ms: int) -> None: ...


class MemoryCacheStore:
    """In-process store; entries die with the process."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: dict[str, tuple[Any, float | None]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Any | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            value, deadline = entry
            if deadline is not None and self._clock() >= deadline:
                del self._entries[key]
                return None
            return copy.deepcopy(value)

    def set(self, key: str, value: Any, ttl_ms: int) -> None:
        if ttl_ms < 0:
            raise ValueError("ttl_ms must be >= 0")
        deadline = None if ttl_ms == 0 else self._clock() + ttl_ms / 1000.0
        with self._lock:
            self._entries[key] = (copy.deepcopy(value), deadline)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()


class RedisCacheStore:
    def __init__(self, client: redis.Redis):
        self.client = client

    @classmethod
    def from_url(cls, url: str) -> "RedisCacheStore":
        return cls(redis.Redis.from_url(url, decode_responses=True))

    def get(self, key: str) -> Any | None:
        raw = self.client.get(key)
        if not raw:
            return None
        return json.loads(raw)

    def set(self, key: str, value: Any, ttl_ms: int) -> None:
        if ttl_ms < 0:
            raise ValueError("ttl_ms must be >= 0")
        data = json.dumps(value, separators=(",", ":"))
        if ttl_ms == 0:
            self.client.set(key, data)
        else:
            self.client.set(key, data, px=ttl_ms)


def create_cache_store(redis_url: str = "") -> CacheStore:
    """Redis when a URL is configured, otherwise an in-process store."""
    if redis_url:
        logger.info("Using Redis cache store")
        return RedisCacheStore.from_url(redis_url)
    logger.info("REDIS_URL not set, using in-memory cache store")
    return MemoryCacheStore()
