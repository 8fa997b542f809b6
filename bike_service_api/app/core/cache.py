"""
Key/value cache used to accelerate single‑bike lookups.

``CachePort`` is the contract the services depend on.  Two adapters are
provided: ``RedisCache`` for deployments and ``MemoryCache`` for local
runs and tests.  The cache is advisory: adapters report failures by
raising ``CacheError`` and callers log and continue.
"""

import logging
import threading
import time
from abc import ABC, abstractmethod
from typing import Callable, Dict, Optional, Tuple

import redis

from .exceptions import CacheError


logger = logging.getLogger(__name__)


def bike_cache_key(bike_id) -> str:
    return f"bike:{bike_id}"


class CachePort(ABC):
    """Minimal key/value contract with per‑entry time‑to‑live."""

    @abstractmethod
    def get(self, key: str) -> Optional[bytes]:
        """Return the stored bytes, or ``None`` on a miss or expiry."""

    @abstractmethod
    def set(self, key: str, value: bytes, ttl_seconds: int) -> None:
        ...

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove ``key``.  Deleting a missing key is not an error."""

    def close(self) -> None:
        pass


class MemoryCache(CachePort):
    """Process‑local cache with monotonic‑clock expiry.

    Entries are dropped lazily when read after their deadline.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: Dict[str, Tuple[bytes, float]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[bytes]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                return None
            return value

    def set(self, key: str, value: bytes, ttl_seconds: int) -> None:
        with self._lock:
            self._entries[key] = (value, self._clock() + ttl_seconds)

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None


class RedisCache(CachePort):
    """Cache backed by a Redis server.

    The client connects lazily, so constructing the adapter never fails
    even if Redis is down; each operation translates ``RedisError`` into
    ``CacheError``.
    """

    def __init__(self, client: redis.Redis) -> None:
        self._client = client

    @classmethod
    def from_url(cls, url: str) -> "RedisCache":
        return cls(redis.Redis.from_url(url))

    def get(self, key: str) -> Optional[bytes]:
        try:
            return self._client.get(key)
        except redis.RedisError as exc:
            raise CacheError(f"redis GET {key} failed: {exc}") from exc

    def set(self, key: str, value: bytes, ttl_seconds: int) -> None:
        try:
            self._client.set(key, value, ex=ttl_seconds)
        except redis.RedisError as exc:
            raise CacheError(f"redis SET {key} failed: {exc}") from exc

    def delete(self, key: str) -> None:
        try:
            self._client.delete(key)
        except redis.RedisError as exc:
            raise CacheError(f"redis DEL {key} failed: {exc}") from exc

    def close(self) -> None:
        try:
            self._client.close()
        except redis.RedisError as exc:
            logger.error("Redis close error: %s", exc)


def build_cache(redis_url: str) -> CachePort:
    """Return a Redis adapter when ``redis_url`` is set, else an in‑memory one."""
    if redis_url:
        logger.info("Using Redis cache")
        return RedisCache.from_url(redis_url)
    logger.info("REDIS_URL not set, using in-process cache")
    return MemoryCache()
