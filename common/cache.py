"""
WallDecorator - Cache Layer
============================
Plain TTL key/value cache for read-heavy storefront queries.

Backed by Redis when REDIS_URL is set; otherwise an in-memory dict
(single process, development only). Values are stored as JSON text.
A cache failure is logged and treated as a miss, never as a page error.
"""

import json
import logging
import time
from typing import Any, Callable, Dict, Optional, Tuple

import redis

from config.settings import REDIS_URL

logger = logging.getLogger("walldecorator.cache")


class MemoryBackend:
    """In-memory fallback with monotonic expiry."""
    name = "memory"

    def __init__(self):
        self._store: Dict[str, Tuple[str, float]] = {}

    def get(self, key: str) -> Optional[str]:
        item = self._store.get(key)
        if not item:
            return None
        value, expires_at = item
        if time.monotonic() >= expires_at:
            self._store.pop(key, None)
            return None
        return value

    def setex(self, key: str, seconds: int, value: str):
        self._store[key] = (value, time.monotonic() + seconds)

    def delete(self, key: str):
        self._store.pop(key, None)

    def clear(self):
        self._store.clear()


class RedisBackend:
    name = "redis"

    def __init__(self, url: str, key_prefix: str = "wd:"):
        self._client = redis.Redis.from_url(
            url,
            socket_timeout=5.0,
            socket_connect_timeout=5.0,
            decode_responses=True,
        )
        self._prefix = key_prefix

    def get(self, key: str) -> Optional[str]:
        return self._client.get(self._prefix + key)

    def setex(self, key: str, seconds: int, value: str):
        self._client.setex(self._prefix + key, seconds, value)

    def delete(self, key: str):
        self._client.delete(self._prefix + key)

    def clear(self):
        for key in self._client.scan_iter(match=f"{self._prefix}*"):
            self._client.delete(key)


class Cache:
    """JSON-encoding TTL cache over a backend."""

    def __init__(self, backend):
        self.backend = backend

    def get(self, key: str) -> Any:
        try:
            raw = self.backend.get(key)
        except redis.RedisError as e:
            logger.warning(f"Cache read failed for {key}: {e}")
            return None
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning(f"Discarding undecodable cache entry {key}")
            return None

    def setex(self, key: str, seconds: int, value: Any):
        try:
            self.backend.setex(key, seconds, json.dumps(value, default=str))
        except redis.RedisError as e:
            logger.warning(f"Cache write failed for {key}: {e}")

    def delete(self, key: str):
        try:
            self.backend.delete(key)
        except redis.RedisError as e:
            logger.warning(f"Cache delete failed for {key}: {e}")

    def clear(self):
        self.backend.clear()

    def get_or_set(self, key: str, seconds: int, loader: Callable[[], Any]) -> Any:
        """Read-through: return the cached value or load, store and return it."""
        cached = self.get(key)
        if cached is not None:
            return cached
        value = loader()
        if value is not None:
            self.setex(key, seconds, value)
        return value


def _build_backend():
    if REDIS_URL:
        logger.info("Cache backend: redis")
        return RedisBackend(REDIS_URL)
    logger.warning("REDIS_URL not configured, using in-memory cache fallback")
    return MemoryBackend()


# Singleton
cache = Cache(_build_backend())
