"""
Redis caching layer for the Users Service.
"""

from typing import Any, Iterable, Optional

import redis
from redis.exceptions import RedisError

from shared.logging import get_logger
from shared.errors import CacheAccessError
from .base import BaseCacheManager
from .serialization import dumps, loads


class RedisCache:
    """Named cache stored in a single Redis endpoint."""

    CLEAR_BATCH_SIZE = 500

    def __init__(
        self,
        name: str,
        client: redis.Redis,
        key_prefix: str = "",
        ttl_seconds: Optional[int] = 600
    ):
        self.name = name
        self.client = client
        self.key_prefix = key_prefix
        self.ttl_seconds = ttl_seconds
        self.logger = get_logger("users.cache.redis")

    @property
    def native_cache(self) -> redis.Redis:
        return self.client

    def _make_key(self, key: Any) -> str:
        """Generate the physical Redis key for a cache key."""
        return f"{self.key_prefix}{self.name}::{key}"

    def _pattern(self) -> str:
        return f"{self.key_prefix}{self.name}::*"

    def get(self, key: Any) -> Optional[Any]:
        """Get cached value, or None on a miss."""
        cache_key = self._make_key(key)
        try:
            raw = self.client.get(cache_key)
        except RedisError as e:
            raise CacheAccessError(self.name, "get", str(e), {"key": cache_key}) from e

        if raw is None:
            return None

        self.logger.debug("Cache hit", cache_key=cache_key)
        return loads(raw)

    def put(self, key: Any, value: Any) -> None:
        """Store a value. None values are not cacheable."""
        if value is None:
            raise ValueError(f"Cache '{self.name}' does not allow None values (key '{key}')")

        cache_key = self._make_key(key)
        try:
            if self.ttl_seconds:
                self.client.set(cache_key, dumps(value), ex=self.ttl_seconds)
            else:
                self.client.set(cache_key, dumps(value))
        except RedisError as e:
            raise CacheAccessError(self.name, "put", str(e), {"key": cache_key}) from e

        self.logger.debug("Cached value", cache_key=cache_key, ttl=self.ttl_seconds)

    def evict(self, key: Any) -> None:
        """Remove a key from the cache."""
        cache_key = self._make_key(key)
        try:
            self.client.delete(cache_key)
        except RedisError as e:
            raise CacheAccessError(self.name, "evict", str(e), {"key": cache_key}) from e

    def clear(self) -> int:
        """Remove every key belonging to this cache. Returns the number removed."""
        removed = 0
        batch = []
        try:
            for cache_key in self.client.scan_iter(match=self._pattern(), count=self.CLEAR_BATCH_SIZE):
                batch.append(cache_key)
                if len(batch) >= self.CLEAR_BATCH_SIZE:
                    removed += self.client.delete(*batch)
                    batch = []
            if batch:
                removed += self.client.delete(*batch)
        except RedisError as e:
            raise CacheAccessError(self.name, "clear", str(e), {"pattern": self._pattern()}) from e

        self.logger.info("Cache cleared", cache=self.name, count=removed)
        return removed


class RedisCacheManager(BaseCacheManager):
    """Resolves cache names to RedisCache handles over one Redis client."""

    def __init__(
        self,
        client: redis.Redis,
        key_prefix: str = "",
        ttl_seconds: Optional[int] = 600,
        cache_names: Iterable[str] = (),
        allow_runtime_cache_creation: bool = True
    ):
        self.client = client
        self.key_prefix = key_prefix
        self.ttl_seconds = ttl_seconds
        super().__init__(cache_names, allow_runtime_cache_creation)
        self.logger.info(
            "Redis cache manager configured",
            key_prefix=key_prefix,
            ttl_seconds=ttl_seconds,
            cache_names=sorted(self.get_cache_names())
        )

    def _create_cache(self, name: str) -> RedisCache:
        return RedisCache(name, self.client, key_prefix=self.key_prefix, ttl_seconds=self.ttl_seconds)
