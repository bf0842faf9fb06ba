"""
Cache package for the Users Service.

Provides the fallback cache layer: a FallbackCacheManager hands out one
FallbackCache per name, each reading from a replica tier with fallback to
the master tier and mirroring writes to both. Backing tiers are Redis
(RedisCacheManager) or process-local (InMemoryCacheManager).
"""

from .fallback_cache import FallbackCache
from .fallback_manager import FallbackCacheManager
from .memory_cache import InMemoryCache, InMemoryCacheManager
from .redis_cache import RedisCache, RedisCacheManager

__all__ = [
    "FallbackCache",
    "FallbackCacheManager",
    "InMemoryCache",
    "InMemoryCacheManager",
    "RedisCache",
    "RedisCacheManager",
]
