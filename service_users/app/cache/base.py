"""
Common cache manager behaviour shared by the backing tiers.
"""

import threading
from typing import Any, Dict, Iterable, Optional, Set

from shared.logging import get_logger


class BaseCacheManager:
    """
    Memoizing name -> cache handle resolver.

    Subclasses implement ``_create_cache``. Handles are created at most once
    per name; with ``allow_runtime_cache_creation`` disabled only names given
    up front resolve, and unknown names return ``None``.
    """

    def __init__(self, cache_names: Iterable[str] = (), allow_runtime_cache_creation: bool = True):
        self.allow_runtime_cache_creation = allow_runtime_cache_creation
        self.logger = get_logger(f"users.cache.{type(self).__name__.lower()}")
        self._caches: Dict[str, Any] = {}
        self._lock = threading.Lock()
        for name in cache_names:
            self._caches[name] = self._create_cache(name)

    def get_cache(self, name: str) -> Optional[Any]:
        """Return the cache handle for ``name``, creating it if allowed."""
        cache = self._caches.get(name)
        if cache is not None or not self.allow_runtime_cache_creation:
            return cache

        with self._lock:
            cache = self._caches.get(name)
            if cache is None:
                cache = self._create_cache(name)
                self._caches[name] = cache
                self.logger.debug("Cache handle created", cache=name)
        return cache

    def get_cache_names(self) -> Set[str]:
        """Names of all caches known to this manager."""
        return set(self._caches)

    def _create_cache(self, name: str) -> Any:
        """Build a cache handle. Override in subclasses."""
        raise NotImplementedError
