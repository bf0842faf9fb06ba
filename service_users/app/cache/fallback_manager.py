"""
Registry producing one FallbackCache per cache name.
"""

import threading
from typing import Any, Dict, Optional, Set, TYPE_CHECKING

from shared.logging import get_logger
from shared.errors import CacheConfigurationError
from .fallback_cache import FallbackCache

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector


class FallbackCacheManager:
    """
    Cache manager wrapping a primary and an optional secondary manager.

    ``get_cache`` is get-or-create per name: concurrent first calls for the
    same name observe a single FallbackCache instance. Each name has its own
    creation lock so building one cache never blocks another name.
    """

    def __init__(self, primary_manager: Any, secondary_manager: Optional[Any] = None,
                 metrics: Optional["MetricsCollector"] = None):
        self.primary_manager = primary_manager
        self.secondary_manager = secondary_manager
        self.metrics = metrics
        self.logger = get_logger("users.cache.manager")
        self._caches: Dict[str, FallbackCache] = {}
        self._creation_locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def get_cache(self, name: str) -> FallbackCache:
        """Return the FallbackCache for ``name``, building it on first use."""
        cache = self._caches.get(name)
        if cache is not None:
            return cache

        with self._locks_guard:
            name_lock = self._creation_locks.setdefault(name, threading.Lock())

        with name_lock:
            cache = self._caches.get(name)
            if cache is None:
                try:
                    cache = self._create_cache(name)
                except Exception:
                    with self._locks_guard:
                        if self._creation_locks.get(name) is name_lock:
                            del self._creation_locks[name]
                    raise
                self._caches[name] = cache
        return cache

    def get_cache_names(self) -> Set[str]:
        """Cache names known to the primary manager."""
        return set(self.primary_manager.get_cache_names())

    def _create_cache(self, name: str) -> FallbackCache:
        primary = self._resolve(self.primary_manager, name, "primary")
        secondary = None
        if self.secondary_manager is not None:
            secondary = self._resolve(self.secondary_manager, name, "secondary")

        self.logger.info("Fallback cache created", cache=name, has_secondary=secondary is not None)
        return FallbackCache(primary, secondary, metrics=self.metrics)

    def _resolve(self, manager: Any, name: str, tier: str) -> Any:
        try:
            cache = manager.get_cache(name)
        except CacheConfigurationError:
            raise
        except Exception as e:
            self.logger.error("Cache manager failed to resolve cache", cache=name, tier=tier, error=str(e))
            raise CacheConfigurationError(name, f"{tier} manager failed: {e}", {"tier": tier}) from e

        if cache is None:
            self.logger.error("Cache manager has no cache for name", cache=name, tier=tier)
            raise CacheConfigurationError(name, f"unknown to {tier} manager", {"tier": tier})
        return cache
