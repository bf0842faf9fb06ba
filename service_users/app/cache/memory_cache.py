"""
Process-local caches, used when Redis is not available and in tests.
"""

import threading
from typing import Any, Dict, Optional

from .base import BaseCacheManager


class InMemoryCache:
    """Thread-safe dict-backed cache handle."""

    def __init__(self, name: str):
        self.name = name
        self._store: Dict[Any, Any] = {}
        self._lock = threading.RLock()

    @property
    def native_cache(self) -> Dict[Any, Any]:
        return self._store

    def get(self, key: Any) -> Optional[Any]:
        with self._lock:
            return self._store.get(key)

    def put(self, key: Any, value: Any) -> None:
        if value is None:
            raise ValueError(f"Cache '{self.name}' does not allow None values (key '{key}')")
        with self._lock:
            self._store[key] = value

    def evict(self, key: Any) -> None:
        with self._lock:
            self._store.pop(key, None)

    def clear(self) -> int:
        with self._lock:
            removed = len(self._store)
            self._store.clear()
            return removed


class InMemoryCacheManager(BaseCacheManager):
    """Resolves cache names to InMemoryCache handles."""

    def _create_cache(self, name: str) -> InMemoryCache:
        return InMemoryCache(name)
