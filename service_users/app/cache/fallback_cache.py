"""
Fallback cache over a primary (master) and optional secondary (replica) tier.

Reads prefer the secondary and fall back to the primary when the secondary
errors or misses. Writes, evictions and clears go to the primary first and
are mirrored to the secondary; each tier fails independently and no failure
escapes this class, apart from a failing value loader.
"""

import time
from typing import Any, Callable, Optional, TYPE_CHECKING

from shared.logging import get_logger
from shared.errors import ValueRetrievalError

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector

PRIMARY = "primary"
SECONDARY = "secondary"


class FallbackCache:
    """Single cache interface over a primary/secondary pair."""

    def __init__(self, primary: Any, secondary: Optional[Any] = None,
                 metrics: Optional["MetricsCollector"] = None):
        self._primary = primary
        self._secondary = secondary
        self._metrics = metrics
        self.logger = get_logger("users.cache.fallback")

    @property
    def name(self) -> str:
        return self._primary.name

    @property
    def native_cache(self) -> Any:
        return self._primary.native_cache

    @property
    def primary(self) -> Any:
        return self._primary

    @property
    def secondary(self) -> Optional[Any]:
        return self._secondary

    def get(self, key: Any, loader: Optional[Callable[[], Any]] = None) -> Optional[Any]:
        """
        Look up ``key``; with a ``loader``, compute and store the value on a miss.

        Args:
            key: Cache key
            loader: Zero-argument callable invoked once when no tier has the key

        Returns:
            The cached or loaded value, or None when absent

        Raises:
            ValueRetrievalError: If the loader fails. Nothing is cached.
        """
        value = self._lookup(key)
        if value is not None or loader is None:
            return value

        start = time.time()
        try:
            value = loader()
        except Exception as e:
            self.logger.error("Value loader failed", cache=self.name, key=str(key), error=str(e))
            raise ValueRetrievalError(key, e) from e
        finally:
            if self._metrics:
                self._metrics.observe_histogram(
                    "cache_load_duration_seconds", time.time() - start, cache=self.name
                )

        if value is None:
            self.logger.debug("Loader returned no value; nothing cached", cache=self.name, key=str(key))
            return None

        self.put(key, value)
        return value

    def put(self, key: Any, value: Any) -> None:
        """Write to the primary, then mirror to the secondary."""
        self._attempt(PRIMARY, "put", key, lambda: self._primary.put(key, value))
        if self._secondary is not None:
            self._attempt(SECONDARY, "put", key, lambda: self._secondary.put(key, value))

    def evict(self, key: Any) -> None:
        """Remove ``key`` from both tiers."""
        self._attempt(PRIMARY, "evict", key, lambda: self._primary.evict(key))
        if self._secondary is not None:
            self._attempt(SECONDARY, "evict", key, lambda: self._secondary.evict(key))

    def clear(self) -> None:
        """Clear both tiers."""
        self._attempt(PRIMARY, "clear", None, self._primary.clear)
        if self._secondary is not None:
            self._attempt(SECONDARY, "clear", None, self._secondary.clear)

    def _lookup(self, key: Any) -> Optional[Any]:
        if self._secondary is not None:
            try:
                value = self._secondary.get(key)
            except Exception as e:
                self.logger.warning(
                    "Secondary cache read failed, falling back to primary",
                    cache=self.name, key=str(key), error=str(e)
                )
                self._record_error(SECONDARY, "get")
            else:
                if value is not None:
                    self._record_lookup(SECONDARY, "hit")
                    return value
                # replica may not have caught up yet
                self._record_lookup(SECONDARY, "miss")

        try:
            value = self._primary.get(key)
        except Exception as e:
            self.logger.error(
                "Primary cache read failed, treating as miss",
                cache=self.name, key=str(key), error=str(e)
            )
            self._record_error(PRIMARY, "get")
            return None

        self._record_lookup(PRIMARY, "hit" if value is not None else "miss")
        return value

    def _attempt(self, tier: str, operation: str, key: Any, action: Callable[[], Any]):
        try:
            action()
        except Exception as e:
            log = self.logger.warning if tier == PRIMARY else self.logger.info
            log(
                f"{operation}() failed on {tier} cache",
                cache=self.name, key=None if key is None else str(key), error=str(e)
            )
            self._record_error(tier, operation)

    def _record_lookup(self, tier: str, result: str):
        if self._metrics:
            self._metrics.increment_counter("cache_requests_total", cache=self.name, tier=tier, result=result)

    def _record_error(self, tier: str, operation: str):
        if self._metrics:
            self._metrics.increment_counter("cache_errors_total", cache=self.name, tier=tier, operation=operation)
