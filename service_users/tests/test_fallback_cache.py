"""
Unit tests for FallbackCache.
"""

import pytest
from unittest.mock import MagicMock
import redis

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from service_users.app.cache.fallback_cache import FallbackCache
from service_users.app.cache.memory_cache import InMemoryCache
from service_users.app.models import User
from shared.errors import CacheAccessError, ValueRetrievalError
from shared.metrics import MetricsCollector


def failing_cache(name: str = "users") -> MagicMock:
    """Cache handle whose every operation raises an access error."""
    cache = MagicMock()
    cache.name = name
    error = CacheAccessError(name, "any", "connection refused")
    cache.get.side_effect = error
    cache.put.side_effect = error
    cache.evict.side_effect = error
    cache.clear.side_effect = error
    return cache


class TestFallbackCacheWithoutSecondary:
    """Primary-only behaviour."""

    @pytest.fixture
    def primary(self):
        return InMemoryCache("users")

    @pytest.fixture
    def cache(self, primary):
        return FallbackCache(primary)

    def test_name_and_native_cache_delegate_to_primary(self, cache, primary):
        assert cache.name == "users"
        assert cache.native_cache is primary.native_cache
        assert cache.secondary is None

    def test_put_then_get(self, cache):
        cache.put("id:1", User(id=1, name="Alice"))

        assert cache.get("id:1") == User(id=1, name="Alice")

    def test_get_missing_key(self, cache):
        assert cache.get("id:404") is None

    def test_scenario_alice_and_bob(self, cache, primary):
        """Primary holds Alice; Bob is loaded and cached on demand."""
        primary.put("id:1", User(id=1, name="Alice"))

        assert cache.get("id:1") == User(id=1, name="Alice")
        assert cache.get("id:2") is None

        result = cache.get("id:2", lambda: User(id=2, name="Bob"))

        assert result == User(id=2, name="Bob")
        assert primary.get("id:2") == User(id=2, name="Bob")

    def test_evict_then_get(self, cache):
        cache.put("id:1", User(id=1, name="Alice"))
        cache.evict("id:1")

        assert cache.get("id:1") is None

    def test_clear(self, cache, primary):
        cache.put("id:1", User(id=1, name="Alice"))
        cache.put("id:2", User(id=2, name="Bob"))

        cache.clear()

        assert primary.native_cache == {}

    def test_primary_read_error_returns_none(self):
        cache = FallbackCache(failing_cache())

        assert cache.get("id:1") is None

    def test_put_swallows_primary_failure(self):
        primary = failing_cache()
        cache = FallbackCache(primary)

        cache.put("id:1", User(id=1, name="Alice"))

        primary.put.assert_called_once()

    def test_evict_and_clear_swallow_primary_failure(self):
        primary = failing_cache()
        cache = FallbackCache(primary)

        cache.evict("id:1")
        cache.clear()

        primary.evict.assert_called_once_with("id:1")
        primary.clear.assert_called_once_with()


class TestFallbackCacheReads:
    """Read preference and fallback between tiers."""

    @pytest.fixture
    def primary(self):
        return InMemoryCache("users")

    @pytest.fixture
    def secondary(self):
        return InMemoryCache("users")

    @pytest.fixture
    def cache(self, primary, secondary):
        return FallbackCache(primary, secondary)

    def test_secondary_hit_skips_primary(self, secondary):
        primary = MagicMock()
        primary.name = "users"
        secondary.put("id:1", User(id=1, name="Replica Alice"))
        cache = FallbackCache(primary, secondary)

        assert cache.get("id:1") == User(id=1, name="Replica Alice")
        primary.get.assert_not_called()

    def test_secondary_miss_falls_back_to_primary(self, cache, primary):
        """A stale replica miss is not authoritative."""
        primary.put("id:1", User(id=1, name="Alice"))

        assert cache.get("id:1") == User(id=1, name="Alice")

    def test_secondary_miss_and_primary_miss(self, cache):
        assert cache.get("id:1") is None

    def test_secondary_error_falls_back_to_primary(self, primary):
        secondary = MagicMock()
        secondary.get.side_effect = redis.ConnectionError("replica down")
        primary.put("id:1", User(id=1, name="Alice"))
        cache = FallbackCache(primary, secondary)

        assert cache.get("id:1") == User(id=1, name="Alice")
        secondary.get.assert_called_once_with("id:1")

    def test_both_tiers_fail_returns_none(self):
        cache = FallbackCache(failing_cache(), failing_cache())

        assert cache.get("id:1") is None

    def test_secondary_is_tried_exactly_once(self, primary):
        secondary = failing_cache()
        cache = FallbackCache(primary, secondary)

        cache.get("id:1")

        assert secondary.get.call_count == 1


class TestFallbackCacheLoader:
    """get(key, loader) semantics."""

    @pytest.fixture
    def primary(self):
        return InMemoryCache("users")

    @pytest.fixture
    def secondary(self):
        return InMemoryCache("users")

    @pytest.fixture
    def cache(self, primary, secondary):
        return FallbackCache(primary, secondary)

    def test_loader_not_called_on_hit(self, cache, primary):
        primary.put("id:1", User(id=1, name="Alice"))
        loader = MagicMock()

        assert cache.get("id:1", loader) == User(id=1, name="Alice")
        loader.assert_not_called()

    def test_loader_called_once_and_result_retrievable(self, cache):
        loader = MagicMock(return_value=User(id=2, name="Bob"))

        result = cache.get("id:2", loader)

        assert result == User(id=2, name="Bob")
        loader.assert_called_once_with()
        assert cache.get("id:2") == User(id=2, name="Bob")

    def test_loader_result_written_to_both_tiers(self, cache, primary, secondary):
        cache.get("id:2", lambda: User(id=2, name="Bob"))

        assert primary.get("id:2") == User(id=2, name="Bob")
        assert secondary.get("id:2") == User(id=2, name="Bob")

    def test_loader_failure_is_wrapped(self, cache, primary):
        cause = RuntimeError("database unavailable")

        def loader():
            raise cause

        with pytest.raises(ValueRetrievalError) as exc_info:
            cache.get("id:3", loader)

        assert exc_info.value.key == "id:3"
        assert exc_info.value.cause is cause
        assert exc_info.value.code == "CACHE_VALUE_RETRIEVAL_ERROR"
        assert primary.native_cache == {}

    def test_loader_returning_none_is_not_cached(self, cache, primary, secondary):
        assert cache.get("id:9", lambda: None) is None
        assert primary.native_cache == {}
        assert secondary.native_cache == {}

    def test_loader_used_when_both_tiers_fail(self):
        cache = FallbackCache(failing_cache(), failing_cache())
        loader = MagicMock(return_value=User(id=5, name="Eve"))

        assert cache.get("id:5", loader) == User(id=5, name="Eve")
        loader.assert_called_once_with()


class TestFallbackCacheWrites:
    """Best-effort dual writes."""

    def test_put_writes_primary_before_secondary(self):
        calls = []
        primary = MagicMock()
        primary.put.side_effect = lambda k, v: calls.append("primary")
        secondary = MagicMock()
        secondary.put.side_effect = lambda k, v: calls.append("secondary")
        cache = FallbackCache(primary, secondary)

        cache.put("id:1", User(id=1, name="Alice"))

        assert calls == ["primary", "secondary"]

    def test_secondary_put_failure_keeps_primary_write(self):
        primary = InMemoryCache("users")
        cache = FallbackCache(primary, failing_cache())

        cache.put("id:1", User(id=1, name="Alice"))

        assert primary.get("id:1") == User(id=1, name="Alice")

    def test_primary_put_failure_still_writes_secondary(self):
        secondary = InMemoryCache("users")
        cache = FallbackCache(failing_cache(), secondary)

        cache.put("id:1", User(id=1, name="Alice"))

        assert secondary.get("id:1") == User(id=1, name="Alice")

    def test_put_never_raises_when_both_tiers_unreachable(self):
        cache = FallbackCache(failing_cache(), failing_cache())

        cache.put("id:1", User(id=1, name="Alice"))
        cache.evict("id:1")
        cache.clear()

    def test_evict_removes_from_both_tiers(self):
        primary = InMemoryCache("users")
        secondary = InMemoryCache("users")
        cache = FallbackCache(primary, secondary)
        cache.put("id:1", User(id=1, name="Alice"))

        cache.evict("id:1")

        assert primary.get("id:1") is None
        assert secondary.get("id:1") is None
        assert cache.get("id:1") is None

    def test_clear_reaches_secondary_when_primary_fails(self):
        secondary = MagicMock()
        cache = FallbackCache(failing_cache(), secondary)

        cache.clear()

        secondary.clear.assert_called_once_with()


class TestFallbackCacheMetrics:
    """Tier metrics recording."""

    @pytest.fixture
    def metrics(self):
        collector = MetricsCollector("users")
        collector.increment_counter = MagicMock()
        return collector

    def test_records_secondary_miss_and_primary_hit(self, metrics):
        primary = InMemoryCache("users")
        primary.put("id:1", User(id=1, name="Alice"))
        cache = FallbackCache(primary, InMemoryCache("users"), metrics=metrics)

        cache.get("id:1")

        metrics.increment_counter.assert_any_call(
            "cache_requests_total", cache="users", tier="secondary", result="miss"
        )
        metrics.increment_counter.assert_any_call(
            "cache_requests_total", cache="users", tier="primary", result="hit"
        )

    def test_records_tier_errors(self, metrics):
        cache = FallbackCache(InMemoryCache("users"), failing_cache(), metrics=metrics)

        cache.put("id:1", User(id=1, name="Alice"))

        metrics.increment_counter.assert_called_once_with(
            "cache_errors_total", cache="users", tier="secondary", operation="put"
        )
