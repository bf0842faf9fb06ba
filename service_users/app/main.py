"""
Users service for the Users Cache Service.

Wires configuration, logging, metrics, Redis tiers, the fallback cache
registry and the user services together.
"""

from typing import Any, Dict, Optional

import redis

from shared.config import ServiceConfig, get_config
from shared.logging import configure_logging, get_logger
from shared.metrics import MetricsCollector, get_metrics_collector
from .cache import FallbackCacheManager, RedisCacheManager
from .persistence import InMemoryUserRepository
from .services import RedisService, UserService

SERVICE_NAME = "users"


def build_redis_client(url: str, config: ServiceConfig) -> redis.Redis:
    """Create a blocking Redis client for one tier."""
    return redis.Redis.from_url(
        url,
        socket_connect_timeout=config.redis_connect_timeout,
        socket_timeout=config.redis_socket_timeout,
        health_check_interval=config.redis_health_check_interval,
    )


class UsersService:
    """Users service implementation."""

    def __init__(
        self,
        config: Optional[ServiceConfig] = None,
        master_client: Optional[redis.Redis] = None,
        replica_client: Optional[redis.Redis] = None,
        repository: Optional[Any] = None,
        metrics: Optional[MetricsCollector] = None
    ):
        self.config = config or get_config(SERVICE_NAME)
        configure_logging(SERVICE_NAME, self.config.log_level)
        self.logger = get_logger(SERVICE_NAME)
        self.metrics = metrics or get_metrics_collector(SERVICE_NAME)

        self.master_client = master_client or build_redis_client(self.config.redis_master_url, self.config)
        self.replica_client = None
        if self.config.redis_replica_enabled:
            self.replica_client = replica_client or build_redis_client(
                self.config.effective_replica_url, self.config
            )

        self.cache_manager = self._build_cache_manager()
        self.repository = repository or InMemoryUserRepository()
        self.user_service = UserService(self.repository, self.cache_manager)
        self.redis_service = RedisService(self.master_client, self.replica_client)

        self.logger.info(
            "Users service initialized",
            env=self.config.env,
            replica_enabled=self.replica_client is not None,
            cache_names=sorted(self.cache_manager.get_cache_names())
        )

    def _build_cache_manager(self) -> FallbackCacheManager:
        ttl = self.config.cache_ttl_seconds or None
        master_manager = RedisCacheManager(
            self.master_client,
            key_prefix=self.config.cache_master_prefix,
            ttl_seconds=ttl,
            cache_names=self.config.cache_names,
            allow_runtime_cache_creation=self.config.cache_allow_runtime_creation
        )

        replica_manager = None
        if self.replica_client is not None:
            replica_manager = RedisCacheManager(
                self.replica_client,
                key_prefix=self.config.cache_replica_prefix,
                ttl_seconds=ttl,
                cache_names=self.config.cache_names,
                allow_runtime_cache_creation=self.config.cache_allow_runtime_creation
            )

        return FallbackCacheManager(master_manager, replica_manager, metrics=self.metrics)

    def health(self) -> Dict[str, Any]:
        """Report service and Redis tier health."""
        report = self.redis_service.health()
        self.metrics.record_health_check("ok" if report["status"] == "UP" else "error")
        return {"service": SERVICE_NAME, "version": "1.0.0", **report}

    def stop(self):
        """Close Redis connections."""
        self.master_client.close()
        if self.replica_client is not None and self.replica_client is not self.master_client:
            self.replica_client.close()
        self.logger.info("Users service stopped")


def create_service(**kwargs) -> UsersService:
    """Create a users service instance."""
    return UsersService(**kwargs)


if __name__ == "__main__":
    service = create_service()
    service.logger.info("Startup health", **service.health())
    service.stop()
