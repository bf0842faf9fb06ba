"""
Shared configuration management for the Users Cache Service.
"""

from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="USERS_",
        case_sensitive=False,
        extra="allow"
    )

    # Environment
    env: str = Field(default="local")
    log_level: str = Field(default="info")

    # Redis tiers
    redis_master_url: str = Field(default="redis://localhost:6379/0")
    redis_replica_url: Optional[str] = Field(
        default=None,
        description="Replica endpoint; standalone deployments read from the master URL"
    )
    redis_replica_enabled: bool = Field(default=True)
    redis_socket_timeout: float = Field(default=5.0)
    redis_connect_timeout: float = Field(default=5.0)
    redis_health_check_interval: int = Field(default=30)

    # Cache behaviour
    cache_ttl_seconds: int = Field(default=600, ge=0)
    cache_master_prefix: str = Field(default="masterNode:")
    cache_replica_prefix: str = Field(default="replicaNode:")
    cache_names: List[str] = Field(default_factory=lambda: ["users"])
    cache_allow_runtime_creation: bool = Field(default=True)

    @property
    def effective_replica_url(self) -> str:
        """Replica URL, falling back to the master for standalone setups."""
        return self.redis_replica_url or self.redis_master_url


class ServiceConfig(BaseConfig):
    """Service-specific configuration."""

    service_name: str

    def __init__(self, service_name: str, **kwargs):
        super().__init__(service_name=service_name, **kwargs)


def get_config(service_name: str, **overrides) -> ServiceConfig:
    """Get configuration for a specific service."""
    return ServiceConfig(service_name=service_name, **overrides)
