"""
Direct key/value access to the Redis master and replica.
"""

from typing import Any, Dict, List, Optional

import redis

from shared.logging import get_logger
from ..cache.serialization import dumps, loads


class RedisService:
    """Writes go to the master; reads prefer the replica and fall back to the master."""

    def __init__(self, master: redis.Redis, replica: Optional[redis.Redis] = None):
        self.master = master
        self.replica = replica
        self.logger = get_logger("users.redis")

    def set_value(self, key: str, value: Any) -> None:
        self.logger.info("Writing to master", key=key)
        self.master.set(key, dumps(value))

    def get_value(self, key: str) -> Optional[Any]:
        raw = self._read(key, lambda client: client.get(key))
        return None if raw is None else loads(raw)

    def delete_key(self, key: str) -> bool:
        self.logger.info("Deleting from master", key=key)
        return self.master.delete(key) > 0

    def has_key(self, key: str) -> bool:
        return bool(self._read(key, lambda client: client.exists(key)))

    def get_keys(self, pattern: str = "*") -> List[str]:
        """List keys matching ``pattern``, sorted. Uses SCAN rather than KEYS."""
        keys = self._read(pattern, lambda client: list(client.scan_iter(match=pattern)))
        return sorted(k.decode("utf-8") if isinstance(k, bytes) else k for k in keys)

    def flush_all(self) -> None:
        """Drop every key on the master; the replica follows through replication."""
        self.logger.warning("Flushing all keys on master")
        self.master.flushall()

    def _read(self, key: str, operation):
        if self.replica is None:
            return operation(self.master)
        try:
            self.logger.debug("Reading from replica", key=key)
            return operation(self.replica)
        except redis.RedisError as e:
            self.logger.warning("Failed to read from replica, falling back to master", key=key, error=str(e))
            return operation(self.master)

    def _ping(self, client: redis.Redis, tier: str) -> Optional[str]:
        try:
            client.ping()
        except redis.RedisError as e:
            self.logger.warning("Redis health check failed", tier=tier, error=str(e))
            return str(e)
        return None

    def health(self) -> Dict[str, Any]:
        """
        Ping master and replica.

        The service is UP while the master answers; a failing replica only
        degrades the report.
        """
        master_error = self._ping(self.master, "master")
        replica_error = None
        replica_status = "DISABLED"
        if self.replica is not None:
            replica_error = self._ping(self.replica, "replica")
            replica_status = "DOWN" if replica_error else "UP"

        if master_error:
            self.logger.error("Redis master is down", replica=replica_status)
            return {
                "status": "DOWN",
                "master": "DOWN",
                "replica": replica_status,
                "message": "Redis connection failed",
                "error": master_error,
            }

        if replica_status == "DISABLED":
            message = "Redis master is up, no replica configured"
        elif replica_error:
            return {
                "status": "UP",
                "master": "UP",
                "replica": "DOWN",
                "message": "Redis master is up, replica has issues",
                "error": replica_error,
            }
        else:
            message = "Redis master and replica are up and running"

        return {"status": "UP", "master": "UP", "replica": replica_status, "message": message}
