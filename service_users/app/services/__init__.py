from .redis_service import RedisService
from .user_service import UserService

__all__ = ["RedisService", "UserService"]
