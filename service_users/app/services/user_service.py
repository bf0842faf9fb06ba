"""
User CRUD with explicit read-through caching.
"""

from typing import Any, List, Optional

from shared.logging import get_logger
from ..models import User

CACHE_NAME = "users"
ALL_USERS_KEY = "all-users"


def id_key(user_id: int) -> str:
    return f"id:{user_id}"


def name_key(name: str) -> str:
    return f"name:{name.lower()}"


class UserService:
    """
    User operations backed by a repository and the ``users`` cache.

    Reads go through ``cache.get(key, loader)``; writes refresh the id entry
    and evict the list and name entries they invalidate.
    """

    def __init__(self, repository: Any, cache_manager: Any):
        self.repository = repository
        self.cache = cache_manager.get_cache(CACHE_NAME)
        self.logger = get_logger("users.service")

    def get_all_users(self) -> List[User]:
        def load():
            self.logger.info("Fetching all users from repository")
            return self.repository.find_all()

        return self.cache.get(ALL_USERS_KEY, load)

    def get_user_by_name(self, name: str) -> Optional[User]:
        def load():
            self.logger.info("Fetching user by name", name=name)
            wanted = name.lower()
            for user in self.repository.find_all():
                if user.name.lower() == wanted:
                    return user
            return None

        return self.cache.get(name_key(name), load)

    def get_user_by_id(self, user_id: int) -> Optional[User]:
        def load():
            self.logger.info("Fetching user by id", user_id=user_id)
            return self.repository.find_by_id(user_id)

        return self.cache.get(id_key(user_id), load)

    def create_users_in_bulk(self, users: List[User]) -> List[User]:
        self.logger.info("Creating users in bulk", count=len(users))
        saved = [self.repository.save(user) for user in users]
        self.cache.evict(ALL_USERS_KEY)
        for user in saved:
            self.cache.evict(name_key(user.name))
        return saved

    def create_user(self, user: User) -> User:
        self.logger.info("Creating user", name=user.name)
        saved = self.repository.save(user)
        self.cache.put(id_key(saved.id), saved)
        self.cache.evict(ALL_USERS_KEY)
        self.cache.evict(name_key(saved.name))
        return saved

    def update_user(self, user_id: int, details: User) -> Optional[User]:
        """Copy name, email and designation onto an existing user."""
        self.logger.info("Updating user", user_id=user_id)
        existing = self.repository.find_by_id(user_id)
        if existing is None:
            self.logger.warning("User not found for update", user_id=user_id)
            return None

        previous_name = existing.name
        updated = existing.model_copy(update={
            "name": details.name,
            "email": details.email,
            "designation": details.designation,
        })
        saved = self.repository.save(updated)

        self.cache.put(id_key(saved.id), saved)
        self.cache.evict(ALL_USERS_KEY)
        self.cache.evict(name_key(previous_name))
        self.cache.evict(name_key(saved.name))
        return saved

    def delete_user(self, user_id: int) -> None:
        self.logger.info("Deleting user", user_id=user_id)
        existing = self.repository.find_by_id(user_id)
        self.repository.delete_by_id(user_id)

        self.cache.evict(id_key(user_id))
        self.cache.evict(ALL_USERS_KEY)
        if existing is not None:
            self.cache.evict(name_key(existing.name))
