"""
In-memory persistence for users.
"""

import itertools
import threading
from typing import Dict, List, Optional

from shared.logging import get_logger
from ..models import User


class InMemoryUserRepository:
    """Thread-safe user store with database-style identity generation."""

    def __init__(self):
        self.logger = get_logger("users.persistence.memory")
        self._users: Dict[int, User] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def find_all(self) -> List[User]:
        """Load all users ordered by id."""
        with self._lock:
            return [user.model_copy() for _, user in sorted(self._users.items())]

    def find_by_id(self, user_id: int) -> Optional[User]:
        """Load a user by id."""
        with self._lock:
            user = self._users.get(user_id)
            return user.model_copy() if user else None

    def save(self, user: User) -> User:
        """Insert or update a user; new users receive the next id."""
        with self._lock:
            if user.id is None:
                user = user.model_copy(update={"id": next(self._ids)})
            self._users[user.id] = user.model_copy()

        self.logger.debug("User saved", user_id=user.id)
        return user

    def delete_by_id(self, user_id: int) -> bool:
        """Delete a user. Returns whether a record was removed."""
        with self._lock:
            removed = self._users.pop(user_id, None) is not None

        if removed:
            self.logger.debug("User deleted", user_id=user_id)
        return removed
