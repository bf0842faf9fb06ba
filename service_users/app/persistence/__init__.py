"""
Persistence package for the Users Service.

The service depends only on the repository methods find_all, find_by_id,
save and delete_by_id; InMemoryUserRepository is the bundled implementation.
"""

from .memory import InMemoryUserRepository

__all__ = ["InMemoryUserRepository"]
