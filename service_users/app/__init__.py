"""
Users Service package for the Users Cache Service.

This package serves user records through a two-tier Redis cache. It provides:

- app.main: Service composition and health.
- app.cache: Fallback cache registry over master and replica tiers.
- app.services: User CRUD with explicit caching, and direct key/value access.
- app.persistence: User repository implementations.

Guidelines:
- The repository is the source of truth; cache failures never fail a request.
- Reads prefer the replica; writes always target the master first.
- Keep cache interaction explicit at the call site.
"""
