"""Data stores for persistence and caching.

Stores handle:
- PostgreSQL: DB session, ORM operations
- Redis: caching, locks, TTL policies

No business logic in stores - that belongs in services.
"""
