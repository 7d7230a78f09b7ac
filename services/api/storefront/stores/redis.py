"""Redis store for caching and distributed locks.

Handles:
- Caching with TTL policies
- Distributed locks (one import per marketplace listing at a time)

TTL policies:
- Featured products (home payload): 60 seconds
- Category product listings: 5 minutes
- Wheel of fortune configuration: 1 hour
- Import locks: 2 minutes (browser navigation + uploads)
"""

import hashlib
import json
import logging
import secrets
from typing import Any

import redis.asyncio as redis

from storefront.settings import get_settings

# TTL constants (in seconds)
TTL_FEATURED_PRODUCTS = 60  # 1 minute
TTL_CATEGORY_PRODUCTS = 300  # 5 minutes
TTL_WHEEL_CONFIG = 3600  # 1 hour
TTL_IMPORT_LOCK = 120  # 2 minutes

# Key prefixes
PREFIX_CATALOG = "catalog:"
PREFIX_WHEEL = "wheel:"
PREFIX_LOCK = "lock:"
PREFIX_IMPORT_LOCK = "import:"

# Compare-and-delete, atomic on the server
_RELEASE_LOCK_SCRIPT = """
if redis.call("GET", KEYS[1]) == ARGV[1] then
    return redis.call("DEL", KEYS[1])
end
return 0
"""

# Redis client (initialized on startup)
_redis: redis.Redis | None = None
logger = logging.getLogger("uvicorn.error")


async def init_redis() -> None:
    """Initialize Redis connection."""
    global _redis
    settings = get_settings()
    _redis = redis.from_url(
        settings.redis_url,
        encoding="utf-8",
        decode_responses=True,
        socket_connect_timeout=5,
        socket_timeout=5,
    )
    await _redis.ping()
    logger.info("Redis connected")


async def close_redis() -> None:
    """Close Redis connection."""
    global _redis
    if _redis:
        await _redis.aclose()
        _redis = None


def _get_redis() -> redis.Redis:
    """Get Redis client instance."""
    if _redis is None:
        raise RuntimeError("Redis not initialized. Call init_redis() first.")
    return _redis


# ============================================================
# Generic cache operations
# ============================================================


async def cache_get(key: str) -> str | None:
    """Get value from cache.

    Args:
        key: Cache key.

    Returns:
        Cached value or None if not found.
    """
    return await _get_redis().get(key)


async def cache_set(key: str, value: str, ttl: int) -> None:
    """Set value in cache with TTL.

    Args:
        key: Cache key.
        value: Value to cache.
        ttl: Time-to-live in seconds.
    """
    await _get_redis().setex(key, ttl, value)


async def cache_get_json(key: str) -> Any | None:
    """Get JSON value from cache.

    Returns:
        Parsed JSON value or None if not found.
    """
    value = await cache_get(key)
    if value:
        return json.loads(value)
    return None


async def cache_set_json(key: str, value: Any, ttl: int) -> None:
    """Set JSON value in cache."""
    await cache_set(key, json.dumps(value), ttl)


# ============================================================
# Catalog cache
# ============================================================


def catalog_key(name: str, *parts: str) -> str:
    """Build a catalog cache key, e.g. catalog:featured or catalog:category:<slug>."""
    return ":".join([f"{PREFIX_CATALOG}{name}", *parts]) if parts else f"{PREFIX_CATALOG}{name}"


async def get_catalog_cache(key: str) -> list[dict[str, Any]] | None:
    """Get a cached list of CMS documents."""
    return await cache_get_json(key)


async def set_catalog_cache(key: str, documents: list[dict[str, Any]], ttl: int) -> None:
    """Cache a list of CMS documents."""
    await cache_set_json(key, documents, ttl)


# ============================================================
# Distributed locks
# ============================================================


async def acquire_lock(key: str, ttl: int = TTL_IMPORT_LOCK) -> str | None:
    """Acquire a distributed lock.

    Args:
        key: Lock key.
        ttl: Lock timeout in seconds.

    Returns:
        Owner token if the lock was acquired, None if already locked.
    """
    token = secrets.token_hex(16)
    # SET NX (only if not exists) with TTL
    result = await _get_redis().set(f"{PREFIX_LOCK}{key}", token, nx=True, ex=ttl)
    return token if result else None


async def release_lock(key: str, token: str) -> bool:
    """Release a lock only if `token` still owns it.

    A lock that expired and was taken by another request is left alone.

    Returns:
        True if the lock was deleted.
    """
    deleted = await _get_redis().eval(_RELEASE_LOCK_SCRIPT, 1, f"{PREFIX_LOCK}{key}", token)
    return bool(deleted)


def import_lock_key(url: str) -> str:
    """Lock key for importing one marketplace listing URL."""
    url_hash = hashlib.sha256(url.strip().encode()).hexdigest()[:16]
    return f"{PREFIX_IMPORT_LOCK}{url_hash}"
