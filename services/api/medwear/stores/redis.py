"""Redis store for caching and counters.

Handles:
- Caching with TTL policies
- Atomic daily counters (receipt numbers)

TTL policies:
- Active product catalog: 30 seconds by default (CATALOG_CACHE_TTL)
- Receipt counters: 2 days (only the current day is ever incremented)
"""

import json
import logging
from typing import Any

import redis.asyncio as redis

from medwear.settings import get_settings

# TTL constants (in seconds)
TTL_RECEIPT_COUNTER = 172800  # 2 days

# Key prefixes
PREFIX_CATALOG = "catalog:"
PREFIX_RECEIPT_COUNTER = "receipt:seq:"

CATALOG_ACTIVE_KEY = f"{PREFIX_CATALOG}active"

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


async def cache_delete(key: str) -> None:
    """Delete value from cache."""
    await _get_redis().delete(key)


# ============================================================
# Product catalog cache
# ============================================================


async def get_catalog_cache() -> list[dict[str, Any]] | None:
    """Get the cached active catalog payload."""
    value = await cache_get(CATALOG_ACTIVE_KEY)
    if not value:
        return None
    parsed = json.loads(value)
    return parsed if isinstance(parsed, list) else None


async def set_catalog_cache(products: list[dict[str, Any]]) -> None:
    """Cache the active catalog payload."""
    ttl = get_settings().catalog_cache_ttl
    if ttl <= 0:
        return
    await cache_set(CATALOG_ACTIVE_KEY, json.dumps(products), ttl)


async def invalidate_catalog_cache() -> None:
    """Drop the cached catalog after any stock-changing write.

    Silently skipped when Redis is not available (tests / local minimal env).
    """
    try:
        await cache_delete(CATALOG_ACTIVE_KEY)
    except RuntimeError:
        return


# ============================================================
# Counters
# ============================================================


async def next_receipt_sequence(day: str) -> int:
    """Atomically allocate the next receipt sequence for a day (YYYYMMDD).

    Raises:
        RuntimeError: If Redis is not initialized.
    """
    key = f"{PREFIX_RECEIPT_COUNTER}{day}"
    client = _get_redis()
    value = await client.incr(key)
    if value == 1:
        await client.expire(key, TTL_RECEIPT_COUNTER)
    return int(value)
