"""
Redis caching for the public venue map listing.

CACHING STRATEGY
================

What we cache:
  - The map listing response (open venues with coordinates), per search
    term and sort order
  - Cache key pattern: "venues:map:q={query}&sort={sort}"

Why:
  - The map is the landing page for guests; it is read far more often than
    venues change
  - Only open venues with coordinates appear, so the set changes when an
    owner opens or closes a venue

Invalidation strategy:
  - On venue status change: delete every "venues:map:*" key
  - TTL-based expiry as safety net (REDIS_CACHE_TTL), which also covers
    venue edits made through the external venue editor

What we never cache:
  - Reservations, blackout dates and dashboard counters. Stale slot data
    would let the UI offer dates that are already taken, and dashboard
    counts must match the reservation rows they summarize.

Redis is optional: when disabled or unreachable every call degrades to a
cache miss and the database answers.
"""

import json
from typing import Optional

import redis.asyncio as redis
from redis.exceptions import RedisError
from venue_booking.core.config import get_settings
from venue_booking.core.logging import get_logger
from venue_booking.core.metrics import record_cache_operation

logger = get_logger(__name__)

MAP_KEY_PREFIX = "venues:map:"

_redis_client: Optional[redis.Redis] = None


async def get_redis() -> Optional[redis.Redis]:
    """Get or create Redis connection. Returns None if Redis is disabled."""
    global _redis_client
    settings = get_settings()

    if not settings.REDIS_ENABLED:
        return None

    if _redis_client is None:
        try:
            _redis_client = redis.from_url(
                settings.REDIS_URL,
                encoding="utf-8",
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
                retry_on_timeout=True,
            )
            await _redis_client.ping()
            logger.info("redis_connected", url=settings.REDIS_URL)
        except (RedisError, OSError) as e:
            logger.error("redis_connection_failed", error=str(e))
            _redis_client = None
            return None

    return _redis_client


async def close_redis() -> None:
    """Close Redis connection on shutdown."""
    global _redis_client
    if _redis_client:
        await _redis_client.aclose()
        _redis_client = None


def _make_map_key(search: Optional[str], sort: str) -> str:
    term = (search or "").strip().lower()
    return f"{MAP_KEY_PREFIX}q={term}&sort={sort}"


async def get_cached_map_venues(search: Optional[str], sort: str) -> Optional[dict]:
    """Retrieve cached map listing response."""
    client = await get_redis()
    if not client:
        return None

    key = _make_map_key(search, sort)
    try:
        data = await client.get(key)
        if data:
            record_cache_operation("get", hit=True)
            logger.debug("cache_hit", key=key)
            return json.loads(data)
        record_cache_operation("get", hit=False)
        logger.debug("cache_miss", key=key)
    except (RedisError, OSError, ValueError) as e:
        logger.error("cache_get_error", key=key, error=str(e))

    return None


async def set_cached_map_venues(search: Optional[str], sort: str, data: dict) -> None:
    """Cache map listing response with TTL."""
    client = await get_redis()
    if not client:
        return

    settings = get_settings()
    key = _make_map_key(search, sort)
    try:
        await client.setex(key, settings.REDIS_CACHE_TTL, json.dumps(data, default=str))
        logger.debug("cache_set", key=key, ttl=settings.REDIS_CACHE_TTL)
    except (RedisError, OSError, TypeError) as e:
        logger.error("cache_set_error", key=key, error=str(e))


async def invalidate_venue_cache() -> None:
    """
    Invalidate all cached map listings.
    Uses SCAN to find and delete all keys matching the prefix.
    """
    client = await get_redis()
    if not client:
        return

    try:
        deleted = 0
        async for key in client.scan_iter(match=f"{MAP_KEY_PREFIX}*", count=100):
            await client.delete(key)
            deleted += 1
        logger.info("cache_invalidated", keys_deleted=deleted)
    except (RedisError, OSError) as e:
        logger.error("cache_invalidation_error", error=str(e))


async def get_cache_stats() -> dict:
    """Get Redis cache statistics for monitoring."""
    client = await get_redis()
    if not client:
        return {"status": "disabled"}

    try:
        info = await client.info("stats")
        hits = info.get("keyspace_hits", 0)
        misses = info.get("keyspace_misses", 0)
        return {
            "status": "connected",
            "hits": hits,
            "misses": misses,
            "hit_rate": round(hits / max(hits + misses, 1) * 100, 2),
        }
    except (RedisError, OSError) as e:
        return {"status": "error", "error": str(e)}
