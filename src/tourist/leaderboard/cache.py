"""Leaderboard read-model cache.

The public part of a leaderboard page (entries + participant count) is kept
in Redis under a per-limit key with a short TTL, stamped with the time it was
computed. Visit writes call ``invalidate_leaderboard_cache`` so a new visit
is never hidden for longer than one write round-trip. Per-user stats are
never cached.

Redis errors are logged and treated as a cache miss; PostgreSQL stays the
source of truth.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone

import redis.asyncio as aioredis
import structlog
from redis.exceptions import RedisError

from tourist.config import get_settings

logger = structlog.get_logger()

LEADERBOARD_CACHE_PREFIX = "leaderboard:cache:"


def build_cache_key(limit: int) -> str:
    """Redis key for a cached leaderboard page of ``limit`` entries."""
    return f"{LEADERBOARD_CACHE_PREFIX}{limit}"


async def get_cached_leaderboard(redis: aioredis.Redis, limit: int) -> dict | None:
    """Return ``{computed_at, entries, total_participants}`` or None on miss."""
    try:
        raw = await redis.get(build_cache_key(limit))
    except RedisError:
        logger.warning("leaderboard_cache_read_failed", limit=limit, exc_info=True)
        return None
    if not raw:
        return None
    logger.debug("leaderboard_cache_hit", limit=limit)
    return json.loads(raw)


async def set_cached_leaderboard(
    redis: aioredis.Redis,
    limit: int,
    entries: list[dict],
    total_participants: int,
) -> None:
    """Store a computed leaderboard page with the configured TTL."""
    payload = {
        "computed_at": datetime.now(timezone.utc).isoformat(),
        "entries": entries,
        "total_participants": total_participants,
    }
    ttl = get_settings().leaderboard_cache_ttl_seconds
    try:
        await redis.setex(build_cache_key(limit), ttl, json.dumps(payload))
    except RedisError:
        logger.warning("leaderboard_cache_write_failed", limit=limit, exc_info=True)


async def invalidate_leaderboard_cache(redis: aioredis.Redis | None) -> int:
    """Drop every cached leaderboard page. Returns the number of keys removed."""
    if redis is None:
        return 0
    try:
        keys = [key async for key in redis.scan_iter(match=f"{LEADERBOARD_CACHE_PREFIX}*")]
        if not keys:
            return 0
        removed = await redis.delete(*keys)
    except RedisError:
        logger.warning("leaderboard_cache_invalidate_failed", exc_info=True)
        return 0
    logger.info("leaderboard_cache_invalidated", keys=removed)
    return removed
