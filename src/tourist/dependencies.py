"""Shared FastAPI dependencies."""

from collections.abc import AsyncGenerator

import redis.asyncio as aioredis

from tourist.database import get_session as _get_session
from tourist.redis_client import get_redis as _get_redis

get_db = _get_session


async def get_cache() -> AsyncGenerator[aioredis.Redis | None, None]:
    """Yield the Redis client, or None when the cache is not configured.

    The leaderboard cache is optional; the database stays the source of truth.
    """
    try:
        client: aioredis.Redis | None = _get_redis()
    except RuntimeError:
        client = None
    yield client
