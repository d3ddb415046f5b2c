"""Redis connection pool for the leaderboard read-model cache.

The cache is optional: when Redis is unreachable at startup the pool is not
kept and ``get_redis`` raises, which request dependencies treat as "no cache".
"""

import redis.asyncio as redis
import structlog
from redis.exceptions import RedisError

logger = structlog.get_logger()

_pool: redis.Redis | None = None


async def init_redis(url: str) -> bool:
    """Connect to Redis. Returns False (and keeps no pool) if it cannot be reached."""
    global _pool  # noqa: PLW0603
    client = redis.from_url(  # type: ignore[no-untyped-call]
        url,
        encoding="utf-8",
        decode_responses=True,
        max_connections=50,
        socket_timeout=2,
    )
    try:
        await client.ping()
    except (RedisError, OSError):
        logger.warning("redis_unavailable_cache_disabled", url=url, exc_info=True)
        await client.aclose()
        return False
    _pool = client
    return True


async def close_redis() -> None:
    """Close the Redis connection pool."""
    global _pool  # noqa: PLW0603
    if _pool:
        await _pool.aclose()
        _pool = None


def get_redis() -> redis.Redis:
    """Get the Redis client."""
    if _pool is None:
        msg = "Redis not initialized. Call init_redis() first."
        raise RuntimeError(msg)
    return _pool
