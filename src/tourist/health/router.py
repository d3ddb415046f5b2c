"""Health, readiness, and version endpoints."""

import redis.asyncio as aioredis
from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from tourist.config import get_settings
from tourist.database import get_session
from tourist.dependencies import get_cache

router = APIRouter()


@router.get("/health")
async def health() -> dict[str, str]:
    """Liveness probe — returns 200 if the process is alive."""
    return {"status": "healthy"}


@router.get("/ready")
async def readiness(
    db: AsyncSession = Depends(get_session),  # noqa: B008
    redis: aioredis.Redis | None = Depends(get_cache),  # noqa: B008
) -> dict[str, object]:
    """Readiness probe. The database is required, the leaderboard cache is optional."""
    checks: dict[str, object] = {}

    try:
        result = await db.execute(text("SELECT 1"))
        result.scalar()
        checks["database"] = "ok"
    except Exception as exc:
        checks["database"] = f"error: {exc}"

    if redis is None:
        checks["cache"] = "disabled"
    else:
        try:
            await redis.ping()
            checks["cache"] = "ok"
        except Exception as exc:
            checks["cache"] = f"error: {exc}"

    status = "ready" if checks["database"] == "ok" else "unavailable"
    if status == "ready" and checks["cache"] not in ("ok", "disabled"):
        status = "degraded"
    return {"status": status, "checks": checks}


@router.get("/version")
async def version() -> dict[str, str]:
    """Return API version and environment."""
    settings = get_settings()
    return {
        "version": settings.app_version,
        "environment": settings.environment,
    }
