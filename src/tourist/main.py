"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from tourist.badges.router import router as badges_router
from tourist.config import get_settings
from tourist.database import close_db, init_db
from tourist.health.router import router as health_router
from tourist.leaderboard.router import router as leaderboard_router
from tourist.middleware import setup_middleware
from tourist.redis_client import close_redis, init_redis
from tourist.visits.router import router as visits_router


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown lifecycle."""
    settings = get_settings()
    await init_db(settings.database_url)

    if settings.redis_url:
        await init_redis(settings.redis_url)

    yield

    await close_db()
    await close_redis()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Tourist App API",
        description="Leaderboard ranking and location badge progress for the tourist app",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(leaderboard_router)
    app.include_router(badges_router)
    app.include_router(visits_router)

    return app


app = create_app()
