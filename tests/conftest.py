"""Shared test fixtures.

Tests run against an in-memory SQLite database (aiosqlite) built from the ORM
metadata, so no PostgreSQL or Redis server is needed.
"""

from __future__ import annotations

import fnmatch
import os
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone

# Override settings for testing BEFORE any app imports
os.environ["TOURIST_DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["TOURIST_REDIS_URL"] = ""
os.environ["TOURIST_JWT_SECRET"] = "test-secret-not-for-production-use-only-0123456789"
os.environ["TOURIST_LOG_FORMAT"] = "console"
os.environ["TOURIST_LOG_LEVEL"] = "WARNING"

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from tourist.auth.jwt import create_access_token  # noqa: E402
from tourist.config import get_settings  # noqa: E402
from tourist.database import get_session  # noqa: E402
from tourist.db.base import Base  # noqa: E402
from tourist.db.models import Attraction, City, Continent, Country, User, Visit  # noqa: E402
from tourist.dependencies import get_cache  # noqa: E402

get_settings.cache_clear()

BASE_DATE = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


class FakeRedis:
    """Dict-backed stand-in for the handful of redis.asyncio calls the cache makes."""

    def __init__(self) -> None:
        self.store: dict[str, str] = {}
        self.ttls: dict[str, int | None] = {}

    async def get(self, key: str) -> str | None:
        return self.store.get(key)

    async def setex(self, key: str, ttl: int, value: str) -> bool:
        self.store[key] = value
        self.ttls[key] = ttl
        return True

    async def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            if self.store.pop(key, None) is not None:
                removed += 1
            self.ttls.pop(key, None)
        return removed

    async def scan_iter(self, match: str = "*"):
        for key in list(self.store):
            if fnmatch.fnmatch(key, match):
                yield key

    async def ping(self) -> bool:
        return True


# ══════════════════════════════════════════════════════════════════════════
# Database
# ══════════════════════════════════════════════════════════════════════════


@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Fresh in-memory database with all tables created."""
    eng = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest_asyncio.fixture
async def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Direct database session for seeding and service calls."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


# ══════════════════════════════════════════════════════════════════════════
# HTTP
# ══════════════════════════════════════════════════════════════════════════


@asynccontextmanager
async def _app_client(session_factory, cache: FakeRedis | None) -> AsyncGenerator[AsyncClient, None]:
    from tourist.main import create_app

    app = create_app()

    async def _session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    async def _cache() -> AsyncGenerator[FakeRedis | None, None]:
        yield cache

    app.dependency_overrides[get_session] = _session
    app.dependency_overrides[get_cache] = _cache

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client against the app, wired to the test database, no cache."""
    async with _app_client(session_factory, None) as ac:
        yield ac


@pytest_asyncio.fixture
async def cached_client(session_factory, fake_redis) -> AsyncGenerator[AsyncClient, None]:
    """Same as ``client`` but with the leaderboard cache backed by ``fake_redis``."""
    async with _app_client(session_factory, fake_redis) as ac:
        yield ac


def auth_headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id, user.email)}"}


# ══════════════════════════════════════════════════════════════════════════
# Data helpers
# ══════════════════════════════════════════════════════════════════════════


async def create_user(
    db: AsyncSession,
    email: str,
    name: str | None = None,
    tier: str = "premium",
    status: str = "active",
    user_id: str | None = None,
) -> User:
    """Create a test user (premium/active unless told otherwise)."""
    user = User(
        email=email,
        name=name,
        subscription_tier=tier,
        subscription_status=status,
    )
    if user_id is not None:
        user.id = user_id
    db.add(user)
    await db.flush()
    return user


async def create_location_tree(
    db: AsyncSession,
    attractions_per_city: int = 4,
    cities_per_country: int = 2,
    prefix: str = "eu",
) -> dict:
    """One continent with two countries, each with ``cities_per_country`` cities.

    Returns ids keyed by level plus attractions grouped per city id.
    """
    continent = Continent(id=f"{prefix}-continent", name="Europe")
    db.add(continent)
    tree: dict = {"continent": continent, "countries": [], "cities": [], "attractions": {}}

    for c in range(2):
        country = Country(id=f"{prefix}-country-{c}", name=f"Country {c}", continent_id=continent.id)
        db.add(country)
        tree["countries"].append(country)
        for k in range(cities_per_country):
            city = City(id=f"{prefix}-city-{c}-{k}", name=f"City {c}-{k}", country_id=country.id)
            db.add(city)
            tree["cities"].append(city)
            tree["attractions"][city.id] = []
            for a in range(attractions_per_city):
                attraction = Attraction(id=f"{city.id}-attr-{a:03d}", name=f"Sight {a}", city_id=city.id)
                db.add(attraction)
                tree["attractions"][city.id].append(attraction)

    await db.flush()
    return tree


async def create_attractions(db: AsyncSession, count: int, city_id: str = "pool-city") -> list[Attraction]:
    """A single city holding ``count`` attractions (for leaderboard volume)."""
    continent = Continent(id=f"{city_id}-continent", name="Pool Continent")
    country = Country(id=f"{city_id}-country", name="Pool Country", continent_id=continent.id)
    city = City(id=city_id, name="Pool City", country_id=country.id)
    db.add_all([continent, country, city])
    attractions = [Attraction(id=f"{city_id}-a{i:04d}", name=f"A{i}", city_id=city_id) for i in range(count)]
    db.add_all(attractions)
    await db.flush()
    return attractions


async def add_visits(
    db: AsyncSession,
    user: User,
    attractions: list[Attraction],
    verified: bool = True,
    start: datetime = BASE_DATE,
) -> list[Visit]:
    """One visit per attraction, one day apart starting at ``start``."""
    visits = [
        Visit(
            user_id=user.id,
            attraction_id=attraction.id,
            is_verified=verified,
            visit_date=start + timedelta(days=i),
        )
        for i, attraction in enumerate(attractions)
    ]
    db.add_all(visits)
    await db.flush()
    return visits
