"""Visit recording: the only write path that moves rankings and badges.

One visit per user per attraction (UNIQUE constraint). Every successful write
invalidates the cached leaderboard pages.
"""

from __future__ import annotations

from datetime import datetime, timezone

import redis.asyncio as aioredis
import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tourist.badges.service import badge_changes, get_progress
from tourist.db.models import Attraction, City, Country, User, Visit
from tourist.errors import ConflictError, NotFoundError, translate_store_errors
from tourist.leaderboard.cache import invalidate_leaderboard_cache

logger = structlog.get_logger()


def _visit_to_dict(visit: Visit) -> dict:
    return {
        "id": visit.id,
        "user_id": visit.user_id,
        "attraction_id": visit.attraction_id,
        "is_verified": visit.is_verified,
        "visit_date": visit.visit_date,
    }


@translate_store_errors
async def record_visit(
    db: AsyncSession,
    redis: aioredis.Redis | None,
    user_id: str,
    attraction_id: str,
    is_verified: bool = False,
    visit_date: datetime | None = None,
) -> dict:
    """Record a visit and return it with the badge progress it affects.

    Progress is reported for the attraction's city, country and continent.
    ``new_badges`` lists the badges held in those locations after the write,
    with ``is_new`` set where this visit raised the tier.
    """
    if await db.get(User, user_id) is None:
        msg = f"User {user_id} not found"
        raise NotFoundError(msg)

    attraction = await db.get(Attraction, attraction_id)
    if attraction is None:
        msg = f"Attraction {attraction_id} not found"
        raise NotFoundError(msg)

    city = await db.get(City, attraction.city_id)
    country = await db.get(Country, city.country_id)
    locations = [("city", city.id), ("country", country.id), ("continent", country.continent_id)]
    before = [await get_progress(db, user_id, kind, location_id) for kind, location_id in locations]

    visit = Visit(
        user_id=user_id,
        attraction_id=attraction_id,
        is_verified=is_verified,
        visit_date=visit_date or datetime.now(timezone.utc),
    )
    db.add(visit)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        msg = "Attraction already marked as visited"
        raise ConflictError(msg) from None

    logger.info(
        "visit_recorded",
        user_id=user_id,
        attraction_id=attraction_id,
        is_verified=is_verified,
    )
    await invalidate_leaderboard_cache(redis)

    progress = [await get_progress(db, user_id, kind, location_id) for kind, location_id in locations]
    new_badges = await badge_changes(db, user_id, before, progress)
    return {"visit": _visit_to_dict(visit), "progress": progress, "new_badges": new_badges}


@translate_store_errors
async def remove_visit(
    db: AsyncSession,
    redis: aioredis.Redis | None,
    user_id: str,
    attraction_id: str,
) -> None:
    """Delete the user's visit to an attraction."""
    result = await db.execute(
        select(Visit).where(Visit.user_id == user_id, Visit.attraction_id == attraction_id)
    )
    visit = result.scalar_one_or_none()
    if visit is None:
        msg = f"No visit to attraction {attraction_id}"
        raise NotFoundError(msg)

    await db.delete(visit)
    await db.commit()

    logger.info("visit_removed", user_id=user_id, attraction_id=attraction_id)
    await invalidate_leaderboard_cache(redis)
