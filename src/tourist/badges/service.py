"""Location badge progress: city, country and continent completion.

Progress counts every visit, verified or not; verification only matters for
the leaderboard. A user holds one badge per location, at the highest tier the
location's completion reaches. Nothing here is persisted: badges are derived
from the visits table on every call.
"""

from __future__ import annotations

from datetime import datetime

import structlog
from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from tourist.badges.tiers import (
    LOCATION_TYPES,
    TIER_ORDER,
    compute_progress_percent,
    next_tier,
    progress_to_next_tier,
    tier_for_progress,
    visits_needed_for_tier,
)
from tourist.db.models import Attraction, City, Continent, Country, User, Visit
from tourist.errors import InvalidArgumentError, NotFoundError, translate_store_errors

logger = structlog.get_logger()

LOCATION_MODELS: dict[str, type[City] | type[Country] | type[Continent]] = {
    "city": City,
    "country": Country,
    "continent": Continent,
}


def _attractions_in(location_type: str, location_id: str) -> Select:
    """Ids of every attraction under a location."""
    stmt = select(Attraction.id)
    if location_type == "city":
        return stmt.where(Attraction.city_id == location_id)
    stmt = stmt.join(City, Attraction.city_id == City.id)
    if location_type == "country":
        return stmt.where(City.country_id == location_id)
    return stmt.join(Country, City.country_id == Country.id).where(Country.continent_id == location_id)


async def _require_user(db: AsyncSession, user_id: str) -> User:
    user = await db.get(User, user_id)
    if user is None:
        msg = f"User {user_id} not found"
        raise NotFoundError(msg)
    return user


async def _compute_progress(
    db: AsyncSession,
    user_id: str,
    location_type: str,
    location_id: str,
    location_name: str,
) -> dict:
    subtree = _attractions_in(location_type, location_id)

    total_result = await db.execute(select(func.count()).select_from(subtree.subquery()))
    total_count = int(total_result.scalar_one())

    visited_result = await db.execute(
        select(func.count(func.distinct(Visit.attraction_id))).where(
            Visit.user_id == user_id,
            Visit.attraction_id.in_(subtree),
        )
    )
    visited_count = int(visited_result.scalar_one())

    progress_percent = compute_progress_percent(visited_count, total_count)
    current_tier = tier_for_progress(progress_percent)
    return {
        "location_id": location_id,
        "location_name": location_name,
        "location_type": location_type,
        "visited_count": visited_count,
        "total_count": total_count,
        "progress_percent": progress_percent,
        "current_tier": current_tier,
        "next_tier": next_tier(current_tier),
        "progress_to_next_tier": progress_to_next_tier(progress_percent, current_tier),
    }


@translate_store_errors
async def get_progress(
    db: AsyncSession,
    user_id: str,
    location_type: str,
    location_id: str,
) -> dict:
    """Badge progress for one user in one city, country or continent."""
    await _require_user(db, user_id)

    model = LOCATION_MODELS.get(location_type)
    if model is None:
        msg = f"Unknown location type: {location_type}"
        raise NotFoundError(msg)
    location = await db.get(model, location_id)
    if location is None:
        msg = f"{location_type.capitalize()} {location_id} not found"
        raise NotFoundError(msg)

    return await _compute_progress(db, user_id, location_type, location.id, location.name)


async def _visited_locations(db: AsyncSession, user_id: str) -> dict[str, dict[str, str]]:
    """Every city, country and continent holding at least one of the user's visits."""
    result = await db.execute(
        select(
            City.id.label("city_id"),
            City.name.label("city_name"),
            Country.id.label("country_id"),
            Country.name.label("country_name"),
            Continent.id.label("continent_id"),
            Continent.name.label("continent_name"),
        )
        .select_from(Visit)
        .join(Attraction, Visit.attraction_id == Attraction.id)
        .join(City, Attraction.city_id == City.id)
        .join(Country, City.country_id == Country.id)
        .join(Continent, Country.continent_id == Continent.id)
        .where(Visit.user_id == user_id)
        .distinct()
    )

    locations: dict[str, dict[str, str]] = {location_type: {} for location_type in LOCATION_TYPES}
    for row in result:
        locations["city"][row.city_id] = row.city_name
        locations["country"][row.country_id] = row.country_name
        locations["continent"][row.continent_id] = row.continent_name
    return locations


async def _all_progress(db: AsyncSession, user_id: str) -> dict[str, list[dict]]:
    locations = await _visited_locations(db, user_id)

    progress: dict[str, list[dict]] = {}
    for location_type in LOCATION_TYPES:
        items = [
            await _compute_progress(db, user_id, location_type, location_id, name)
            for location_id, name in locations[location_type].items()
        ]
        items.sort(key=lambda p: (-p["progress_percent"], p["location_id"]))
        progress[location_type] = items
    return progress


@translate_store_errors
async def get_all_progress(db: AsyncSession, user_id: str) -> dict[str, list[dict]]:
    """Progress for every location the user has touched, keyed cities/countries/continents."""
    await _require_user(db, user_id)
    progress = await _all_progress(db, user_id)
    return {
        "cities": progress["city"],
        "countries": progress["country"],
        "continents": progress["continent"],
    }


async def _earned_at(db: AsyncSession, user_id: str, progress: dict) -> datetime | None:
    """Date of the visit that pushed the user over the current tier's threshold."""
    needed = visits_needed_for_tier(progress["current_tier"], progress["total_count"])
    subtree = _attractions_in(progress["location_type"], progress["location_id"])
    result = await db.execute(
        select(Visit.visit_date)
        .where(Visit.user_id == user_id, Visit.attraction_id.in_(subtree))
        .order_by(Visit.visit_date.asc(), Visit.id.asc())
        .offset(needed - 1)
        .limit(1)
    )
    return result.scalar_one_or_none()


async def _badge_from_progress(db: AsyncSession, user_id: str, item: dict) -> dict:
    return {
        "location_id": item["location_id"],
        "location_name": item["location_name"],
        "location_type": item["location_type"],
        "tier": item["current_tier"],
        "earned_at": await _earned_at(db, user_id, item),
        "visited_count": item["visited_count"],
        "total_count": item["total_count"],
        "progress_percent": item["progress_percent"],
    }


async def _earned_badges(db: AsyncSession, user_id: str) -> list[dict]:
    """One badge per location with a tier, newest first."""
    progress = await _all_progress(db, user_id)

    badges = [
        await _badge_from_progress(db, user_id, item)
        for location_type in LOCATION_TYPES
        for item in progress[location_type]
        if item["current_tier"] is not None
    ]

    badges.sort(
        key=lambda b: (b["earned_at"] is not None, b["earned_at"] or 0, b["location_id"]),
        reverse=True,
    )
    return badges


@translate_store_errors
async def get_earned_badges(
    db: AsyncSession,
    user_id: str,
    location_type: str | None = None,
    tier: str | None = None,
) -> list[dict]:
    """Earned location badges, optionally filtered by location type and tier."""
    if location_type is not None and location_type not in LOCATION_TYPES:
        msg = f"Unknown location type: {location_type}"
        raise InvalidArgumentError(msg)
    if tier is not None and tier not in TIER_ORDER:
        msg = f"Unknown badge tier: {tier}"
        raise InvalidArgumentError(msg)

    await _require_user(db, user_id)
    badges = await _earned_badges(db, user_id)
    return [
        b for b in badges
        if (location_type is None or b["location_type"] == location_type)
        and (tier is None or b["tier"] == tier)
    ]


@translate_store_errors
async def get_badge_timeline(db: AsyncSession, user_id: str, limit: int = 20) -> list[dict]:
    """The ``limit`` most recently earned badges."""
    if limit < 1:
        msg = f"limit must be a positive integer, got {limit}"
        raise InvalidArgumentError(msg)
    await _require_user(db, user_id)
    badges = await _earned_badges(db, user_id)
    return badges[:limit]


@translate_store_errors
async def get_summary(db: AsyncSession, user_id: str) -> dict:
    """Badge counts by tier and by location type, plus the most recent badge."""
    await _require_user(db, user_id)
    badges = await _earned_badges(db, user_id)

    badges_by_tier = dict.fromkeys(TIER_ORDER, 0)
    badges_by_type = dict.fromkeys(LOCATION_TYPES, 0)
    for badge in badges:
        badges_by_tier[badge["tier"]] += 1
        badges_by_type[badge["location_type"]] += 1

    logger.debug("badge_summary_computed", user_id=user_id, total=len(badges))
    return {
        "total_badges": len(badges),
        "badges_by_tier": badges_by_tier,
        "badges_by_type": badges_by_type,
        "most_recent_badge": badges[0] if badges else None,
    }


@translate_store_errors
async def badge_changes(
    db: AsyncSession,
    user_id: str,
    before: list[dict],
    after: list[dict],
) -> list[dict]:
    """Badges held after a write, each flagged ``is_new`` when its tier changed.

    ``before`` and ``after`` are progress snapshots of the same locations, in
    the same order. Locations still below bronze are left out.
    """
    changes = []
    for old, new in zip(before, after, strict=True):
        if new["current_tier"] is None:
            continue
        badge = await _badge_from_progress(db, user_id, new)
        badge["is_new"] = new["current_tier"] != old["current_tier"]
        changes.append(badge)
    return changes
