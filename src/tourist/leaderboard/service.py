"""Leaderboard service: global ranking by verified visits.

Only premium users with an active subscription and at least one verified
visit are ranked. Ordering is verified visit count descending, then user id
ascending, so ties resolve the same way on every call.

Ranks are recomputed per request from the visits table; the optional Redis
read-model cache in ``tourist.leaderboard.cache`` only short-circuits the
public page.
"""

from __future__ import annotations

import redis.asyncio as aioredis
import structlog
from sqlalchemy import Select, and_, case, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from tourist.config import get_settings
from tourist.db.models import User, Visit
from tourist.errors import InvalidArgumentError, NotFoundError, translate_store_errors
from tourist.leaderboard.cache import get_cached_leaderboard, set_cached_leaderboard
from tourist.leaderboard.tiers import get_display_name, tier_for_rank

logger = structlog.get_logger()

# (user_id, verified_visits) in rank order
Ordering = list[tuple[str, int]]


def _eligible_ranking_query() -> Select:
    """Eligible users with their verified visit counts, in rank order."""
    verified = func.count(Visit.id).label("verified_visits")
    return (
        select(User.id, verified)
        .join(Visit, and_(Visit.user_id == User.id, Visit.is_verified.is_(True)))
        .where(
            User.subscription_tier == "premium",
            User.subscription_status == "active",
        )
        .group_by(User.id)
        .order_by(verified.desc(), User.id.asc())
    )


def _validate_limit(limit: int) -> int:
    if limit < 1:
        msg = f"limit must be a positive integer, got {limit}"
        raise InvalidArgumentError(msg)
    return min(limit, get_settings().leaderboard_max_limit)


async def _scan_ordering(db: AsyncSession, limit: int | None = None) -> Ordering:
    stmt = _eligible_ranking_query()
    if limit is not None:
        stmt = stmt.limit(limit)
    result = await db.execute(stmt)
    return [(row[0], int(row[1])) for row in result]


async def _count_participants(db: AsyncSession) -> int:
    subq = _eligible_ranking_query().order_by(None).subquery()
    result = await db.execute(select(func.count()).select_from(subq))
    return int(result.scalar_one())


async def _build_entries(db: AsyncSession, ordering: Ordering) -> list[dict]:
    """Attach display profiles to ranked rows; rank is the 1-based position."""
    if not ordering:
        return []

    user_ids = [user_id for user_id, _ in ordering]
    result = await db.execute(
        select(User.id, User.name, User.email, User.avatar_url).where(User.id.in_(user_ids))
    )
    profiles = {row.id: row for row in result}

    entries = []
    for index, (user_id, verified_visits) in enumerate(ordering):
        profile = profiles[user_id]
        rank = index + 1
        entries.append({
            "rank": rank,
            "user_id": user_id,
            "display_name": get_display_name(profile.name, profile.email),
            "avatar_url": profile.avatar_url,
            "verified_visits": verified_visits,
            "badge": tier_for_rank(rank),
        })
    return entries


@translate_store_errors
async def get_leaderboard(
    db: AsyncSession,
    limit: int = 50,
    requesting_user_id: str | None = None,
    redis: aioredis.Redis | None = None,
) -> dict:
    """Top ``limit`` eligible users, participant total, and the requester's stats.

    With a requester, the entries, the total and the requester's rank all come
    from one ordered scan. Without one, a limited query plus a count query is
    used. A cached page (when Redis is supplied) replaces both; the
    requester's stats are then read separately and may reflect a newer
    snapshot than the cached page.
    """
    limit = _validate_limit(limit)

    cached = await get_cached_leaderboard(redis, limit) if redis is not None else None
    if cached is not None:
        current_user = None
        if requesting_user_id is not None:
            current_user = await get_user_rank_stats(db, requesting_user_id)
        return {
            "entries": cached["entries"],
            "current_user": current_user,
            "total_participants": cached["total_participants"],
        }

    current_user = None
    if requesting_user_id is not None:
        ordering = await _scan_ordering(db)
        total_participants = len(ordering)
        entries = await _build_entries(db, ordering[:limit])
        current_user = await get_user_rank_stats(db, requesting_user_id, ordering=ordering)
    else:
        ordering = await _scan_ordering(db, limit)
        total_participants = await _count_participants(db)
        entries = await _build_entries(db, ordering)

    logger.debug("leaderboard_computed", limit=limit, total_participants=total_participants)

    if redis is not None:
        await set_cached_leaderboard(redis, limit, entries, total_participants)

    return {
        "entries": entries,
        "current_user": current_user,
        "total_participants": total_participants,
    }


@translate_store_errors
async def get_user_rank_stats(
    db: AsyncSession,
    user_id: str,
    ordering: Ordering | None = None,
) -> dict:
    """A single user's rank, visit counts, badge and eligibility.

    Rank is the user's position in ``ordering`` when supplied, otherwise one
    plus the number of eligible users ahead of them in the same order: more
    verified visits, or as many and a smaller user id.
    """
    user = await db.get(User, user_id)
    if user is None:
        msg = f"User {user_id} not found"
        raise NotFoundError(msg)

    counts = await db.execute(
        select(
            func.count(Visit.id),
            func.sum(case((Visit.is_verified.is_(True), 1), else_=0)),
        ).where(Visit.user_id == user_id)
    )
    total_visits, verified_visits = counts.one()
    total_visits = int(total_visits or 0)
    verified_visits = int(verified_visits or 0)

    is_eligible = user.is_premium_active
    if not is_eligible or verified_visits == 0:
        return {
            "rank": None,
            "verified_visits": verified_visits,
            "total_visits": total_visits,
            "badge": None,
            "is_eligible": is_eligible,
        }

    rank = None
    if ordering is not None:
        for index, (ranked_id, _) in enumerate(ordering):
            if ranked_id == user_id:
                rank = index + 1
                break

    if rank is None:
        ranked = _eligible_ranking_query().order_by(None).subquery()
        ahead = or_(
            ranked.c.verified_visits > verified_visits,
            and_(ranked.c.verified_visits == verified_visits, ranked.c.id < user_id),
        )
        result = await db.execute(select(func.count()).select_from(ranked).where(ahead))
        rank = int(result.scalar_one()) + 1

    return {
        "rank": rank,
        "verified_visits": verified_visits,
        "total_visits": total_visits,
        "badge": tier_for_rank(rank),
        "is_eligible": True,
    }


async def get_top_users(
    db: AsyncSession,
    n: int = 10,
    redis: aioredis.Redis | None = None,
) -> list[dict]:
    """First ``n`` leaderboard entries (quick preview)."""
    result = await get_leaderboard(db, limit=n, redis=redis)
    return result["entries"]
