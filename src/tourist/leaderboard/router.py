"""Leaderboard API endpoints — 4 routes."""

from __future__ import annotations

import redis.asyncio as aioredis
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from tourist.auth.dependencies import get_current_user, get_optional_user
from tourist.config import get_settings
from tourist.database import get_session
from tourist.db.models import User
from tourist.dependencies import get_cache
from tourist.leaderboard.schemas import (
    LeaderboardEntryResponse,
    LeaderboardResponse,
    RankBadgeInfo,
    RankBadgeInfoResponse,
    TopUsersResponse,
    UserRankStatsResponse,
)
from tourist.leaderboard.service import get_leaderboard, get_top_users, get_user_rank_stats
from tourist.leaderboard.tiers import LEADERBOARD_BADGES

router = APIRouter(prefix="/api/v1/leaderboard", tags=["Leaderboard"])


# ── Public endpoints (optional auth adds the caller's position) ──


@router.get("", response_model=LeaderboardResponse)
async def leaderboard(
    limit: int | None = Query(default=None, ge=1, le=100),
    user: User | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_session),
    redis: aioredis.Redis | None = Depends(get_cache),
):
    """Global leaderboard of premium travellers by verified visits."""
    if limit is None:
        limit = get_settings().leaderboard_default_limit
    result = await get_leaderboard(
        db,
        limit=limit,
        requesting_user_id=user.id if user else None,
        redis=redis,
    )
    current = result["current_user"]
    return LeaderboardResponse(
        leaderboard=[LeaderboardEntryResponse(**e) for e in result["entries"]],
        current_user=UserRankStatsResponse(**current) if current else None,
        total_participants=result["total_participants"],
    )


@router.get("/top", response_model=TopUsersResponse)
async def top_users(
    db: AsyncSession = Depends(get_session),
    redis: aioredis.Redis | None = Depends(get_cache),
):
    """Quick preview of the top travellers."""
    entries = await get_top_users(db, get_settings().leaderboard_top_count, redis=redis)
    return TopUsersResponse(leaderboard=[LeaderboardEntryResponse(**e) for e in entries])


@router.get("/badges", response_model=RankBadgeInfoResponse)
async def rank_badges():
    """Display metadata for the rank badges."""
    return RankBadgeInfoResponse(badges=[RankBadgeInfo(**b) for b in LEADERBOARD_BADGES])


# ── Authenticated endpoints ──


@router.get("/me", response_model=UserRankStatsResponse)
async def my_rank(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Current user's rank, visit counts and badge."""
    stats = await get_user_rank_stats(db, user.id)
    return UserRankStatsResponse(**stats)
