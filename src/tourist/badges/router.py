"""Location badge API endpoints — 5 routes, all authenticated."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from tourist.auth.dependencies import get_current_user
from tourist.badges.schemas import (
    AllProgressResponse,
    BadgeProgressResponse,
    BadgeSummaryResponse,
    BadgeTier,
    BadgeTimelineResponse,
    EarnedBadgeResponse,
    LocationType,
    UserBadgesResponse,
)
from tourist.badges.service import (
    get_all_progress,
    get_badge_timeline,
    get_earned_badges,
    get_progress,
    get_summary,
)
from tourist.config import get_settings
from tourist.database import get_session
from tourist.db.models import User

router = APIRouter(prefix="/api/v1/badges", tags=["Badges"])


@router.get("", response_model=UserBadgesResponse)
async def my_badges(
    location_type: LocationType | None = Query(default=None, alias="locationType"),
    tier: BadgeTier | None = Query(default=None),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Earned location badges with a summary."""
    badges = await get_earned_badges(db, user.id, location_type=location_type, tier=tier)
    summary = await get_summary(db, user.id)
    return UserBadgesResponse(
        badges=[EarnedBadgeResponse(**b) for b in badges],
        summary=BadgeSummaryResponse(**summary),
    )


@router.get("/progress", response_model=AllProgressResponse)
async def all_progress(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Progress for every city, country and continent the user has visited."""
    return AllProgressResponse(**await get_all_progress(db, user.id))


@router.get("/progress/{location_type}/{location_id}", response_model=BadgeProgressResponse)
async def location_progress(
    location_type: LocationType,
    location_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Progress toward the badge tiers of one location."""
    return BadgeProgressResponse(**await get_progress(db, user.id, location_type, location_id))


@router.get("/timeline", response_model=BadgeTimelineResponse)
async def badge_timeline(
    limit: int | None = Query(default=None, ge=1, le=100),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Most recently earned badges."""
    if limit is None:
        limit = get_settings().badge_timeline_default_limit
    items = await get_badge_timeline(db, user.id, limit=limit)
    return BadgeTimelineResponse(items=[EarnedBadgeResponse(**b) for b in items], total=len(items))


@router.get("/summary", response_model=BadgeSummaryResponse)
async def badge_summary(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Badge counts by tier and location type."""
    return BadgeSummaryResponse(**await get_summary(db, user.id))
