"""Pydantic response models for location badge endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel

BadgeTier = Literal["bronze", "silver", "gold", "platinum"]
LocationType = Literal["city", "country", "continent"]


class BadgeProgressResponse(BaseModel):
    location_id: str
    location_name: str
    location_type: LocationType
    visited_count: int
    total_count: int
    progress_percent: float
    current_tier: BadgeTier | None = None
    next_tier: BadgeTier | None = None
    progress_to_next_tier: float


class AllProgressResponse(BaseModel):
    cities: list[BadgeProgressResponse]
    countries: list[BadgeProgressResponse]
    continents: list[BadgeProgressResponse]


class EarnedBadgeResponse(BaseModel):
    location_id: str
    location_name: str
    location_type: LocationType
    tier: BadgeTier
    earned_at: datetime | None = None
    visited_count: int
    total_count: int
    progress_percent: float


class BadgeSummaryResponse(BaseModel):
    total_badges: int
    badges_by_tier: dict[str, int]
    badges_by_type: dict[str, int]
    most_recent_badge: EarnedBadgeResponse | None = None


class UserBadgesResponse(BaseModel):
    badges: list[EarnedBadgeResponse]
    summary: BadgeSummaryResponse


class BadgeTimelineResponse(BaseModel):
    items: list[EarnedBadgeResponse]
    total: int
