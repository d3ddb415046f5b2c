"""Pydantic response models for leaderboard endpoints."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel

RankBadge = Literal["gold_champion", "silver_explorer", "bronze_voyager", "elite_traveler", "rising_star"]


class LeaderboardEntryResponse(BaseModel):
    rank: int
    user_id: str
    display_name: str
    avatar_url: str | None = None
    verified_visits: int
    badge: RankBadge | None = None


class UserRankStatsResponse(BaseModel):
    rank: int | None = None  # None when not eligible or no verified visits
    verified_visits: int
    total_visits: int
    badge: RankBadge | None = None
    is_eligible: bool  # premium + active subscription


class LeaderboardResponse(BaseModel):
    leaderboard: list[LeaderboardEntryResponse]
    current_user: UserRankStatsResponse | None = None
    total_participants: int


class TopUsersResponse(BaseModel):
    leaderboard: list[LeaderboardEntryResponse]


class RankBadgeInfo(BaseModel):
    id: RankBadge
    name: str
    emoji: str
    description: str
    position: str


class RankBadgeInfoResponse(BaseModel):
    badges: list[RankBadgeInfo]
