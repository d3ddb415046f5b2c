"""Pydantic request/response models for visit endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from tourist.badges.schemas import BadgeProgressResponse, EarnedBadgeResponse


class RecordVisitRequest(BaseModel):
    # Self-reported visits are never verified; verification sets the flag server-side.
    attraction_id: str
    visit_date: datetime | None = None


class VisitResponse(BaseModel):
    id: str
    user_id: str
    attraction_id: str
    is_verified: bool
    visit_date: datetime


class VisitBadgeResponse(EarnedBadgeResponse):
    is_new: bool


class RecordVisitResponse(BaseModel):
    visit: VisitResponse
    progress: list[BadgeProgressResponse]
    new_badges: list[VisitBadgeResponse]
