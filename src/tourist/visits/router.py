"""Visit API endpoints — 2 routes, authenticated."""

from __future__ import annotations

import redis.asyncio as aioredis
from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from tourist.auth.dependencies import get_current_user
from tourist.database import get_session
from tourist.db.models import User
from tourist.dependencies import get_cache
from tourist.visits.schemas import RecordVisitRequest, RecordVisitResponse
from tourist.visits.service import record_visit, remove_visit

router = APIRouter(prefix="/api/v1/visits", tags=["Visits"])


@router.post("", response_model=RecordVisitResponse, status_code=201)
async def mark_visited(
    body: RecordVisitRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
    redis: aioredis.Redis | None = Depends(get_cache),
):
    """Mark an attraction as visited."""
    result = await record_visit(
        db,
        redis,
        user.id,
        body.attraction_id,
        visit_date=body.visit_date,
    )
    return RecordVisitResponse(**result)


@router.delete("/{attraction_id}", status_code=204)
async def unmark_visited(
    attraction_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
    redis: aioredis.Redis | None = Depends(get_cache),
) -> Response:
    """Remove the visit to an attraction."""
    await remove_visit(db, redis, user.id, attraction_id)
    return Response(status_code=204)
