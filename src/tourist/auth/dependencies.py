"""FastAPI authentication dependencies."""

from __future__ import annotations

import jwt
from fastapi import Depends, HTTPException, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from tourist.auth.jwt import verify_token
from tourist.database import get_session
from tourist.db.models import User

_bearer = HTTPBearer()
_optional_bearer = HTTPBearer(auto_error=False)


async def _resolve_user(token: str, db: AsyncSession) -> User:
    try:
        payload = verify_token(token, expected_type="access")
    except jwt.InvalidTokenError as e:
        raise HTTPException(status_code=401, detail=str(e)) from e

    user = await db.get(User, payload["sub"])
    if user is None:
        raise HTTPException(status_code=401, detail="User not found")
    return user


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Security(_bearer),
    db: AsyncSession = Depends(get_session),
) -> User:
    """Extract and verify the bearer JWT, return the User. Raises 401 on failure."""
    return await _resolve_user(credentials.credentials, db)


async def get_optional_user(
    credentials: HTTPAuthorizationCredentials | None = Security(_optional_bearer),
    db: AsyncSession = Depends(get_session),
) -> User | None:
    """Like get_current_user, but anonymous requests resolve to None.

    A token that is present but invalid is still rejected with 401.
    """
    if credentials is None:
        return None
    return await _resolve_user(credentials.credentials, db)
