"""
Bearer-token resolution of the current user.

Sessions and logins are handled by the external auth service, which issues
HS256 JWTs whose `sub` claim is the user id. This module only verifies those
tokens and turns them into an explicit CurrentUser for service calls.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from venue_booking.core.config import get_settings
from venue_booking.core.logging import get_logger
from venue_booking.db.session import get_db
from venue_booking.db.unit_of_work import unit_of_work
from venue_booking.models.user import User
from venue_booking.schemas.user import CurrentUser

logger = get_logger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def create_access_token(data: dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    settings = get_settings()
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode["exp"] = expire
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> dict[str, Any]:
    """Decode and verify a JWT, raising JWTError on failure."""
    settings = get_settings()
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])


def _unauthenticated(detail: str = "Could not validate credentials") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> CurrentUser:
    if credentials is None:
        raise _unauthenticated("Not authenticated")

    try:
        payload = decode_access_token(credentials.credentials)
        user_id = int(payload["sub"])
    except (JWTError, KeyError, TypeError, ValueError):
        raise _unauthenticated()

    async with unit_of_work(db, "resolve_current_user", user_id=user_id):
        result = await db.execute(select(User.id, User.role, User.is_active).where(User.id == user_id))
        row = result.one_or_none()
    if row is None or not row.is_active:
        logger.warning("auth_rejected", user_id=user_id, reason="unknown_or_inactive")
        raise _unauthenticated()

    return CurrentUser(id=row.id, role=row.role)
