"""Common API dependencies."""

from __future__ import annotations

import uuid
from collections.abc import AsyncGenerator
from typing import Annotated, Any

from fastapi import Depends, HTTPException, Request, Response, status
from fastapi.security import OAuth2PasswordBearer
from fastapi_limiter import FastAPILimiter
from fastapi_limiter.depends import RateLimiter
from jose import JWTError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from mediabook.core.config import get_settings
from mediabook.core.security import decode_access_token
from mediabook.db.session import get_session
from mediabook.models.user import User, UserStatus

settings = get_settings()

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.api_v1_prefix}/auth/token")

_SECONDS = {
    "second": 1,
    "seconds": 1,
    "minute": 60,
    "minutes": 60,
    "hour": 3600,
    "hours": 3600,
    "day": 86400,
    "days": 86400,
}


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Provide an async database session."""
    async for session in get_session():
        yield session


async def get_current_user(
    token: Annotated[str, Depends(oauth2_scheme)],
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> User:
    """Authenticate request via bearer token."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = decode_access_token(token)
    except JWTError as exc:
        raise credentials_exception from exc

    subject = payload.get("sub")
    if subject is None:
        raise credentials_exception

    try:
        user_id = uuid.UUID(subject)
    except (ValueError, TypeError) as exc:
        raise credentials_exception from exc

    result = await session.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None or user.status != UserStatus.ACTIVE:
        raise credentials_exception
    return user


async def get_current_active_user(
    current_user: Annotated[User, Depends(get_current_user)],
) -> User:
    """Ensure the current user is active."""
    return current_user


async def require_admin(
    current_user: Annotated[User, Depends(get_current_active_user)],
) -> User:
    """Only account admins may manage booking configuration."""
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions"
        )
    return current_user


def parse_rate(value: str, *, fallback: tuple[int, int]) -> tuple[int, int]:
    """Parse ``"20/minute"`` into ``(20, 60)``."""
    try:
        count_str, window_str = value.split("/", 1)
        count = int(count_str.strip())
    except ValueError:
        return fallback
    seconds = _SECONDS.get(window_str.strip().lower(), fallback[1])
    return count, seconds


def rate_limit(value: str, *, fallback: tuple[int, int]) -> Any:
    """Rate limit dependency; a no-op until the limiter is initialised."""
    limit = parse_rate(value, fallback=fallback)

    async def _dependency(request: Request, response: Response) -> None:
        if FastAPILimiter.redis is None:
            return None
        limiter = RateLimiter(times=limit[0], seconds=limit[1])
        await limiter(request, response)

    return Depends(_dependency)


LOGIN_RATE_LIMIT = rate_limit(settings.rate_limit_login, fallback=(10, 60))
DEFAULT_RATE_LIMIT = rate_limit(settings.rate_limit_default, fallback=(100, 60))
BOOKING_RATE_LIMIT = rate_limit(settings.rate_limit_booking, fallback=(20, 60))
