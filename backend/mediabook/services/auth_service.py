"""Authentication service helpers."""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from mediabook.core.security import create_access_token, verify_password
from mediabook.models.user import User, UserStatus
from mediabook.services import user_service


async def authenticate_user(
    session: AsyncSession, email: str, password: str
) -> User | None:
    """Validate credentials and return a user if correct."""
    user = await user_service.get_user_by_email(session, email=email)
    if user is None:
        return None
    if user.status != UserStatus.ACTIVE:
        return None
    if not verify_password(password, user.hashed_password):
        return None
    return user


async def create_access_token_for_user(user: User) -> str:
    """Generate a JWT carrying the user's role and account."""
    return create_access_token(
        str(user.id), role=user.role.value, account_id=str(user.account_id)
    )
