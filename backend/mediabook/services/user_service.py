"""User data access helpers."""
from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from mediabook.core.security import get_password_hash
from mediabook.models.user import User
from mediabook.schemas.user import UserCreate


async def get_user_by_email(session: AsyncSession, email: str) -> User | None:
    """Return a user by email address."""
    result = await session.execute(select(User).where(User.email == email.lower()))
    return result.scalar_one_or_none()


async def create_user(session: AsyncSession, payload: UserCreate) -> User:
    """Persist a new user with hashed password."""
    user = User(
        account_id=payload.account_id,
        email=payload.email.lower(),
        hashed_password=get_password_hash(payload.password),
        first_name=payload.first_name,
        last_name=payload.last_name,
        role=payload.role,
        status=payload.status,
    )
    session.add(user)
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise
    await session.refresh(user)
    return user
