"""Bootstrap helpers for default data."""

from __future__ import annotations

import logging

from sqlalchemy import select

from mediabook.core.config import get_settings
from mediabook.db.session import get_sessionmaker
from mediabook.models import Account, BookingSettings, User, UserRole, UserStatus
from mediabook.schemas.user import UserCreate
from mediabook.services.user_service import create_user

logger = logging.getLogger(__name__)

DEFAULT_ADMIN_FIRST = "Studio"
DEFAULT_ADMIN_LAST = "Admin"


async def ensure_default_admin() -> None:
    """Create the default studio account and admin when credentials are configured."""

    settings = get_settings()
    if not settings.default_admin_email or not settings.default_admin_password:
        logger.debug("Default admin credentials not configured; bootstrap skipped")
        return

    sessionmaker = get_sessionmaker(settings.database_url)
    async with sessionmaker() as session:
        existing = await session.execute(
            select(User).where(User.email == settings.default_admin_email.lower())
        )
        if existing.scalar_one_or_none() is not None:
            return

        account_result = await session.execute(
            select(Account).where(Account.slug == settings.default_account_slug)
        )
        account = account_result.scalar_one_or_none()
        if account is None:
            account = Account(
                name=settings.default_account_name,
                slug=settings.default_account_slug,
                contact_email=settings.default_admin_email.lower(),
            )
            session.add(account)
            await session.flush()
            session.add(BookingSettings(account_id=account.id))
            await session.commit()
            await session.refresh(account)

        payload = UserCreate(
            account_id=account.id,
            email=settings.default_admin_email,
            password=settings.default_admin_password,
            first_name=DEFAULT_ADMIN_FIRST,
            last_name=DEFAULT_ADMIN_LAST,
            role=UserRole.ADMIN,
            status=UserStatus.ACTIVE,
        )
        await create_user(session, payload)
        logger.info("Created default admin for account %s", account.slug)
