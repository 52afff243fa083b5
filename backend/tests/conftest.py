"""Test fixtures for the booking backend."""
from __future__ import annotations

import os
import uuid
from collections.abc import AsyncIterator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine

os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test.db")

from mediabook.core.config import get_settings
from mediabook.core.security import get_password_hash
from mediabook.db.base import Base
from mediabook.db.session import dispose_engine, get_sessionmaker
from mediabook.main import app
from mediabook.models import (
    Account,
    AvailabilityRule,
    BookingSettings,
    Service,
    ServiceCategory,
    Tax,
    User,
    UserRole,
    UserStatus,
)


@pytest.fixture(scope="session")
def db_url(tmp_path_factory: pytest.TempPathFactory) -> str:
    """Provide a temporary SQLite database URL for the test session."""
    db_path = tmp_path_factory.mktemp("db") / "test.db"
    return f"sqlite+aiosqlite:///{db_path}"


@pytest_asyncio.fixture()
async def reset_database(db_url: str) -> AsyncIterator[None]:
    """Drop and recreate the database schema for an isolated test."""
    os.environ["DATABASE_URL"] = db_url
    get_settings.cache_clear()
    get_settings()

    await dispose_engine(db_url)
    engine = create_async_engine(db_url, future=True)
    async with engine.begin() as connection:
        await connection.run_sync(Base.metadata.drop_all)
        await connection.run_sync(Base.metadata.create_all)
    await engine.dispose()
    yield
    await dispose_engine(db_url)


@pytest_asyncio.fixture()
async def app_context(
    reset_database: AsyncIterator[None], db_url: str
) -> AsyncIterator[dict[str, object]]:
    """Yield an async client and a seeded studio account.

    The account has a 5% tax, two taxed services (100.00 and 50.00), booking
    settings in UTC with a 15 minute default buffer, and 9:00-17:00 hours on
    every day of the week.
    """
    sessionmaker = get_sessionmaker(db_url)
    admin_password = "Passw0rd!"

    async with sessionmaker() as session:
        account = Account(
            name="Test Studio",
            slug=f"studio-{uuid.uuid4().hex[:8]}",
            contact_email="studio@example.com",
        )
        session.add(account)
        await session.flush()

        admin = User(
            account_id=account.id,
            email="admin@example.com",
            hashed_password=get_password_hash(admin_password),
            first_name="Avery",
            last_name="Admin",
            role=UserRole.ADMIN,
            status=UserStatus.ACTIVE,
        )
        staff = User(
            account_id=account.id,
            email="staff@example.com",
            hashed_password=get_password_hash(admin_password),
            first_name="Sky",
            last_name="Staff",
            role=UserRole.STAFF,
            status=UserStatus.ACTIVE,
        )
        session.add_all([admin, staff])

        session.add(
            BookingSettings(
                account_id=account.id,
                time_zone="UTC",
                lead_time_min=0,
                max_advance_days=60,
                default_buffer_min=15,
            )
        )
        for day in range(7):
            session.add(
                AvailabilityRule(
                    account_id=account.id,
                    day_of_week=day,
                    start_minutes=9 * 60,
                    end_minutes=17 * 60,
                )
            )

        tax = Tax(account_id=account.id, name="GST", rate_bps=500)
        category = ServiceCategory(
            account_id=account.id,
            name="Photography",
            slug="photography",
            description="Listing photography",
        )
        session.add_all([tax, category])
        await session.flush()

        photos = Service(
            account_id=account.id,
            category_id=category.id,
            name="HDR Photos",
            slug="hdr-photos",
            price_cents=10000,
            duration_min=60,
        )
        photos.taxes = [tax]
        drone = Service(
            account_id=account.id,
            category_id=category.id,
            name="Drone Photos",
            slug="drone-photos",
            price_cents=5000,
            duration_min=30,
        )
        drone.taxes = [tax]
        session.add_all([photos, drone])
        await session.commit()

        context = {
            "account_id": account.id,
            "account_slug": account.slug,
            "admin_email": admin.email,
            "admin_password": admin_password,
            "staff_email": staff.email,
            "staff_password": admin_password,
            "tax_id": tax.id,
            "category_id": category.id,
            "photos_id": photos.id,
            "drone_id": drone.id,
        }

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        context["client"] = client
        yield context
