"""Booking settings, weekly availability rules and blackouts."""
from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from mediabook.models import AvailabilityRule, Blackout, BookingSettings
from mediabook.schemas.availability import (
    AvailabilityRuleCreate,
    BlackoutCreate,
    BookingSettingsUpdate,
)
from mediabook.services.booking_errors import BookingNotConfiguredError


async def get_booking_settings(
    session: AsyncSession, *, account_id: uuid.UUID
) -> BookingSettings | None:
    stmt = select(BookingSettings).where(BookingSettings.account_id == account_id)
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def require_booking_settings(
    session: AsyncSession, *, account_id: uuid.UUID
) -> BookingSettings:
    settings = await get_booking_settings(session, account_id=account_id)
    if settings is None:
        raise BookingNotConfiguredError()
    return settings


async def upsert_booking_settings(
    session: AsyncSession, *, account_id: uuid.UUID, payload: BookingSettingsUpdate
) -> BookingSettings:
    settings = await get_booking_settings(session, account_id=account_id)
    if settings is None:
        settings = BookingSettings(account_id=account_id)
        session.add(settings)
    for key, value in payload.model_dump().items():
        setattr(settings, key, value)
    await session.commit()
    await session.refresh(settings)
    return settings


async def list_rules(
    session: AsyncSession, *, account_id: uuid.UUID, active_only: bool = False
) -> list[AvailabilityRule]:
    stmt = select(AvailabilityRule).where(AvailabilityRule.account_id == account_id)
    if active_only:
        stmt = stmt.where(AvailabilityRule.active.is_(True))
    stmt = stmt.order_by(
        AvailabilityRule.day_of_week.asc(), AvailabilityRule.start_minutes.asc()
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def get_rule(
    session: AsyncSession, *, account_id: uuid.UUID, rule_id: uuid.UUID
) -> AvailabilityRule | None:
    stmt = select(AvailabilityRule).where(
        AvailabilityRule.id == rule_id, AvailabilityRule.account_id == account_id
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def create_rule(
    session: AsyncSession, *, account_id: uuid.UUID, payload: AvailabilityRuleCreate
) -> AvailabilityRule:
    rule = AvailabilityRule(account_id=account_id, **payload.model_dump())
    session.add(rule)
    await session.commit()
    await session.refresh(rule)
    return rule


async def update_rule(
    session: AsyncSession, *, rule: AvailabilityRule, payload: AvailabilityRuleCreate
) -> AvailabilityRule:
    for key, value in payload.model_dump().items():
        setattr(rule, key, value)
    await session.commit()
    await session.refresh(rule)
    return rule


async def delete_rule(session: AsyncSession, *, rule: AvailabilityRule) -> None:
    await session.delete(rule)
    await session.commit()


async def list_blackouts(
    session: AsyncSession,
    *,
    account_id: uuid.UUID,
    overlapping_start: datetime | None = None,
    overlapping_end: datetime | None = None,
) -> list[Blackout]:
    """Blackouts of an account, optionally only those touching a window."""
    stmt = select(Blackout).where(Blackout.account_id == account_id)
    if overlapping_start is not None:
        stmt = stmt.where(Blackout.end_at > overlapping_start)
    if overlapping_end is not None:
        stmt = stmt.where(Blackout.start_at < overlapping_end)
    stmt = stmt.order_by(Blackout.start_at.asc())
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def get_blackout(
    session: AsyncSession, *, account_id: uuid.UUID, blackout_id: uuid.UUID
) -> Blackout | None:
    stmt = select(Blackout).where(
        Blackout.id == blackout_id, Blackout.account_id == account_id
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def create_blackout(
    session: AsyncSession, *, account_id: uuid.UUID, payload: BlackoutCreate
) -> Blackout:
    blackout = Blackout(account_id=account_id, **payload.model_dump())
    session.add(blackout)
    await session.commit()
    await session.refresh(blackout)
    return blackout


async def delete_blackout(session: AsyncSession, *, blackout: Blackout) -> None:
    await session.delete(blackout)
    await session.commit()
