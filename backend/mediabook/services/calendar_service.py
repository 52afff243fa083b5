"""Stored Google Calendar connection per account."""

from __future__ import annotations

import logging
import uuid

import httpx
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from mediabook.core.settings import GoogleSettings, get_google_settings
from mediabook.integrations.google_calendar import (
    CalendarCredentials,
    GoogleCalendarClient,
)
from mediabook.models import CalendarConnection
from mediabook.schemas.integrations import GoogleCalendarConnect
from mediabook.services.availability_service import get_booking_settings

logger = logging.getLogger(__name__)


async def get_connection(
    session: AsyncSession, *, account_id: uuid.UUID
) -> CalendarConnection | None:
    stmt = select(CalendarConnection).where(CalendarConnection.account_id == account_id)
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def save_connection(
    session: AsyncSession, *, account_id: uuid.UUID, payload: GoogleCalendarConnect
) -> CalendarConnection:
    """Store tokens and, when given, the target calendar id."""
    connection = await get_connection(session, account_id=account_id)
    if connection is None:
        connection = CalendarConnection(account_id=account_id, provider="google")
        session.add(connection)
    connection.access_token = payload.access_token
    connection.refresh_token = payload.refresh_token
    connection.expires_at = payload.expires_at
    connection.scope = payload.scope
    if payload.calendar_id is not None:
        settings = await get_booking_settings(session, account_id=account_id)
        if settings is not None:
            settings.google_calendar_id = payload.calendar_id or None
    await session.commit()
    await session.refresh(connection)
    return connection


async def delete_connection(session: AsyncSession, *, account_id: uuid.UUID) -> bool:
    connection = await get_connection(session, account_id=account_id)
    if connection is None:
        return False
    await session.delete(connection)
    await session.commit()
    return True


async def open_client(
    session: AsyncSession,
    *,
    account_id: uuid.UUID,
    transport: httpx.AsyncBaseTransport | None = None,
    google: GoogleSettings | None = None,
) -> GoogleCalendarClient | None:
    """Build a calendar client for the account, or ``None`` when not connected."""
    connection = await get_connection(session, account_id=account_id)
    if connection is None:
        return None
    google = google or get_google_settings()
    if not google.enabled:
        logger.warning("Google OAuth client not configured; calendar sync skipped")
        return None
    credentials = CalendarCredentials(
        access_token=connection.access_token,
        refresh_token=connection.refresh_token,
        expires_at=connection.expires_at,
        scope=connection.scope,
    )
    return GoogleCalendarClient(google, credentials, transport=transport)


async def persist_refreshed_tokens(
    session: AsyncSession, *, account_id: uuid.UUID, client: GoogleCalendarClient
) -> None:
    if not client.refreshed:
        return
    connection = await get_connection(session, account_id=account_id)
    if connection is None:
        return
    credentials = client.credentials
    connection.access_token = credentials.access_token
    connection.refresh_token = credentials.refresh_token
    connection.expires_at = credentials.expires_at
    connection.scope = credentials.scope
    await session.commit()
