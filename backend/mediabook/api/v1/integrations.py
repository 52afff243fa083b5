"""Google Calendar connection management."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from mediabook.api import deps
from mediabook.models.user import User
from mediabook.schemas.integrations import GoogleCalendarConnect, GoogleCalendarStatus
from mediabook.services import availability_service, calendar_service

router = APIRouter(prefix="/integrations/google-calendar")


async def _status(session: AsyncSession, user: User) -> GoogleCalendarStatus:
    connection = await calendar_service.get_connection(session, account_id=user.account_id)
    if connection is None:
        return GoogleCalendarStatus(connected=False)
    settings = await availability_service.get_booking_settings(
        session, account_id=user.account_id
    )
    return GoogleCalendarStatus(
        connected=True,
        calendar_id=settings.google_calendar_id if settings else None,
        expires_at=connection.expires_at,
        scope=connection.scope,
    )


@router.get("", response_model=GoogleCalendarStatus, summary="Calendar connection status")
async def get_status(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.require_admin)],
) -> GoogleCalendarStatus:
    return await _status(session, current_user)


@router.put("", response_model=GoogleCalendarStatus, summary="Connect Google Calendar")
async def connect(
    payload: GoogleCalendarConnect,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.require_admin)],
) -> GoogleCalendarStatus:
    await calendar_service.save_connection(
        session, account_id=current_user.account_id, payload=payload
    )
    return await _status(session, current_user)


@router.delete(
    "", status_code=status.HTTP_204_NO_CONTENT, summary="Disconnect Google Calendar"
)
async def disconnect(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.require_admin)],
) -> None:
    removed = await calendar_service.delete_connection(
        session, account_id=current_user.account_id
    )
    if not removed:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Calendar not connected"
        )
