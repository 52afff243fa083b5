"""Booking settings, weekly availability and blackout endpoints."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from mediabook.api import deps
from mediabook.models.user import User
from mediabook.schemas.availability import (
    AvailabilityRuleCreate,
    AvailabilityRuleRead,
    BlackoutCreate,
    BlackoutRead,
    BookingSettingsRead,
    BookingSettingsUpdate,
)
from mediabook.services import availability_service

router = APIRouter()


@router.get(
    "/booking-settings", response_model=BookingSettingsRead, summary="Get booking settings"
)
async def get_booking_settings(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.require_admin)],
) -> BookingSettingsRead:
    settings = await availability_service.get_booking_settings(
        session, account_id=current_user.account_id
    )
    if settings is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Booking settings not configured"
        )
    return BookingSettingsRead.model_validate(settings)


@router.put(
    "/booking-settings", response_model=BookingSettingsRead, summary="Save booking settings"
)
async def put_booking_settings(
    payload: BookingSettingsUpdate,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.require_admin)],
) -> BookingSettingsRead:
    settings = await availability_service.upsert_booking_settings(
        session, account_id=current_user.account_id, payload=payload
    )
    return BookingSettingsRead.model_validate(settings)


@router.get(
    "/availability-rules",
    response_model=list[AvailabilityRuleRead],
    summary="List availability rules",
)
async def list_rules(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.require_admin)],
) -> list[AvailabilityRuleRead]:
    rules = await availability_service.list_rules(
        session, account_id=current_user.account_id
    )
    return [AvailabilityRuleRead.model_validate(rule) for rule in rules]


@router.post(
    "/availability-rules",
    response_model=AvailabilityRuleRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create availability rule",
)
async def create_rule(
    payload: AvailabilityRuleCreate,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.require_admin)],
) -> AvailabilityRuleRead:
    rule = await availability_service.create_rule(
        session, account_id=current_user.account_id, payload=payload
    )
    return AvailabilityRuleRead.model_validate(rule)


@router.put(
    "/availability-rules/{rule_id}",
    response_model=AvailabilityRuleRead,
    summary="Replace availability rule",
)
async def update_rule(
    rule_id: uuid.UUID,
    payload: AvailabilityRuleCreate,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.require_admin)],
) -> AvailabilityRuleRead:
    rule = await availability_service.get_rule(
        session, account_id=current_user.account_id, rule_id=rule_id
    )
    if rule is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Rule not found")
    updated = await availability_service.update_rule(session, rule=rule, payload=payload)
    return AvailabilityRuleRead.model_validate(updated)


@router.delete(
    "/availability-rules/{rule_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete availability rule",
)
async def delete_rule(
    rule_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.require_admin)],
) -> None:
    rule = await availability_service.get_rule(
        session, account_id=current_user.account_id, rule_id=rule_id
    )
    if rule is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Rule not found")
    await availability_service.delete_rule(session, rule=rule)


@router.get("/blackouts", response_model=list[BlackoutRead], summary="List blackouts")
async def list_blackouts(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.require_admin)],
    start: datetime | None = Query(default=None),
    end: datetime | None = Query(default=None),
) -> list[BlackoutRead]:
    blackouts = await availability_service.list_blackouts(
        session,
        account_id=current_user.account_id,
        overlapping_start=start,
        overlapping_end=end,
    )
    return [BlackoutRead.model_validate(blackout) for blackout in blackouts]


@router.post(
    "/blackouts",
    response_model=BlackoutRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create blackout",
)
async def create_blackout(
    payload: BlackoutCreate,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.require_admin)],
) -> BlackoutRead:
    blackout = await availability_service.create_blackout(
        session, account_id=current_user.account_id, payload=payload
    )
    return BlackoutRead.model_validate(blackout)


@router.get(
    "/blackouts/{blackout_id}", response_model=BlackoutRead, summary="Get blackout"
)
async def get_blackout(
    blackout_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.require_admin)],
) -> BlackoutRead:
    blackout = await availability_service.get_blackout(
        session, account_id=current_user.account_id, blackout_id=blackout_id
    )
    if blackout is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Blackout not found"
        )
    return BlackoutRead.model_validate(blackout)


@router.delete(
    "/blackouts/{blackout_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete blackout",
)
async def delete_blackout(
    blackout_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.require_admin)],
) -> None:
    blackout = await availability_service.get_blackout(
        session, account_id=current_user.account_id, blackout_id=blackout_id
    )
    if blackout is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Blackout not found"
        )
    await availability_service.delete_blackout(session, blackout=blackout)
