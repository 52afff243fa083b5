"""Admin endpoints for bookings, derived orders and realtors."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from mediabook.api import deps
from mediabook.models.booking import BookingStatus
from mediabook.models.user import User
from mediabook.schemas.booking import BookingRead, BookingUpdate
from mediabook.schemas.order import OrderRead, RealtorRead
from mediabook.services import booking_service
from mediabook.services.booking_effects import calendar_sync_effect, run_effect

router = APIRouter()


@router.get("/bookings", response_model=list[BookingRead], summary="List bookings")
async def list_bookings(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.require_admin)],
    start_from: datetime | None = Query(default=None),
    start_to: datetime | None = Query(default=None),
    booking_status: BookingStatus | None = Query(default=None, alias="status"),
) -> list[BookingRead]:
    bookings = await booking_service.list_bookings(
        session,
        account_id=current_user.account_id,
        start_from=start_from,
        start_to=start_to,
        status=booking_status,
    )
    return [BookingRead.model_validate(booking) for booking in bookings]


@router.get("/bookings/{booking_id}", response_model=BookingRead, summary="Get booking")
async def get_booking(
    booking_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.require_admin)],
) -> BookingRead:
    booking = await booking_service.get_booking(
        session, account_id=current_user.account_id, booking_id=booking_id
    )
    if booking is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Booking not found")
    return BookingRead.model_validate(booking)


@router.patch(
    "/bookings/{booking_id}",
    response_model=BookingRead,
    summary="Update or reschedule booking",
)
@router.patch(
    "/bookings/{booking_id}/status",
    response_model=BookingRead,
    summary="Update booking status",
    include_in_schema=False,
)
async def update_booking(
    booking_id: uuid.UUID,
    payload: BookingUpdate,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.require_admin)],
) -> BookingRead:
    booking = await booking_service.get_booking(
        session, account_id=current_user.account_id, booking_id=booking_id
    )
    if booking is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Booking not found")
    change = await booking_service.update_booking(session, booking=booking, payload=payload)
    if change.calendar is not None and await run_effect(
        calendar_sync_effect(change.calendar)
    ):
        refreshed = await booking_service.get_booking(
            session, account_id=current_user.account_id, booking_id=booking_id
        )
        if refreshed is not None:
            return BookingRead.model_validate(refreshed)
    return BookingRead.model_validate(change.booking)


@router.get("/orders", response_model=list[OrderRead], summary="List orders")
async def list_orders(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.require_admin)],
) -> list[OrderRead]:
    orders = await booking_service.list_orders(session, account_id=current_user.account_id)
    return [OrderRead.model_validate(order) for order in orders]


@router.get("/orders/{order_id}", response_model=OrderRead, summary="Get order")
async def get_order(
    order_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.require_admin)],
) -> OrderRead:
    order = await booking_service.get_order(
        session, account_id=current_user.account_id, order_id=order_id
    )
    if order is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found")
    return OrderRead.model_validate(order)


@router.get("/realtors", response_model=list[RealtorRead], summary="List realtors")
async def list_realtors(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.require_admin)],
) -> list[RealtorRead]:
    realtors = await booking_service.list_realtors(
        session, account_id=current_user.account_id
    )
    return [RealtorRead.model_validate(realtor) for realtor in realtors]
