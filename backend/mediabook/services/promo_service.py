"""Promo code evaluation and administration."""

from __future__ import annotations

import uuid
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from mediabook.models import Booking, DiscountType, Order, PromoCode, Realtor, Service
from mediabook.schemas.promo import PromoCodeCreate, PromoCodeUpdate
from mediabook.services.booking_errors import BookingErrorCode, BookingValidationError
from mediabook.services.catalog_service import load_booking_lines
from mediabook.services.pricing_service import ServiceLine, compute_discount, eligible_lines
from mediabook.utils.datetimes import normalize_datetime


@dataclass(frozen=True, slots=True)
class PromoTerms:
    """Immutable snapshot of a promo code used during evaluation."""

    id: uuid.UUID
    code: str
    active: bool
    discount_type: DiscountType
    discount_value_cents: int | None = None
    discount_rate_bps: int | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    max_uses_total: int | None = None
    max_uses_per_realtor: int | None = None
    service_ids: frozenset[uuid.UUID] = frozenset()

    @classmethod
    def from_model(cls, promo: PromoCode) -> "PromoTerms":
        return cls(
            id=promo.id,
            code=promo.code,
            active=promo.active,
            discount_type=promo.discount_type,
            discount_value_cents=promo.discount_value_cents,
            discount_rate_bps=promo.discount_rate_bps,
            start_date=promo.start_date,
            end_date=promo.end_date,
            max_uses_total=promo.max_uses_total,
            max_uses_per_realtor=promo.max_uses_per_realtor,
            service_ids=frozenset(promo.service_ids),
        )


class PromoUsage(Protocol):
    """Counts prior uses of a promo code."""

    async def count_total(self, promo_id: uuid.UUID) -> int: ...

    async def count_for_realtor(
        self, promo_id: uuid.UUID, realtor_id: uuid.UUID
    ) -> int: ...


class SqlPromoUsage:
    """Usage counter backed by bookings and standalone orders.

    Orders derived from a booking are not counted again.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def _count(
        self, promo_id: uuid.UUID, realtor_id: uuid.UUID | None = None
    ) -> int:
        booking_stmt = select(func.count(Booking.id)).where(
            Booking.applied_promo_code_id == promo_id
        )
        order_stmt = select(func.count(Order.id)).where(
            Order.applied_promo_code_id == promo_id,
            Order.booking_id.is_(None),
        )
        if realtor_id is not None:
            booking_stmt = booking_stmt.where(Booking.realtor_id == realtor_id)
            order_stmt = order_stmt.where(Order.realtor_id == realtor_id)
        bookings = await self._session.scalar(booking_stmt)
        orders = await self._session.scalar(order_stmt)
        return int(bookings or 0) + int(orders or 0)

    async def count_total(self, promo_id: uuid.UUID) -> int:
        return await self._count(promo_id)

    async def count_for_realtor(
        self, promo_id: uuid.UUID, realtor_id: uuid.UUID
    ) -> int:
        return await self._count(promo_id, realtor_id)


@dataclass(frozen=True, slots=True)
class PromoOutcome:
    """Result of evaluating a promo against a service selection.

    ``applied`` is false when the promo passed every check but had nothing
    to discount; such bookings do not reference the promo.
    """

    promo_id: uuid.UUID
    discount_cents: int
    eligible_ids: frozenset[uuid.UUID]
    applied: bool


def check_window(terms: PromoTerms, now: datetime) -> None:
    """Raise when ``now`` falls outside the inclusive promo window."""
    current = normalize_datetime(now)
    if terms.start_date is not None and current < normalize_datetime(terms.start_date):
        raise BookingValidationError(BookingErrorCode.NOT_YET_ACTIVE)
    if terms.end_date is not None and current > normalize_datetime(terms.end_date):
        raise BookingValidationError(BookingErrorCode.EXPIRED)


async def evaluate_promo(
    terms: PromoTerms | None,
    lines: Sequence[ServiceLine],
    *,
    now: datetime,
    usage: PromoUsage,
    realtor_id: uuid.UUID | None,
) -> PromoOutcome:
    """Validate ``terms`` in order and compute the raw discount.

    Checks run in a fixed order and the first failure wins: existence and
    active flag, date window, total usage cap, per-realtor cap. The discount
    is clamped to the eligible subtotal.
    """
    if terms is None or not terms.active:
        raise BookingValidationError(BookingErrorCode.INVALID_CODE)
    check_window(terms, now)

    if terms.max_uses_total is not None:
        used = await usage.count_total(terms.id)
        if used >= terms.max_uses_total:
            raise BookingValidationError(BookingErrorCode.USAGE_LIMIT_REACHED)
    if terms.max_uses_per_realtor is not None and realtor_id is not None:
        used = await usage.count_for_realtor(terms.id, realtor_id)
        if used >= terms.max_uses_per_realtor:
            raise BookingValidationError(BookingErrorCode.PER_CLIENT_LIMIT_REACHED)

    discountable = eligible_lines(lines, terms.service_ids)
    eligible_subtotal = sum(line.price_cents for line in discountable)
    eligible_ids = frozenset(line.id for line in discountable)
    if eligible_subtotal <= 0:
        return PromoOutcome(
            promo_id=terms.id, discount_cents=0, eligible_ids=eligible_ids, applied=False
        )
    discount = compute_discount(
        terms.discount_type,
        eligible_subtotal=eligible_subtotal,
        value_cents=terms.discount_value_cents,
        rate_bps=terms.discount_rate_bps,
    )
    return PromoOutcome(
        promo_id=terms.id,
        discount_cents=discount,
        eligible_ids=eligible_ids,
        applied=True,
    )


async def load_promo_terms(
    session: AsyncSession, *, account_id: uuid.UUID, code: str
) -> PromoTerms | None:
    """Look up a promo by its exact code within an account."""
    stmt = (
        select(PromoCode)
        .options(selectinload(PromoCode.services))
        .where(PromoCode.account_id == account_id, PromoCode.code == code.strip())
    )
    result = await session.execute(stmt)
    promo = result.scalar_one_or_none()
    return PromoTerms.from_model(promo) if promo is not None else None


@dataclass(frozen=True, slots=True)
class PromoPreview:
    promo_id: uuid.UUID
    discount_cents: int
    applies_to_service_ids: list[uuid.UUID]
    warning: str | None = None


async def validate_promo_for_selection(
    session: AsyncSession,
    *,
    account_id: uuid.UUID,
    code: str,
    service_ids: Sequence[uuid.UUID],
    contact_email: str | None,
    now: datetime,
) -> PromoPreview:
    """Preview a promo for the booking page before submission.

    Usage caps only produce a warning here; submission enforces them.
    """
    if not code or not code.strip():
        raise BookingValidationError(
            BookingErrorCode.MISSING_REQUIRED_FIELD, "Promo code is required"
        )
    if not service_ids:
        raise BookingValidationError(
            BookingErrorCode.MISSING_REQUIRED_FIELD,
            "Select at least one service before applying a promo code",
        )

    terms = await load_promo_terms(session, account_id=account_id, code=code)
    if terms is None or not terms.active:
        raise BookingValidationError(BookingErrorCode.INVALID_CODE)
    check_window(terms, now)

    lines = await load_booking_lines(
        session, account_id=account_id, service_ids=service_ids
    )
    discountable = eligible_lines(lines, terms.service_ids)
    eligible_subtotal = sum(line.price_cents for line in discountable)
    if not discountable or eligible_subtotal <= 0:
        raise BookingValidationError(BookingErrorCode.PROMO_NOT_APPLICABLE)
    discount = compute_discount(
        terms.discount_type,
        eligible_subtotal=eligible_subtotal,
        value_cents=terms.discount_value_cents,
        rate_bps=terms.discount_rate_bps,
    )

    warning: str | None = None
    if contact_email:
        usage = SqlPromoUsage(session)
        realtor_id = await session.scalar(
            select(Realtor.id).where(Realtor.email == contact_email.strip().lower())
        )
        if terms.max_uses_per_realtor is not None and realtor_id is not None:
            used = await usage.count_for_realtor(terms.id, realtor_id)
            if used >= terms.max_uses_per_realtor:
                warning = (
                    "This code has already reached the limit for this client "
                    "and may be rejected on submit."
                )
        if terms.max_uses_total is not None:
            if await usage.count_total(terms.id) >= terms.max_uses_total:
                warning = (
                    "This code has reached the maximum number of uses "
                    "and may be rejected on submit."
                )

    return PromoPreview(
        promo_id=terms.id,
        discount_cents=discount,
        applies_to_service_ids=[line.id for line in discountable],
        warning=warning,
    )


# Administration ---------------------------------------------------------------


class PromoCodeConflictError(ValueError):
    """Raised when a code is already used by another promo in the account."""

    def __init__(self) -> None:
        super().__init__("Promo code already exists")


async def _resolve_services(
    session: AsyncSession, *, account_id: uuid.UUID, service_ids: Sequence[uuid.UUID]
) -> list[Service]:
    if not service_ids:
        return []
    wanted = set(service_ids)
    stmt = select(Service).where(
        Service.account_id == account_id, Service.id.in_(list(wanted))
    )
    result = await session.execute(stmt)
    services = list(result.scalars().all())
    if len(services) != len(wanted):
        raise ValueError("Unknown service id")
    return services


async def list_promo_codes(
    session: AsyncSession, *, account_id: uuid.UUID
) -> list[PromoCode]:
    stmt = (
        select(PromoCode)
        .options(selectinload(PromoCode.services))
        .where(PromoCode.account_id == account_id)
        .order_by(PromoCode.created_at.desc())
    )
    result = await session.execute(stmt)
    return list(result.scalars().unique().all())


async def get_promo_code(
    session: AsyncSession, *, account_id: uuid.UUID, promo_id: uuid.UUID
) -> PromoCode | None:
    stmt = (
        select(PromoCode)
        .options(selectinload(PromoCode.services))
        .where(PromoCode.id == promo_id, PromoCode.account_id == account_id)
        .execution_options(populate_existing=True)
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def create_promo_code(
    session: AsyncSession, *, account_id: uuid.UUID, payload: PromoCodeCreate
) -> PromoCode:
    """Create a promo code; raises ``ValueError`` on a duplicate code."""
    services = await _resolve_services(
        session, account_id=account_id, service_ids=payload.service_ids
    )
    promo = PromoCode(
        account_id=account_id, **payload.model_dump(exclude={"service_ids"})
    )
    promo.services = services
    session.add(promo)
    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        raise PromoCodeConflictError() from exc
    refreshed = await get_promo_code(session, account_id=account_id, promo_id=promo.id)
    assert refreshed is not None
    return refreshed


def _check_discount_fields(promo: PromoCode) -> None:
    if promo.discount_type is DiscountType.AMOUNT:
        if promo.discount_value_cents is None or promo.discount_value_cents < 0:
            raise ValueError("discount_value_cents required for AMOUNT promos")
        promo.discount_rate_bps = None
    else:
        rate = promo.discount_rate_bps
        if rate is None or not 1 <= rate <= 10000:
            raise ValueError("discount_rate_bps must be between 1 and 10000")
        promo.discount_value_cents = None
    if promo.start_date and promo.end_date:
        if normalize_datetime(promo.start_date) > normalize_datetime(promo.end_date):
            raise ValueError("start_date must be before end_date")


async def update_promo_code(
    session: AsyncSession, *, promo: PromoCode, payload: PromoCodeUpdate
) -> PromoCode:
    data = payload.model_dump(exclude_unset=True)
    service_ids = data.pop("service_ids", None)
    if service_ids is not None:
        promo.services = await _resolve_services(
            session, account_id=promo.account_id, service_ids=service_ids
        )
    if "code" in data and data["code"] is not None:
        data["code"] = data["code"].strip()
    for key, value in data.items():
        setattr(promo, key, value)
    try:
        _check_discount_fields(promo)
    except ValueError:
        await session.rollback()
        raise
    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        raise PromoCodeConflictError() from exc
    refreshed = await get_promo_code(
        session, account_id=promo.account_id, promo_id=promo.id
    )
    assert refreshed is not None
    return refreshed


async def delete_promo_code(session: AsyncSession, *, promo: PromoCode) -> None:
    await session.delete(promo)
    await session.commit()
