"""Public booking submission and admin booking management."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from mediabook.models import (
    Account,
    Booking,
    BookingItem,
    BookingStatus,
    Order,
    OrderStatus,
    Realtor,
    RealtorAssignment,
    User,
    UserRole,
    UserStatus,
)
from mediabook.schemas.booking import BookingSubmitRequest, BookingUpdate
from mediabook.services import availability_service
from mediabook.services.booking_effects import (
    BookingEffect,
    BookingSnapshot,
    CalendarAction,
    CalendarChange,
    build_booking_effects,
)
from mediabook.services.booking_errors import BookingErrorCode, BookingValidationError
from mediabook.services.catalog_service import load_booking_lines
from mediabook.services.pricing_service import PricingResult, price_booking
from mediabook.services.promo_service import (
    PromoOutcome,
    SqlPromoUsage,
    evaluate_promo,
    load_promo_terms,
)
from mediabook.services.slot_service import DurationBreakdown, compose_duration
from mediabook.utils.datetimes import normalize_datetime, utcnow
from mediabook.utils.slug import random_suffix, slugify

logger = logging.getLogger(__name__)

ORDER_SLUG_ATTEMPTS = 10


@dataclass(slots=True)
class BookingSubmission:
    booking: Booking
    order: Order
    pricing: PricingResult
    duration: DurationBreakdown
    snapshot: BookingSnapshot
    effects: list[BookingEffect] = field(default_factory=list)


def _require_fields(payload: BookingSubmitRequest) -> None:
    missing = [
        name
        for name in ("address", "contact_first_name", "contact_last_name", "contact_email")
        if not getattr(payload, name)
    ]
    if missing:
        raise BookingValidationError(
            BookingErrorCode.MISSING_REQUIRED_FIELD,
            f"Missing required fields: {', '.join(missing)}",
        )
    if not payload.service_ids:
        raise BookingValidationError(
            BookingErrorCode.MISSING_REQUIRED_FIELD, "No services selected"
        )


async def upsert_realtor(
    session: AsyncSession, *, account_id: uuid.UUID, payload: BookingSubmitRequest
) -> Realtor:
    """Find the realtor by email or create one, and link them to the account.

    Existing realtor details are left untouched.
    """
    email = payload.contact_email.lower()
    realtor = await session.scalar(select(Realtor).where(Realtor.email == email))
    if realtor is None:
        realtor = Realtor(
            email=email,
            first_name=payload.contact_first_name,
            last_name=payload.contact_last_name,
            phone=payload.contact_phone or None,
            company_name=payload.company or None,
        )
        session.add(realtor)
        await session.flush()

    assignment = await session.scalar(
        select(RealtorAssignment).where(
            RealtorAssignment.account_id == account_id,
            RealtorAssignment.realtor_id == realtor.id,
        )
    )
    if assignment is None:
        session.add(RealtorAssignment(account_id=account_id, realtor_id=realtor.id))
        await session.flush()
    return realtor


async def generate_unique_order_slug(
    session: AsyncSession, client_name: str, property_address: str
) -> str:
    """``client/address`` slug, suffixed with random characters on collision."""
    base = f"{slugify(client_name)}/{slugify(property_address)}"
    candidate = base
    for _ in range(ORDER_SLUG_ATTEMPTS + 1):
        existing = await session.scalar(select(Order.id).where(Order.slug == candidate))
        if existing is None:
            return candidate
        candidate = f"{base}-{random_suffix()}"
    raise RuntimeError("Failed to generate unique order slug")


async def _admin_emails(session: AsyncSession, account: Account) -> tuple[str, ...]:
    stmt = select(User.email).where(
        User.account_id == account.id,
        User.role.in_([UserRole.ADMIN, UserRole.SUPERADMIN]),
        User.status == UserStatus.ACTIVE,
    )
    emails = list((await session.execute(stmt)).scalars().all())
    if account.contact_email and account.contact_email not in emails:
        emails.insert(0, account.contact_email)
    return tuple(emails)


async def submit_booking(
    session: AsyncSession,
    *,
    account: Account,
    payload: BookingSubmitRequest,
    now: datetime | None = None,
) -> BookingSubmission:
    """Validate, price and persist a public booking.

    The booking, its items and the derived draft order are committed together.
    Side effects are returned for the caller to dispatch after the commit.
    """
    _require_fields(payload)
    settings = await availability_service.require_booking_settings(
        session, account_id=account.id
    )
    lines = await load_booking_lines(
        session, account_id=account.id, service_ids=payload.service_ids
    )
    if not lines:
        raise BookingValidationError(BookingErrorCode.NO_VALID_SERVICES)

    duration = compose_duration(lines, settings.default_buffer_min)
    start_at = normalize_datetime(payload.slot_start)
    end_at = start_at + timedelta(minutes=duration.total_min)
    current = now or utcnow()

    try:
        realtor = await upsert_realtor(session, account_id=account.id, payload=payload)

        outcome: PromoOutcome | None = None
        if payload.promo_code:
            terms = await load_promo_terms(
                session, account_id=account.id, code=payload.promo_code
            )
            outcome = await evaluate_promo(
                terms,
                lines,
                now=current,
                usage=SqlPromoUsage(session),
                realtor_id=realtor.id,
            )
        applied = outcome is not None and outcome.applied
        pricing = price_booking(
            lines,
            discount_cents=outcome.discount_cents if applied else 0,
            eligible_ids=outcome.eligible_ids if applied else None,
        )
        promo_id = outcome.promo_id if applied else None

        contact_name = f"{payload.contact_first_name} {payload.contact_last_name}"
        booking = Booking(
            account_id=account.id,
            realtor_id=realtor.id,
            status=BookingStatus.CONFIRMED,
            start_at=start_at,
            end_at=end_at,
            time_zone=settings.time_zone,
            property_address=payload.address,
            property_formatted_address=payload.formatted_address or None,
            property_lat=payload.lat,
            property_lng=payload.lng,
            property_city=payload.city or None,
            property_province=payload.province or None,
            property_postal_code=payload.postal_code or None,
            property_country=payload.country or None,
            property_place_id=payload.place_id or None,
            property_size_sq_ft=payload.property_size_sq_ft,
            contact_name=contact_name,
            contact_email=payload.contact_email,
            contact_phone=payload.contact_phone or None,
            company=payload.company or None,
            notes=payload.notes or None,
            subtotal_cents=pricing.subtotal_cents,
            discount_cents=pricing.discount_cents,
            tax_cents=pricing.tax_cents,
            total_cents=pricing.total_cents,
            applied_promo_code_id=promo_id,
        )
        booking.items = [
            BookingItem(
                service_id=item.service_id,
                position=position,
                service_name=item.service_name,
                unit_price_cents=item.unit_price_cents,
                discount_cents=item.discount_cents,
                tax_cents=item.tax_cents,
            )
            for position, item in enumerate(pricing.items)
        ]
        session.add(booking)
        await session.flush()

        slug = await generate_unique_order_slug(
            session, realtor.display_name, payload.address
        )
        order = Order(
            account_id=account.id,
            realtor_id=realtor.id,
            booking_id=booking.id,
            slug=slug,
            status=OrderStatus.DRAFT,
            property_address=payload.address,
            property_formatted_address=payload.formatted_address or None,
            property_lat=payload.lat,
            property_lng=payload.lng,
            property_city=payload.city or None,
            property_province=payload.province or None,
            property_postal_code=payload.postal_code or None,
            property_country=payload.country or None,
            property_place_id=payload.place_id or None,
            property_size=payload.property_size_sq_ft,
            description=payload.notes or None,
            discount_cents=pricing.discount_cents,
            applied_promo_code_id=promo_id,
        )
        session.add(order)
        admin_emails = await _admin_emails(session, account)
        await session.commit()
    except Exception:
        await session.rollback()
        raise

    logger.info(
        "Booking %s submitted for account %s (total %s cents)",
        booking.id,
        account.slug,
        booking.total_cents,
    )
    primary = lines[0]
    snapshot = BookingSnapshot(
        booking_id=booking.id,
        account_id=account.id,
        first_name=payload.contact_first_name,
        last_name=payload.contact_last_name,
        email=payload.contact_email,
        phone=payload.contact_phone or None,
        company=payload.company or None,
        notes=payload.notes or None,
        address=payload.formatted_address or payload.address,
        start_at=start_at,
        core_end_at=start_at + timedelta(minutes=duration.core_min),
        time_zone=settings.time_zone,
        total_cents=pricing.total_cents,
        service_name=primary.name,
        category_name=primary.category_name,
        category_description=primary.category_description,
        google_calendar_id=settings.google_calendar_id,
        admin_emails=admin_emails,
    )
    return BookingSubmission(
        booking=booking,
        order=order,
        pricing=pricing,
        duration=duration,
        snapshot=snapshot,
        effects=build_booking_effects(snapshot),
    )


# Administration ---------------------------------------------------------------


async def list_bookings(
    session: AsyncSession,
    *,
    account_id: uuid.UUID,
    start_from: datetime | None = None,
    start_to: datetime | None = None,
    status: BookingStatus | None = None,
) -> list[Booking]:
    stmt: Select[tuple[Booking]] = (
        select(Booking)
        .options(selectinload(Booking.items))
        .where(Booking.account_id == account_id)
    )
    if start_from is not None:
        stmt = stmt.where(Booking.start_at >= start_from)
    if start_to is not None:
        stmt = stmt.where(Booking.start_at < start_to)
    if status is not None:
        stmt = stmt.where(Booking.status == status)
    stmt = stmt.order_by(Booking.start_at.asc())
    result = await session.execute(stmt)
    return list(result.scalars().unique().all())


async def get_booking(
    session: AsyncSession, *, account_id: uuid.UUID, booking_id: uuid.UUID
) -> Booking | None:
    stmt = (
        select(Booking)
        .options(selectinload(Booking.items))
        .where(Booking.id == booking_id, Booking.account_id == account_id)
        .execution_options(populate_existing=True)
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


@dataclass(slots=True)
class BookingChange:
    booking: Booking
    calendar: CalendarChange | None = None


def _calendar_action(
    payload: BookingUpdate, *, had_event: bool
) -> CalendarAction | None:
    if payload.status is BookingStatus.CANCELLED:
        return CalendarAction.REMOVE if had_event else None
    if payload.status is BookingStatus.CONFIRMED:
        return CalendarAction.UPSERT
    if payload.start_at is not None and had_event:
        return CalendarAction.MOVE
    return None


async def update_booking(
    session: AsyncSession, *, booking: Booking, payload: BookingUpdate
) -> BookingChange:
    """Apply an admin status change or reschedule.

    Moving the start recomputes the end from the booked services' current
    durations plus the account's default buffer. The returned change carries
    what the Google event needs to follow, if anything.
    """
    service_ids = [item.service_id for item in booking.items if item.service_id]
    lines = await load_booking_lines(
        session,
        account_id=booking.account_id,
        service_ids=service_ids,
        active_only=False,
    )
    settings = await availability_service.get_booking_settings(
        session, account_id=booking.account_id
    )
    duration = compose_duration(lines, settings.default_buffer_min if settings else 0)

    if payload.start_at is not None:
        start_at = normalize_datetime(payload.start_at)
        booking.start_at = start_at
        booking.end_at = start_at + timedelta(minutes=duration.total_min)
    if payload.status is not None:
        booking.status = payload.status
    await session.commit()

    refreshed = await get_booking(
        session, account_id=booking.account_id, booking_id=booking.id
    )
    assert refreshed is not None
    action = _calendar_action(payload, had_event=bool(refreshed.google_event_id))
    if action is None:
        return BookingChange(booking=refreshed)
    start_at = normalize_datetime(refreshed.start_at)
    calendar = CalendarChange(
        booking_id=refreshed.id,
        account_id=refreshed.account_id,
        action=action,
        start_at=start_at,
        core_end_at=start_at + timedelta(minutes=duration.core_min),
    )
    logger.info("Booking %s updated; calendar %s pending", refreshed.id, action.value)
    return BookingChange(booking=refreshed, calendar=calendar)


async def list_orders(session: AsyncSession, *, account_id: uuid.UUID) -> list[Order]:
    stmt = (
        select(Order)
        .where(Order.account_id == account_id)
        .order_by(Order.created_at.desc())
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def get_order(
    session: AsyncSession, *, account_id: uuid.UUID, order_id: uuid.UUID
) -> Order | None:
    stmt = select(Order).where(Order.id == order_id, Order.account_id == account_id)
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def list_realtors(
    session: AsyncSession, *, account_id: uuid.UUID
) -> list[Realtor]:
    """Realtors who have booked with the account."""
    stmt = (
        select(Realtor)
        .join(RealtorAssignment, RealtorAssignment.realtor_id == Realtor.id)
        .where(RealtorAssignment.account_id == account_id)
        .order_by(Realtor.last_name.asc(), Realtor.first_name.asc())
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())
