"""Best-effort work that follows a committed booking.

Each effect is independent: none depends on another having run, and a failure
in one is logged without affecting the others or the booking itself.
"""

from __future__ import annotations

import enum
import logging
import uuid
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from datetime import datetime

import httpx
from fastapi import BackgroundTasks
from starlette.concurrency import run_in_threadpool

from mediabook.core.settings import (
    GhlSettings,
    GoogleSettings,
    MailSettings,
    get_ghl_settings,
    get_mail_settings,
)
from mediabook.db.session import session_scope
from mediabook.integrations.ghl_client import GhlBooking, send_booking
from mediabook.models import Booking
from mediabook.services import calendar_service
from mediabook.services.availability_service import get_booking_settings
from mediabook.services.notification_service import (
    build_admin_booking_email,
    build_customer_booking_email,
    send_email,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class BookingEffect:
    name: str
    run: Callable[[], Awaitable[None]]


@dataclass(frozen=True, slots=True)
class BookingSnapshot:
    """Plain copy of a committed booking; effects never touch request ORM state."""

    booking_id: uuid.UUID
    account_id: uuid.UUID
    first_name: str
    last_name: str
    email: str
    address: str
    start_at: datetime
    core_end_at: datetime
    time_zone: str
    total_cents: int
    service_name: str
    phone: str | None = None
    company: str | None = None
    notes: str | None = None
    category_name: str | None = None
    category_description: str | None = None
    google_calendar_id: str | None = None
    admin_emails: tuple[str, ...] = field(default_factory=tuple)

    @property
    def contact_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


async def run_effect(effect: BookingEffect) -> bool:
    """Run one effect inside its own error boundary."""
    try:
        await effect.run()
    except Exception:
        logger.exception("Booking side effect %s failed; continuing", effect.name)
        return False
    return True


def dispatch_effects(
    background_tasks: BackgroundTasks, effects: Sequence[BookingEffect]
) -> None:
    """Schedule every effect to run after the response is sent."""
    for effect in effects:
        background_tasks.add_task(run_effect, effect)


def _event_description(snapshot: BookingSnapshot) -> str:
    contact = snapshot.email
    if snapshot.phone:
        contact = f"{contact}, {snapshot.phone}"
    lines = [f"Client: {snapshot.contact_name} ({contact})"]
    if snapshot.company:
        lines.append(f"Company: {snapshot.company}")
    if snapshot.notes:
        lines.append(f"Notes: {snapshot.notes}")
    return "\n".join(lines)


async def create_calendar_event(
    snapshot: BookingSnapshot,
    *,
    database_url: str | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    google: GoogleSettings | None = None,
) -> str | None:
    """Create the Google event over the core window and store its id."""
    async with session_scope(database_url) as session:
        client = await calendar_service.open_client(
            session, account_id=snapshot.account_id, transport=transport, google=google
        )
        if client is None:
            logger.debug("No calendar connection for account %s", snapshot.account_id)
            return None
        attendees = [{"email": snapshot.email, "displayName": snapshot.contact_name}]
        attendees.extend({"email": email} for email in snapshot.admin_emails)
        event_id = await client.create_event(
            calendar_id=snapshot.google_calendar_id,
            summary=f"{snapshot.address} - {snapshot.contact_name}",
            description=_event_description(snapshot),
            start=snapshot.start_at,
            end=snapshot.core_end_at,
            time_zone=snapshot.time_zone,
            location=snapshot.address,
            attendees=attendees,
        )
        await calendar_service.persist_refreshed_tokens(
            session, account_id=snapshot.account_id, client=client
        )
        if event_id:
            booking = await session.get(Booking, snapshot.booking_id)
            if booking is not None:
                booking.google_event_id = event_id
                await session.commit()
        return event_id


class CalendarAction(str, enum.Enum):
    """What an admin booking change means for its Google event."""

    REMOVE = "remove"
    UPSERT = "upsert"
    MOVE = "move"


@dataclass(frozen=True, slots=True)
class CalendarChange:
    booking_id: uuid.UUID
    account_id: uuid.UUID
    action: CalendarAction
    start_at: datetime
    core_end_at: datetime


async def sync_calendar_event(
    change: CalendarChange,
    *,
    database_url: str | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    google: GoogleSettings | None = None,
) -> str | None:
    """Bring the booking's Google event in line with an admin change.

    ``REMOVE`` deletes the event and clears the stored id. ``UPSERT`` moves
    the event to the core window, creating it when none is stored. ``MOVE``
    only touches an event that already exists. Returns the stored event id.
    """
    async with session_scope(database_url) as session:
        booking = await session.get(Booking, change.booking_id)
        if booking is None:
            return None
        event_id = booking.google_event_id
        if event_id is None and change.action is not CalendarAction.UPSERT:
            return None
        client = await calendar_service.open_client(
            session, account_id=change.account_id, transport=transport, google=google
        )
        if client is None:
            return event_id
        settings = await get_booking_settings(session, account_id=change.account_id)
        calendar_id = settings.google_calendar_id if settings else None

        if change.action is CalendarAction.REMOVE:
            assert event_id is not None
            await client.delete_event(calendar_id=calendar_id, event_id=event_id)
            booking.google_event_id = None
        else:
            address = booking.property_formatted_address or booking.property_address
            summary = f"{address} - {booking.contact_name or 'Booking'}"
            if event_id:
                await client.update_event(
                    calendar_id=calendar_id,
                    event_id=event_id,
                    summary=summary,
                    start=change.start_at,
                    end=change.core_end_at,
                    time_zone=booking.time_zone,
                )
            else:
                booking.google_event_id = await client.create_event(
                    calendar_id=calendar_id,
                    summary=summary,
                    start=change.start_at,
                    end=change.core_end_at,
                    time_zone=booking.time_zone,
                    location=address,
                )
        await session.commit()
        await calendar_service.persist_refreshed_tokens(
            session, account_id=change.account_id, client=client
        )
        logger.info(
            "Calendar %s for booking %s synced", change.action.value, change.booking_id
        )
        return booking.google_event_id


def calendar_sync_effect(
    change: CalendarChange,
    *,
    database_url: str | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    google: GoogleSettings | None = None,
) -> BookingEffect:
    async def calendar_sync() -> None:
        await sync_calendar_event(
            change, database_url=database_url, transport=transport, google=google
        )

    return BookingEffect("calendar_sync", calendar_sync)


def build_booking_effects(
    snapshot: BookingSnapshot,
    *,
    database_url: str | None = None,
    mail: MailSettings | None = None,
    ghl: GhlSettings | None = None,
    calendar_transport: httpx.AsyncBaseTransport | None = None,
    ghl_transport: httpx.AsyncBaseTransport | None = None,
) -> list[BookingEffect]:
    """Effects for a new booking; unconfigured integrations are left out."""
    mail = mail or get_mail_settings()
    ghl = ghl or get_ghl_settings()

    async def calendar_event() -> None:
        await create_calendar_event(
            snapshot, database_url=database_url, transport=calendar_transport
        )

    async def crm_push() -> None:
        await send_booking(
            ghl,
            GhlBooking(
                first_name=snapshot.first_name,
                last_name=snapshot.last_name,
                email=snapshot.email,
                phone=snapshot.phone,
                address=snapshot.address,
                start_at=snapshot.start_at,
                time_zone=snapshot.time_zone,
            ),
            transport=ghl_transport,
        )

    async def customer_email() -> None:
        subject, body = build_customer_booking_email(
            first_name=snapshot.first_name,
            address=snapshot.address,
            start_at=snapshot.start_at,
            time_zone=snapshot.time_zone,
            service_name=snapshot.service_name,
            category_name=snapshot.category_name,
            category_description=snapshot.category_description,
        )
        await run_in_threadpool(send_email, [snapshot.email], subject, body, mail=mail)

    async def admin_email() -> None:
        subject, body = build_admin_booking_email(
            address=snapshot.address,
            start_at=snapshot.start_at,
            time_zone=snapshot.time_zone,
            service_name=snapshot.service_name,
            first_name=snapshot.first_name,
            last_name=snapshot.last_name,
            email=snapshot.email,
            phone=snapshot.phone,
            company=snapshot.company,
            total_cents=snapshot.total_cents,
            category_name=snapshot.category_name,
            category_description=snapshot.category_description,
        )
        await run_in_threadpool(
            send_email, list(snapshot.admin_emails), subject, body, mail=mail
        )

    effects = [BookingEffect("calendar_event", calendar_event)]
    if ghl.enabled:
        effects.append(BookingEffect("crm_push", crm_push))
    else:
        logger.info("GHL not configured; CRM push skipped")
    if mail.enabled:
        effects.append(BookingEffect("customer_email", customer_email))
        if snapshot.admin_emails:
            effects.append(BookingEffect("admin_email", admin_email))
    else:
        logger.debug("SMTP disabled; booking emails skipped")
    return effects
