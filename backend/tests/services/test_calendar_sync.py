"""Google event creation and admin-driven calendar sync against a seeded booking."""

from __future__ import annotations

import json
import os
import uuid
from datetime import UTC, datetime, timedelta
from typing import Any

import httpx
import pytest

from mediabook.core.settings import GoogleSettings
from mediabook.db.session import get_sessionmaker
from mediabook.models import Account, Booking, CalendarConnection
from mediabook.schemas.booking import BookingSubmitRequest, BookingUpdate
from mediabook.services import booking_service
from mediabook.services.booking_effects import (
    CalendarAction,
    CalendarChange,
    calendar_sync_effect,
    create_calendar_event,
    run_effect,
    sync_calendar_event,
)
from mediabook.utils.datetimes import normalize_datetime

pytestmark = pytest.mark.asyncio

GOOGLE = GoogleSettings(client_id="client", client_secret="secret")
START = datetime(2030, 3, 4, 10, 0, tzinfo=UTC)


class Recorder:
    def __init__(self, status_code: int = 200, payload: dict[str, Any] | None = None):
        self.requests: list[httpx.Request] = []
        self.status_code = status_code
        self.payload = payload if payload is not None else {"id": "event-1"}

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.method == "DELETE":
            return httpx.Response(204)
        return httpx.Response(self.status_code, json=self.payload)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


async def _submit(ctx: dict[str, Any]) -> booking_service.BookingSubmission:
    sessionmaker = get_sessionmaker(os.environ["DATABASE_URL"])
    async with sessionmaker() as session:
        account = await session.get(Account, ctx["account_id"])
        return await booking_service.submit_booking(
            session,
            account=account,
            payload=BookingSubmitRequest(
                service_ids=[ctx["photos_id"], ctx["drone_id"]],
                slot_start=START,
                address="42 Birch Rd",
                contact_first_name="Morgan",
                contact_last_name="Lee",
                contact_email="morgan@example.com",
            ),
            now=START - timedelta(days=3),
        )


async def _connect(account_id: uuid.UUID) -> None:
    sessionmaker = get_sessionmaker(os.environ["DATABASE_URL"])
    async with sessionmaker() as session:
        session.add(CalendarConnection(account_id=account_id, access_token="token-1"))
        await session.commit()


async def _load(booking_id: uuid.UUID) -> Booking:
    sessionmaker = get_sessionmaker(os.environ["DATABASE_URL"])
    async with sessionmaker() as session:
        booking = await session.get(Booking, booking_id)
        assert booking is not None
        return booking


async def _set_event(booking_id: uuid.UUID, event_id: str | None) -> None:
    sessionmaker = get_sessionmaker(os.environ["DATABASE_URL"])
    async with sessionmaker() as session:
        booking = await session.get(Booking, booking_id)
        booking.google_event_id = event_id
        await session.commit()


def _change(
    submission: booking_service.BookingSubmission,
    action: CalendarAction,
    start: datetime = START,
) -> CalendarChange:
    return CalendarChange(
        booking_id=submission.booking.id,
        account_id=submission.booking.account_id,
        action=action,
        start_at=start,
        core_end_at=start + timedelta(minutes=90),
    )


async def test_new_booking_event_spans_core_services_only(
    app_context: dict[str, Any],
) -> None:
    submission = await _submit(app_context)
    await _connect(app_context["account_id"])
    google = Recorder(payload={"id": "event-42"})

    event_id = await create_calendar_event(
        submission.snapshot, transport=google.transport, google=GOOGLE
    )

    assert event_id == "event-42"
    body = json.loads(google.requests[0].content)
    assert body["start"]["dateTime"] == "2030-03-04T10:00:00Z"
    assert body["end"]["dateTime"] == "2030-03-04T11:30:00Z"
    booking = await _load(submission.booking.id)
    assert normalize_datetime(booking.end_at) == START + timedelta(minutes=105)
    assert booking.google_event_id == "event-42"


async def test_new_booking_without_connection_makes_no_calls(
    app_context: dict[str, Any],
) -> None:
    submission = await _submit(app_context)
    google = Recorder()

    event_id = await create_calendar_event(
        submission.snapshot, transport=google.transport, google=GOOGLE
    )

    assert event_id is None
    assert google.requests == []


async def test_remove_deletes_event_and_clears_id(app_context: dict[str, Any]) -> None:
    submission = await _submit(app_context)
    await _connect(app_context["account_id"])
    await _set_event(submission.booking.id, "event-7")
    google = Recorder()

    await sync_calendar_event(
        _change(submission, CalendarAction.REMOVE),
        transport=google.transport,
        google=GOOGLE,
    )

    assert [request.method for request in google.requests] == ["DELETE"]
    assert google.requests[0].url.path.endswith("/calendars/primary/events/event-7")
    assert (await _load(submission.booking.id)).google_event_id is None


async def test_upsert_updates_existing_event(app_context: dict[str, Any]) -> None:
    submission = await _submit(app_context)
    await _connect(app_context["account_id"])
    await _set_event(submission.booking.id, "event-7")
    google = Recorder()

    event_id = await sync_calendar_event(
        _change(submission, CalendarAction.UPSERT),
        transport=google.transport,
        google=GOOGLE,
    )

    assert event_id == "event-7"
    request = google.requests[0]
    assert request.method == "PATCH"
    body = json.loads(request.content)
    assert body["summary"] == "42 Birch Rd - Morgan Lee"
    assert body["end"]["dateTime"] == "2030-03-04T11:30:00Z"


async def test_upsert_creates_missing_event(app_context: dict[str, Any]) -> None:
    submission = await _submit(app_context)
    await _connect(app_context["account_id"])
    google = Recorder(payload={"id": "event-9"})

    event_id = await sync_calendar_event(
        _change(submission, CalendarAction.UPSERT),
        transport=google.transport,
        google=GOOGLE,
    )

    assert event_id == "event-9"
    assert [request.method for request in google.requests] == ["POST"]
    assert (await _load(submission.booking.id)).google_event_id == "event-9"


async def test_move_without_event_makes_no_calls(app_context: dict[str, Any]) -> None:
    submission = await _submit(app_context)
    await _connect(app_context["account_id"])
    google = Recorder()

    event_id = await sync_calendar_event(
        _change(submission, CalendarAction.MOVE),
        transport=google.transport,
        google=GOOGLE,
    )

    assert event_id is None
    assert google.requests == []


async def test_sync_failure_is_swallowed(app_context: dict[str, Any]) -> None:
    submission = await _submit(app_context)
    await _connect(app_context["account_id"])
    await _set_event(submission.booking.id, "event-7")
    google = Recorder(status_code=500)

    ran = await run_effect(
        calendar_sync_effect(
            _change(submission, CalendarAction.MOVE, START + timedelta(days=1)),
            transport=google.transport,
            google=GOOGLE,
        )
    )

    assert ran is False
    assert (await _load(submission.booking.id)).google_event_id == "event-7"


async def test_reschedule_recomputes_end_and_plans_a_move(
    app_context: dict[str, Any],
) -> None:
    submission = await _submit(app_context)
    await _set_event(submission.booking.id, "event-7")
    new_start = START + timedelta(days=1, hours=2)

    sessionmaker = get_sessionmaker(os.environ["DATABASE_URL"])
    async with sessionmaker() as session:
        booking = await booking_service.get_booking(
            session,
            account_id=app_context["account_id"],
            booking_id=submission.booking.id,
        )
        change = await booking_service.update_booking(
            session, booking=booking, payload=BookingUpdate(start_at=new_start)
        )

    assert normalize_datetime(change.booking.end_at) == new_start + timedelta(minutes=105)
    assert change.calendar is not None
    assert change.calendar.action is CalendarAction.MOVE
    assert change.calendar.core_end_at == new_start + timedelta(minutes=90)


async def test_status_changes_map_to_calendar_actions(
    app_context: dict[str, Any],
) -> None:
    submission = await _submit(app_context)
    sessionmaker = get_sessionmaker(os.environ["DATABASE_URL"])

    async with sessionmaker() as session:
        booking = await booking_service.get_booking(
            session,
            account_id=app_context["account_id"],
            booking_id=submission.booking.id,
        )
        confirmed = await booking_service.update_booking(
            session, booking=booking, payload=BookingUpdate(status="confirmed")
        )
        cancelled = await booking_service.update_booking(
            session, booking=confirmed.booking, payload=BookingUpdate(status="cancelled")
        )

    assert confirmed.calendar is not None
    assert confirmed.calendar.action is CalendarAction.UPSERT
    # nothing to delete without a stored event
    assert cancelled.calendar is None
    assert cancelled.booking.status.value == "cancelled"
