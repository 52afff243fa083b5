"""Tests for post-booking side effects and notification emails."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime, timedelta

import pytest
from fastapi import BackgroundTasks

from mediabook.core.settings import GhlSettings, MailSettings
from mediabook.services import notification_service
from mediabook.services.booking_effects import (
    BookingEffect,
    BookingSnapshot,
    build_booking_effects,
    dispatch_effects,
    run_effect,
)

START = datetime(2026, 10, 18, 19, 30, tzinfo=UTC)
SNAPSHOT = BookingSnapshot(
    booking_id=uuid.uuid4(),
    account_id=uuid.uuid4(),
    first_name="Riley",
    last_name="Agent",
    email="riley@example.com",
    address="123 Main St, Calgary",
    start_at=START,
    core_end_at=START + timedelta(minutes=90),
    time_zone="America/Edmonton",
    total_cents=15750,
    service_name="HDR Photos",
    phone="555-0100",
    category_name="Photography",
    admin_emails=("studio@example.com",),
)
NO_MAIL = MailSettings(sender="studio@example.com")
SMTP = MailSettings(host="smtp.example.com", port=587, sender="studio@example.com")
NO_GHL = GhlSettings()
GHL = GhlSettings(api_key="key", location_id="loc")


@pytest.mark.asyncio
async def test_run_effect_swallows_failures() -> None:
    async def boom() -> None:
        raise RuntimeError("calendar down")

    assert await run_effect(BookingEffect("calendar_event", boom)) is False


@pytest.mark.asyncio
async def test_dispatch_runs_every_effect_despite_failures() -> None:
    ran: list[str] = []

    async def failing() -> None:
        ran.append("failing")
        raise RuntimeError("boom")

    async def working() -> None:
        ran.append("working")

    tasks = BackgroundTasks()
    dispatch_effects(
        tasks,
        [BookingEffect("first", failing), BookingEffect("second", working)],
    )
    await tasks()

    assert ran == ["failing", "working"]


def test_unconfigured_integrations_are_left_out() -> None:
    effects = build_booking_effects(SNAPSHOT, mail=NO_MAIL, ghl=NO_GHL)

    assert [effect.name for effect in effects] == ["calendar_event"]


def test_configured_integrations_are_included() -> None:
    effects = build_booking_effects(SNAPSHOT, mail=SMTP, ghl=GHL)

    assert [effect.name for effect in effects] == [
        "calendar_event",
        "crm_push",
        "customer_email",
        "admin_email",
    ]


def test_admin_email_needs_recipients() -> None:
    snapshot = BookingSnapshot(
        booking_id=SNAPSHOT.booking_id,
        account_id=SNAPSHOT.account_id,
        first_name="Riley",
        last_name="Agent",
        email="riley@example.com",
        address="123 Main St",
        start_at=START,
        core_end_at=START,
        time_zone="UTC",
        total_cents=0,
        service_name="HDR Photos",
    )

    effects = build_booking_effects(snapshot, mail=SMTP, ghl=NO_GHL)

    assert "admin_email" not in [effect.name for effect in effects]


def test_customer_email_uses_local_time() -> None:
    subject, body = notification_service.build_customer_booking_email(
        first_name="Riley",
        address=SNAPSHOT.address,
        start_at=START,
        time_zone="America/Edmonton",
        service_name="HDR Photos",
        category_name="Photography",
    )

    assert subject == "We received your booking request for 123 Main St, Calgary"
    assert "Hi Riley," in body
    assert "Date & time: October 18, 2026, at 1:30 p.m." in body
    assert "Photography\nHDR Photos" in body


def test_admin_email_lists_client_and_total() -> None:
    subject, body = notification_service.build_admin_booking_email(
        address="123 Main St",
        start_at=START,
        time_zone="UTC",
        service_name="HDR Photos",
        first_name="Riley",
        last_name="Agent",
        email="riley@example.com",
        total_cents=15750,
    )

    assert subject == "New Booking Request Received for 123 Main St"
    assert "Email: riley@example.com" in body
    assert "Total: $157.50" in body
    assert "Date & time: October 18, 2026, at 7:30 p.m." in body


def test_send_email_skips_without_smtp() -> None:
    assert notification_service.send_email(["a@example.com"], "s", "b", mail=NO_MAIL) is False
    assert notification_service.send_email([""], "s", "b", mail=SMTP) is False


def test_send_email_delivers_through_smtp(monkeypatch: pytest.MonkeyPatch) -> None:
    sent: list[object] = []

    class FakeSMTP:
        def __init__(self, host: str, port: int) -> None:
            assert (host, port) == ("smtp.example.com", 587)

        def __enter__(self) -> "FakeSMTP":
            return self

        def __exit__(self, *exc: object) -> None:
            return None

        def send_message(self, message) -> None:
            sent.append(message)

    monkeypatch.setattr(notification_service.smtplib, "SMTP", FakeSMTP)

    assert notification_service.send_email(
        ["riley@example.com"], "Booked", "Body", mail=SMTP
    )
    assert sent[0]["To"] == "riley@example.com"
    assert sent[0]["From"] == "studio@example.com"
