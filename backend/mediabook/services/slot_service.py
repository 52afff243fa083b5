"""Appointment duration composition and open slot generation.

Slots are generated from weekly availability rules in the account's time
zone. A slot covers the full blocking window (core work, every service
buffer and the account default buffer); only the core duration is shown on
the external calendar event.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta
from typing import Protocol
from zoneinfo import ZoneInfo

import httpx
from sqlalchemy.ext.asyncio import AsyncSession

from mediabook.core.config import get_settings
from mediabook.integrations.google_calendar import BusyWindow, GoogleCalendarError
from mediabook.models import Account
from mediabook.services import availability_service, calendar_service
from mediabook.services.booking_errors import BookingErrorCode, BookingValidationError
from mediabook.services.catalog_service import load_booking_lines
from mediabook.services.pricing_service import ServiceLine
from mediabook.utils.datetimes import normalize_datetime, utcnow

logger = logging.getLogger(__name__)


class SchedulingSettings(Protocol):
    time_zone: str
    lead_time_min: int
    max_advance_days: int
    default_buffer_min: int


class WeeklyRule(Protocol):
    day_of_week: int
    start_minutes: int
    end_minutes: int
    time_zone: str | None
    active: bool


class Blocked(Protocol):
    start_at: datetime
    end_at: datetime


@dataclass(frozen=True, slots=True)
class DurationBreakdown:
    core_min: int
    before_min: int
    after_min: int
    default_buffer_min: int

    @property
    def total_min(self) -> int:
        return self.core_min + self.before_min + self.after_min + self.default_buffer_min


def compose_duration(
    lines: Iterable[ServiceLine], default_buffer_min: int
) -> DurationBreakdown:
    """Sum service durations and buffers, adding the default buffer once."""
    selected = list(lines)
    return DurationBreakdown(
        core_min=sum(line.duration_min for line in selected),
        before_min=sum(line.buffer_before_min for line in selected),
        after_min=sum(line.buffer_after_min for line in selected),
        default_buffer_min=default_buffer_min,
    )


@dataclass(frozen=True, slots=True, order=True)
class Slot:
    start: datetime
    end: datetime

    def to_dict(self) -> dict[str, str]:
        return {"start": self.start.isoformat(), "end": self.end.isoformat()}


def _overlaps(start: datetime, end: datetime, other_start: datetime, other_end: datetime) -> bool:
    return start < other_end and end > other_start


def _weekday(day: date) -> int:
    # date.weekday() is Monday=0; rules use Sunday=0.
    return (day.weekday() + 1) % 7


def _days(first: date, last: date) -> Iterable[date]:
    current = first
    while current <= last:
        yield current
        current += timedelta(days=1)


def generate_slots(
    range_start: datetime,
    range_end: datetime,
    settings: SchedulingSettings,
    rules: Sequence[WeeklyRule],
    blackouts: Sequence[Blocked],
    lines: Sequence[ServiceLine],
    *,
    now: datetime,
    interval_min: int = 30,
) -> list[Slot]:
    """Walk every day of the range and emit the slots each rule allows.

    A slot is kept when it starts no earlier than ``now`` plus the lead time,
    no later than ``now`` plus the advance window, and does not intersect a
    blackout. Overlapping rules yield each slot once.
    """
    if interval_min <= 0:
        raise ValueError("Slot interval must be positive")
    zone = ZoneInfo(settings.time_zone or "UTC")
    total = timedelta(minutes=compose_duration(lines, settings.default_buffer_min).total_min)
    step = timedelta(minutes=interval_min)
    current = normalize_datetime(now)
    lead_ready = current + timedelta(minutes=settings.lead_time_min)
    advance_limit = current + timedelta(days=settings.max_advance_days)
    blocked = [
        (normalize_datetime(item.start_at), normalize_datetime(item.end_at))
        for item in blackouts
    ]

    first_day = normalize_datetime(range_start).astimezone(zone).date()
    last_day = normalize_datetime(range_end).astimezone(zone).date()
    found: set[Slot] = set()
    for day in _days(first_day, last_day):
        weekday = _weekday(day)
        for rule in rules:
            if not rule.active or rule.day_of_week != weekday:
                continue
            rule_zone = ZoneInfo(rule.time_zone) if rule.time_zone else zone
            midnight = datetime(day.year, day.month, day.day, tzinfo=rule_zone)
            window_start = (midnight + timedelta(minutes=rule.start_minutes)).astimezone(UTC)
            window_end = (midnight + timedelta(minutes=rule.end_minutes)).astimezone(UTC)

            start = window_start
            while start + total <= window_end:
                end = start + total
                if start >= lead_ready and start <= advance_limit and not any(
                    _overlaps(start, end, b_start, b_end) for b_start, b_end in blocked
                ):
                    found.add(Slot(start=start, end=end))
                start += step
    return sorted(found)


def clamp_range(
    range_start: datetime | None,
    range_end: datetime | None,
    *,
    now: datetime,
    max_advance_days: int,
    cap_days: int = 60,
) -> tuple[datetime, datetime]:
    """Sanitize a requested window before generating slots.

    Missing bounds default to ``now`` and the end of the advance window; the
    end is clamped to the advance window and to ``cap_days`` after the start,
    and never precedes the start.
    """
    current = normalize_datetime(now)
    start = normalize_datetime(range_start) if range_start else current
    max_end = current + timedelta(days=max_advance_days)
    end = normalize_datetime(range_end) if range_end else max_end
    latest = min(max_end, start + timedelta(days=cap_days))
    if end > latest:
        end = latest
    if end < start:
        end = start
    return start, end


def drop_busy(slots: Sequence[Slot], busy: Sequence[BusyWindow]) -> list[Slot]:
    """Remove slots overlapping any externally busy window."""
    if not busy:
        return list(slots)
    return [
        slot
        for slot in slots
        if not any(_overlaps(slot.start, slot.end, item.start, item.end) for item in busy)
    ]


async def list_open_slots(
    session: AsyncSession,
    *,
    account: Account,
    service_ids: Sequence[uuid.UUID],
    range_start: datetime | None = None,
    range_end: datetime | None = None,
    now: datetime | None = None,
    calendar_transport: httpx.AsyncBaseTransport | None = None,
) -> list[Slot]:
    """Open slots for a service selection, minus Google Calendar busy time."""
    app_settings = get_settings()
    settings = await availability_service.require_booking_settings(
        session, account_id=account.id
    )
    lines = await load_booking_lines(
        session, account_id=account.id, service_ids=service_ids
    )
    if not lines:
        raise BookingValidationError(BookingErrorCode.NO_VALID_SERVICES)

    current = now or utcnow()
    start, end = clamp_range(
        range_start,
        range_end,
        now=current,
        max_advance_days=settings.max_advance_days,
        cap_days=app_settings.slot_range_cap_days,
    )
    rules = await availability_service.list_rules(
        session, account_id=account.id, active_only=True
    )
    blackouts = await availability_service.list_blackouts(session, account_id=account.id)
    slots = generate_slots(
        start,
        end,
        settings,
        rules,
        blackouts,
        lines,
        now=current,
        interval_min=app_settings.slot_interval_minutes,
    )

    client = await calendar_service.open_client(
        session, account_id=account.id, transport=calendar_transport
    )
    if client is None or not slots:
        return slots
    try:
        busy = await client.free_busy(
            calendar_id=settings.google_calendar_id,
            time_min=start,
            time_max=max(end, slots[-1].end),
            time_zone=settings.time_zone,
        )
    except (GoogleCalendarError, httpx.HTTPError):
        logger.warning(
            "Google free/busy lookup failed; using internal availability only",
            exc_info=True,
        )
        return slots
    await calendar_service.persist_refreshed_tokens(
        session, account_id=account.id, client=client
    )
    return drop_busy(slots, busy)
