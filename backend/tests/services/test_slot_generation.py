"""Tests for appointment duration and slot generation."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import pytest

from mediabook.integrations.google_calendar import BusyWindow
from mediabook.services.pricing_service import ServiceLine
from mediabook.services.slot_service import (
    Slot,
    clamp_range,
    compose_duration,
    drop_busy,
    generate_slots,
)

# 2026-10-18 is a Sunday.
SUNDAY = datetime(2026, 10, 18, tzinfo=UTC)


@dataclass
class Settings:
    time_zone: str = "UTC"
    lead_time_min: int = 0
    max_advance_days: int = 60
    default_buffer_min: int = 0


@dataclass
class Rule:
    day_of_week: int
    start_minutes: int
    end_minutes: int
    time_zone: str | None = None
    active: bool = True


@dataclass
class Block:
    start_at: datetime
    end_at: datetime


HOUR_SHOOT = [ServiceLine(id=uuid.uuid4(), name="Photos", price_cents=100, duration_min=60)]


def _at(hour: int, minute: int = 0, *, day: datetime = SUNDAY) -> datetime:
    return day.replace(hour=hour, minute=minute)


def _starts(slots: list[Slot]) -> list[datetime]:
    return [slot.start for slot in slots]


def _sunday_slots(rules, *, settings=None, blackouts=(), now=None, lines=HOUR_SHOOT):
    return generate_slots(
        SUNDAY,
        SUNDAY + timedelta(hours=23, minutes=59),
        settings or Settings(),
        rules,
        list(blackouts),
        lines,
        now=now or _at(6),
    )


def test_compose_duration_adds_default_buffer_once() -> None:
    lines = [
        ServiceLine(
            id=uuid.uuid4(),
            name="Photos",
            price_cents=0,
            duration_min=60,
            buffer_before_min=10,
            buffer_after_min=5,
        ),
        ServiceLine(id=uuid.uuid4(), name="Drone", price_cents=0, duration_min=30),
    ]

    duration = compose_duration(lines, 15)

    assert duration.core_min == 90
    assert duration.before_min == 10
    assert duration.after_min == 5
    assert duration.total_min == 120


def test_slots_step_through_rule_window() -> None:
    slots = _sunday_slots([Rule(day_of_week=0, start_minutes=9 * 60, end_minutes=12 * 60)])

    assert _starts(slots) == [_at(9), _at(9, 30), _at(10), _at(10, 30), _at(11)]
    assert all(slot.end - slot.start == timedelta(minutes=60) for slot in slots)


def test_rules_for_other_days_are_ignored() -> None:
    monday_rule = Rule(day_of_week=1, start_minutes=9 * 60, end_minutes=12 * 60)
    inactive = Rule(day_of_week=0, start_minutes=9 * 60, end_minutes=12 * 60, active=False)

    assert _sunday_slots([monday_rule, inactive]) == []


def test_default_buffer_lengthens_each_slot() -> None:
    slots = _sunday_slots(
        [Rule(day_of_week=0, start_minutes=9 * 60, end_minutes=11 * 60)],
        settings=Settings(default_buffer_min=30),
    )

    assert _starts(slots) == [_at(9), _at(9, 30)]
    assert slots[0].end == _at(10, 30)


def test_lead_time_hides_early_slots() -> None:
    slots = _sunday_slots(
        [Rule(day_of_week=0, start_minutes=9 * 60, end_minutes=12 * 60)],
        settings=Settings(lead_time_min=30),
        now=_at(9, 40),
    )

    assert _starts(slots) == [_at(10, 30), _at(11)]


def test_blackout_removes_overlapping_slots_only() -> None:
    slots = _sunday_slots(
        [Rule(day_of_week=0, start_minutes=9 * 60, end_minutes=12 * 60)],
        blackouts=[Block(start_at=_at(10), end_at=_at(10, 30))],
    )

    assert _starts(slots) == [_at(9), _at(10, 30), _at(11)]


def test_overlapping_rules_do_not_duplicate_slots() -> None:
    rule = Rule(day_of_week=0, start_minutes=9 * 60, end_minutes=11 * 60)
    wider = Rule(day_of_week=0, start_minutes=9 * 60, end_minutes=12 * 60)

    slots = _sunday_slots([rule, wider])

    assert len(slots) == len(set(slots)) == 5
    assert slots == sorted(slots)


def test_windows_are_read_in_account_time_zone() -> None:
    edmonton = Settings(time_zone="America/Edmonton")
    local_midnight = datetime(2026, 10, 18, 6, 0, tzinfo=UTC)

    slots = generate_slots(
        local_midnight,
        local_midnight + timedelta(hours=23, minutes=59),
        edmonton,
        [Rule(day_of_week=0, start_minutes=9 * 60, end_minutes=10 * 60)],
        [],
        HOUR_SHOOT,
        now=_at(0),
    )

    # 9:00 MDT is 15:00 UTC.
    assert _starts(slots) == [datetime(2026, 10, 18, 15, 0, tzinfo=UTC)]


def test_rule_time_zone_overrides_settings() -> None:
    slots = _sunday_slots(
        [
            Rule(
                day_of_week=0,
                start_minutes=9 * 60,
                end_minutes=10 * 60,
                time_zone="America/Edmonton",
            )
        ],
        now=_at(0),
    )

    assert _starts(slots) == [_at(15)]


def test_advance_window_limits_future_slots() -> None:
    rules = [Rule(day_of_week=day, start_minutes=9 * 60, end_minutes=10 * 60) for day in range(7)]

    slots = generate_slots(
        SUNDAY,
        SUNDAY + timedelta(days=7),
        Settings(max_advance_days=1),
        rules,
        [],
        HOUR_SHOOT,
        now=_at(6),
    )

    assert _starts(slots) == [_at(9)]


def test_interval_must_be_positive() -> None:
    with pytest.raises(ValueError):
        generate_slots(SUNDAY, SUNDAY, Settings(), [], [], HOUR_SHOOT, now=SUNDAY, interval_min=0)


def test_clamp_range_defaults_to_advance_window() -> None:
    start, end = clamp_range(None, None, now=SUNDAY, max_advance_days=14)

    assert start == SUNDAY
    assert end == SUNDAY + timedelta(days=14)


def test_clamp_range_caps_long_requests() -> None:
    start, end = clamp_range(
        SUNDAY, SUNDAY + timedelta(days=200), now=SUNDAY, max_advance_days=365, cap_days=60
    )
    assert end == start + timedelta(days=60)

    start, end = clamp_range(
        SUNDAY + timedelta(days=3), SUNDAY, now=SUNDAY, max_advance_days=30
    )
    assert end == start


def test_drop_busy_filters_external_conflicts() -> None:
    slots = [
        Slot(start=_at(9), end=_at(10)),
        Slot(start=_at(10), end=_at(11)),
        Slot(start=_at(11), end=_at(12)),
    ]
    busy = [BusyWindow(start=_at(10, 15), end=_at(10, 45))]

    assert drop_busy(slots, busy) == [slots[0], slots[2]]
    assert drop_busy(slots, []) == slots


def test_slot_serializes_iso_strings() -> None:
    slot = Slot(start=_at(9), end=_at(10))
    assert slot.to_dict() == {
        "start": "2026-10-18T09:00:00+00:00",
        "end": "2026-10-18T10:00:00+00:00",
    }
