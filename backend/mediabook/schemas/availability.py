"""Booking settings, availability rule and blackout schemas."""

from __future__ import annotations

import uuid
from datetime import datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def _check_time_zone(value: str | None) -> str | None:
    if value is None:
        return value
    try:
        ZoneInfo(value)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"Unknown time zone {value!r}") from exc
    return value


class BookingSettingsUpdate(BaseModel):
    time_zone: str = "UTC"
    lead_time_min: int = Field(default=0, ge=0)
    max_advance_days: int = Field(default=60, ge=1, le=365)
    default_buffer_min: int = Field(default=0, ge=0)
    google_calendar_id: str | None = None

    _tz = field_validator("time_zone")(_check_time_zone)


class BookingSettingsRead(BookingSettingsUpdate):
    account_id: uuid.UUID

    model_config = ConfigDict(from_attributes=True)


class AvailabilityRuleBase(BaseModel):
    day_of_week: int = Field(ge=0, le=6)
    start_minutes: int = Field(ge=0, le=24 * 60)
    end_minutes: int = Field(ge=0, le=24 * 60)
    time_zone: str | None = None
    active: bool = True

    _tz = field_validator("time_zone")(_check_time_zone)

    @model_validator(mode="after")
    def _check_window(self) -> "AvailabilityRuleBase":
        if self.start_minutes >= self.end_minutes:
            raise ValueError("start_minutes must be before end_minutes")
        return self


class AvailabilityRuleCreate(AvailabilityRuleBase):
    pass


class AvailabilityRuleRead(AvailabilityRuleBase):
    id: uuid.UUID
    account_id: uuid.UUID

    model_config = ConfigDict(from_attributes=True)


class BlackoutCreate(BaseModel):
    start_at: datetime
    end_at: datetime
    reason: str | None = None

    @model_validator(mode="after")
    def _check_range(self) -> "BlackoutCreate":
        if self.end_at <= self.start_at:
            raise ValueError("end_at must be after start_at")
        return self


class BlackoutRead(BlackoutCreate):
    id: uuid.UUID
    account_id: uuid.UUID

    model_config = ConfigDict(from_attributes=True)
