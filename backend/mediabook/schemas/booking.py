"""Public booking and admin booking schemas."""

from __future__ import annotations

import uuid
from datetime import datetime

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, ConfigDict, Field, field_validator

from mediabook.models.booking import BookingStatus


class BookingSubmitRequest(BaseModel):
    """Public booking submission.

    Blank required strings are accepted here and rejected by the booking
    service with a ``MISSING_REQUIRED_FIELD`` code.
    """

    service_ids: list[uuid.UUID]
    slot_start: datetime
    promo_code: str | None = Field(default=None, max_length=64)

    address: str = Field(max_length=512)
    formatted_address: str | None = Field(default=None, max_length=512)
    lat: float | None = None
    lng: float | None = None
    city: str | None = Field(default=None, max_length=120)
    province: str | None = Field(default=None, max_length=120)
    postal_code: str | None = Field(default=None, max_length=32)
    country: str | None = Field(default=None, max_length=120)
    place_id: str | None = Field(default=None, max_length=255)
    property_size_sq_ft: int | None = Field(default=None, ge=0)
    notes: str | None = None

    contact_first_name: str = Field(max_length=120)
    contact_last_name: str = Field(max_length=120)
    contact_email: str = Field(max_length=320)
    contact_phone: str | None = Field(default=None, max_length=32)
    company: str | None = Field(default=None, max_length=255)

    @field_validator(
        "address",
        "contact_first_name",
        "contact_last_name",
        "contact_email",
        "promo_code",
        mode="before",
    )
    @classmethod
    def _strip(cls, value: object) -> object:
        return value.strip() if isinstance(value, str) else value

    @field_validator("contact_email")
    @classmethod
    def _check_email(cls, value: str) -> str:
        if not value:
            return value
        try:
            return validate_email(value, check_deliverability=False).normalized.lower()
        except EmailNotValidError as exc:
            raise ValueError(str(exc)) from exc


class BookingSubmitResponse(BaseModel):
    ok: bool = True
    booking_id: uuid.UUID
    subtotal_cents: int
    discount_cents: int
    tax_cents: int
    total_cents: int


class SlotsRequest(BaseModel):
    service_ids: list[uuid.UUID] = Field(default_factory=list)
    range_start: datetime | None = None
    range_end: datetime | None = None


class SlotRead(BaseModel):
    start: datetime
    end: datetime

    model_config = ConfigDict(from_attributes=True)


class SlotsResponse(BaseModel):
    slots: list[SlotRead]


class ValidatePromoRequest(BaseModel):
    code: str = ""
    service_ids: list[uuid.UUID] = Field(default_factory=list)
    contact_email: str | None = None


class ValidatePromoResponse(BaseModel):
    ok: bool = True
    promo_id: uuid.UUID
    discount_cents: int
    applies_to_service_ids: list[uuid.UUID]
    warning: str | None = None


class CatalogService(BaseModel):
    id: uuid.UUID
    name: str
    slug: str | None = None
    description: str | None = None
    price_cents: int
    duration_min: int
    min_sq_ft: int | None = None
    max_sq_ft: int | None = None
    tax_rates_bps: list[int]


class CatalogCategory(BaseModel):
    id: uuid.UUID | None = None
    name: str
    slug: str
    description: str | None = None
    services: list[CatalogService]


class CatalogSettings(BaseModel):
    time_zone: str
    lead_time_min: int
    max_advance_days: int

    model_config = ConfigDict(from_attributes=True)


class CatalogAvailability(BaseModel):
    day_of_week: int
    start_minutes: int
    end_minutes: int

    model_config = ConfigDict(from_attributes=True)


class CatalogResponse(BaseModel):
    account_name: str
    account_slug: str
    categories: list[CatalogCategory]
    settings: CatalogSettings | None = None
    availability: list[CatalogAvailability] = Field(default_factory=list)


class BookingItemRead(BaseModel):
    id: uuid.UUID
    service_id: uuid.UUID | None
    position: int
    service_name: str
    unit_price_cents: int
    discount_cents: int
    tax_cents: int

    model_config = ConfigDict(from_attributes=True)


class BookingRead(BaseModel):
    id: uuid.UUID
    account_id: uuid.UUID
    realtor_id: uuid.UUID
    status: BookingStatus
    start_at: datetime
    end_at: datetime
    time_zone: str
    property_address: str
    property_formatted_address: str | None = None
    property_city: str | None = None
    property_province: str | None = None
    property_postal_code: str | None = None
    property_size_sq_ft: int | None = None
    contact_name: str
    contact_email: str
    contact_phone: str | None = None
    company: str | None = None
    notes: str | None = None
    subtotal_cents: int
    discount_cents: int
    tax_cents: int
    total_cents: int
    applied_promo_code_id: uuid.UUID | None = None
    google_event_id: str | None = None
    items: list[BookingItemRead] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


class BookingUpdate(BaseModel):
    """Admin change to a booking; a new ``start_at`` moves the whole booking."""

    status: BookingStatus | None = None
    start_at: datetime | None = None
