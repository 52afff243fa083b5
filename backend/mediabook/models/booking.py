"""Booking and booking line item models."""

from __future__ import annotations

import enum
import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from mediabook.db.base import Base
from mediabook.models.mixins import TimestampMixin

if TYPE_CHECKING:  # pragma: no cover - typing only imports
    from mediabook.models.promo import PromoCode
    from mediabook.models.realtor import Realtor


class BookingStatus(str, enum.Enum):
    """Lifecycle states for a booking."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class Booking(TimestampMixin, Base):
    """A priced appointment request submitted through the public booking page."""

    __tablename__ = "bookings"
    __table_args__ = (
        Index("ix_bookings_account_start", "account_id", "start_at"),
        Index("ix_bookings_promo", "applied_promo_code_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4, unique=True
    )
    account_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False
    )
    realtor_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("realtors.id", ondelete="RESTRICT"), nullable=False
    )
    status: Mapped[BookingStatus] = mapped_column(
        Enum(BookingStatus), default=BookingStatus.CONFIRMED, nullable=False
    )
    start_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    time_zone: Mapped[str] = mapped_column(String(64), nullable=False, default="UTC")

    property_address: Mapped[str] = mapped_column(String(512), nullable=False)
    property_formatted_address: Mapped[str | None] = mapped_column(String(512))
    property_lat: Mapped[float | None] = mapped_column(Float)
    property_lng: Mapped[float | None] = mapped_column(Float)
    property_city: Mapped[str | None] = mapped_column(String(120))
    property_province: Mapped[str | None] = mapped_column(String(120))
    property_postal_code: Mapped[str | None] = mapped_column(String(32))
    property_country: Mapped[str | None] = mapped_column(String(120))
    property_place_id: Mapped[str | None] = mapped_column(String(255))
    property_size_sq_ft: Mapped[int | None] = mapped_column(Integer)

    contact_name: Mapped[str] = mapped_column(String(255), nullable=False)
    contact_email: Mapped[str] = mapped_column(String(320), nullable=False)
    contact_phone: Mapped[str | None] = mapped_column(String(32))
    company: Mapped[str | None] = mapped_column(String(255))
    notes: Mapped[str | None] = mapped_column(Text)

    subtotal_cents: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    discount_cents: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    tax_cents: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_cents: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    applied_promo_code_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("promo_codes.id", ondelete="SET NULL"), nullable=True
    )
    google_event_id: Mapped[str | None] = mapped_column(String(255))

    items: Mapped[list["BookingItem"]] = relationship(
        "BookingItem",
        back_populates="booking",
        cascade="all, delete-orphan",
        order_by="BookingItem.position",
    )
    realtor: Mapped["Realtor"] = relationship("Realtor")
    applied_promo_code: Mapped["PromoCode | None"] = relationship("PromoCode")


class BookingItem(TimestampMixin, Base):
    """One selected service on a booking with its price, discount share and tax."""

    __tablename__ = "booking_items"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4, unique=True
    )
    booking_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False
    )
    service_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("services.id", ondelete="SET NULL"), nullable=True
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    service_name: Mapped[str] = mapped_column(String(255), nullable=False)
    unit_price_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    discount_cents: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    tax_cents: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    booking: Mapped["Booking"] = relationship("Booking", back_populates="items")
