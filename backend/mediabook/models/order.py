"""Property order model derived from bookings or created by staff."""

from __future__ import annotations

import enum
import uuid

from sqlalchemy import Enum, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from mediabook.db.base import Base
from mediabook.models.mixins import TimestampMixin


class OrderStatus(str, enum.Enum):
    """Production states for a property order."""

    DRAFT = "draft"
    IN_PROGRESS = "in_progress"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class Order(TimestampMixin, Base):
    """Media delivery order for a single property."""

    __tablename__ = "orders"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4, unique=True
    )
    account_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False
    )
    realtor_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("realtors.id", ondelete="RESTRICT"), nullable=False
    )
    # Set when the order was derived from a public booking.
    booking_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("bookings.id", ondelete="SET NULL"), nullable=True, unique=True
    )
    slug: Mapped[str] = mapped_column(String(512), unique=True, nullable=False)
    status: Mapped[OrderStatus] = mapped_column(
        Enum(OrderStatus), default=OrderStatus.DRAFT, nullable=False
    )
    property_address: Mapped[str] = mapped_column(String(512), nullable=False)
    property_formatted_address: Mapped[str | None] = mapped_column(String(512))
    property_lat: Mapped[float | None] = mapped_column(Float)
    property_lng: Mapped[float | None] = mapped_column(Float)
    property_city: Mapped[str | None] = mapped_column(String(120))
    property_province: Mapped[str | None] = mapped_column(String(120))
    property_postal_code: Mapped[str | None] = mapped_column(String(32))
    property_country: Mapped[str | None] = mapped_column(String(120))
    property_place_id: Mapped[str | None] = mapped_column(String(255))
    property_size: Mapped[int | None] = mapped_column(Integer)
    description: Mapped[str | None] = mapped_column(Text)
    discount_cents: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    applied_promo_code_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("promo_codes.id", ondelete="SET NULL"), nullable=True
    )
