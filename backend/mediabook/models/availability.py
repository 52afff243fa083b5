"""Booking settings, weekly availability and blackout models."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from mediabook.db.base import Base
from mediabook.models.mixins import TimestampMixin

if TYPE_CHECKING:  # pragma: no cover - typing only imports
    from mediabook.models.account import Account


class BookingSettings(TimestampMixin, Base):
    """Per-account scheduling configuration."""

    __tablename__ = "booking_settings"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4, unique=True
    )
    account_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    time_zone: Mapped[str] = mapped_column(String(64), nullable=False, default="UTC")
    lead_time_min: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    max_advance_days: Mapped[int] = mapped_column(Integer, nullable=False, default=60)
    default_buffer_min: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    google_calendar_id: Mapped[str | None] = mapped_column(String(255))

    account: Mapped["Account"] = relationship(
        "Account", back_populates="booking_settings"
    )


class AvailabilityRule(TimestampMixin, Base):
    """Weekly recurring window in which appointments may start and finish."""

    __tablename__ = "availability_rules"
    __table_args__ = (
        CheckConstraint("day_of_week BETWEEN 0 AND 6", name="ck_rule_day_of_week"),
        CheckConstraint("start_minutes < end_minutes", name="ck_rule_window"),
        Index("ix_availability_rules_account_day", "account_id", "day_of_week"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4, unique=True
    )
    account_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False
    )
    # 0 = Sunday ... 6 = Saturday
    day_of_week: Mapped[int] = mapped_column(Integer, nullable=False)
    start_minutes: Mapped[int] = mapped_column(Integer, nullable=False)
    end_minutes: Mapped[int] = mapped_column(Integer, nullable=False)
    time_zone: Mapped[str | None] = mapped_column(String(64))
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)


class Blackout(TimestampMixin, Base):
    """One-off block during which no appointment may overlap."""

    __tablename__ = "blackouts"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4, unique=True
    )
    account_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False
    )
    start_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    reason: Mapped[str | None] = mapped_column(String(255))
