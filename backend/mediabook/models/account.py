"""Account model representing a studio tenant that takes bookings."""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from mediabook.db.base import Base
from mediabook.models.mixins import TimestampMixin


if TYPE_CHECKING:  # pragma: no cover - typing only imports
    from mediabook.models.availability import BookingSettings
    from mediabook.models.catalog import Service, Tax
    from mediabook.models.promo import PromoCode
    from mediabook.models.user import User


class Account(TimestampMixin, Base):
    """A studio account; ``slug`` is its public booking handle."""

    __tablename__ = "accounts"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4, unique=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    contact_email: Mapped[str | None] = mapped_column(String(320))

    users: Mapped[list["User"]] = relationship(
        "User", back_populates="account", cascade="all, delete-orphan"
    )
    booking_settings: Mapped["BookingSettings | None"] = relationship(
        "BookingSettings",
        back_populates="account",
        uselist=False,
        cascade="all, delete-orphan",
    )
    services: Mapped[list["Service"]] = relationship(
        "Service", back_populates="account", cascade="all, delete-orphan"
    )
    taxes: Mapped[list["Tax"]] = relationship(
        "Tax", back_populates="account", cascade="all, delete-orphan"
    )
    promo_codes: Mapped[list["PromoCode"]] = relationship(
        "PromoCode", back_populates="account", cascade="all, delete-orphan"
    )
