"""Realtor client models."""

from __future__ import annotations

import uuid

from sqlalchemy import ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from mediabook.db.base import Base
from mediabook.models.mixins import TimestampMixin


class Realtor(TimestampMixin, Base):
    """A realtor who books shoots; identified globally by email."""

    __tablename__ = "realtors"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4, unique=True
    )
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False)
    first_name: Mapped[str | None] = mapped_column(String(120))
    last_name: Mapped[str | None] = mapped_column(String(120))
    phone: Mapped[str | None] = mapped_column(String(32))
    company_name: Mapped[str | None] = mapped_column(String(255))

    assignments: Mapped[list["RealtorAssignment"]] = relationship(
        "RealtorAssignment", back_populates="realtor", cascade="all, delete-orphan"
    )

    @property
    def display_name(self) -> str:
        name = f"{self.first_name or ''} {self.last_name or ''}".strip()
        return name or self.email or "client"


class RealtorAssignment(TimestampMixin, Base):
    """Links a realtor to each studio account they have booked with."""

    __tablename__ = "realtor_assignments"
    __table_args__ = (
        UniqueConstraint("account_id", "realtor_id", name="uq_realtor_assignment"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4, unique=True
    )
    account_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False
    )
    realtor_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("realtors.id", ondelete="CASCADE"), nullable=False
    )

    realtor: Mapped["Realtor"] = relationship("Realtor", back_populates="assignments")
