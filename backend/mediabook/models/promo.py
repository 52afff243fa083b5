"""Promo code models."""

from __future__ import annotations

import enum
import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    Table,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from mediabook.db.base import Base
from mediabook.models.mixins import TimestampMixin

if TYPE_CHECKING:  # pragma: no cover - typing only imports
    from mediabook.models.account import Account
    from mediabook.models.catalog import Service


class DiscountType(str, enum.Enum):
    """Kinds of discount a promo code grants."""

    AMOUNT = "AMOUNT"
    PERCENT = "PERCENT"


promo_code_services = Table(
    "promo_code_services",
    Base.metadata,
    Column(
        "promo_code_id",
        ForeignKey("promo_codes.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "service_id",
        ForeignKey("services.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


class PromoCode(TimestampMixin, Base):
    """Account-scoped promo code definition."""

    __tablename__ = "promo_codes"
    __table_args__ = (UniqueConstraint("account_id", "code", name="uq_promo_code"),)

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4, unique=True
    )
    account_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False
    )
    display_name: Mapped[str] = mapped_column(String(255), nullable=False)
    code: Mapped[str] = mapped_column(String(64), nullable=False)
    discount_type: Mapped[DiscountType] = mapped_column(
        Enum(DiscountType), nullable=False
    )
    discount_value_cents: Mapped[int | None] = mapped_column(Integer)
    discount_rate_bps: Mapped[int | None] = mapped_column(Integer)
    start_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    end_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    max_uses_total: Mapped[int | None] = mapped_column(Integer)
    max_uses_per_realtor: Mapped[int | None] = mapped_column(Integer)
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    account: Mapped["Account"] = relationship("Account", back_populates="promo_codes")
    services: Mapped[list["Service"]] = relationship(
        "Service", secondary=promo_code_services
    )

    @property
    def service_ids(self) -> list[uuid.UUID]:
        return [service.id for service in self.services]
