"""Service catalog models: categories, services and taxes."""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
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


service_taxes = Table(
    "service_taxes",
    Base.metadata,
    Column(
        "service_id",
        ForeignKey("services.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "tax_id",
        ForeignKey("taxes.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


class ServiceCategory(TimestampMixin, Base):
    """Grouping shown on the public booking page."""

    __tablename__ = "service_categories"
    __table_args__ = (
        UniqueConstraint("account_id", "slug", name="uq_service_category_slug"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4, unique=True
    )
    account_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(String(2048))
    sort_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    services: Mapped[list["Service"]] = relationship(
        "Service", back_populates="category"
    )


class Tax(TimestampMixin, Base):
    """Tax rate in basis points that can be linked to services."""

    __tablename__ = "taxes"
    __table_args__ = (
        CheckConstraint("rate_bps BETWEEN 0 AND 10000", name="ck_tax_rate_bps"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4, unique=True
    )
    account_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    rate_bps: Mapped[int] = mapped_column(Integer, nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    account: Mapped["Account"] = relationship("Account", back_populates="taxes")


class Service(TimestampMixin, Base):
    """Bookable shoot service priced in cents."""

    __tablename__ = "services"
    __table_args__ = (
        CheckConstraint("price_cents >= 0", name="ck_service_price"),
        CheckConstraint("duration_min >= 0", name="ck_service_duration"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4, unique=True
    )
    account_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False
    )
    category_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("service_categories.id", ondelete="SET NULL"), nullable=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str | None] = mapped_column(String(255))
    description: Mapped[str | None] = mapped_column(String(2048))
    price_cents: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    duration_min: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    buffer_before_min: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    buffer_after_min: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    min_sq_ft: Mapped[int | None] = mapped_column(Integer)
    max_sq_ft: Mapped[int | None] = mapped_column(Integer)
    sort_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    account: Mapped["Account"] = relationship("Account", back_populates="services")
    category: Mapped["ServiceCategory | None"] = relationship(
        "ServiceCategory", back_populates="services"
    )
    taxes: Mapped[list["Tax"]] = relationship("Tax", secondary=service_taxes)

    @property
    def tax_ids(self) -> list[uuid.UUID]:
        return [tax.id for tax in self.taxes]

    @property
    def tax_rates_bps(self) -> list[int]:
        return [tax.rate_bps for tax in self.taxes if tax.active]
