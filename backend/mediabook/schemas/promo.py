"""Promo code schemas."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator

from mediabook.models.promo import DiscountType


class PromoCodeBase(BaseModel):
    display_name: str = Field(min_length=1)
    code: str = Field(min_length=1, max_length=64)
    discount_type: DiscountType
    discount_value_cents: int | None = Field(default=None, ge=0)
    discount_rate_bps: int | None = Field(default=None, ge=1, le=10000)
    start_date: datetime | None = None
    end_date: datetime | None = None
    max_uses_total: int | None = Field(default=None, ge=1)
    max_uses_per_realtor: int | None = Field(default=None, ge=1)
    active: bool = True


class PromoCodeCreate(PromoCodeBase):
    service_ids: list[uuid.UUID] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_discount(self) -> "PromoCodeCreate":
        self.code = self.code.strip()
        self.display_name = self.display_name.strip()
        if self.discount_type is DiscountType.AMOUNT:
            if self.discount_value_cents is None:
                raise ValueError("discount_value_cents required for AMOUNT promos")
            self.discount_rate_bps = None
        else:
            if self.discount_rate_bps is None:
                raise ValueError("discount_rate_bps required for PERCENT promos")
            self.discount_value_cents = None
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValueError("start_date must be before end_date")
        return self


class PromoCodeUpdate(BaseModel):
    display_name: str | None = Field(default=None, min_length=1)
    code: str | None = Field(default=None, min_length=1, max_length=64)
    discount_type: DiscountType | None = None
    discount_value_cents: int | None = Field(default=None, ge=0)
    discount_rate_bps: int | None = Field(default=None, ge=1, le=10000)
    start_date: datetime | None = None
    end_date: datetime | None = None
    max_uses_total: int | None = Field(default=None, ge=1)
    max_uses_per_realtor: int | None = Field(default=None, ge=1)
    active: bool | None = None
    service_ids: list[uuid.UUID] | None = None


class PromoCodeRead(PromoCodeBase):
    id: uuid.UUID
    account_id: uuid.UUID
    service_ids: list[uuid.UUID]

    model_config = ConfigDict(from_attributes=True)
