"""Schemas for service categories, services and taxes."""

from __future__ import annotations

import uuid

from pydantic import BaseModel, ConfigDict, Field, model_validator


class TaxBase(BaseModel):
    name: str = Field(min_length=1)
    rate_bps: int = Field(ge=0, le=10000)
    active: bool = True


class TaxCreate(TaxBase):
    pass


class TaxUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1)
    rate_bps: int | None = Field(default=None, ge=0, le=10000)
    active: bool | None = None


class TaxRead(TaxBase):
    id: uuid.UUID
    account_id: uuid.UUID

    model_config = ConfigDict(from_attributes=True)


class ServiceCategoryBase(BaseModel):
    name: str = Field(min_length=1)
    slug: str | None = None
    description: str | None = None
    sort_order: int = 0
    active: bool = True


class ServiceCategoryCreate(ServiceCategoryBase):
    pass


class ServiceCategoryUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1)
    slug: str | None = None
    description: str | None = None
    sort_order: int | None = None
    active: bool | None = None


class ServiceCategoryRead(ServiceCategoryBase):
    id: uuid.UUID
    account_id: uuid.UUID
    slug: str

    model_config = ConfigDict(from_attributes=True)


class ServiceBase(BaseModel):
    name: str = Field(min_length=1)
    slug: str | None = None
    description: str | None = None
    category_id: uuid.UUID | None = None
    price_cents: int = Field(ge=0)
    duration_min: int = Field(default=0, ge=0)
    buffer_before_min: int = Field(default=0, ge=0)
    buffer_after_min: int = Field(default=0, ge=0)
    min_sq_ft: int | None = Field(default=None, ge=0)
    max_sq_ft: int | None = Field(default=None, ge=0)
    sort_order: int = 0
    active: bool = True

    @model_validator(mode="after")
    def _check_sq_ft(self) -> "ServiceBase":
        if (
            self.min_sq_ft is not None
            and self.max_sq_ft is not None
            and self.min_sq_ft > self.max_sq_ft
        ):
            raise ValueError("min_sq_ft must not exceed max_sq_ft")
        return self


class ServiceCreate(ServiceBase):
    tax_ids: list[uuid.UUID] = Field(default_factory=list)


class ServiceUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1)
    slug: str | None = None
    description: str | None = None
    category_id: uuid.UUID | None = None
    price_cents: int | None = Field(default=None, ge=0)
    duration_min: int | None = Field(default=None, ge=0)
    buffer_before_min: int | None = Field(default=None, ge=0)
    buffer_after_min: int | None = Field(default=None, ge=0)
    min_sq_ft: int | None = Field(default=None, ge=0)
    max_sq_ft: int | None = Field(default=None, ge=0)
    sort_order: int | None = None
    active: bool | None = None
    tax_ids: list[uuid.UUID] | None = None


class ServiceRead(ServiceBase):
    id: uuid.UUID
    account_id: uuid.UUID
    tax_ids: list[uuid.UUID]

    model_config = ConfigDict(from_attributes=True)
