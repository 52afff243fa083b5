"""Order and realtor read schemas."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict

from mediabook.models.order import OrderStatus


class OrderRead(BaseModel):
    id: uuid.UUID
    account_id: uuid.UUID
    realtor_id: uuid.UUID
    booking_id: uuid.UUID | None = None
    slug: str
    status: OrderStatus
    property_address: str
    property_formatted_address: str | None = None
    property_city: str | None = None
    property_size: int | None = None
    description: str | None = None
    discount_cents: int
    applied_promo_code_id: uuid.UUID | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class RealtorRead(BaseModel):
    id: uuid.UUID
    email: str
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None
    company_name: str | None = None

    model_config = ConfigDict(from_attributes=True)
