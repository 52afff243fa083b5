"""User schemas."""

from __future__ import annotations

import uuid

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from mediabook.models.user import UserRole, UserStatus


class UserCreate(BaseModel):
    account_id: uuid.UUID
    email: EmailStr
    password: str = Field(min_length=8)
    first_name: str
    last_name: str
    role: UserRole = UserRole.ADMIN
    status: UserStatus = UserStatus.ACTIVE


class UserRead(BaseModel):
    id: uuid.UUID
    account_id: uuid.UUID
    email: EmailStr
    first_name: str
    last_name: str
    role: UserRole
    status: UserStatus

    model_config = ConfigDict(from_attributes=True)
