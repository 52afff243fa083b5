"""User model for studio staff identities."""
from __future__ import annotations

import enum
import uuid
from typing import TYPE_CHECKING

from sqlalchemy import Enum, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from mediabook.db.base import Base
from mediabook.models.mixins import TimestampMixin

if TYPE_CHECKING:  # pragma: no cover - typing only imports
    from mediabook.models.account import Account


class UserRole(str, enum.Enum):
    """Role enumeration for platform permissions."""

    SUPERADMIN = "superadmin"
    ADMIN = "admin"
    STAFF = "staff"


class UserStatus(str, enum.Enum):
    """Enumerates user activation states."""

    INVITED = "invited"
    ACTIVE = "active"
    SUSPENDED = "suspended"


class User(TimestampMixin, Base):
    """User entity for authentication and authorization."""

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4, unique=True
    )
    account_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False
    )
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    first_name: Mapped[str] = mapped_column(String(120), nullable=False)
    last_name: Mapped[str] = mapped_column(String(120), nullable=False)
    role: Mapped[UserRole] = mapped_column(Enum(UserRole), nullable=False)
    status: Mapped[UserStatus] = mapped_column(
        Enum(UserStatus), default=UserStatus.INVITED, nullable=False
    )

    account: Mapped["Account"] = relationship("Account", back_populates="users")

    @property
    def is_admin(self) -> bool:
        return self.role in {UserRole.ADMIN, UserRole.SUPERADMIN}
