"""Validation failures surfaced to public booking callers."""

from __future__ import annotations

import enum


class BookingErrorCode(str, enum.Enum):
    """Terminal, user-facing booking validation failures."""

    INVALID_CODE = "INVALID_CODE"
    NOT_YET_ACTIVE = "NOT_YET_ACTIVE"
    EXPIRED = "EXPIRED"
    USAGE_LIMIT_REACHED = "USAGE_LIMIT_REACHED"
    PER_CLIENT_LIMIT_REACHED = "PER_CLIENT_LIMIT_REACHED"
    PROMO_NOT_APPLICABLE = "PROMO_NOT_APPLICABLE"
    NO_VALID_SERVICES = "NO_VALID_SERVICES"
    MISSING_REQUIRED_FIELD = "MISSING_REQUIRED_FIELD"


_DEFAULT_MESSAGES: dict[BookingErrorCode, str] = {
    BookingErrorCode.INVALID_CODE: "Invalid promo code",
    BookingErrorCode.NOT_YET_ACTIVE: "Promo code is not active yet",
    BookingErrorCode.EXPIRED: "Promo code has expired",
    BookingErrorCode.USAGE_LIMIT_REACHED: "Promo code usage limit reached",
    BookingErrorCode.PER_CLIENT_LIMIT_REACHED: (
        "Promo code limit reached for this client"
    ),
    BookingErrorCode.PROMO_NOT_APPLICABLE: (
        "This promo code does not apply to the selected services"
    ),
    BookingErrorCode.NO_VALID_SERVICES: "No valid services",
    BookingErrorCode.MISSING_REQUIRED_FIELD: "Missing required fields",
}


class BookingValidationError(ValueError):
    """Raised when a booking or promo check fails; never retried."""

    def __init__(self, code: BookingErrorCode, message: str | None = None) -> None:
        self.code = code
        self.message = message or _DEFAULT_MESSAGES[code]
        super().__init__(self.message)

    def to_detail(self) -> dict[str, str]:
        return {"code": self.code.value, "message": self.message}


class BookingNotConfiguredError(ValueError):
    """Raised when an account has not saved its booking settings yet."""

    def __init__(self) -> None:
        super().__init__("Booking settings not configured")
