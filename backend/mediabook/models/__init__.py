"""ORM models package export."""

from mediabook.models.account import Account
from mediabook.models.availability import AvailabilityRule, Blackout, BookingSettings
from mediabook.models.booking import Booking, BookingItem, BookingStatus
from mediabook.models.calendar_connection import CalendarConnection
from mediabook.models.catalog import Service, ServiceCategory, Tax, service_taxes
from mediabook.models.order import Order, OrderStatus
from mediabook.models.promo import DiscountType, PromoCode, promo_code_services
from mediabook.models.realtor import Realtor, RealtorAssignment
from mediabook.models.user import User, UserRole, UserStatus

__all__ = [
    "Account",
    "AvailabilityRule",
    "Blackout",
    "Booking",
    "BookingItem",
    "BookingSettings",
    "BookingStatus",
    "CalendarConnection",
    "DiscountType",
    "Order",
    "OrderStatus",
    "PromoCode",
    "Realtor",
    "RealtorAssignment",
    "Service",
    "ServiceCategory",
    "Tax",
    "User",
    "UserRole",
    "UserStatus",
    "promo_code_services",
    "service_taxes",
]
