"""Versioned API router."""

from fastapi import APIRouter

from . import (
    auth,
    availability,
    bookings,
    catalog,
    health,
    integrations,
    promo_codes,
    public_booking,
)

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(public_booking.router, tags=["public-booking"])
router.include_router(catalog.router, tags=["catalog"])
router.include_router(promo_codes.router, tags=["promo-codes"])
router.include_router(availability.router, tags=["availability"])
router.include_router(bookings.router, tags=["bookings"])
router.include_router(integrations.router, tags=["integrations"])

__all__ = ["router"]
