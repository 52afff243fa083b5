"""Unauthenticated booking endpoints addressed by account slug."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from mediabook.api import deps
from mediabook.models import Account
from mediabook.schemas.booking import (
    BookingSubmitRequest,
    BookingSubmitResponse,
    CatalogAvailability,
    CatalogResponse,
    CatalogSettings,
    SlotRead,
    SlotsRequest,
    SlotsResponse,
    ValidatePromoRequest,
    ValidatePromoResponse,
)
from mediabook.services import availability_service, catalog_service
from mediabook.services.booking_effects import dispatch_effects
from mediabook.services.booking_errors import (
    BookingErrorCode,
    BookingNotConfiguredError,
    BookingValidationError,
)
from mediabook.services.booking_service import submit_booking
from mediabook.services.promo_service import validate_promo_for_selection
from mediabook.services.slot_service import list_open_slots
from mediabook.utils.datetimes import utcnow

router = APIRouter(prefix="/public/booking/{slug}")
logger = logging.getLogger(__name__)


async def _get_account(session: AsyncSession, slug: str) -> Account:
    account = await session.scalar(select(Account).where(Account.slug == slug))
    if account is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Account not found")
    return account


def _validation_error(exc: BookingValidationError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.to_detail())


def _not_configured(exc: BookingNotConfiguredError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))


@router.get(
    "/catalog",
    response_model=CatalogResponse,
    summary="Public service catalog",
    dependencies=[deps.DEFAULT_RATE_LIMIT],
)
async def get_catalog(
    slug: str,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
) -> CatalogResponse:
    account = await _get_account(session, slug)
    categories = await catalog_service.list_public_catalog(session, account_id=account.id)
    settings = await availability_service.get_booking_settings(
        session, account_id=account.id
    )
    rules = await availability_service.list_rules(
        session, account_id=account.id, active_only=True
    )
    return CatalogResponse(
        account_name=account.name,
        account_slug=account.slug,
        categories=categories,
        settings=CatalogSettings.model_validate(settings) if settings else None,
        availability=[CatalogAvailability.model_validate(rule) for rule in rules],
    )


@router.post(
    "/slots",
    response_model=SlotsResponse,
    summary="Open appointment slots",
    dependencies=[deps.DEFAULT_RATE_LIMIT],
)
async def get_slots(
    slug: str,
    payload: SlotsRequest,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
) -> SlotsResponse:
    account = await _get_account(session, slug)
    if not payload.service_ids:
        raise _validation_error(
            BookingValidationError(
                BookingErrorCode.MISSING_REQUIRED_FIELD, "No services selected"
            )
        )
    try:
        slots = await list_open_slots(
            session,
            account=account,
            service_ids=payload.service_ids,
            range_start=payload.range_start,
            range_end=payload.range_end,
        )
    except BookingValidationError as exc:
        raise _validation_error(exc) from exc
    except BookingNotConfiguredError as exc:
        raise _not_configured(exc) from exc
    return SlotsResponse(slots=[SlotRead.model_validate(slot) for slot in slots])


@router.post(
    "/validate-promo",
    response_model=ValidatePromoResponse,
    summary="Preview a promo code",
    dependencies=[deps.BOOKING_RATE_LIMIT],
)
async def validate_promo(
    slug: str,
    payload: ValidatePromoRequest,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
) -> ValidatePromoResponse:
    account = await _get_account(session, slug)
    try:
        preview = await validate_promo_for_selection(
            session,
            account_id=account.id,
            code=payload.code,
            service_ids=payload.service_ids,
            contact_email=payload.contact_email,
            now=utcnow(),
        )
    except BookingValidationError as exc:
        raise _validation_error(exc) from exc
    return ValidatePromoResponse(
        promo_id=preview.promo_id,
        discount_cents=preview.discount_cents,
        applies_to_service_ids=preview.applies_to_service_ids,
        warning=preview.warning,
    )


@router.post(
    "/submit",
    response_model=BookingSubmitResponse,
    summary="Submit a booking",
    dependencies=[deps.BOOKING_RATE_LIMIT],
)
async def submit(
    slug: str,
    payload: BookingSubmitRequest,
    background_tasks: BackgroundTasks,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
) -> BookingSubmitResponse:
    account = await _get_account(session, slug)
    try:
        submission = await submit_booking(session, account=account, payload=payload)
    except BookingValidationError as exc:
        logger.info("Booking rejected for %s: %s", slug, exc.code.value)
        raise _validation_error(exc) from exc
    except BookingNotConfiguredError as exc:
        raise _not_configured(exc) from exc

    dispatch_effects(background_tasks, submission.effects)
    pricing = submission.pricing
    return BookingSubmitResponse(
        booking_id=submission.booking.id,
        subtotal_cents=pricing.subtotal_cents,
        discount_cents=pricing.discount_cents,
        tax_cents=pricing.tax_cents,
        total_cents=pricing.total_cents,
    )
