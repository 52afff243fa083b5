"""Promo code administration endpoints."""

from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from mediabook.api import deps
from mediabook.models.user import User
from mediabook.schemas.promo import PromoCodeCreate, PromoCodeRead, PromoCodeUpdate
from mediabook.services import promo_service

router = APIRouter(prefix="/promo-codes")


def _http_error(exc: ValueError) -> HTTPException:
    if isinstance(exc, promo_service.PromoCodeConflictError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


@router.get("", response_model=list[PromoCodeRead], summary="List promo codes")
async def list_promo_codes(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.require_admin)],
) -> list[PromoCodeRead]:
    promos = await promo_service.list_promo_codes(
        session, account_id=current_user.account_id
    )
    return [PromoCodeRead.model_validate(promo) for promo in promos]


@router.post(
    "",
    response_model=PromoCodeRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create promo code",
)
async def create_promo_code(
    payload: PromoCodeCreate,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.require_admin)],
) -> PromoCodeRead:
    try:
        promo = await promo_service.create_promo_code(
            session, account_id=current_user.account_id, payload=payload
        )
    except ValueError as exc:
        raise _http_error(exc) from exc
    return PromoCodeRead.model_validate(promo)


@router.get("/{promo_id}", response_model=PromoCodeRead, summary="Get promo code")
async def get_promo_code(
    promo_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.require_admin)],
) -> PromoCodeRead:
    promo = await promo_service.get_promo_code(
        session, account_id=current_user.account_id, promo_id=promo_id
    )
    if promo is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Promo code not found"
        )
    return PromoCodeRead.model_validate(promo)


@router.patch("/{promo_id}", response_model=PromoCodeRead, summary="Update promo code")
async def update_promo_code(
    promo_id: uuid.UUID,
    payload: PromoCodeUpdate,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.require_admin)],
) -> PromoCodeRead:
    promo = await promo_service.get_promo_code(
        session, account_id=current_user.account_id, promo_id=promo_id
    )
    if promo is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Promo code not found"
        )
    try:
        updated = await promo_service.update_promo_code(
            session, promo=promo, payload=payload
        )
    except ValueError as exc:
        raise _http_error(exc) from exc
    return PromoCodeRead.model_validate(updated)


@router.delete(
    "/{promo_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete promo code",
)
async def delete_promo_code(
    promo_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.require_admin)],
) -> None:
    promo = await promo_service.get_promo_code(
        session, account_id=current_user.account_id, promo_id=promo_id
    )
    if promo is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Promo code not found"
        )
    await promo_service.delete_promo_code(session, promo=promo)
