"""Admin endpoints for services, service categories and taxes."""

from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from mediabook.api import deps
from mediabook.models.user import User
from mediabook.schemas.catalog import (
    ServiceCategoryCreate,
    ServiceCategoryRead,
    ServiceCategoryUpdate,
    ServiceCreate,
    ServiceRead,
    ServiceUpdate,
    TaxCreate,
    TaxRead,
    TaxUpdate,
)
from mediabook.services import catalog_service

router = APIRouter()


def _not_found(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


# Services -------------------------------------------------------------------


@router.get("/services", response_model=list[ServiceRead], summary="List services")
async def list_services(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.require_admin)],
    active_only: bool = Query(default=False),
) -> list[ServiceRead]:
    services = await catalog_service.list_services(
        session, account_id=current_user.account_id, active_only=active_only
    )
    return [ServiceRead.model_validate(service) for service in services]


@router.post(
    "/services",
    response_model=ServiceRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create service",
)
async def create_service(
    payload: ServiceCreate,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.require_admin)],
) -> ServiceRead:
    try:
        service = await catalog_service.create_service(
            session, account_id=current_user.account_id, payload=payload
        )
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    return ServiceRead.model_validate(service)


@router.get("/services/{service_id}", response_model=ServiceRead, summary="Get service")
async def get_service(
    service_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.require_admin)],
) -> ServiceRead:
    service = await catalog_service.get_service(
        session, account_id=current_user.account_id, service_id=service_id
    )
    if service is None:
        raise _not_found("Service not found")
    return ServiceRead.model_validate(service)


@router.patch(
    "/services/{service_id}", response_model=ServiceRead, summary="Update service"
)
async def update_service(
    service_id: uuid.UUID,
    payload: ServiceUpdate,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.require_admin)],
) -> ServiceRead:
    service = await catalog_service.get_service(
        session, account_id=current_user.account_id, service_id=service_id
    )
    if service is None:
        raise _not_found("Service not found")
    try:
        updated = await catalog_service.update_service(
            session, service=service, payload=payload
        )
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    return ServiceRead.model_validate(updated)


@router.delete(
    "/services/{service_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete service",
)
async def delete_service(
    service_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.require_admin)],
) -> None:
    service = await catalog_service.get_service(
        session, account_id=current_user.account_id, service_id=service_id
    )
    if service is None:
        raise _not_found("Service not found")
    await catalog_service.delete_service(session, service=service)


# Categories -----------------------------------------------------------------


@router.get(
    "/service-categories",
    response_model=list[ServiceCategoryRead],
    summary="List service categories",
)
async def list_categories(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.require_admin)],
) -> list[ServiceCategoryRead]:
    categories = await catalog_service.list_categories(
        session, account_id=current_user.account_id
    )
    return [ServiceCategoryRead.model_validate(category) for category in categories]


@router.post(
    "/service-categories",
    response_model=ServiceCategoryRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create service category",
)
async def create_category(
    payload: ServiceCategoryCreate,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.require_admin)],
) -> ServiceCategoryRead:
    try:
        category = await catalog_service.create_category(
            session, account_id=current_user.account_id, payload=payload
        )
    except IntegrityError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail="Category slug already exists"
        ) from exc
    return ServiceCategoryRead.model_validate(category)


@router.patch(
    "/service-categories/{category_id}",
    response_model=ServiceCategoryRead,
    summary="Update service category",
)
async def update_category(
    category_id: uuid.UUID,
    payload: ServiceCategoryUpdate,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.require_admin)],
) -> ServiceCategoryRead:
    category = await catalog_service.get_category(
        session, account_id=current_user.account_id, category_id=category_id
    )
    if category is None:
        raise _not_found("Category not found")
    try:
        updated = await catalog_service.update_category(
            session, category=category, payload=payload
        )
    except IntegrityError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail="Category slug already exists"
        ) from exc
    return ServiceCategoryRead.model_validate(updated)


@router.delete(
    "/service-categories/{category_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete service category",
)
async def delete_category(
    category_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.require_admin)],
) -> None:
    category = await catalog_service.get_category(
        session, account_id=current_user.account_id, category_id=category_id
    )
    if category is None:
        raise _not_found("Category not found")
    await catalog_service.delete_category(session, category=category)


# Taxes ----------------------------------------------------------------------


@router.get("/taxes", response_model=list[TaxRead], summary="List taxes")
async def list_taxes(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.require_admin)],
) -> list[TaxRead]:
    taxes = await catalog_service.list_taxes(session, account_id=current_user.account_id)
    return [TaxRead.model_validate(tax) for tax in taxes]


@router.post(
    "/taxes",
    response_model=TaxRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create tax",
)
async def create_tax(
    payload: TaxCreate,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.require_admin)],
) -> TaxRead:
    tax = await catalog_service.create_tax(
        session, account_id=current_user.account_id, payload=payload
    )
    return TaxRead.model_validate(tax)


@router.patch("/taxes/{tax_id}", response_model=TaxRead, summary="Update tax")
async def update_tax(
    tax_id: uuid.UUID,
    payload: TaxUpdate,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.require_admin)],
) -> TaxRead:
    tax = await catalog_service.get_tax(
        session, account_id=current_user.account_id, tax_id=tax_id
    )
    if tax is None:
        raise _not_found("Tax not found")
    updated = await catalog_service.update_tax(session, tax=tax, payload=payload)
    return TaxRead.model_validate(updated)


@router.delete(
    "/taxes/{tax_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete tax"
)
async def delete_tax(
    tax_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.require_admin)],
) -> None:
    tax = await catalog_service.get_tax(
        session, account_id=current_user.account_id, tax_id=tax_id
    )
    if tax is None:
        raise _not_found("Tax not found")
    await catalog_service.delete_tax(session, tax=tax)
