"""Operations for the service catalog: categories, services and taxes."""
from __future__ import annotations

import uuid
from collections.abc import Collection
from typing import Any

from sqlalchemy import Select, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from mediabook.models import Service, ServiceCategory, Tax
from mediabook.schemas.catalog import (
    ServiceCategoryCreate,
    ServiceCategoryUpdate,
    ServiceCreate,
    ServiceUpdate,
    TaxCreate,
    TaxUpdate,
)
from mediabook.services.pricing_service import ServiceLine
from mediabook.utils.slug import slugify


def _service_options() -> tuple[Any, ...]:
    return (selectinload(Service.taxes), selectinload(Service.category))


def line_from_service(service: Service) -> ServiceLine:
    """Snapshot a catalog row for pricing and scheduling."""
    category = service.category
    return ServiceLine(
        id=service.id,
        name=service.name,
        price_cents=service.price_cents,
        duration_min=service.duration_min,
        buffer_before_min=service.buffer_before_min,
        buffer_after_min=service.buffer_after_min,
        tax_rates_bps=tuple(service.tax_rates_bps),
        category_name=category.name if category is not None else None,
        category_description=category.description if category is not None else None,
    )


async def load_booking_lines(
    session: AsyncSession,
    *,
    account_id: uuid.UUID,
    service_ids: Collection[uuid.UUID],
    active_only: bool = True,
) -> list[ServiceLine]:
    """Return the account services among ``service_ids``, ordered by id.

    Unknown and foreign ids are silently dropped, and so are inactive ones
    unless ``active_only`` is false.
    """
    if not service_ids:
        return []
    stmt = (
        select(Service)
        .options(*_service_options())
        .where(
            Service.account_id == account_id,
            Service.id.in_(list(set(service_ids))),
        )
        .order_by(Service.id.asc())
    )
    if active_only:
        stmt = stmt.where(Service.active.is_(True))
    result = await session.execute(stmt)
    return [line_from_service(service) for service in result.scalars().unique().all()]


async def list_public_catalog(
    session: AsyncSession, *, account_id: uuid.UUID
) -> list[dict[str, Any]]:
    """Active categories with their active services for the booking page."""
    categories = await list_categories(session, account_id=account_id, active_only=True)
    services = await list_services(session, account_id=account_id, active_only=True)

    grouped: dict[uuid.UUID | None, list[dict[str, Any]]] = {}
    for service in services:
        grouped.setdefault(service.category_id, []).append(
            {
                "id": service.id,
                "name": service.name,
                "slug": service.slug,
                "description": service.description,
                "price_cents": service.price_cents,
                "duration_min": service.duration_min,
                "min_sq_ft": service.min_sq_ft,
                "max_sq_ft": service.max_sq_ft,
                "tax_rates_bps": service.tax_rates_bps,
            }
        )

    catalog = [
        {
            "id": category.id,
            "name": category.name,
            "slug": category.slug,
            "description": category.description,
            "services": grouped.get(category.id, []),
        }
        for category in categories
    ]
    uncategorized = grouped.get(None)
    if uncategorized:
        catalog.append(
            {
                "id": None,
                "name": "Other",
                "slug": "other",
                "description": None,
                "services": uncategorized,
            }
        )
    return catalog


# Categories -----------------------------------------------------------------


async def list_categories(
    session: AsyncSession, *, account_id: uuid.UUID, active_only: bool = False
) -> list[ServiceCategory]:
    stmt: Select[tuple[ServiceCategory]] = select(ServiceCategory).where(
        ServiceCategory.account_id == account_id
    )
    if active_only:
        stmt = stmt.where(ServiceCategory.active.is_(True))
    stmt = stmt.order_by(ServiceCategory.sort_order.asc(), ServiceCategory.name.asc())
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def get_category(
    session: AsyncSession, *, account_id: uuid.UUID, category_id: uuid.UUID
) -> ServiceCategory | None:
    stmt = select(ServiceCategory).where(
        ServiceCategory.id == category_id,
        ServiceCategory.account_id == account_id,
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def create_category(
    session: AsyncSession, *, account_id: uuid.UUID, payload: ServiceCategoryCreate
) -> ServiceCategory:
    category = ServiceCategory(
        account_id=account_id,
        name=payload.name,
        slug=payload.slug or slugify(payload.name),
        description=payload.description,
        sort_order=payload.sort_order,
        active=payload.active,
    )
    session.add(category)
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise
    await session.refresh(category)
    return category


async def update_category(
    session: AsyncSession,
    *,
    category: ServiceCategory,
    payload: ServiceCategoryUpdate,
) -> ServiceCategory:
    for key, value in payload.model_dump(exclude_unset=True).items():
        setattr(category, key, value)
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise
    await session.refresh(category)
    return category


async def delete_category(session: AsyncSession, *, category: ServiceCategory) -> None:
    await session.delete(category)
    await session.commit()


# Taxes ----------------------------------------------------------------------


async def list_taxes(session: AsyncSession, *, account_id: uuid.UUID) -> list[Tax]:
    stmt = select(Tax).where(Tax.account_id == account_id).order_by(Tax.name.asc())
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def get_tax(
    session: AsyncSession, *, account_id: uuid.UUID, tax_id: uuid.UUID
) -> Tax | None:
    stmt = select(Tax).where(Tax.id == tax_id, Tax.account_id == account_id)
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def create_tax(
    session: AsyncSession, *, account_id: uuid.UUID, payload: TaxCreate
) -> Tax:
    tax = Tax(account_id=account_id, **payload.model_dump())
    session.add(tax)
    await session.commit()
    await session.refresh(tax)
    return tax


async def update_tax(session: AsyncSession, *, tax: Tax, payload: TaxUpdate) -> Tax:
    for key, value in payload.model_dump(exclude_unset=True).items():
        setattr(tax, key, value)
    await session.commit()
    await session.refresh(tax)
    return tax


async def delete_tax(session: AsyncSession, *, tax: Tax) -> None:
    await session.delete(tax)
    await session.commit()


# Services -------------------------------------------------------------------


async def _resolve_taxes(
    session: AsyncSession, *, account_id: uuid.UUID, tax_ids: Collection[uuid.UUID]
) -> list[Tax]:
    if not tax_ids:
        return []
    wanted = set(tax_ids)
    stmt = select(Tax).where(Tax.account_id == account_id, Tax.id.in_(list(wanted)))
    result = await session.execute(stmt)
    taxes = list(result.scalars().all())
    if len(taxes) != len(wanted):
        raise ValueError("Unknown tax id")
    return taxes


async def _check_category(
    session: AsyncSession, *, account_id: uuid.UUID, category_id: uuid.UUID | None
) -> None:
    if category_id is None:
        return
    category = await get_category(
        session, account_id=account_id, category_id=category_id
    )
    if category is None:
        raise ValueError("Unknown category id")


async def list_services(
    session: AsyncSession, *, account_id: uuid.UUID, active_only: bool = False
) -> list[Service]:
    stmt: Select[tuple[Service]] = (
        select(Service)
        .options(*_service_options())
        .where(Service.account_id == account_id)
    )
    if active_only:
        stmt = stmt.where(Service.active.is_(True))
    stmt = stmt.order_by(Service.sort_order.asc(), Service.name.asc())
    result = await session.execute(stmt)
    return list(result.scalars().unique().all())


async def get_service(
    session: AsyncSession, *, account_id: uuid.UUID, service_id: uuid.UUID
) -> Service | None:
    stmt = (
        select(Service)
        .options(*_service_options())
        .where(Service.id == service_id, Service.account_id == account_id)
        .execution_options(populate_existing=True)
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def create_service(
    session: AsyncSession, *, account_id: uuid.UUID, payload: ServiceCreate
) -> Service:
    data = payload.model_dump(exclude={"tax_ids"})
    await _check_category(
        session, account_id=account_id, category_id=data.get("category_id")
    )
    taxes = await _resolve_taxes(session, account_id=account_id, tax_ids=payload.tax_ids)
    data["slug"] = data.get("slug") or slugify(payload.name)
    service = Service(account_id=account_id, **data)
    service.taxes = taxes
    session.add(service)
    await session.commit()
    refreshed = await get_service(session, account_id=account_id, service_id=service.id)
    assert refreshed is not None
    return refreshed


async def update_service(
    session: AsyncSession, *, service: Service, payload: ServiceUpdate
) -> Service:
    data = payload.model_dump(exclude_unset=True)
    tax_ids = data.pop("tax_ids", None)
    min_sq_ft = data.get("min_sq_ft", service.min_sq_ft)
    max_sq_ft = data.get("max_sq_ft", service.max_sq_ft)
    if min_sq_ft is not None and max_sq_ft is not None and min_sq_ft > max_sq_ft:
        raise ValueError("min_sq_ft must not exceed max_sq_ft")
    if "category_id" in data:
        await _check_category(
            session, account_id=service.account_id, category_id=data["category_id"]
        )
    if tax_ids is not None:
        service.taxes = await _resolve_taxes(
            session, account_id=service.account_id, tax_ids=tax_ids
        )
    for key, value in data.items():
        setattr(service, key, value)
    await session.commit()
    refreshed = await get_service(
        session, account_id=service.account_id, service_id=service.id
    )
    assert refreshed is not None
    return refreshed


async def delete_service(session: AsyncSession, *, service: Service) -> None:
    await session.delete(service)
    await session.commit()
