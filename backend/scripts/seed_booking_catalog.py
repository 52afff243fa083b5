"""Seed a starter catalog, weekly hours and a welcome promo for each account."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from mediabook.db.session import get_sessionmaker
from mediabook.models import (
    Account,
    AvailabilityRule,
    BookingSettings,
    DiscountType,
    PromoCode,
    Service,
    ServiceCategory,
    Tax,
)

TAX_NAME = "GST"
TAX_RATE_BPS = 500
CATEGORY_SLUG = "photography"
PROMO_CODE = "WELCOME10"
# Monday through Friday, 9:00 to 17:00.
WEEKDAY_HOURS = [(day, 9 * 60, 17 * 60) for day in range(1, 6)]
STARTER_SERVICES = [
    ("HDR Photos", "hdr-photos", 17500, 60),
    ("Drone Photos", "drone-photos", 9900, 30),
    ("Floor Plan", "floor-plan", 12500, 45),
]


@dataclass
class SeedCounts:
    settings: int = 0
    rules: int = 0
    services: int = 0
    promos: int = 0


async def seed_account(session: AsyncSession, account: Account) -> SeedCounts:
    """Add whatever starter records the account is missing."""
    counts = SeedCounts()

    settings = await session.scalar(
        select(BookingSettings).where(BookingSettings.account_id == account.id)
    )
    if settings is None:
        session.add(BookingSettings(account_id=account.id, default_buffer_min=15))
        counts.settings += 1

    has_rules = await session.scalar(
        select(AvailabilityRule.id).where(AvailabilityRule.account_id == account.id).limit(1)
    )
    if has_rules is None:
        for day, start, end in WEEKDAY_HOURS:
            session.add(
                AvailabilityRule(
                    account_id=account.id,
                    day_of_week=day,
                    start_minutes=start,
                    end_minutes=end,
                )
            )
            counts.rules += 1

    category = await session.scalar(
        select(ServiceCategory).where(
            ServiceCategory.account_id == account.id,
            ServiceCategory.slug == CATEGORY_SLUG,
        )
    )
    if category is None:
        tax = Tax(account_id=account.id, name=TAX_NAME, rate_bps=TAX_RATE_BPS)
        category = ServiceCategory(
            account_id=account.id, name="Photography", slug=CATEGORY_SLUG
        )
        session.add_all([tax, category])
        await session.flush()
        for position, (name, slug, price, minutes) in enumerate(STARTER_SERVICES):
            service = Service(
                account_id=account.id,
                category_id=category.id,
                name=name,
                slug=slug,
                price_cents=price,
                duration_min=minutes,
                sort_order=position,
            )
            service.taxes = [tax]
            session.add(service)
            counts.services += 1

    promo = await session.scalar(
        select(PromoCode.id).where(
            PromoCode.account_id == account.id, PromoCode.code == PROMO_CODE
        )
    )
    if promo is None:
        session.add(
            PromoCode(
                account_id=account.id,
                display_name="Welcome 10% off",
                code=PROMO_CODE,
                discount_type=DiscountType.PERCENT,
                discount_rate_bps=1000,
                max_uses_per_realtor=1,
            )
        )
        counts.promos += 1

    await session.commit()
    return counts


async def seed_booking_catalog() -> None:
    sessionmaker = get_sessionmaker()
    async with sessionmaker() as session:
        accounts = (await session.execute(select(Account))).scalars().all()
        if not accounts:
            print("No accounts found; nothing to seed.")
            return
        for account in accounts:
            counts = await seed_account(session, account)
            print(
                f"{account.slug}: {counts.services} service(s), {counts.rules} rule(s), "
                f"{counts.promos} promo(s), {counts.settings} settings row(s)."
            )


def main() -> None:
    asyncio.run(seed_booking_catalog())


if __name__ == "__main__":
    main()
