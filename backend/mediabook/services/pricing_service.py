"""Pricing engine for public bookings.

All money values are integer cents and all rates are integer basis points.
The engine is pure: callers load catalog rows and promo terms and pass them in.

Order of operations:

1. ``subtotal`` is the sum of every selected service price.
2. The promo discount is capped at the eligible subtotal and prorated across
   the eligible services by price (:func:`prorate_discount`).
3. Each service is taxed on its price minus its discount share. Every linked
   tax rate applies to that same base and is rounded on its own.
4. ``total = max(0, subtotal - discount + tax)``.
"""

from __future__ import annotations

import uuid
from collections.abc import Collection, Sequence
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from mediabook.models.promo import DiscountType

BPS_DENOMINATOR = 10_000


@dataclass(frozen=True, slots=True)
class ServiceLine:
    """Catalog service snapshot used for a single pricing run."""

    id: uuid.UUID
    name: str
    price_cents: int
    duration_min: int = 0
    buffer_before_min: int = 0
    buffer_after_min: int = 0
    tax_rates_bps: tuple[int, ...] = ()
    category_name: str | None = None
    category_description: str | None = None


@dataclass(slots=True)
class PricedItem:
    """Priced booking line."""

    service_id: uuid.UUID
    service_name: str
    unit_price_cents: int
    discount_cents: int
    tax_cents: int

    @property
    def taxable_cents(self) -> int:
        return max(0, self.unit_price_cents - self.discount_cents)


@dataclass(slots=True)
class PricingResult:
    """Aggregate pricing output for a booking."""

    items: list[PricedItem] = field(default_factory=list)
    subtotal_cents: int = 0
    discount_cents: int = 0
    tax_cents: int = 0
    total_cents: int = 0

    def item_for(self, service_id: uuid.UUID) -> PricedItem:
        for item in self.items:
            if item.service_id == service_id:
                return item
        raise KeyError(service_id)

    def to_dict(self) -> dict[str, Any]:
        """Serialize the result to plain types for responses."""
        return {
            "items": [
                {
                    "service_id": str(item.service_id),
                    "service_name": item.service_name,
                    "unit_price_cents": item.unit_price_cents,
                    "discount_cents": item.discount_cents,
                    "tax_cents": item.tax_cents,
                }
                for item in self.items
            ],
            "subtotal_cents": self.subtotal_cents,
            "discount_cents": self.discount_cents,
            "tax_cents": self.tax_cents,
            "total_cents": self.total_cents,
        }


def round_half_up(numerator: int, denominator: int) -> int:
    """Divide two integers and round half away from zero."""
    if denominator <= 0:
        raise ValueError("Denominator must be positive")
    quotient = Decimal(numerator) / Decimal(denominator)
    return int(quotient.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def format_cents(cents: int) -> str:
    """Render cents as a dollar string, e.g. ``$157.50``."""
    return f"${Decimal(cents) / 100:.2f}"


def proration_order(lines: Sequence[ServiceLine]) -> list[ServiceLine]:
    """Deterministic iteration order for proration: service id ascending."""
    return sorted(lines, key=lambda line: str(line.id))


def prorate_discount(
    discount_cents: int, lines: Sequence[ServiceLine]
) -> dict[uuid.UUID, int]:
    """Split ``discount_cents`` across ``lines`` proportionally to price.

    Every line but the last receives ``round(discount * price / subtotal)``;
    the last receives what remains, so shares always sum to the (capped)
    discount exactly. Shares never exceed the running remainder nor the
    line's own price.
    """
    ordered = proration_order(lines)
    shares = {line.id: 0 for line in ordered}
    eligible_subtotal = sum(line.price_cents for line in ordered)
    if discount_cents <= 0 or eligible_subtotal <= 0:
        return shares

    discount = min(discount_cents, eligible_subtotal)
    remaining = discount
    last_index = len(ordered) - 1
    for index, line in enumerate(ordered):
        if index == last_index:
            share = remaining
        else:
            share = round_half_up(discount * line.price_cents, eligible_subtotal)
        share = min(share, remaining, line.price_cents)
        shares[line.id] = share
        remaining -= share

    # Rounding can leave the last line a remainder larger than its price;
    # hand the excess back to earlier lines that still have room.
    for line in ordered:
        if remaining <= 0:
            break
        extra = min(line.price_cents - shares[line.id], remaining)
        shares[line.id] += extra
        remaining -= extra
    return shares


def compute_line_tax(base_cents: int, rates_bps: Collection[int]) -> int:
    """Tax ``base_cents`` at each rate independently (rates do not compound)."""
    base = max(0, base_cents)
    return sum(round_half_up(base * rate, BPS_DENOMINATOR) for rate in rates_bps)


def compute_discount(
    discount_type: DiscountType,
    *,
    eligible_subtotal: int,
    value_cents: int | None = None,
    rate_bps: int | None = None,
) -> int:
    """Raw promo discount clamped to ``[0, eligible_subtotal]``."""
    if eligible_subtotal <= 0:
        return 0
    if discount_type is DiscountType.AMOUNT:
        discount = value_cents or 0
    else:
        discount = round_half_up(eligible_subtotal * (rate_bps or 0), BPS_DENOMINATOR)
    return max(0, min(discount, eligible_subtotal))


def eligible_lines(
    lines: Sequence[ServiceLine], eligible_ids: Collection[uuid.UUID] | None
) -> list[ServiceLine]:
    """Lines a promo may discount; ``None`` or empty means every line."""
    if not eligible_ids:
        return list(lines)
    return [line for line in lines if line.id in eligible_ids]


def price_booking(
    lines: Sequence[ServiceLine],
    *,
    discount_cents: int = 0,
    eligible_ids: Collection[uuid.UUID] | None = None,
) -> PricingResult:
    """Price the selected services with an optional promo discount."""
    subtotal = sum(line.price_cents for line in lines)
    discountable = eligible_lines(lines, eligible_ids)
    eligible_subtotal = sum(line.price_cents for line in discountable)
    discount = max(0, min(discount_cents, eligible_subtotal))
    shares = prorate_discount(discount, discountable)

    items: list[PricedItem] = []
    for line in lines:
        share = shares.get(line.id, 0)
        items.append(
            PricedItem(
                service_id=line.id,
                service_name=line.name,
                unit_price_cents=line.price_cents,
                discount_cents=share,
                tax_cents=compute_line_tax(
                    line.price_cents - share, line.tax_rates_bps
                ),
            )
        )

    tax = sum(item.tax_cents for item in items)
    return PricingResult(
        items=items,
        subtotal_cents=subtotal,
        discount_cents=discount,
        tax_cents=tax,
        total_cents=max(0, subtotal - discount + tax),
    )
