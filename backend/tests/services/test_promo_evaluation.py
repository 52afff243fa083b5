"""Tests for promo code evaluation."""

from __future__ import annotations

import uuid
from dataclasses import replace
from datetime import UTC, datetime, timedelta

import pytest

from mediabook.models import DiscountType
from mediabook.services.booking_errors import BookingErrorCode, BookingValidationError
from mediabook.services.pricing_service import ServiceLine
from mediabook.services.promo_service import PromoTerms, check_window, evaluate_promo

pytestmark = pytest.mark.asyncio

NOW = datetime(2026, 10, 18, 12, 0, tzinfo=UTC)
PHOTOS = ServiceLine(id=uuid.UUID(int=1), name="HDR Photos", price_cents=10000)
DRONE = ServiceLine(id=uuid.UUID(int=2), name="Drone Photos", price_cents=5000)
REALTOR = uuid.uuid4()


class FakeUsage:
    def __init__(self, total: int = 0, per_realtor: int = 0) -> None:
        self.total = total
        self.per_realtor = per_realtor
        self.calls: list[str] = []

    async def count_total(self, promo_id: uuid.UUID) -> int:
        self.calls.append("total")
        return self.total

    async def count_for_realtor(self, promo_id: uuid.UUID, realtor_id: uuid.UUID) -> int:
        self.calls.append("realtor")
        return self.per_realtor


def _terms(**overrides) -> PromoTerms:
    base = PromoTerms(
        id=uuid.uuid4(),
        code="SAVE30",
        active=True,
        discount_type=DiscountType.AMOUNT,
        discount_value_cents=3000,
    )
    return replace(base, **overrides)


async def _evaluate(terms: PromoTerms | None, usage: FakeUsage | None = None, lines=None):
    return await evaluate_promo(
        terms,
        lines if lines is not None else [PHOTOS, DRONE],
        now=NOW,
        usage=usage or FakeUsage(),
        realtor_id=REALTOR,
    )


async def _error_code(terms: PromoTerms | None, usage: FakeUsage | None = None):
    with pytest.raises(BookingValidationError) as excinfo:
        await _evaluate(terms, usage)
    return excinfo.value.code


async def test_amount_promo_applies_to_all_lines() -> None:
    outcome = await _evaluate(_terms())

    assert outcome.applied
    assert outcome.discount_cents == 3000
    assert outcome.eligible_ids == {PHOTOS.id, DRONE.id}


async def test_percent_promo_uses_eligible_subtotal() -> None:
    outcome = await _evaluate(
        _terms(discount_type=DiscountType.PERCENT, discount_value_cents=None, discount_rate_bps=1000)
    )
    assert outcome.discount_cents == 1500


async def test_missing_or_inactive_code_is_invalid() -> None:
    assert await _error_code(None) is BookingErrorCode.INVALID_CODE
    assert await _error_code(_terms(active=False)) is BookingErrorCode.INVALID_CODE


async def test_window_bounds_are_inclusive() -> None:
    outcome = await _evaluate(_terms(start_date=NOW, end_date=NOW))
    assert outcome.applied

    too_early = _terms(start_date=NOW + timedelta(seconds=1))
    assert await _error_code(too_early) is BookingErrorCode.NOT_YET_ACTIVE
    too_late = _terms(end_date=NOW - timedelta(seconds=1))
    assert await _error_code(too_late) is BookingErrorCode.EXPIRED


async def test_naive_window_dates_are_treated_as_utc() -> None:
    terms = _terms(end_date=datetime(2026, 10, 18, 11, 0))
    with pytest.raises(BookingValidationError) as excinfo:
        check_window(terms, NOW)
    assert excinfo.value.code is BookingErrorCode.EXPIRED


async def test_total_usage_cap_rejects_next_use() -> None:
    terms = _terms(max_uses_total=3)

    assert (await _evaluate(terms, FakeUsage(total=2))).applied
    assert (
        await _error_code(terms, FakeUsage(total=3))
        is BookingErrorCode.USAGE_LIMIT_REACHED
    )


async def test_per_realtor_cap_rejects_repeat_client() -> None:
    terms = _terms(max_uses_per_realtor=1)

    assert (
        await _error_code(terms, FakeUsage(per_realtor=1))
        is BookingErrorCode.PER_CLIENT_LIMIT_REACHED
    )


async def test_checks_run_in_fixed_order() -> None:
    expired_and_exhausted = _terms(
        end_date=NOW - timedelta(days=1), max_uses_total=1, max_uses_per_realtor=1
    )
    usage = FakeUsage(total=5, per_realtor=5)
    assert await _error_code(expired_and_exhausted, usage) is BookingErrorCode.EXPIRED
    assert usage.calls == []

    both_caps = _terms(max_uses_total=1, max_uses_per_realtor=1)
    usage = FakeUsage(total=5, per_realtor=5)
    assert await _error_code(both_caps, usage) is BookingErrorCode.USAGE_LIMIT_REACHED
    assert usage.calls == ["total"]


async def test_subset_restriction_limits_eligible_lines() -> None:
    outcome = await _evaluate(_terms(service_ids=frozenset({DRONE.id})))

    assert outcome.applied
    assert outcome.eligible_ids == {DRONE.id}
    assert outcome.discount_cents == 3000


async def test_subset_excluding_selection_yields_zero_discount() -> None:
    outcome = await _evaluate(
        _terms(service_ids=frozenset({uuid.uuid4()})), lines=[PHOTOS, DRONE]
    )

    assert not outcome.applied
    assert outcome.discount_cents == 0
    assert outcome.eligible_ids == frozenset()


async def test_amount_over_eligible_subtotal_is_capped() -> None:
    outcome = await _evaluate(
        _terms(discount_value_cents=99999, service_ids=frozenset({DRONE.id}))
    )
    assert outcome.discount_cents == 5000
