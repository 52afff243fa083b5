"""Booking settings, availability rule and blackout API tests."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio


async def _authenticate(client: AsyncClient, email: str, password: str) -> str:
    response = await client.post(
        "/api/v1/auth/token",
        data={"username": email, "password": password},
        headers={"Content-Type": "application/x-www-form-urlencoded"},
    )
    assert response.status_code == 200
    return response.json()["access_token"]


async def _headers(ctx: dict[str, Any]) -> dict[str, str]:
    token = await _authenticate(ctx["client"], ctx["admin_email"], ctx["admin_password"])
    return {"Authorization": f"Bearer {token}"}


async def test_booking_settings_round_trip(app_context: dict[str, Any]) -> None:
    client: AsyncClient = app_context["client"]
    headers = await _headers(app_context)

    current = await client.get("/api/v1/booking-settings", headers=headers)
    assert current.status_code == 200
    assert current.json()["default_buffer_min"] == 15

    saved = await client.put(
        "/api/v1/booking-settings",
        json={
            "time_zone": "America/Edmonton",
            "lead_time_min": 120,
            "max_advance_days": 30,
            "default_buffer_min": 0,
        },
        headers=headers,
    )
    assert saved.status_code == 200
    assert saved.json()["time_zone"] == "America/Edmonton"

    catalog = await client.get(
        f"/api/v1/public/booking/{app_context['account_slug']}/catalog"
    )
    assert catalog.json()["settings"] == {
        "time_zone": "America/Edmonton",
        "lead_time_min": 120,
        "max_advance_days": 30,
    }


async def test_booking_settings_reject_unknown_time_zone(
    app_context: dict[str, Any],
) -> None:
    headers = await _headers(app_context)

    response = await app_context["client"].put(
        "/api/v1/booking-settings", json={"time_zone": "Mars/Olympus"}, headers=headers
    )

    assert response.status_code == 422


async def test_rule_lifecycle(app_context: dict[str, Any]) -> None:
    client: AsyncClient = app_context["client"]
    headers = await _headers(app_context)

    create = await client.post(
        "/api/v1/availability-rules",
        json={"day_of_week": 2, "start_minutes": 18 * 60, "end_minutes": 20 * 60},
        headers=headers,
    )
    assert create.status_code == 201
    rule = create.json()

    replace = await client.put(
        f"/api/v1/availability-rules/{rule['id']}",
        json={
            "day_of_week": 3,
            "start_minutes": 7 * 60,
            "end_minutes": 8 * 60,
            "time_zone": "America/Edmonton",
        },
        headers=headers,
    )
    assert replace.status_code == 200
    assert replace.json()["day_of_week"] == 3
    assert replace.json()["time_zone"] == "America/Edmonton"

    listing = await client.get("/api/v1/availability-rules", headers=headers)
    assert len(listing.json()) == 8

    delete = await client.delete(
        f"/api/v1/availability-rules/{rule['id']}", headers=headers
    )
    assert delete.status_code == 204
    again = await client.delete(
        f"/api/v1/availability-rules/{rule['id']}", headers=headers
    )
    assert again.status_code == 404


@pytest.mark.parametrize(
    "payload",
    [
        {"day_of_week": 7, "start_minutes": 0, "end_minutes": 60},
        {"day_of_week": 1, "start_minutes": 600, "end_minutes": 600},
        {"day_of_week": 1, "start_minutes": 0, "end_minutes": 60, "time_zone": "Nowhere"},
    ],
)
async def test_invalid_rules(app_context: dict[str, Any], payload: dict[str, Any]) -> None:
    headers = await _headers(app_context)

    response = await app_context["client"].post(
        "/api/v1/availability-rules", json=payload, headers=headers
    )

    assert response.status_code == 422


async def test_blackout_hides_slots(app_context: dict[str, Any]) -> None:
    client: AsyncClient = app_context["client"]
    headers = await _headers(app_context)
    tomorrow = datetime.now(UTC).date() + timedelta(days=1)
    day_start = datetime(tomorrow.year, tomorrow.month, tomorrow.day, tzinfo=UTC)

    create = await client.post(
        "/api/v1/blackouts",
        json={
            "start_at": day_start.isoformat(),
            "end_at": (day_start + timedelta(days=1)).isoformat(),
            "reason": "Holiday",
        },
        headers=headers,
    )
    assert create.status_code == 201
    blackout = create.json()

    slots = await client.post(
        f"/api/v1/public/booking/{app_context['account_slug']}/slots",
        json={
            "service_ids": [str(app_context["drone_id"])],
            "range_start": day_start.isoformat(),
            "range_end": (day_start + timedelta(hours=23)).isoformat(),
        },
    )
    assert slots.status_code == 200
    assert slots.json()["slots"] == []

    fetched = await client.get(f"/api/v1/blackouts/{blackout['id']}", headers=headers)
    assert fetched.json()["reason"] == "Holiday"

    listing = await client.get("/api/v1/blackouts", headers=headers)
    assert [item["id"] for item in listing.json()] == [blackout["id"]]

    delete = await client.delete(f"/api/v1/blackouts/{blackout['id']}", headers=headers)
    assert delete.status_code == 204
    missing = await client.get(f"/api/v1/blackouts/{blackout['id']}", headers=headers)
    assert missing.status_code == 404


async def test_blackout_requires_positive_range(app_context: dict[str, Any]) -> None:
    headers = await _headers(app_context)
    moment = datetime(2026, 11, 1, 12, tzinfo=UTC).isoformat()

    response = await app_context["client"].post(
        "/api/v1/blackouts", json={"start_at": moment, "end_at": moment}, headers=headers
    )

    assert response.status_code == 422
