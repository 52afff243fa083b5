"""Admin catalog API tests: services, categories and taxes."""

from __future__ import annotations

import uuid
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


async def test_staff_cannot_manage_catalog(app_context: dict[str, Any]) -> None:
    client: AsyncClient = app_context["client"]
    token = await _authenticate(
        client, app_context["staff_email"], app_context["staff_password"]
    )

    response = await client.get(
        "/api/v1/services", headers={"Authorization": f"Bearer {token}"}
    )

    assert response.status_code == 403


async def test_service_lifecycle(app_context: dict[str, Any]) -> None:
    client: AsyncClient = app_context["client"]
    headers = await _headers(app_context)

    create = await client.post(
        "/api/v1/services",
        json={
            "name": "Floor Plan",
            "price_cents": 12500,
            "duration_min": 45,
            "category_id": str(app_context["category_id"]),
            "tax_ids": [str(app_context["tax_id"])],
        },
        headers=headers,
    )
    assert create.status_code == 201, create.text
    service = create.json()
    assert service["slug"] == "floor-plan"
    assert service["tax_ids"] == [str(app_context["tax_id"])]

    update = await client.patch(
        f"/api/v1/services/{service['id']}",
        json={"price_cents": 13000, "active": False, "tax_ids": []},
        headers=headers,
    )
    assert update.status_code == 200
    assert update.json()["price_cents"] == 13000
    assert update.json()["tax_ids"] == []

    active = await client.get(
        "/api/v1/services", params={"active_only": "true"}, headers=headers
    )
    assert service["id"] not in {item["id"] for item in active.json()}

    delete = await client.delete(f"/api/v1/services/{service['id']}", headers=headers)
    assert delete.status_code == 204
    missing = await client.get(f"/api/v1/services/{service['id']}", headers=headers)
    assert missing.status_code == 404


async def test_inactive_service_leaves_public_catalog(app_context: dict[str, Any]) -> None:
    client: AsyncClient = app_context["client"]
    headers = await _headers(app_context)

    await client.patch(
        f"/api/v1/services/{app_context['drone_id']}",
        json={"active": False},
        headers=headers,
    )
    catalog = await client.get(
        f"/api/v1/public/booking/{app_context['account_slug']}/catalog"
    )

    names = [
        service["name"]
        for category in catalog.json()["categories"]
        for service in category["services"]
    ]
    assert names == ["HDR Photos"]


@pytest.mark.parametrize(
    "fields",
    [
        {"tax_ids": [str(uuid.uuid4())]},
        {"category_id": str(uuid.uuid4())},
    ],
)
async def test_service_rejects_unknown_references(
    app_context: dict[str, Any], fields: dict[str, Any]
) -> None:
    headers = await _headers(app_context)
    payload = {"name": "Video", "price_cents": 40000, **fields}

    response = await app_context["client"].post(
        "/api/v1/services", json=payload, headers=headers
    )

    assert response.status_code == 400


async def test_service_square_footage_bounds(app_context: dict[str, Any]) -> None:
    client: AsyncClient = app_context["client"]
    headers = await _headers(app_context)

    invalid = await client.post(
        "/api/v1/services",
        json={"name": "Large", "price_cents": 1, "min_sq_ft": 5000, "max_sq_ft": 1000},
        headers=headers,
    )
    assert invalid.status_code == 422

    update = await client.patch(
        f"/api/v1/services/{app_context['photos_id']}",
        json={"min_sq_ft": 3000, "max_sq_ft": 2000},
        headers=headers,
    )
    assert update.status_code == 400


async def test_category_crud_and_duplicate_slug(app_context: dict[str, Any]) -> None:
    client: AsyncClient = app_context["client"]
    headers = await _headers(app_context)

    create = await client.post(
        "/api/v1/service-categories",
        json={"name": "Video Tours", "sort_order": 2},
        headers=headers,
    )
    assert create.status_code == 201
    category = create.json()
    assert category["slug"] == "video-tours"

    duplicate = await client.post(
        "/api/v1/service-categories",
        json={"name": "Photography"},
        headers=headers,
    )
    assert duplicate.status_code == 409

    rename = await client.patch(
        f"/api/v1/service-categories/{category['id']}",
        json={"description": "Walkthrough video"},
        headers=headers,
    )
    assert rename.json()["description"] == "Walkthrough video"

    listing = await client.get("/api/v1/service-categories", headers=headers)
    assert [item["slug"] for item in listing.json()] == ["photography", "video-tours"]

    delete = await client.delete(
        f"/api/v1/service-categories/{category['id']}", headers=headers
    )
    assert delete.status_code == 204


async def test_tax_crud(app_context: dict[str, Any]) -> None:
    client: AsyncClient = app_context["client"]
    headers = await _headers(app_context)

    create = await client.post(
        "/api/v1/taxes", json={"name": "PST", "rate_bps": 700}, headers=headers
    )
    assert create.status_code == 201
    tax = create.json()

    too_high = await client.post(
        "/api/v1/taxes", json={"name": "Bad", "rate_bps": 10001}, headers=headers
    )
    assert too_high.status_code == 422

    update = await client.patch(
        f"/api/v1/taxes/{tax['id']}", json={"active": False}, headers=headers
    )
    assert update.json()["active"] is False

    listing = await client.get("/api/v1/taxes", headers=headers)
    assert {item["name"] for item in listing.json()} == {"GST", "PST"}

    delete = await client.delete(f"/api/v1/taxes/{tax['id']}", headers=headers)
    assert delete.status_code == 204
    again = await client.delete(f"/api/v1/taxes/{tax['id']}", headers=headers)
    assert again.status_code == 404


async def test_inactive_tax_is_not_charged(app_context: dict[str, Any]) -> None:
    client: AsyncClient = app_context["client"]
    headers = await _headers(app_context)

    await client.patch(
        f"/api/v1/taxes/{app_context['tax_id']}", json={"active": False}, headers=headers
    )
    response = await client.post(
        f"/api/v1/public/booking/{app_context['account_slug']}/submit",
        json={
            "service_ids": [str(app_context["photos_id"])],
            "slot_start": "2030-01-07T10:00:00+00:00",
            "address": "9 Elm Ave",
            "contact_first_name": "Dana",
            "contact_last_name": "Lee",
            "contact_email": "dana@example.com",
        },
    )

    assert response.status_code == 200, response.text
    assert response.json()["tax_cents"] == 0
    assert response.json()["total_cents"] == 10000
