"""Authentication endpoint tests."""

from __future__ import annotations

from typing import Any

import pytest

pytestmark = pytest.mark.asyncio


async def test_login_and_read_profile(app_context: dict[str, Any]) -> None:
    client = app_context["client"]

    response = await client.post(
        "/api/v1/auth/token",
        data={
            "username": app_context["admin_email"],
            "password": app_context["admin_password"],
        },
        headers={"Content-Type": "application/x-www-form-urlencoded"},
    )
    assert response.status_code == 200
    token = response.json()["access_token"]

    me = await client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["email"] == app_context["admin_email"]
    assert me.json()["role"] == "admin"


async def test_wrong_password_is_rejected(app_context: dict[str, Any]) -> None:
    response = await app_context["client"].post(
        "/api/v1/auth/token",
        data={"username": app_context["admin_email"], "password": "wrong"},
        headers={"Content-Type": "application/x-www-form-urlencoded"},
    )
    assert response.status_code == 401


async def test_admin_routes_require_token(app_context: dict[str, Any]) -> None:
    response = await app_context["client"].get("/api/v1/services")
    assert response.status_code == 401
