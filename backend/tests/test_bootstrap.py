"""Default admin bootstrap tests."""

from __future__ import annotations

import os
from typing import Any

import pytest
from sqlalchemy import func, select

from mediabook.core.config import get_settings
from mediabook.db.session import get_sessionmaker
from mediabook.models import Account, BookingSettings, User, UserRole
from mediabook.services.bootstrap_service import ensure_default_admin

pytestmark = pytest.mark.asyncio


async def test_default_admin_is_created_once(
    app_context: dict[str, Any], monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("DEFAULT_ADMIN_EMAIL", "Owner@Studio.example")
    monkeypatch.setenv("DEFAULT_ADMIN_PASSWORD", "Sup3rSecret!")
    monkeypatch.setenv("DEFAULT_ACCOUNT_SLUG", "north-studio")
    get_settings.cache_clear()
    try:
        await ensure_default_admin()
        await ensure_default_admin()
    finally:
        get_settings.cache_clear()

    sessionmaker = get_sessionmaker(os.environ["DATABASE_URL"])
    async with sessionmaker() as session:
        admin = await session.scalar(
            select(User).where(User.email == "owner@studio.example")
        )
        account = await session.scalar(select(Account).where(Account.slug == "north-studio"))
        settings_rows = await session.scalar(select(func.count(BookingSettings.account_id)))

    assert admin is not None
    assert admin.role == UserRole.ADMIN
    assert account is not None
    assert admin.account_id == account.id
    assert settings_rows == 2

    token = await app_context["client"].post(
        "/api/v1/auth/token",
        data={"username": "owner@studio.example", "password": "Sup3rSecret!"},
        headers={"Content-Type": "application/x-www-form-urlencoded"},
    )
    assert token.status_code == 200


async def test_bootstrap_skipped_without_credentials(
    app_context: dict[str, Any], monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.delenv("DEFAULT_ADMIN_EMAIL", raising=False)
    monkeypatch.delenv("DEFAULT_ADMIN_PASSWORD", raising=False)
    get_settings.cache_clear()
    try:
        await ensure_default_admin()
    finally:
        get_settings.cache_clear()

    sessionmaker = get_sessionmaker(os.environ["DATABASE_URL"])
    async with sessionmaker() as session:
        accounts = await session.scalar(select(func.count(Account.id)))
    assert accounts == 1
