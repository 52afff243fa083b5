"""Timezone helpers shared by scheduling and promo checks."""

from __future__ import annotations

from datetime import UTC, datetime


def utcnow() -> datetime:
    """Timezone-aware current time in UTC."""
    return datetime.now(UTC)


def normalize_datetime(moment: datetime) -> datetime:
    """Return ``moment`` as an aware UTC datetime.

    SQLite hands back naive values for ``DateTime(timezone=True)`` columns;
    those are stored in UTC.
    """
    if moment.tzinfo is None:
        return moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC)
