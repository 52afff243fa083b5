"""Calendar integration schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class GoogleCalendarConnect(BaseModel):
    """OAuth tokens obtained by the admin console's Google sign-in."""

    access_token: str = Field(min_length=1)
    refresh_token: str | None = None
    expires_at: datetime | None = None
    scope: str | None = None
    calendar_id: str | None = None


class GoogleCalendarStatus(BaseModel):
    connected: bool
    calendar_id: str | None = None
    expires_at: datetime | None = None
    scope: str | None = None
