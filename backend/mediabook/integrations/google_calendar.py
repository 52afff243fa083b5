"""Minimal Google Calendar REST client used by the booking flow."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any
from urllib.parse import quote

import httpx

from mediabook.core.settings import GoogleSettings
from mediabook.utils.datetimes import normalize_datetime, utcnow

logger = logging.getLogger(__name__)

GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_CALENDAR_API = "https://www.googleapis.com/calendar/v3"
DEFAULT_CALENDAR_ID = "primary"
# Refresh tokens this close to expiry.
EXPIRY_SKEW = timedelta(minutes=5)


class GoogleCalendarError(RuntimeError):
    """Raised when Google rejects a calendar call or a token refresh."""


@dataclass(slots=True)
class CalendarCredentials:
    access_token: str
    refresh_token: str | None = None
    expires_at: datetime | None = None
    scope: str | None = None


@dataclass(frozen=True, slots=True)
class BusyWindow:
    start: datetime
    end: datetime


def _parse_rfc3339(value: str) -> datetime:
    return normalize_datetime(datetime.fromisoformat(value.replace("Z", "+00:00")))


def _isoformat(moment: datetime) -> str:
    return normalize_datetime(moment).isoformat().replace("+00:00", "Z")


def _events_path(calendar_id: str | None, event_id: str | None = None) -> str:
    calendar = quote(calendar_id or DEFAULT_CALENDAR_ID, safe="@")
    path = f"/calendars/{calendar}/events"
    if event_id:
        path = f"{path}/{quote(event_id, safe='')}"
    return path


class GoogleCalendarClient:
    """Calls the Calendar v3 API with a stored OAuth token.

    ``refreshed`` flips to true when the access token was renewed so callers
    can persist ``credentials``.
    """

    def __init__(
        self,
        settings: GoogleSettings,
        credentials: CalendarCredentials,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 10.0,
    ) -> None:
        self._settings = settings
        self.credentials = credentials
        self.refreshed = False
        self._transport = transport
        self._timeout = timeout

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self._transport, timeout=self._timeout)

    def _needs_refresh(self, now: datetime) -> bool:
        expires_at = self.credentials.expires_at
        if expires_at is None or not self.credentials.refresh_token:
            return False
        return normalize_datetime(expires_at) <= now + EXPIRY_SKEW

    async def refresh_access_token(self) -> str:
        if not self.credentials.refresh_token:
            raise GoogleCalendarError("No refresh token stored")
        async with self._client() as client:
            response = await client.post(
                GOOGLE_TOKEN_URL,
                data={
                    "client_id": self._settings.client_id,
                    "client_secret": self._settings.client_secret,
                    "refresh_token": self.credentials.refresh_token,
                    "grant_type": "refresh_token",
                },
            )
        if response.status_code != 200:
            raise GoogleCalendarError(
                f"Token refresh failed with status {response.status_code}"
            )
        tokens = response.json()
        access_token = tokens.get("access_token")
        if not access_token:
            raise GoogleCalendarError("Token refresh returned no access token")
        expires_in = int(tokens.get("expires_in", 3600))
        self.credentials.access_token = access_token
        self.credentials.expires_at = utcnow() + timedelta(seconds=expires_in)
        if tokens.get("refresh_token"):
            self.credentials.refresh_token = tokens["refresh_token"]
        if tokens.get("scope"):
            self.credentials.scope = tokens["scope"]
        self.refreshed = True
        logger.info("Google Calendar access token refreshed")
        return access_token

    async def access_token(self, now: datetime | None = None) -> str:
        if self._needs_refresh(now or utcnow()):
            return await self.refresh_access_token()
        return self.credentials.access_token

    async def _request(
        self,
        method: str,
        path: str,
        *,
        accept: tuple[int, ...] = (200, 201),
        **kwargs: Any,
    ) -> dict[str, Any]:
        token = await self.access_token()
        async with self._client() as client:
            response = await client.request(
                method,
                f"{GOOGLE_CALENDAR_API}{path}",
                headers={"Authorization": f"Bearer {token}"},
                **kwargs,
            )
        if response.status_code not in accept:
            raise GoogleCalendarError(
                f"Calendar API {method} {path} failed with status {response.status_code}"
            )
        if response.status_code == 204 or not response.content:
            return {}
        return response.json()

    async def free_busy(
        self,
        *,
        calendar_id: str | None,
        time_min: datetime,
        time_max: datetime,
        time_zone: str | None = None,
    ) -> list[BusyWindow]:
        """Return busy windows of one calendar between two instants."""
        calendar = calendar_id or DEFAULT_CALENDAR_ID
        body: dict[str, Any] = {
            "timeMin": _isoformat(time_min),
            "timeMax": _isoformat(time_max),
            "items": [{"id": calendar}],
        }
        if time_zone:
            body["timeZone"] = time_zone
        data = await self._request("POST", "/freeBusy", json=body)
        busy = data.get("calendars", {}).get(calendar, {}).get("busy") or []
        return [
            BusyWindow(start=_parse_rfc3339(item["start"]), end=_parse_rfc3339(item["end"]))
            for item in busy
        ]

    async def create_event(
        self,
        *,
        calendar_id: str | None,
        summary: str,
        start: datetime,
        end: datetime,
        time_zone: str | None = None,
        description: str | None = None,
        location: str | None = None,
        attendees: list[dict[str, str]] | None = None,
    ) -> str | None:
        """Insert an event and notify attendees; returns the event id."""
        event: dict[str, Any] = {
            "summary": summary,
            "start": {"dateTime": _isoformat(start), "timeZone": time_zone},
            "end": {"dateTime": _isoformat(end), "timeZone": time_zone},
        }
        if description:
            event["description"] = description
        if location:
            event["location"] = location
        if attendees:
            event["attendees"] = attendees
        data = await self._request(
            "POST",
            _events_path(calendar_id),
            params={"sendUpdates": "all"},
            json=event,
        )
        return data.get("id")

    async def update_event(
        self,
        *,
        calendar_id: str | None,
        event_id: str,
        summary: str,
        start: datetime,
        end: datetime,
        time_zone: str | None = None,
    ) -> None:
        """Move or rename an existing event."""
        event = {
            "summary": summary,
            "start": {"dateTime": _isoformat(start), "timeZone": time_zone},
            "end": {"dateTime": _isoformat(end), "timeZone": time_zone},
        }
        await self._request(
            "PATCH",
            _events_path(calendar_id, event_id),
            params={"sendUpdates": "all"},
            json=event,
        )

    async def delete_event(self, *, calendar_id: str | None, event_id: str) -> None:
        """Delete an event; one that is already gone counts as deleted."""
        await self._request(
            "DELETE",
            _events_path(calendar_id, event_id),
            params={"sendUpdates": "all"},
            accept=(200, 204, 404, 410),
        )
