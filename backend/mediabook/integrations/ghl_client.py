"""GoHighLevel (LeadConnector) CRM client.

Pushes each new booking as an upserted contact with booking custom fields,
an optional calendar appointment and a fixed tag set.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any
from zoneinfo import ZoneInfo

import httpx

from mediabook.core.settings import GhlSettings
from mediabook.utils.datetimes import normalize_datetime

logger = logging.getLogger(__name__)

APPOINTMENT_TITLE = "Photoshoot"


class GhlError(RuntimeError):
    """Raised when the CRM rejects a request."""


@dataclass(frozen=True, slots=True)
class GhlBooking:
    first_name: str
    last_name: str
    email: str
    address: str
    start_at: datetime
    time_zone: str = "UTC"
    phone: str | None = None


def format_booking_date(start_at: datetime, time_zone: str) -> str:
    """Local date as ``YYYY-MM-DD`` for the CRM date picker field."""
    return normalize_datetime(start_at).astimezone(ZoneInfo(time_zone)).strftime(
        "%Y-%m-%d"
    )


def format_booking_time(start_at: datetime, time_zone: str) -> str:
    """Local 12-hour time such as ``1:00 PM``."""
    local = normalize_datetime(start_at).astimezone(ZoneInfo(time_zone))
    hour = local.hour % 12 or 12
    return f"{hour}:{local.minute:02d} {'AM' if local.hour < 12 else 'PM'}"


class GhlClient:
    def __init__(
        self,
        settings: GhlSettings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 10.0,
    ) -> None:
        if not settings.api_key:
            raise GhlError("GHL API key is not configured")
        self._settings = settings
        self._transport = transport
        self._timeout = timeout

    def _headers(self, version: str) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._settings.api_key}",
            "Version": version,
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    async def _post(self, path: str, body: dict[str, Any], *, version: str) -> Any:
        async with httpx.AsyncClient(
            base_url=self._settings.api_base,
            transport=self._transport,
            timeout=self._timeout,
        ) as client:
            response = await client.post(path, json=body, headers=self._headers(version))
        if response.is_error:
            raise GhlError(f"POST {path} failed with status {response.status_code}")
        if not response.content:
            return {}
        return response.json()

    async def upsert_contact(
        self,
        *,
        first_name: str,
        last_name: str,
        email: str,
        location_id: str,
        phone: str | None = None,
        custom_fields: list[dict[str, str]] | None = None,
    ) -> str:
        """Create or update a contact by email and return its id."""
        body: dict[str, Any] = {
            "firstName": first_name,
            "lastName": last_name,
            "email": email,
            "locationId": location_id,
        }
        if phone:
            body["phone"] = phone
        if custom_fields:
            body["customFields"] = custom_fields
        data = await self._post(
            "/contacts/upsert", body, version=self._settings.api_version
        )
        contact_id = (data.get("contact") or {}).get("id")
        if not contact_id:
            raise GhlError("Contact upsert returned no contact id")
        return contact_id

    async def create_appointment(
        self,
        *,
        calendar_id: str,
        location_id: str,
        contact_id: str,
        address: str,
        start_at: datetime,
        title: str = APPOINTMENT_TITLE,
        assigned_user_id: str | None = None,
    ) -> None:
        body: dict[str, Any] = {
            "title": title,
            "meetingLocationType": "custom",
            "meetingLocationId": "custom_0",
            "overrideLocationConfig": True,
            "appointmentStatus": "confirmed",
            "description": f"{title} - {address}",
            "address": address,
            "ignoreDateRange": False,
            "toNotify": False,
            "ignoreFreeSlotValidation": True,
            "calendarId": calendar_id,
            "locationId": location_id,
            "contactId": contact_id,
            "startTime": normalize_datetime(start_at).isoformat(),
        }
        if assigned_user_id:
            body["assignedUserId"] = assigned_user_id
        await self._post(
            "/calendars/events/appointments",
            body,
            version=self._settings.appointments_api_version,
        )

    async def add_tags(self, contact_id: str, tags: list[str]) -> None:
        await self._post(
            f"/contacts/{contact_id}/tags",
            {"tags": tags},
            version=self._settings.api_version,
        )


async def send_booking(
    settings: GhlSettings,
    booking: GhlBooking,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> str | None:
    """Push a booking to the CRM; returns the contact id or ``None`` when skipped.

    A failed appointment is logged and tagging still runs.
    """
    if not settings.enabled:
        logger.info("GHL push skipped; API key or location not configured")
        return None
    location_id = settings.location_id
    assert location_id is not None

    client = GhlClient(settings, transport=transport)
    custom_fields = [
        {"key": "booking_address", "field_value": booking.address},
        {
            "key": "booking_date_and_time",
            "field_value": format_booking_date(booking.start_at, booking.time_zone),
        },
        {
            "key": "booking_time",
            "field_value": format_booking_time(booking.start_at, booking.time_zone),
        },
    ]
    contact_id = await client.upsert_contact(
        first_name=booking.first_name,
        last_name=booking.last_name,
        email=booking.email,
        location_id=location_id,
        phone=booking.phone,
        custom_fields=custom_fields,
    )

    if settings.calendar_id:
        try:
            await client.create_appointment(
                calendar_id=settings.calendar_id,
                location_id=location_id,
                contact_id=contact_id,
                address=booking.address,
                start_at=booking.start_at,
                assigned_user_id=settings.assigned_user_id,
            )
        except (GhlError, httpx.HTTPError):
            logger.warning("GHL appointment creation failed", exc_info=True)
    else:
        logger.info("GHL appointment skipped; calendar id not configured")

    if settings.tags:
        await client.add_tags(contact_id, settings.tags)
    return contact_id
