"""Specialized settings adapters for integrations."""

from __future__ import annotations

from pydantic import BaseModel

from mediabook.core.config import get_settings


class MailSettings(BaseModel):
    """Slim view of outbound email configuration."""

    host: str | None = None
    port: int | None = None
    username: str | None = None
    password: str | None = None
    sender: str

    @property
    def enabled(self) -> bool:
        return bool(self.host and self.port)


class GoogleSettings(BaseModel):
    """OAuth client used to refresh calendar tokens."""

    client_id: str | None = None
    client_secret: str | None = None

    @property
    def enabled(self) -> bool:
        return bool(self.client_id and self.client_secret)


class GhlSettings(BaseModel):
    """GoHighLevel CRM push configuration."""

    api_key: str | None = None
    location_id: str | None = None
    calendar_id: str | None = None
    assigned_user_id: str | None = None
    api_base: str = "https://services.leadconnectorhq.com"
    api_version: str = "2021-07-28"
    appointments_api_version: str = "2021-04-15"
    tags: list[str] = []

    @property
    def enabled(self) -> bool:
        return bool(self.api_key and self.location_id)


def get_mail_settings() -> MailSettings:
    """Return SMTP configuration."""

    settings = get_settings()
    return MailSettings(
        host=settings.smtp_host or None,
        port=settings.smtp_port,
        username=settings.smtp_username or None,
        password=settings.smtp_password or None,
        sender=settings.smtp_from,
    )


def get_google_settings() -> GoogleSettings:
    """Return Google OAuth client configuration."""

    settings = get_settings()
    return GoogleSettings(
        client_id=settings.google_client_id or None,
        client_secret=settings.google_client_secret or None,
    )


def get_ghl_settings() -> GhlSettings:
    """Return GoHighLevel configuration."""

    settings = get_settings()
    return GhlSettings(
        api_key=settings.ghl_api_key or None,
        location_id=settings.ghl_location_id or None,
        calendar_id=settings.ghl_calendar_id or None,
        assigned_user_id=settings.ghl_assigned_user_id or None,
        api_base=settings.ghl_api_base.rstrip("/"),
        api_version=settings.ghl_api_version,
        appointments_api_version=settings.ghl_appointments_api_version,
        tags=list(settings.ghl_tags),
    )
