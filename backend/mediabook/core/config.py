"""Application configuration via pydantic settings."""

from functools import lru_cache
from pathlib import Path

from typing import Any

from pydantic import Field
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Typed application configuration."""

    app_env: str = Field("local", alias="APP_ENV")
    app_name: str = "Listing Media Booking API"
    api_v1_prefix: str = "/api/v1"
    app_public_url: str = Field("http://localhost:3000", alias="APP_PUBLIC_URL")

    database_url: str = Field(..., alias="DATABASE_URL")
    sync_database_url: str | None = Field(default=None, alias="SYNC_DATABASE_URL")

    secret_key: str = Field("change-me", alias="SECRET_KEY")
    jwt_secret_key: str = Field(default="", alias="JWT_SECRET_KEY")
    jwt_algorithm: str = Field("HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(60, alias="ACCESS_TOKEN_EXPIRE_MINUTES")

    redis_url: str | None = Field(default=None, alias="REDIS_URL")

    smtp_host: str | None = Field(default=None, alias="SMTP_HOST")
    smtp_port: int | None = Field(default=None, alias="SMTP_PORT")
    smtp_username: str | None = Field(default=None, alias="SMTP_USER")
    smtp_password: str | None = Field(default=None, alias="SMTP_PASSWORD")
    smtp_from: str = Field(
        "Photos 4 Real Estate <no-reply@photos4realestate.ca>", alias="SMTP_FROM"
    )

    google_client_id: str | None = Field(default=None, alias="GOOGLE_CLIENT_ID")
    google_client_secret: str | None = Field(
        default=None, alias="GOOGLE_CLIENT_SECRET"
    )

    ghl_api_key: str | None = Field(default=None, alias="GHL_API_KEY")
    ghl_location_id: str | None = Field(default=None, alias="GHL_LOCATION_ID")
    ghl_calendar_id: str | None = Field(default=None, alias="GHL_CALENDAR_ID")
    ghl_assigned_user_id: str | None = Field(
        default=None, alias="GHL_ASSIGNED_USER_ID"
    )
    ghl_api_base: str = Field(
        "https://services.leadconnectorhq.com", alias="GHL_API_BASE"
    )
    ghl_api_version: str = Field("2021-07-28", alias="GHL_API_VERSION")
    ghl_appointments_api_version: str = Field(
        "2021-04-15", alias="GHL_APPOINTMENTS_API_VERSION"
    )
    ghl_tags: list[str] = Field(
        default_factory=lambda: ["realtor", "new booking request"], alias="GHL_TAGS"
    )

    slot_interval_minutes: int = Field(30, alias="SLOT_INTERVAL_MINUTES")
    slot_range_cap_days: int = Field(60, alias="SLOT_RANGE_CAP_DAYS")

    default_admin_email: str | None = Field(default=None, alias="DEFAULT_ADMIN_EMAIL")
    default_admin_password: str | None = Field(
        default=None, alias="DEFAULT_ADMIN_PASSWORD"
    )
    default_account_name: str = Field(
        "Photos 4 Real Estate", alias="DEFAULT_ACCOUNT_NAME"
    )
    default_account_slug: str = Field("p4re", alias="DEFAULT_ACCOUNT_SLUG")

    cors_allow_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:3000"],
        alias="CORS_ALLOW_ORIGINS",
    )
    cors_allow_credentials: bool = Field(default=False, alias="CORS_ALLOW_CREDENTIALS")

    rate_limit_default: str = Field("100/minute", alias="RATE_LIMIT_DEFAULT")
    rate_limit_login: str = Field("10/minute", alias="RATE_LIMIT_LOGIN")
    rate_limit_booking: str = Field("20/minute", alias="RATE_LIMIT_BOOKING")

    model_config = SettingsConfigDict(
        env_file=Path(__file__).resolve().parents[3] / ".env",
        case_sensitive=False,
    )

    def model_post_init(self, __context: Any) -> None:
        """Populate JWT secret from the generic secret when not provided."""

        if not self.jwt_secret_key:
            object.__setattr__(self, "jwt_secret_key", self.secret_key)

    @field_validator("cors_allow_origins", "ghl_tags", mode="before")
    @classmethod
    def _split_csv(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return value


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""
    return Settings()  # type: ignore[call-arg]
