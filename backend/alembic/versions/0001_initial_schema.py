"""Initial booking schema.

Revision ID: 0001
Revises:
Create Date: 2026-10-18
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def _id() -> sa.Column:
    return sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True)


def _account_fk() -> sa.Column:
    return sa.Column(
        "account_id",
        sa.Uuid(as_uuid=True),
        sa.ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
    )


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    ]


def _property_columns() -> list[sa.Column]:
    return [
        sa.Column("property_address", sa.String(length=512), nullable=False),
        sa.Column("property_formatted_address", sa.String(length=512)),
        sa.Column("property_lat", sa.Float()),
        sa.Column("property_lng", sa.Float()),
        sa.Column("property_city", sa.String(length=120)),
        sa.Column("property_province", sa.String(length=120)),
        sa.Column("property_postal_code", sa.String(length=32)),
        sa.Column("property_country", sa.String(length=120)),
        sa.Column("property_place_id", sa.String(length=255)),
    ]


def upgrade() -> None:
    op.create_table(
        "accounts",
        _id(),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("slug", sa.String(length=255), nullable=False, unique=True),
        sa.Column("contact_email", sa.String(length=320)),
        *_timestamps(),
    )

    user_role_enum = sa.Enum("SUPERADMIN", "ADMIN", "STAFF", name="userrole")
    user_status_enum = sa.Enum("INVITED", "ACTIVE", "SUSPENDED", name="userstatus")
    op.create_table(
        "users",
        _id(),
        _account_fk(),
        sa.Column("email", sa.String(length=320), nullable=False, unique=True),
        sa.Column("hashed_password", sa.String(length=255), nullable=False),
        sa.Column("first_name", sa.String(length=120), nullable=False),
        sa.Column("last_name", sa.String(length=120), nullable=False),
        sa.Column("role", user_role_enum, nullable=False),
        sa.Column("status", user_status_enum, nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_users_account_id", "users", ["account_id"])

    op.create_table(
        "booking_settings",
        _id(),
        sa.Column(
            "account_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("accounts.id", ondelete="CASCADE"),
            nullable=False,
            unique=True,
        ),
        sa.Column("time_zone", sa.String(length=64), nullable=False),
        sa.Column("lead_time_min", sa.Integer(), nullable=False),
        sa.Column("max_advance_days", sa.Integer(), nullable=False),
        sa.Column("default_buffer_min", sa.Integer(), nullable=False),
        sa.Column("google_calendar_id", sa.String(length=255)),
        *_timestamps(),
    )

    op.create_table(
        "availability_rules",
        _id(),
        _account_fk(),
        sa.Column("day_of_week", sa.Integer(), nullable=False),
        sa.Column("start_minutes", sa.Integer(), nullable=False),
        sa.Column("end_minutes", sa.Integer(), nullable=False),
        sa.Column("time_zone", sa.String(length=64)),
        sa.Column("active", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("day_of_week BETWEEN 0 AND 6", name="ck_rule_day_of_week"),
        sa.CheckConstraint("start_minutes < end_minutes", name="ck_rule_window"),
    )
    op.create_index(
        "ix_availability_rules_account_day",
        "availability_rules",
        ["account_id", "day_of_week"],
    )

    op.create_table(
        "blackouts",
        _id(),
        _account_fk(),
        sa.Column("start_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("reason", sa.String(length=255)),
        *_timestamps(),
    )

    op.create_table(
        "service_categories",
        _id(),
        _account_fk(),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("slug", sa.String(length=255), nullable=False),
        sa.Column("description", sa.String(length=2048)),
        sa.Column("sort_order", sa.Integer(), nullable=False),
        sa.Column("active", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("account_id", "slug", name="uq_service_category_slug"),
    )

    op.create_table(
        "taxes",
        _id(),
        _account_fk(),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("rate_bps", sa.Integer(), nullable=False),
        sa.Column("active", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("rate_bps BETWEEN 0 AND 10000", name="ck_tax_rate_bps"),
    )

    op.create_table(
        "services",
        _id(),
        _account_fk(),
        sa.Column(
            "category_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("service_categories.id", ondelete="SET NULL"),
        ),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("slug", sa.String(length=255)),
        sa.Column("description", sa.String(length=2048)),
        sa.Column("price_cents", sa.Integer(), nullable=False),
        sa.Column("duration_min", sa.Integer(), nullable=False),
        sa.Column("buffer_before_min", sa.Integer(), nullable=False),
        sa.Column("buffer_after_min", sa.Integer(), nullable=False),
        sa.Column("min_sq_ft", sa.Integer()),
        sa.Column("max_sq_ft", sa.Integer()),
        sa.Column("sort_order", sa.Integer(), nullable=False),
        sa.Column("active", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("price_cents >= 0", name="ck_service_price"),
        sa.CheckConstraint("duration_min >= 0", name="ck_service_duration"),
    )

    op.create_table(
        "service_taxes",
        sa.Column(
            "service_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("services.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "tax_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("taxes.id", ondelete="CASCADE"),
            primary_key=True,
        ),
    )

    discount_type_enum = sa.Enum("AMOUNT", "PERCENT", name="discounttype")
    op.create_table(
        "promo_codes",
        _id(),
        _account_fk(),
        sa.Column("display_name", sa.String(length=255), nullable=False),
        sa.Column("code", sa.String(length=64), nullable=False),
        sa.Column("discount_type", discount_type_enum, nullable=False),
        sa.Column("discount_value_cents", sa.Integer()),
        sa.Column("discount_rate_bps", sa.Integer()),
        sa.Column("start_date", sa.DateTime(timezone=True)),
        sa.Column("end_date", sa.DateTime(timezone=True)),
        sa.Column("max_uses_total", sa.Integer()),
        sa.Column("max_uses_per_realtor", sa.Integer()),
        sa.Column("active", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("account_id", "code", name="uq_promo_code"),
    )

    op.create_table(
        "promo_code_services",
        sa.Column(
            "promo_code_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("promo_codes.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "service_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("services.id", ondelete="CASCADE"),
            primary_key=True,
        ),
    )

    op.create_table(
        "realtors",
        _id(),
        sa.Column("email", sa.String(length=320), nullable=False, unique=True),
        sa.Column("first_name", sa.String(length=120)),
        sa.Column("last_name", sa.String(length=120)),
        sa.Column("phone", sa.String(length=32)),
        sa.Column("company_name", sa.String(length=255)),
        *_timestamps(),
    )

    op.create_table(
        "realtor_assignments",
        _id(),
        _account_fk(),
        sa.Column(
            "realtor_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("realtors.id", ondelete="CASCADE"),
            nullable=False,
        ),
        *_timestamps(),
        sa.UniqueConstraint("account_id", "realtor_id", name="uq_realtor_assignment"),
    )

    booking_status_enum = sa.Enum(
        "PENDING", "CONFIRMED", "CANCELLED", name="bookingstatus"
    )
    op.create_table(
        "bookings",
        _id(),
        _account_fk(),
        sa.Column(
            "realtor_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("realtors.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("status", booking_status_enum, nullable=False),
        sa.Column("start_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("time_zone", sa.String(length=64), nullable=False),
        *_property_columns(),
        sa.Column("property_size_sq_ft", sa.Integer()),
        sa.Column("contact_name", sa.String(length=255), nullable=False),
        sa.Column("contact_email", sa.String(length=320), nullable=False),
        sa.Column("contact_phone", sa.String(length=32)),
        sa.Column("company", sa.String(length=255)),
        sa.Column("notes", sa.Text()),
        sa.Column("subtotal_cents", sa.Integer(), nullable=False),
        sa.Column("discount_cents", sa.Integer(), nullable=False),
        sa.Column("tax_cents", sa.Integer(), nullable=False),
        sa.Column("total_cents", sa.Integer(), nullable=False),
        sa.Column(
            "applied_promo_code_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("promo_codes.id", ondelete="SET NULL"),
        ),
        sa.Column("google_event_id", sa.String(length=255)),
        *_timestamps(),
    )
    op.create_index("ix_bookings_account_start", "bookings", ["account_id", "start_at"])
    op.create_index("ix_bookings_promo", "bookings", ["applied_promo_code_id"])

    op.create_table(
        "booking_items",
        _id(),
        sa.Column(
            "booking_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("bookings.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "service_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("services.id", ondelete="SET NULL"),
        ),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("service_name", sa.String(length=255), nullable=False),
        sa.Column("unit_price_cents", sa.Integer(), nullable=False),
        sa.Column("discount_cents", sa.Integer(), nullable=False),
        sa.Column("tax_cents", sa.Integer(), nullable=False),
        *_timestamps(),
    )

    order_status_enum = sa.Enum(
        "DRAFT", "IN_PROGRESS", "DELIVERED", "CANCELLED", name="orderstatus"
    )
    op.create_table(
        "orders",
        _id(),
        _account_fk(),
        sa.Column(
            "realtor_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("realtors.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column(
            "booking_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("bookings.id", ondelete="SET NULL"),
            unique=True,
        ),
        sa.Column("slug", sa.String(length=512), nullable=False, unique=True),
        sa.Column("status", order_status_enum, nullable=False),
        *_property_columns(),
        sa.Column("property_size", sa.Integer()),
        sa.Column("description", sa.Text()),
        sa.Column("discount_cents", sa.Integer(), nullable=False),
        sa.Column(
            "applied_promo_code_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("promo_codes.id", ondelete="SET NULL"),
        ),
        *_timestamps(),
    )

    op.create_table(
        "calendar_connections",
        _id(),
        sa.Column(
            "account_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("accounts.id", ondelete="CASCADE"),
            nullable=False,
            unique=True,
        ),
        sa.Column("provider", sa.String(length=32), nullable=False),
        sa.Column("access_token", sa.Text(), nullable=False),
        sa.Column("refresh_token", sa.Text()),
        sa.Column("expires_at", sa.DateTime(timezone=True)),
        sa.Column("scope", sa.String(length=1024)),
        *_timestamps(),
    )


def downgrade() -> None:
    op.drop_table("calendar_connections")
    op.drop_table("orders")
    sa.Enum(name="orderstatus").drop(op.get_bind(), checkfirst=True)
    op.drop_table("booking_items")
    op.drop_index("ix_bookings_promo", table_name="bookings")
    op.drop_index("ix_bookings_account_start", table_name="bookings")
    op.drop_table("bookings")
    sa.Enum(name="bookingstatus").drop(op.get_bind(), checkfirst=True)
    op.drop_table("realtor_assignments")
    op.drop_table("realtors")
    op.drop_table("promo_code_services")
    op.drop_table("promo_codes")
    sa.Enum(name="discounttype").drop(op.get_bind(), checkfirst=True)
    op.drop_table("service_taxes")
    op.drop_table("services")
    op.drop_table("taxes")
    op.drop_table("service_categories")
    op.drop_table("blackouts")
    op.drop_index("ix_availability_rules_account_day", table_name="availability_rules")
    op.drop_table("availability_rules")
    op.drop_table("booking_settings")
    op.drop_index("ix_users_account_id", table_name="users")
    op.drop_table("users")
    sa.Enum(name="userstatus").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="userrole").drop(op.get_bind(), checkfirst=True)
    op.drop_table("accounts")
