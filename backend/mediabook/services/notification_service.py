"""Booking email builders and SMTP delivery."""

from __future__ import annotations

import logging
import smtplib
from datetime import datetime
from email.message import EmailMessage
from typing import Iterable
from zoneinfo import ZoneInfo

from mediabook.core.settings import MailSettings, get_mail_settings
from mediabook.services.pricing_service import format_cents
from mediabook.utils.datetimes import normalize_datetime

logger = logging.getLogger(__name__)

STUDIO_SIGNATURE = (
    "Photos 4 Real Estate\n"
    "info@photos4realestate.ca\n"
    "(825) 449-5001"
)


def format_appointment(start_at: datetime, time_zone: str) -> tuple[str, str]:
    """Return ``("October 18, 2026", "1:30 p.m.")`` in the account time zone."""
    local = normalize_datetime(start_at).astimezone(ZoneInfo(time_zone or "UTC"))
    date_str = f"{local.strftime('%B')} {local.day}, {local.year}"
    hour = local.hour % 12 or 12
    meridiem = "a.m." if local.hour < 12 else "p.m."
    return date_str, f"{hour}:{local.minute:02d} {meridiem}"


def _service_block(
    category_name: str | None, category_description: str | None, service_name: str
) -> list[str]:
    lines = [value for value in (category_name, category_description) if value]
    lines.append(service_name)
    return lines


def build_customer_booking_email(
    *,
    first_name: str,
    address: str,
    start_at: datetime,
    time_zone: str,
    service_name: str,
    category_name: str | None = None,
    category_description: str | None = None,
) -> tuple[str, str]:
    date_str, time_str = format_appointment(start_at, time_zone)
    subject = f"We received your booking request for {address}"
    body_lines = [
        f"Hi {first_name},",
        "",
        "We're all set for your appointment!",
        "",
        "Booking Details:",
        f"Address: {address}",
        f"Date & time: {date_str}, at {time_str}",
        "",
        "Selected Service:",
        *_service_block(category_name, category_description, service_name),
        "",
        "Thank you for your business!",
        "",
        STUDIO_SIGNATURE,
    ]
    return subject, "\n".join(body_lines)


def build_admin_booking_email(
    *,
    address: str,
    start_at: datetime,
    time_zone: str,
    service_name: str,
    first_name: str,
    last_name: str,
    email: str,
    total_cents: int,
    phone: str | None = None,
    company: str | None = None,
    category_name: str | None = None,
    category_description: str | None = None,
) -> tuple[str, str]:
    date_str, time_str = format_appointment(start_at, time_zone)
    subject = f"New Booking Request Received for {address}"
    body_lines = [
        "A new booking request has been received.",
        "",
        "Booking Details:",
        f"Address: {address}",
        f"Date & time: {date_str}, at {time_str}",
        "",
        "Selected Service:",
        *_service_block(category_name, category_description, service_name),
        "",
        "Client:",
        f"First Name: {first_name}",
        f"Last Name: {last_name}",
        f"Email: {email}",
        f"Phone: {phone or ''}",
        f"Company name: {company or ''}",
        "",
        "Pricing:",
        f"Total: {format_cents(total_cents)}",
        "",
        "Please review and confirm with the client.",
    ]
    return subject, "\n".join(body_lines)


def send_email(
    recipients: Iterable[str],
    subject: str,
    body: str,
    *,
    mail: MailSettings | None = None,
) -> bool:
    """Deliver a plain-text email; returns ``False`` when SMTP is disabled.

    SMTP errors propagate to the caller.
    """
    recipients_list = [addr for addr in recipients if addr]
    if not recipients_list:
        logger.debug("No recipients provided for email; skipping")
        return False
    mail = mail or get_mail_settings()
    if not mail.enabled:
        logger.info("SMTP settings missing; skipping email delivery to %s", recipients_list)
        return False

    message = EmailMessage()
    message["Subject"] = subject
    message["To"] = ", ".join(recipients_list)
    message["From"] = mail.sender
    message.set_content(body)

    assert mail.host is not None and mail.port is not None
    with smtplib.SMTP(mail.host, mail.port) as smtp:
        if mail.username and mail.password:
            smtp.starttls()
            smtp.login(mail.username, mail.password)
        smtp.send_message(message)
    logger.info("Email sent to %s", recipients_list)
    return True

