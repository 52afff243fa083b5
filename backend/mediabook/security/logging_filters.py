"""Logging filters that scrub sensitive content."""

from __future__ import annotations

import logging
import re

_SENSITIVE_PATTERN = re.compile(
    r"(Authorization: Bearer\s+[\w\.-]+"
    r"|(?:access_token|refresh_token|client_secret)\"?\s*[:=]\s*\"?[^\",\s]+\"?"
    r"|password\"\s*:\s*\"[^\"]+\")",
    re.IGNORECASE,
)

REDACTED = "**REDACTED**"


def redact(text: str) -> str:
    """Return ``text`` with bearer tokens, OAuth secrets and passwords masked."""
    return _SENSITIVE_PATTERN.sub(REDACTED, text)


class SensitiveFilter(logging.Filter):
    """Replace sensitive tokens in log messages with a redaction marker."""

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = redact(record.msg)
        if record.args:
            if isinstance(record.args, dict):
                record.args = {
                    key: redact(value) if isinstance(value, str) else value
                    for key, value in record.args.items()
                }
            else:
                record.args = tuple(
                    redact(arg) if isinstance(arg, str) else arg
                    for arg in record.args
                )
        return True


def install_sensitive_filter(*logger_names: str) -> None:
    """Attach a single SensitiveFilter to each named logger."""
    for name in logger_names:
        target = logging.getLogger(name)
        if not any(isinstance(flt, SensitiveFilter) for flt in target.filters):
            target.addFilter(SensitiveFilter())


__all__ = ["REDACTED", "SensitiveFilter", "install_sensitive_filter", "redact"]
