"""Slug helpers for public URLs."""

from __future__ import annotations

import re
import secrets
import string

_NON_ALNUM = re.compile(r"[^a-z0-9]+")
_SUFFIX_ALPHABET = string.ascii_lowercase + string.digits


def slugify(text: str, *, max_length: int = 200) -> str:
    """Lowercase ``text`` and collapse anything non-alphanumeric into dashes."""
    slug = _NON_ALNUM.sub("-", text.lower()).strip("-")
    return slug[:max_length]


def random_suffix(length: int = 4) -> str:
    return "".join(secrets.choice(_SUFFIX_ALPHABET) for _ in range(length))
