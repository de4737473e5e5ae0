"""String helpers for configuration checks, header safety and email content."""

from __future__ import annotations

import hmac
import re
from typing import Optional
from urllib.parse import urlsplit

_HEADER_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")
_BODY_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")


def is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def is_not_blank(value: Optional[str]) -> bool:
    return not is_blank(value)


def is_configured(value: Optional[str]) -> bool:
    """True when `value` holds a real setting (not blank, not the literal `null`)."""
    return is_not_blank(value) and value.strip() != "null"


def sanitize_for_email_header(value: Optional[str]) -> str:
    """Strip line breaks and control characters so `value` cannot inject headers."""
    if value is None:
        return ""
    cleaned = value.replace("\r", "").replace("\n", "").replace("\t", " ")
    return _HEADER_CONTROL_CHARS.sub("", cleaned).strip()


def sanitize_for_email_body(value: Optional[str]) -> str:
    if value is None:
        return ""
    cleaned = value.replace("\r\n", "\n").replace("\r", "\n")
    cleaned = _BODY_CONTROL_CHARS.sub("", cleaned)
    return cleaned.replace("\t", "    ")


def constant_time_equals(expected: Optional[str], provided: Optional[str]) -> bool:
    if expected is None or provided is None:
        return False
    return hmac.compare_digest(expected.encode("utf-8"), provided.encode("utf-8"))


def origin_from_referer(referer: Optional[str]) -> Optional[str]:
    """Reduce a Referer URL to its `scheme://host[:port]` origin."""
    if is_blank(referer):
        return None
    try:
        parts = urlsplit(referer.strip())
        port = parts.port
    except ValueError:
        return None
    if not parts.scheme or not parts.hostname:
        return None
    if port is None:
        return f"{parts.scheme}://{parts.hostname}"
    return f"{parts.scheme}://{parts.hostname}:{port}"
