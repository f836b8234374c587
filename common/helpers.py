"""
WallDecorator - Shared Helpers
===============================
Pure utility functions with NO database or module dependencies.
"""

import re
import secrets
import string
import uuid
from datetime import datetime, timezone
from typing import Optional

from config.settings import CURRENCY_LABEL

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def now_utc() -> datetime:
    """Returns current UTC datetime (timezone-aware)."""
    return datetime.now(timezone.utc)


def is_valid_email(value: str) -> bool:
    return bool(value) and bool(EMAIL_RE.match(value))


def clean_optional(value: Optional[str]) -> Optional[str]:
    """Trim a form string; empty strings become None."""
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def format_rupees(value) -> str:
    """Format an amount as 'Rs 1,234.00'."""
    if value is None:
        value = 0
    try:
        return f"{CURRENCY_LABEL} {float(value):,.2f}"
    except (ValueError, TypeError):
        return f"{CURRENCY_LABEL} {value}"


def format_long_date(value: datetime) -> str:
    """Format a datetime as 'December 3, 2024'."""
    if value is None:
        return ""
    return f"{value:%B} {value.day}, {value.year}"


def generate_order_number(length: int = 6) -> str:
    """Generate an order number like WD-250301-7K2Q9A (date + random suffix)."""
    alphabet = string.ascii_uppercase + string.digits
    suffix = "".join(secrets.choice(alphabet) for _ in range(length))
    return f"WD-{now_utc():%y%m%d}-{suffix}"


def get_real_ip(request) -> str:
    """Extract real client IP from request (handles X-Forwarded-For proxy header)."""
    x_forwarded = request.headers.get("X-Forwarded-For")
    if x_forwarded:
        return x_forwarded.split(",")[0].strip()
    return request.client.host if request.client else ""


def new_uuid() -> str:
    """String UUID4, used as primary key for public-facing rows."""
    return str(uuid.uuid4())
