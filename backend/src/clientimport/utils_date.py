"""Value parsing helpers for dates, numbers and cell strings."""

import re
from datetime import datetime, timezone
from typing import Optional

# Non-ISO layouts accepted for membership dates
_FALLBACK_DATE_FORMATS = (
    "%Y-%m-%d",  # unpadded fields, e.g. 2025-1-5
    "%Y/%m/%d",
    "%m/%d/%Y",
    "%d %b %Y",
    "%b %d %Y",
    "%B %d %Y",
    "%b %d, %Y",
    "%B %d, %Y",
)

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

# Plain decimal notation with optional exponent; ASCII digits only, no '_' separators
NUMBER_PATTERN = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$", re.ASCII)


def parse_calendar_date(value: Optional[str]) -> Optional[datetime]:
    """
    Parse a calendar date or datetime string to an aware UTC datetime.

    ISO 8601 dates and datetimes are tried first (a trailing 'Z' and explicit
    offsets are honoured), then a handful of common human layouts. Values
    without a timezone are taken as UTC.

    Args:
        value: Raw cell value

    Returns:
        datetime or None: Parsed UTC datetime, or None if unparseable
    """
    if value is None:
        return None

    value = value.strip()
    if not value:
        return None

    iso = value[:-1] + "+00:00" if value.endswith(("Z", "z")) else value
    try:
        dt = datetime.fromisoformat(iso)
    except ValueError:
        dt = None

    if dt is None:
        for fmt in _FALLBACK_DATE_FORMATS:
            try:
                dt = datetime.strptime(value, fmt)
                break
            except ValueError:
                continue

    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def is_valid_email(value: Optional[str]) -> bool:
    """Loose shape check: something@something.something, no whitespace."""
    return bool(value) and EMAIL_PATTERN.match(value) is not None


def safe_float(value: Optional[str], default: Optional[float] = None) -> Optional[float]:
    """
    Safely convert a string to float, returning default on failure.

    Args:
        value: String value to convert
        default: Default value if conversion fails

    Returns:
        float or None: Converted value or default
    """
    if value is None:
        return default

    value = value.strip()
    if not NUMBER_PATTERN.match(value):
        return default

    try:
        return float(value)
    except (ValueError, TypeError):
        return default


def clean_str(value: Optional[str]) -> Optional[str]:
    """
    Clean and trim a string value.

    Args:
        value: String value to clean

    Returns:
        str or None: Cleaned string or None
    """
    if value is None:
        return None

    cleaned = value.strip()
    return cleaned if cleaned else None
