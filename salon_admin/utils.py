"""Shared utilities used across the salon admin core."""

import re
from datetime import date, datetime
from typing import Any, Optional, Union

_TIME_RE = re.compile(r"^\s*(\d{1,2}):(\d{2})(?::\d{2}(?:\.\d+)?)?\s*$")

MINUTES_PER_DAY = 24 * 60


def normalize_time(value: str) -> str:
    """Normalize a wire time to ``HH:mm``, truncating any seconds.

    Examples:
        >>> normalize_time("09:30:00")
        '09:30'
        >>> normalize_time("9:05")
        '09:05'
    """
    return minutes_to_time(time_to_minutes(value))


def time_to_minutes(value: str) -> int:
    """Convert ``HH:mm`` or ``HH:mm:ss`` to minute-of-day."""
    match = _TIME_RE.match(value or "")
    if not match:
        raise ValueError(f"Invalid time: {value!r}")
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        raise ValueError(f"Invalid time: {value!r}")
    return hours * 60 + minutes


def minutes_to_time(minutes: int) -> str:
    if not 0 <= minutes < MINUTES_PER_DAY:
        raise ValueError(f"Minute-of-day out of range: {minutes}")
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def parse_date(value: Union[str, date]) -> date:
    """Parse a ``YYYY-MM-DD`` date; a leading date of an ISO timestamp is accepted."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = (value or "").strip()
    try:
        return datetime.strptime(text[:10], "%Y-%m-%d").date()
    except ValueError:
        raise ValueError(f"Invalid date: {value!r}") from None


def format_date(value: Union[str, date]) -> str:
    return parse_date(value).strftime("%Y-%m-%d")


def parse_or_default(value: Any, default: float = 0.0) -> float:
    """Coerce a price-like value to a non-negative float.

    Lenient on purpose: the remote service recomputes every price, so an
    unparsable or negative value resolves to ``default`` instead of failing.

    Examples:
        >>> parse_or_default("12.50")
        12.5
        >>> parse_or_default("abc")
        0.0
    """
    if isinstance(value, bool) or value is None:
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if number != number or number < 0:  # NaN or negative
        return default
    return number


def optional_int(value: Any) -> Optional[int]:
    """Parse a picker id (``""``, ``None``, ``"3"`` or ``3``) into an int or None."""
    if value is None or value == "":
        return None
    return int(value)
