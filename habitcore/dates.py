"""Calendar-day helpers for habitcore.

All comparisons happen at day granularity on the caller's local calendar;
nothing here converts between timezones.
"""

from __future__ import annotations

import re
from datetime import date, datetime

from habitcore.errors import InvalidArgumentError

_ISO_DAY = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")


def parse_day(value: object) -> date | None:
    """Coerce a date-like value to a ``date``.

    Accepts ``date``, ``datetime`` (its own calendar day, no tz shift) and
    ``YYYY-MM-DD`` strings, optionally followed by a ``T...`` time part.
    Returns None if the value can't be read as a day.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    text = value.strip()
    if "T" in text:
        text = text.split("T", 1)[0]
    m = _ISO_DAY.match(text)
    if not m:
        return None
    try:
        return date(int(m.group(1)), int(m.group(2)), int(m.group(3)))
    except ValueError:
        return None


def day_str(d: date) -> str:
    return d.isoformat()


def require_day(value: object, name: str = "today") -> date:
    """Like parse_day, but for required arguments: a non-date raises."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    raise InvalidArgumentError(f"{name} must be a date, got {type(value).__name__}")
