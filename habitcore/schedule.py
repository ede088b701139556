"""Weekly recurrence schedules.

Canonical weekday indices are 0 = Sunday ... 6 = Saturday. Older records use
1 = Monday ... 7 = Sunday; both are accepted and folded into the canonical
form. An empty schedule means the habit is due every day.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Iterable

from habitcore.errors import InvalidArgumentError
from habitcore.models import Habit

logger = logging.getLogger(__name__)

DAY_NAMES = {
    0: ("Sun", "Sunday"),
    1: ("Mon", "Monday"),
    2: ("Tue", "Tuesday"),
    3: ("Wed", "Wednesday"),
    4: ("Thu", "Thursday"),
    5: ("Fri", "Friday"),
    6: ("Sat", "Saturday"),
}

WEEKDAYS = frozenset({1, 2, 3, 4, 5})
WEEKENDS = frozenset({0, 6})


def normalize_schedule(raw_days: Iterable[Any] | None) -> list[int]:
    """Fold a raw weekday list into a sorted, de-duplicated canonical list.

    Values in 1..7 are read as legacy (7 -> 0, others unchanged), 0 passes
    through. Anything outside 0..7 is kept as-is rather than rejected.
    """
    if raw_days is None:
        return []
    if isinstance(raw_days, (str, bytes, dict)) or not hasattr(raw_days, "__iter__"):
        raise InvalidArgumentError(f"Schedule must be a sequence of weekdays, got {type(raw_days).__name__}")

    days = set()
    for day in raw_days:
        if isinstance(day, bool) or not isinstance(day, int):
            raise InvalidArgumentError(f"Schedule weekday must be an integer, got {day!r}")
        if 1 <= day <= 7:
            days.add(0 if day == 7 else day)
        else:
            if day != 0:
                logger.debug("Keeping out-of-range schedule weekday %r", day)
            days.add(day)
    return sorted(days)


def habit_days(habit: Habit) -> list[int]:
    """Normalized due weekdays of *habit*; weekly-target habits are due any day."""
    if habit.is_weekly:
        return []
    return normalize_schedule(habit.schedule)


def weekday_index(d: date) -> int:
    """Canonical weekday of *d* (0 = Sunday)."""
    return (d.weekday() + 1) % 7


def is_scheduled_on(schedule: Iterable[Any] | None, d: date) -> bool:
    """True if a habit with *schedule* is due on *d*; empty schedules are due daily."""
    days = normalize_schedule(schedule)
    if not days:
        return True
    return weekday_index(d) in days


def schedule_label(raw_days: Iterable[Any] | None, variant: str = "pills", full_names: bool = False) -> str:
    """Human label for a schedule.

    Precedence: empty -> "No schedule", 7 days -> "Daily", Mon-Fri ->
    "Weekdays", Sat+Sun -> "Weekends", then either the day names or, for the
    compact variant, a per-week count.
    """
    days = normalize_schedule(raw_days)
    if not days:
        return "No schedule"
    if len(days) == 7:
        return "Daily"
    if len(days) == 5 and set(days) == WEEKDAYS:
        return "Weekdays"
    if len(days) == 2 and set(days) == WEEKENDS:
        return "Weekends"

    if variant == "compact":
        return "Once/week" if len(days) == 1 else f"{len(days)}x/week"

    idx = 1 if full_names else 0
    return ", ".join(DAY_NAMES[d][idx] for d in days if d in DAY_NAMES)
