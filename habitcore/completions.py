"""Completion store view and legacy key reconciliation.

Completions reach us in several persisted shapes:

- nested:  {habitId: {"YYYY-MM-DD": {"completed": true, ...}}}
- keyed:   {"YYYY-MM-DD_habitId": record} or {"YYYY-MM-DD-habitId": record}
- records: [{"habitId": ..., "date": ..., "completed": ...}, ...]

``load_completions`` is the one place that understands all of them; the
streak, progress and analytics engines only ever see a ``CompletionStore``.
"""

from __future__ import annotations

import logging
import re
from datetime import date
from typing import Any, Iterator, Mapping

from habitcore.dates import parse_day
from habitcore.errors import InvalidArgumentError
from habitcore.models import CleanupReport, CompletionRecord

logger = logging.getLogger(__name__)

_DATE_KEY = re.compile(r"^(\d{4}-\d{2}-\d{2})[_-](\S+)$")
_DAY_NAME_KEY = re.compile(r"^(Monday|Tuesday|Wednesday|Thursday|Friday|Saturday|Sunday)-(\S+)$")


# ── Keys ──────────────────────────────────────────────────────


def parse_completion_key(key: str) -> tuple[str, date] | None:
    """Split a date-based key into (habit_id, date).

    Day-name keys like 'Monday-123' are ambiguous across weeks and return None.
    """
    if not isinstance(key, str):
        return None
    m = _DATE_KEY.match(key)
    if not m:
        return None
    day = parse_day(m.group(1))
    if day is None:
        return None
    return m.group(2), day


def format_completion_key(habit_id: str, day: date) -> str:
    return f"{day.isoformat()}_{habit_id}"


def classify_key(key: str) -> str:
    """'date', 'dayname' or 'other'."""
    if parse_completion_key(key) is not None:
        return "date"
    if isinstance(key, str) and _DAY_NAME_KEY.match(key):
        return "dayname"
    return "other"


def _is_nested_entry(value: Any) -> bool:
    """True for a per-habit {date: record} mapping from the nested shape."""
    return isinstance(value, Mapping) and any(parse_day(k) is not None for k in value)


def _is_done(value: Any) -> bool:
    """A stored value counts as done if it's True or a record not marked completed=False."""
    if isinstance(value, Mapping):
        return bool(value.get("completed", True))
    return bool(value)


# ── Store ─────────────────────────────────────────────────────


class CompletionStore:
    """Read-only (habit, day) -> completed lookup.

    Absence of a record is the common case and means "not completed".
    """

    def __init__(self, records: Mapping[str, Mapping[date, bool]] | None = None) -> None:
        self._by_habit: dict[str, dict[date, bool]] = {
            str(hid): dict(days) for hid, days in (records or {}).items()
        }

    def __len__(self) -> int:
        return sum(len(days) for days in self._by_habit.values())

    def __iter__(self) -> Iterator[CompletionRecord]:
        for hid in sorted(self._by_habit):
            for day in sorted(self._by_habit[hid]):
                yield CompletionRecord(habit_id=hid, date=day, completed=self._by_habit[hid][day])

    def habit_ids(self) -> list[str]:
        return sorted(self._by_habit)

    def get(self, habit_id: Any, day: Any) -> bool | None:
        """Stored flag for (habit, day), or None if nothing was recorded."""
        d = parse_day(day)
        if d is None:
            return None
        return self._by_habit.get(str(habit_id), {}).get(d)

    def is_completed_on(self, habit_id: Any, day: Any) -> bool:
        return self.get(habit_id, day) is True

    def completed_dates(self, habit_id: Any) -> list[date]:
        days = self._by_habit.get(str(habit_id), {})
        return sorted(d for d, done in days.items() if done)


class _Builder:
    def __init__(self) -> None:
        self.records: dict[str, dict[date, bool]] = {}

    def add(self, habit_id: Any, day: Any, done: bool) -> None:
        d = parse_day(day)
        if d is None or habit_id in (None, ""):
            logger.debug("Skipping completion with unreadable date/habit: %r / %r", day, habit_id)
            return
        days = self.records.setdefault(str(habit_id), {})
        days[d] = days.get(d, False) or done

    def build(self) -> CompletionStore:
        return CompletionStore(self.records)


def load_completions(raw: Any) -> CompletionStore:
    """Normalize any supported completion shape into a CompletionStore."""
    if raw is None:
        return CompletionStore()
    if isinstance(raw, CompletionStore):
        return raw

    builder = _Builder()
    if isinstance(raw, Mapping):
        for key, value in raw.items():
            parsed = parse_completion_key(key)
            if parsed is not None:
                builder.add(parsed[0], parsed[1], _is_done(value))
            elif classify_key(key) == "dayname":
                logger.debug("Ignoring day-name completion key %r", key)
            elif isinstance(value, Mapping):
                for day, entry in value.items():
                    builder.add(key, day, _is_done(entry))
            else:
                logger.debug("Ignoring unrecognized completion key %r", key)
        return builder.build()

    if isinstance(raw, (list, tuple)):
        for item in raw:
            if isinstance(item, CompletionRecord):
                builder.add(item.habit_id, item.date, item.completed)
            elif isinstance(item, Mapping):
                rec = CompletionRecord.from_dict(item)
                builder.add(rec.habit_id, rec.date, rec.completed)
            elif isinstance(item, (list, tuple)) and len(item) == 2:
                # (key, value) pairs from a serialized Map
                parsed = parse_completion_key(item[0])
                if parsed is not None:
                    builder.add(parsed[0], parsed[1], _is_done(item[1]))
            else:
                logger.debug("Ignoring completion entry %r", item)
        return builder.build()

    raise InvalidArgumentError(f"Unsupported completions shape: {type(raw).__name__}")


# ── Legacy cleanup ────────────────────────────────────────────


def reconcile_completion_keys(
    snapshot: Mapping[str, Any], canonical: bool = False
) -> tuple[dict[str, Any], CleanupReport]:
    """Drop day-name and unreadable keys from a keyed completion snapshot.

    Returns a new mapping plus a report; the input is not modified. Falsy
    values are dropped as well. Nested ``{habitId: {date: record}}`` entries
    that share the snapshot are valid completions and pass through untouched.
    With ``canonical=True`` the kept date keys are rewritten to the
    ``YYYY-MM-DD_habitId`` form.
    """
    if not isinstance(snapshot, Mapping):
        raise InvalidArgumentError(f"Completion snapshot must be a mapping, got {type(snapshot).__name__}")

    report = CleanupReport(total_before=len(snapshot))
    cleaned: dict[str, Any] = {}
    for key, value in snapshot.items():
        kind = classify_key(key)
        if kind == "date":
            report.date_based_before += 1
            if not value:
                report.dropped_keys.append(key)
                continue
            if canonical:
                habit_id, day = parse_completion_key(key)  # type: ignore[misc]
                cleaned[format_completion_key(habit_id, day)] = value
            else:
                cleaned[key] = value
            continue
        if kind == "other" and _is_nested_entry(value):
            report.nested_before += 1
            cleaned[key] = value
            continue
        if kind == "dayname":
            report.day_name_before += 1
        else:
            report.other_before += 1
        report.dropped_keys.append(key)

    report.kept = len(cleaned)
    logger.info(
        "Completion cleanup kept %d of %d keys (%d day-name, %d other dropped)",
        report.kept, report.total_before, report.day_name_before, report.other_before,
    )
    return cleaned, report
