"""Typed dataclasses for the habitcore data model.

All models use from_dict/to_dict for JSON/YAML serialization.
camelCase in JSON is mapped to snake_case in Python.
Unknown keys are ignored; missing keys use defaults.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any

from habitcore.dates import parse_day
from habitcore.errors import InvalidArgumentError


# ── Habits ────────────────────────────────────────────────────


def _raw_schedule(d: dict[str, Any]) -> list[Any]:
    """Pull the raw weekday list out of a habit record.

    ``schedule.days`` is the current shape; a top-level ``frequency`` list is
    the legacy one. A string frequency (``"weekly"``) carries no days; it is
    kept on ``Habit.frequency`` instead.
    """
    schedule = d.get("schedule")
    if isinstance(schedule, dict):
        days = schedule.get("days")
    elif schedule is not None:
        days = schedule
    else:
        days = None
    if days is None:
        frequency = d.get("frequency")
        days = frequency if isinstance(frequency, (list, tuple)) else []
    if not isinstance(days, (list, tuple)):
        raise InvalidArgumentError(f"Habit schedule must be a list of weekdays, got {type(days).__name__}")
    return list(days)


DEFAULT_WEEKLY_TARGET = 3


def _weekly_target(value: Any) -> int:
    """Weekly-target count; missing or 0 falls back to the default of 3."""
    if value is None or value == 0:
        return DEFAULT_WEEKLY_TARGET
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise InvalidArgumentError(f"weeklyTarget must be a positive integer, got {value!r}")
    return value


@dataclass
class Habit:
    id: str = ""
    name: str = ""
    icon: str = ""
    color: str = ""
    schedule: list[int] = field(default_factory=list)  # raw, pre-normalization
    is_active: bool = True
    frequency: str = ""  # "weekly" for target-per-week habits
    weekly_target: int = DEFAULT_WEEKLY_TARGET

    @property
    def is_weekly(self) -> bool:
        return self.frequency == "weekly"

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Habit:
        if not isinstance(d, dict):
            raise InvalidArgumentError(f"Habit record must be a mapping, got {type(d).__name__}")
        frequency = d.get("frequency")
        return cls(
            id=str(d.get("id", d.get("_id", ""))),
            name=str(d.get("name", "")),
            icon=str(d.get("icon", "")),
            color=str(d.get("color", "")),
            schedule=_raw_schedule(d),
            is_active=bool(d.get("isActive", True)),
            frequency=frequency if isinstance(frequency, str) else "",
            weekly_target=_weekly_target(d.get("weeklyTarget", d.get("weekly_target"))),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "icon": self.icon,
            "color": self.color,
            "schedule": {"days": list(self.schedule)},
            "isActive": self.is_active,
            "frequency": self.frequency,
            "weeklyTarget": self.weekly_target,
        }


def coerce_habits(habits: Any) -> list[Habit]:
    """Accept Habit objects or raw dicts; reject anything that isn't a sequence."""
    if habits is None:
        return []
    if isinstance(habits, (str, bytes, dict)) or not hasattr(habits, "__iter__"):
        raise InvalidArgumentError(f"habits must be a sequence, got {type(habits).__name__}")
    return [h if isinstance(h, Habit) else Habit.from_dict(h) for h in habits]


# ── Completions ───────────────────────────────────────────────


@dataclass
class CompletionRecord:
    habit_id: str = ""
    date: date | None = None
    completed: bool = True

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> CompletionRecord:
        return cls(
            habit_id=str(d.get("habitId", d.get("habit_id", ""))),
            date=parse_day(d.get("date")),
            completed=bool(d.get("completed", True)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "habitId": self.habit_id,
            "date": self.date.isoformat() if self.date else None,
            "completed": self.completed,
        }


@dataclass
class CleanupReport:
    total_before: int = 0
    date_based_before: int = 0
    day_name_before: int = 0
    other_before: int = 0
    nested_before: int = 0
    kept: int = 0
    dropped_keys: list[str] = field(default_factory=list)

    @property
    def removed(self) -> int:
        return len(self.dropped_keys)

    def to_dict(self) -> dict[str, Any]:
        return {
            "before": {
                "totalKeys": self.total_before,
                "dateBasedKeys": self.date_based_before,
                "dayBasedKeys": self.day_name_before,
                "otherKeys": self.other_before,
                "nestedKeys": self.nested_before,
            },
            "after": {
                "totalKeys": self.kept,
                "dateBasedKeys": self.kept - self.nested_before,
                "dayBasedKeys": 0,
                "otherKeys": 0,
                "nestedKeys": self.nested_before,
            },
            "droppedKeys": list(self.dropped_keys),
        }


# ── Progress & streaks ────────────────────────────────────────


@dataclass
class WeeklyProgress:
    completed: int = 0
    target: int = 0
    met: bool = False
    remaining: int = 0
    completed_days: list[str] = field(default_factory=list)

    @property
    def display_completed(self) -> int:
        return min(self.completed, self.target)

    @property
    def exceeded_by(self) -> int:
        return max(0, self.completed - self.target)

    @property
    def exceeding_target(self) -> bool:
        return self.exceeded_by > 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "completed": self.completed,
            "target": self.target,
            "met": self.met,
            "remaining": self.remaining,
            "completedDays": list(self.completed_days),
            "displayCompleted": self.display_completed,
            "exceededBy": self.exceeded_by,
            "exceedingTarget": self.exceeding_target,
        }


@dataclass
class HabitStats:
    total_completions: int = 0
    current_streak: int = 0
    longest_streak: int = 0
    first_completion: str | None = None
    last_completion: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalCompletions": self.total_completions,
            "currentStreak": self.current_streak,
            "longestStreak": self.longest_streak,
            "firstCompletion": self.first_completion,
            "lastCompletion": self.last_completion,
        }


@dataclass
class StreakEntry:
    habit_id: str = ""
    name: str = ""
    full_name: str = ""
    streak: int = 0
    color: str = ""
    icon: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "habitId": self.habit_id,
            "name": self.name,
            "fullName": self.full_name,
            "streak": self.streak,
            "color": self.color,
            "icon": self.icon,
        }


# ── Analytics ─────────────────────────────────────────────────


@dataclass
class AnalyticsSummary:
    total_habits: int = 0
    total_completions: int = 0
    average_completion_rate: int = 0
    active_habits: int = 0
    window_days: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalHabits": self.total_habits,
            "totalCompletions": self.total_completions,
            "averageCompletionRate": self.average_completion_rate,
            "activeHabits": self.active_habits,
            "windowDays": self.window_days,
        }


@dataclass
class PeriodMetrics:
    active_habits: int = 0
    completions: int = 0
    possible: int = 0
    rate: int = 0
    prev_rate: int = 0
    best_streak: int = 0

    @property
    def rate_delta(self) -> int:
        return self.rate - self.prev_rate

    def to_dict(self) -> dict[str, Any]:
        return {
            "activeHabits": self.active_habits,
            "completions": self.completions,
            "possible": self.possible,
            "rate": self.rate,
            "prevRate": self.prev_rate,
            "rateDelta": self.rate_delta,
            "bestStreak": self.best_streak,
        }


# ── Onboarding / traits ───────────────────────────────────────


@dataclass
class OnboardingAnswers:
    goals: list[str] = field(default_factory=list)
    capacity: str = "balanced"
    preferred_times: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        # Direct construction goes through the same shape checks as from_dict.
        self.goals = _string_list("goals", self.goals)
        self.capacity = "balanced" if self.capacity is None else _string("capacity", self.capacity)
        self.preferred_times = _string_list("preferredTimes", self.preferred_times)

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> OnboardingAnswers:
        if not isinstance(d, dict):
            raise InvalidArgumentError(f"Onboarding answers must be a mapping, got {type(d).__name__}")
        return cls(
            goals=d.get("goals"),
            capacity=d.get("capacity"),
            preferred_times=d.get("preferredTimes", d.get("preferred_times")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "goals": list(self.goals),
            "capacity": self.capacity,
            "preferredTimes": list(self.preferred_times),
        }


def _string(name: str, value: Any) -> str:
    if not isinstance(value, str):
        raise InvalidArgumentError(f"{name} must be a string, got {type(value).__name__}")
    return value


def _string_list(name: str, value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, (str, bytes, dict)) or not isinstance(value, (list, tuple)):
        raise InvalidArgumentError(f"{name} must be a list of strings, got {type(value).__name__}")
    return [_string(name, v) for v in value]


DEFAULT_TRAITS = {
    "tone": "warm",
    "focus": "balanced",
    "verbosity": "concise",
    "accountability": "gentle",
}


@dataclass
class TraitProfile:
    tone: str = "warm"
    focus: str = "balanced"
    verbosity: str = "concise"
    accountability: str = "gentle"

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> TraitProfile:
        if not d or not isinstance(d, dict):
            return cls()
        return cls(**{axis: str(d.get(axis) or default) for axis, default in DEFAULT_TRAITS.items()})

    def to_dict(self) -> dict[str, Any]:
        return {
            "tone": self.tone,
            "focus": self.focus,
            "verbosity": self.verbosity,
            "accountability": self.accountability,
        }
