"""Weekly progress against a habit's scheduled target."""

from __future__ import annotations

import math
from datetime import date, timedelta
from typing import Any

from habitcore.completions import load_completions
from habitcore.dates import require_day
from habitcore.models import Habit, WeeklyProgress, coerce_habits
from habitcore.schedule import habit_days, weekday_index


def round_half_up(x: float) -> int:
    """Round .5 away from zero for non-negative x (Math.round semantics, not banker's)."""
    return int(math.floor(x + 0.5))


def week_start(d: date, week_start_day: int = 1) -> date:
    """Most recent *week_start_day* (0 = Sunday, 1 = Monday) on or before *d*."""
    return d - timedelta(days=(weekday_index(d) - week_start_day) % 7)


def week_dates(start: date) -> list[date]:
    return [start + timedelta(days=i) for i in range(7)]


def weekly_progress(habit: Habit | dict[str, Any], completions: Any, start: date) -> WeeklyProgress:
    """Completed vs. target for the seven days beginning at *start*.

    target: scheduled days in the window (7 for daily habits), or the
    habit's weekly_target for weekly-target habits.
    completed: days in the window with a completion, scheduled or not, so
    extra effort shows up as exceeding the target instead of being hidden.
    """
    habit = habit if isinstance(habit, Habit) else Habit.from_dict(habit)
    store = load_completions(completions)
    window = week_dates(require_day(start, "start"))

    if habit.is_weekly:
        target = habit.weekly_target
    else:
        days = habit_days(habit)
        target = sum(1 for d in window if not days or weekday_index(d) in days)
    completed_days = [d.isoformat() for d in window if store.is_completed_on(habit.id, d)]
    completed = len(completed_days)

    return WeeklyProgress(
        completed=completed,
        target=target,
        met=completed >= target,
        remaining=max(0, target - completed),
        completed_days=completed_days,
    )


def _active_scheduled(habits: list[Habit], d: date) -> list[Habit]:
    out = []
    for h in habits:
        if not h.is_active:
            continue
        days = habit_days(h)
        if not days or weekday_index(d) in days:
            out.append(h)
    return out


def day_completion_rate(habits: Any, completions: Any, d: date) -> int:
    """Percent of the active habits due on *d* that were completed (100 if none due)."""
    store = load_completions(completions)
    due = _active_scheduled(coerce_habits(habits), require_day(d, "d"))
    if not due:
        return 100
    done = sum(1 for h in due if store.is_completed_on(h.id, d))
    return round_half_up(100 * done / len(due))


def week_completion_rate(habits: Any, completions: Any, start: date) -> int:
    """Percent over every scheduled (habit, day) slot of the week (100 if none)."""
    store = load_completions(completions)
    habit_list = coerce_habits(habits)
    scheduled = 0
    done = 0
    for d in week_dates(require_day(start, "start")):
        for h in _active_scheduled(habit_list, d):
            scheduled += 1
            if store.is_completed_on(h.id, d):
                done += 1
    if scheduled == 0:
        return 100
    return round_half_up(100 * done / scheduled)
