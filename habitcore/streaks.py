"""Schedule-aware streak calculation for habitcore."""

from __future__ import annotations

from collections import Counter
from datetime import date, timedelta
from typing import Any

from habitcore.completions import CompletionStore, load_completions
from habitcore.dates import require_day
from habitcore.errors import InvalidArgumentError
from habitcore.models import Habit, HabitStats, StreakEntry, coerce_habits
from habitcore.progress import week_dates, week_start
from habitcore.schedule import habit_days, weekday_index

# How far back we keep skipping non-scheduled days before giving up.
DEFAULT_LOOKBACK_DAYS = 90

# Weeks checked before the current one for weekly-target habits (~2 years).
MAX_STREAK_WEEKS = 104

CHART_NAME_MAX = 14


def _habit(habit: Habit | dict[str, Any]) -> Habit:
    return habit if isinstance(habit, Habit) else Habit.from_dict(habit)


def _cutoff(today: date, lookback_days: Any) -> date:
    if isinstance(lookback_days, bool) or not isinstance(lookback_days, int) or lookback_days < 0:
        raise InvalidArgumentError(f"lookback_days must be a non-negative integer, got {lookback_days!r}")
    return today - timedelta(days=min(lookback_days, (today - date.min).days))


def _week_met(habit: Habit, store: CompletionStore, start: date) -> bool:
    done = sum(1 for d in week_dates(start) if store.is_completed_on(habit.id, d))
    return done >= habit.weekly_target


def _weekly_streak(habit: Habit, store: CompletionStore, today: date, week_start_day: int) -> int:
    """Consecutive weeks meeting the weekly target.

    The current week only counts once met; an unfinished current week does
    not break the run of earlier weeks.
    """
    start = week_start(today, week_start_day)
    streak = 1 if _week_met(habit, store, start) else 0
    for _ in range(MAX_STREAK_WEEKS):
        if (start - date.min).days < 7:
            break
        start -= timedelta(days=7)
        if not _week_met(habit, store, start):
            break
        streak += 1
    return streak


def current_streak(
    habit: Habit | dict[str, Any],
    completions: Any,
    today: date,
    lookback_days: int = DEFAULT_LOOKBACK_DAYS,
    week_start_day: int = 1,
) -> int:
    """Count consecutive satisfied scheduled days walking back from *today*.

    Non-scheduled days neither count nor break the streak. A scheduled (or,
    for daily habits, any) day without a completion ends it. Skipping stops
    once the walk is more than *lookback_days* before today, so habits with
    sparse schedules and no history terminate with 0.

    Weekly-target habits count weeks instead of days.
    """
    habit = _habit(habit)
    today = require_day(today)
    store = load_completions(completions)
    if habit.is_weekly:
        return _weekly_streak(habit, store, today, week_start_day)

    days = habit_days(habit)
    cutoff = _cutoff(today, lookback_days)

    streak = 0
    d = today
    while True:
        if days and weekday_index(d) not in days:
            if d < cutoff:
                break
        elif store.is_completed_on(habit.id, d):
            streak += 1
        else:
            break
        if d == date.min:
            break
        d -= timedelta(days=1)
    return streak


def _longest_weekly(habit: Habit, store: CompletionStore, week_start_day: int) -> int:
    per_week = Counter(week_start(d, week_start_day) for d in store.completed_dates(habit.id))
    best = 0
    run = 0
    previous: date | None = None
    for start in sorted(per_week):
        if per_week[start] < habit.weekly_target:
            run = 0
        elif previous is not None and run and start - previous == timedelta(days=7):
            run += 1
        else:
            run = 1
        best = max(best, run)
        previous = start
    return best


def longest_streak(habit: Habit | dict[str, Any], completions: Any, week_start_day: int = 1) -> int:
    """Best run of scheduled completions over the whole history.

    Two completions are consecutive when no scheduled day falls strictly
    between them. Completions on non-scheduled days are ignored. For
    weekly-target habits this is the best run of consecutive met weeks.
    """
    habit = _habit(habit)
    store = load_completions(completions)
    if habit.is_weekly:
        return _longest_weekly(habit, store, week_start_day)
    days = habit_days(habit)

    def scheduled(d: date) -> bool:
        return not days or weekday_index(d) in days

    best = 0
    run = 0
    previous: date | None = None
    for d in store.completed_dates(habit.id):
        if not scheduled(d):
            continue
        if previous is None:
            run = 1
        else:
            gap = previous + timedelta(days=1)
            consecutive = True
            while gap < d:
                if scheduled(gap):
                    consecutive = False
                    break
                gap += timedelta(days=1)
            run = run + 1 if consecutive else 1
        best = max(best, run)
        previous = d
    return best


def habit_stats(
    habit: Habit | dict[str, Any],
    completions: Any,
    today: date,
    lookback_days: int = DEFAULT_LOOKBACK_DAYS,
    week_start_day: int = 1,
) -> HabitStats:
    habit = _habit(habit)
    today = require_day(today)
    store = load_completions(completions)
    done = store.completed_dates(habit.id)
    if not done:
        return HabitStats()
    return HabitStats(
        total_completions=len(done),
        current_streak=current_streak(habit, store, today, lookback_days, week_start_day),
        longest_streak=longest_streak(habit, store, week_start_day),
        first_completion=done[0].isoformat(),
        last_completion=done[-1].isoformat(),
    )


def rank_streaks(
    habits: Any,
    completions: Any,
    today: date,
    limit: int = 8,
    lookback_days: int = DEFAULT_LOOKBACK_DAYS,
    week_start_day: int = 1,
) -> list[StreakEntry]:
    """Current streak per habit, highest first, for the streak chart."""
    today = require_day(today)
    store = load_completions(completions)
    entries = []
    for habit in coerce_habits(habits):
        name = habit.name
        short = name if len(name) <= CHART_NAME_MAX else name[: CHART_NAME_MAX - 1] + "…"
        entries.append(StreakEntry(
            habit_id=habit.id,
            name=short,
            full_name=name,
            streak=current_streak(habit, store, today, lookback_days, week_start_day),
            color=habit.color,
            icon=habit.icon,
        ))
    entries.sort(key=lambda e: e.streak, reverse=True)
    return entries[:limit]
