"""Cross-habit analytics for the dashboard.

Two rates exist on purpose:

- ``summarize`` treats every calendar day in the window as a possible
  completion, whatever the schedule. This is the top-level stat.
- ``period_metrics`` only counts scheduled days and compares against the
  previous window of the same length.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Any

from habitcore.completions import CompletionStore, load_completions
from habitcore.dates import require_day
from habitcore.errors import InvalidArgumentError
from habitcore.models import AnalyticsSummary, Habit, PeriodMetrics, coerce_habits
from habitcore.progress import round_half_up, week_start, weekly_progress
from habitcore.schedule import habit_days, schedule_label, weekday_index
from habitcore.streaks import DEFAULT_LOOKBACK_DAYS, current_streak, longest_streak, rank_streaks

ALL_TIME_DAYS = 365

# Upper bound for any analytics window, also enforced on settings.
MAX_WINDOW_DAYS = 3650


def _check_window(window_days: Any, today: date, periods: int = 1) -> int:
    """Validate a window length; *periods* consecutive windows must fit before today."""
    if isinstance(window_days, bool) or not isinstance(window_days, int):
        raise InvalidArgumentError(f"window_days must be an integer, got {window_days!r}")
    if window_days < 0:
        raise InvalidArgumentError(f"window_days must be >= 0, got {window_days}")
    if window_days > MAX_WINDOW_DAYS:
        raise InvalidArgumentError(f"window_days must be <= {MAX_WINDOW_DAYS}, got {window_days}")
    if today.toordinal() - periods * window_days < date.min.toordinal():
        raise InvalidArgumentError(f"window_days={window_days} reaches before {date.min.isoformat()}")
    return window_days


def _days(start: date, end: date) -> list[date]:
    """Every day in [start, end]."""
    return [start + timedelta(days=i) for i in range((end - start).days + 1)]


def summarize(habits: Any, completions: Any, today: date, window_days: int = 30) -> AnalyticsSummary:
    """Totals over [today - window_days, today], one slot per habit per day."""
    today = require_day(today)
    window_days = _check_window(window_days, today)
    habit_list = coerce_habits(habits)
    store = load_completions(completions)
    summary = AnalyticsSummary(total_habits=len(habit_list), window_days=window_days)
    if not habit_list:
        return summary

    window = _days(today - timedelta(days=window_days), today)
    possible = 0
    for habit in habit_list:
        done = sum(1 for d in window if store.is_completed_on(habit.id, d))
        possible += len(window)
        summary.total_completions += done
        if done:
            summary.active_habits += 1

    if possible > 0:
        summary.average_completion_rate = round_half_up(100 * summary.total_completions / possible)
    return summary


def _scheduled_days(habit: Habit, start: date, end: date) -> list[date]:
    days = habit_days(habit)
    return [d for d in _days(start, end) if not days or weekday_index(d) in days]


def period_metrics(
    habits: Any,
    completions: Any,
    today: date,
    window_days: int | None = 30,
) -> PeriodMetrics:
    """Schedule-aware rate for the window, the previous window and the best run.

    ``window_days=None`` means all time, capped at a year.
    """
    today = require_day(today)
    window_days = _check_window(ALL_TIME_DAYS if window_days is None else window_days, today, periods=2)
    habit_list = coerce_habits(habits)
    store = load_completions(completions)
    metrics = PeriodMetrics(active_habits=sum(1 for h in habit_list if h.is_active))
    if not habit_list:
        return metrics

    start = today - timedelta(days=window_days)
    prev_start = start - timedelta(days=window_days)
    prev_done = 0
    prev_possible = 0

    for habit in habit_list:
        run = 0
        for d in _scheduled_days(habit, start, today):
            metrics.possible += 1
            if store.is_completed_on(habit.id, d):
                metrics.completions += 1
                run += 1
                metrics.best_streak = max(metrics.best_streak, run)
            else:
                run = 0
        if window_days > 0:
            for d in _scheduled_days(habit, prev_start, start - timedelta(days=1)):
                prev_possible += 1
                if store.is_completed_on(habit.id, d):
                    prev_done += 1

    if metrics.possible > 0:
        metrics.rate = round_half_up(100 * metrics.completions / metrics.possible)
    if prev_possible > 0:
        metrics.prev_rate = round_half_up(100 * prev_done / prev_possible)
    return metrics


def habit_label(habit: Habit) -> str:
    if habit.is_weekly:
        return f"{habit.weekly_target}x/week"
    return schedule_label(habit.schedule)


def habit_row(
    habit: Habit,
    store: CompletionStore,
    today: date,
    start: date,
    lookback_days: int = DEFAULT_LOOKBACK_DAYS,
    week_start_day: int = 1,
) -> dict[str, Any]:
    """One habit as the habit list and dashboard show it."""
    return {
        **habit.to_dict(),
        "scheduleLabel": habit_label(habit),
        "streak": current_streak(habit, store, today, lookback_days, week_start_day),
        "longestStreak": longest_streak(habit, store, week_start_day),
        "weeklyProgress": weekly_progress(habit, store, start).to_dict(),
    }


def build_dashboard(
    habits: Any,
    completions: Any,
    today: date,
    window_days: int = 30,
    week_start_day: int = 1,
    lookback_days: int = DEFAULT_LOOKBACK_DAYS,
) -> dict[str, Any]:
    """Everything the dashboard widgets need, as plain data."""
    today = require_day(today)
    habit_list = coerce_habits(habits)
    store: CompletionStore = load_completions(completions)
    start = week_start(today, week_start_day)

    rows = [habit_row(h, store, today, start, lookback_days, week_start_day) for h in habit_list]
    ranked = rank_streaks(habit_list, store, today, lookback_days=lookback_days, week_start_day=week_start_day)

    return {
        "today": today.isoformat(),
        "weekStart": start.isoformat(),
        "summary": summarize(habit_list, store, today, window_days).to_dict(),
        "metrics": period_metrics(habit_list, store, today, window_days).to_dict(),
        "bestStreak": max((row["longestStreak"] for row in rows), default=0),
        "streaks": [e.to_dict() for e in ranked],
        "habits": rows,
    }
