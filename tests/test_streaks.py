"""Tests for habitcore/streaks.py."""

from datetime import date, timedelta

import pytest

from habitcore.errors import InvalidArgumentError
from habitcore.models import Habit
from habitcore.streaks import MAX_STREAK_WEEKS, current_streak, habit_stats, longest_streak, rank_streaks

WEDNESDAY = date(2024, 6, 5)
MONDAY = date(2024, 6, 3)


def _entries(habit_id: str, days: list[date]) -> dict:
    return {habit_id: {d.isoformat(): {"completed": True} for d in days}}


def _back(today: date, *offsets: int) -> list[date]:
    return [today - timedelta(days=n) for n in offsets]


def test_daily_streak_counts_consecutive_days():
    habit = Habit(id="h", name="Read")
    entries = _entries("h", _back(WEDNESDAY, 0, 1, 2, 3, 4))
    assert current_streak(habit, entries, WEDNESDAY) == 5


def test_daily_streak_ends_on_gap():
    habit = Habit(id="h")
    entries = _entries("h", _back(WEDNESDAY, 0, 1, 3, 4))
    assert current_streak(habit, entries, WEDNESDAY) == 2


def test_daily_streak_zero_when_today_not_done():
    habit = Habit(id="h")
    entries = _entries("h", _back(WEDNESDAY, 1, 2, 3))
    assert current_streak(habit, entries, WEDNESDAY) == 0


def test_explicit_false_record_breaks_streak():
    habit = Habit(id="h")
    entries = {"h": {
        WEDNESDAY.isoformat(): {"completed": True},
        (WEDNESDAY - timedelta(days=1)).isoformat(): {"completed": False},
        (WEDNESDAY - timedelta(days=2)).isoformat(): {"completed": True},
    }}
    assert current_streak(habit, entries, WEDNESDAY) == 1


def test_monday_habit_with_missed_monday_is_zero():
    habit = Habit(id="m", schedule=[1])
    # last completed two Mondays ago; the most recent Monday was missed
    entries = _entries("m", [MONDAY - timedelta(days=14)])
    assert current_streak(habit, entries, WEDNESDAY) == 0


def test_monday_habit_skips_non_scheduled_days():
    habit = Habit(id="m", schedule=[1])
    entries = _entries("m", [MONDAY, MONDAY - timedelta(days=7)])
    assert current_streak(habit, entries, WEDNESDAY) == 2


def test_non_scheduled_completion_does_not_count():
    habit = Habit(id="m", schedule=[1])
    entries = _entries("m", [MONDAY, MONDAY - timedelta(days=1)])
    assert current_streak(habit, entries, MONDAY) == 1


def test_legacy_sunday_schedule():
    sunday = date(2024, 6, 9)
    habit = Habit(id="s", schedule=[7])
    entries = _entries("s", [sunday, sunday - timedelta(days=7)])
    assert current_streak(habit, entries, sunday) == 2


def test_schedule_matching_no_day_terminates():
    habit = Habit(id="x", schedule=[9])
    assert current_streak(habit, {}, WEDNESDAY) == 0
    assert current_streak(habit, {}, WEDNESDAY, lookback_days=0) == 0


def test_empty_history_returns_zero():
    assert current_streak(Habit(id="h", schedule=[2, 4]), None, WEDNESDAY) == 0


def test_accepts_raw_habit_dict_and_record_list():
    habit = {"_id": 5, "name": "Walk", "schedule": {"days": []}}
    entries = [
        {"habitId": 5, "date": WEDNESDAY.isoformat(), "completed": True},
        {"habitId": 5, "date": (WEDNESDAY - timedelta(days=1)).isoformat(), "completed": True},
    ]
    assert current_streak(habit, entries, WEDNESDAY) == 2


def test_longest_streak_daily():
    habit = Habit(id="h")
    days = [date(2024, 6, 1), date(2024, 6, 2), date(2024, 6, 3), date(2024, 6, 5), date(2024, 6, 6)]
    assert longest_streak(habit, _entries("h", days)) == 3


def test_longest_streak_respects_schedule():
    habit = Habit(id="r", schedule=[1, 3, 5])
    days = [
        date(2024, 6, 3),   # Mon
        date(2024, 6, 4),   # Tue, not scheduled
        date(2024, 6, 5),   # Wed
        date(2024, 6, 7),   # Fri
        date(2024, 6, 10),  # Mon
        date(2024, 6, 14),  # Fri, Wed 12th missed
    ]
    assert longest_streak(habit, _entries("r", days)) == 4


def test_longest_streak_empty():
    assert longest_streak(Habit(id="h"), {}) == 0


def test_habit_stats():
    habit = Habit(id="h")
    entries = _entries("h", _back(WEDNESDAY, 0, 1, 5, 6, 7))
    stats = habit_stats(habit, entries, WEDNESDAY)
    assert stats.total_completions == 5
    assert stats.current_streak == 2
    assert stats.longest_streak == 3
    assert stats.first_completion == "2024-05-29"
    assert stats.last_completion == "2024-06-05"


def test_habit_stats_no_history():
    stats = habit_stats(Habit(id="h"), {}, WEDNESDAY)
    assert stats.total_completions == 0
    assert stats.first_completion is None


def test_rank_streaks_sorted_and_truncated():
    habits = [
        Habit(id="a", name="Short"),
        Habit(id="b", name="Morning meditation"),
        Habit(id="c", name="Never"),
    ]
    entries = {}
    entries.update(_entries("a", _back(WEDNESDAY, 0)))
    entries.update(_entries("b", _back(WEDNESDAY, 0, 1, 2)))
    ranked = rank_streaks(habits, entries, WEDNESDAY, limit=2)
    assert [e.habit_id for e in ranked] == ["b", "a"]
    assert ranked[0].streak == 3
    assert ranked[0].name == "Morning medit…"
    assert ranked[0].full_name == "Morning meditation"


def test_lookback_cuts_off_sparse_schedule():
    habit = Habit(id="m", schedule=[1])
    entries = _entries("m", [MONDAY])
    # Tue 4th is not before today - 1, so the walk reaches Monday
    assert current_streak(habit, entries, WEDNESDAY, lookback_days=1) == 1
    # with no lookback the walk stops on Tuesday, before reaching Monday
    assert current_streak(habit, entries, WEDNESDAY, lookback_days=0) == 0


def test_bad_today_and_lookback_raise():
    with pytest.raises(InvalidArgumentError):
        current_streak(Habit(id="h"), {}, "2024-06-05")
    with pytest.raises(InvalidArgumentError):
        current_streak(Habit(id="h", schedule=[1]), {}, WEDNESDAY, lookback_days=-1)
    with pytest.raises(InvalidArgumentError):
        habit_stats(Habit(id="h"), {}, None)


def test_huge_lookback_terminates():
    assert current_streak(Habit(id="x", schedule=[9]), {}, date(1, 1, 10), lookback_days=10**9) == 0


WEEKLY = {"_id": "w", "name": "Gym", "frequency": "weekly", "weeklyTarget": 2}

# Monday weeks: May 13 (1 done), May 20 (3 done), May 27 (2 done)
WEEKLY_HISTORY = [
    date(2024, 5, 13),
    date(2024, 5, 20), date(2024, 5, 21), date(2024, 5, 22),
    date(2024, 5, 27), date(2024, 5, 29),
]


def test_weekly_streak_unfinished_week_does_not_break():
    entries = _entries("w", WEEKLY_HISTORY + [MONDAY])
    assert current_streak(WEEKLY, entries, WEDNESDAY) == 2


def test_weekly_streak_counts_met_current_week():
    entries = _entries("w", WEEKLY_HISTORY + [MONDAY, date(2024, 6, 4)])
    assert current_streak(WEEKLY, entries, WEDNESDAY) == 3


def test_weekly_streak_ignores_missed_days():
    # two completions a week, never on consecutive days
    days = [WEDNESDAY - timedelta(days=n) for n in (2, 7, 9, 14, 16)]
    habit = Habit(id="w", frequency="weekly", weekly_target=2)
    assert current_streak(habit, _entries("w", days), WEDNESDAY) == 2


def test_weekly_streak_is_capped():
    habit = Habit(id="w", frequency="weekly", weekly_target=1)
    days = [WEDNESDAY - timedelta(weeks=n) for n in range(200)]
    assert current_streak(habit, _entries("w", days), WEDNESDAY) == MAX_STREAK_WEEKS + 1


def test_longest_weekly_streak():
    days = WEEKLY_HISTORY + [MONDAY, date(2024, 6, 4), date(2024, 4, 1), date(2024, 4, 2)]
    assert longest_streak(WEEKLY, _entries("w", days)) == 3
    assert longest_streak(WEEKLY, _entries("w", [MONDAY])) == 0
