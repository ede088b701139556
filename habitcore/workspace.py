"""Workspace root, settings, timezone and path helpers for habitcore.

A workspace is a directory holding the data snapshot the engines run over:

    settings.yaml      timezone, week start, lookback and window defaults
    habits.json        list of habit records
    completions.json   completions in any shape load_completions accepts
    profile.yaml       derived trait profile (written once at onboarding)
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from habitcore.analytics import MAX_WINDOW_DAYS
from habitcore.completions import CompletionStore, load_completions
from habitcore.fileio import read_json, read_yaml
from habitcore.models import Habit, coerce_habits
from habitcore.streaks import DEFAULT_LOOKBACK_DAYS

logger = logging.getLogger(__name__)


def workspace_root() -> Path:
    return Path(
        os.environ.get("HABITCORE_ROOT", str(Path.home() / "habits"))
    ).expanduser().resolve()


# ── Settings ──────────────────────────────────────────────────


@dataclass
class Settings:
    timezone: str = "UTC"
    week_start_day: int = 1  # 0 = Sunday, 1 = Monday
    streak_lookback_days: int = DEFAULT_LOOKBACK_DAYS
    analytics_window_days: int = 30

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Settings:
        if not d or not isinstance(d, dict):
            return cls()
        defaults = cls()
        return cls(
            timezone=_timezone_or(d.get("timezone"), defaults.timezone),
            week_start_day=_int_in(d.get("week_start_day"), 0, 6, defaults.week_start_day),
            streak_lookback_days=_int_in(d.get("streak_lookback_days"), 0, 3650, defaults.streak_lookback_days),
            analytics_window_days=_int_in(d.get("analytics_window_days"), 0, MAX_WINDOW_DAYS, defaults.analytics_window_days),
        )

    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    def to_dict(self) -> dict[str, Any]:
        return {
            "timezone": self.timezone,
            "week_start_day": self.week_start_day,
            "streak_lookback_days": self.streak_lookback_days,
            "analytics_window_days": self.analytics_window_days,
        }


def _int_in(value: Any, lo: int, hi: int, default: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or not lo <= value <= hi:
        if value is not None:
            logger.warning("Ignoring invalid setting value %r, using %r", value, default)
        return default
    return value


def _timezone_or(value: Any, default: str) -> str:
    if not value:
        return default
    try:
        ZoneInfo(str(value))
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown timezone %r, using %s", value, default)
        return default
    return str(value)


def load_settings(root: Path | None = None) -> Settings:
    return Settings.from_dict(read_yaml(settings_path(root)))


def today(root: Path | None = None) -> date:
    """Today's date in the workspace timezone."""
    return datetime.now(load_settings(root).tzinfo()).date()


# ── Path helpers ──────────────────────────────────────────────


def settings_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "settings.yaml"


def habits_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "habits.json"


def completions_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "completions.json"


def profile_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "profile.yaml"


# ── Snapshot loading ──────────────────────────────────────────


def load_habits(root: Path | None = None) -> list[Habit]:
    data = read_json(habits_path(root), default=[])
    if isinstance(data, dict):
        data = data.get("habits") or []
    return coerce_habits(data)


def load_workspace_completions(root: Path | None = None) -> CompletionStore:
    store = load_completions(read_json(completions_path(root)))
    logger.debug("Loaded %d completion records", len(store))
    return store
