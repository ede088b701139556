"""Shared test fixtures for habitcore tests."""

from __future__ import annotations

import json
import os
from datetime import datetime, timedelta
from pathlib import Path
from zoneinfo import ZoneInfo

import pytest
import yaml


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Create a temporary workspace with habits and completions around today."""
    root = tmp_path / "workspace"
    root.mkdir(parents=True)

    settings = {
        "timezone": "UTC",
        "week_start_day": 1,
        "streak_lookback_days": 90,
        "analytics_window_days": 6,
    }
    (root / "settings.yaml").write_text(
        yaml.dump(settings, default_flow_style=False), encoding="utf-8"
    )

    habits = [
        {"_id": "read", "name": "Read 20 pages", "icon": "📚", "color": "#6366f1", "schedule": {"days": []}},
        {"_id": "run", "name": "Run", "icon": "🏃", "color": "#10b981", "schedule": {"days": [1, 3, 5]}},
        {"_id": "stretch", "name": "Stretch before bed", "icon": "🧘", "color": "#f59e0b", "frequency": [6, 7]},
    ]
    (root / "habits.json").write_text(json.dumps(habits, indent=2), encoding="utf-8")

    today = datetime.now(ZoneInfo("UTC")).date()
    completions = {
        "read": {(today - timedelta(days=n)).isoformat(): {"completed": True} for n in (0, 1, 2)},
        "run": {(today - timedelta(days=10)).isoformat(): {"completed": True}},
    }
    (root / "completions.json").write_text(json.dumps(completions, indent=2), encoding="utf-8")

    os.environ["HABITCORE_ROOT"] = str(root)
    yield root
    # Cleanup
    if "HABITCORE_ROOT" in os.environ:
        del os.environ["HABITCORE_ROOT"]
