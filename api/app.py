from __future__ import annotations

import logging
import os
import secrets
from datetime import date
from typing import Any

from fastapi import Body, Depends, FastAPI, HTTPException, Query, Request, status
from fastapi.responses import JSONResponse
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from habitcore import (
    InvalidArgumentError,
    MAX_WINDOW_DAYS,
    TraitProfile,
    build_dashboard,
    classify_key,
    derive_traits,
    habit_row,
    habit_stats,
    load_habits,
    load_settings,
    load_workspace_completions,
    rank_streaks,
    reconcile_completion_keys,
    summarize,
    today as _today,
    week_start,
    workspace_root as _workspace_root,
    completions_path as _completions_path,
    profile_path as _profile_path,
)
from habitcore.fileio import read_json, read_yaml, write_json_atomic, write_yaml_atomic

logging.basicConfig(
    level=os.environ.get("HABITCORE_LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="habitcore API", version="0.1.0")

security = HTTPBasic(auto_error=False)


@app.exception_handler(InvalidArgumentError)
def invalid_argument_handler(request: Request, exc: InvalidArgumentError) -> JSONResponse:
    logger.warning("Rejected request %s: %s", request.url.path, exc)
    return JSONResponse(status_code=400, content={"detail": str(exc)})


# ── Auth ──────────────────────────────────────────────────────


def get_current_user(credentials: HTTPBasicCredentials | None = Depends(security)) -> str:
    expected_username = os.environ.get("HABITCORE_USERNAME", "")
    expected_password = os.environ.get("HABITCORE_PASSWORD", "")

    if not expected_username or not expected_password:
        return "guest"

    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Basic"},
        )

    correct_username = secrets.compare_digest(credentials.username.encode("utf-8"), expected_username.encode("utf-8"))
    correct_password = secrets.compare_digest(credentials.password.encode("utf-8"), expected_password.encode("utf-8"))

    if not (correct_username and correct_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Basic"},
        )

    return credentials.username


def _parse_date_param(value: str | None) -> date | None:
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid date: {value}")


# ── Endpoints ─────────────────────────────────────────────────


@app.get("/healthz")
def healthz() -> dict[str, str]:
    return {"ok": "true"}


@app.get("/api/habits")
def api_list_habits(on: str | None = None, username: str = Depends(get_current_user)) -> dict[str, Any]:
    """Habits with schedule label, current streak and this week's progress."""
    root = _workspace_root()
    settings = load_settings(root)
    day = _parse_date_param(on) or _today(root)
    start = week_start(day, settings.week_start_day)
    store = load_workspace_completions(root)

    rows = [
        habit_row(habit, store, day, start, settings.streak_lookback_days, settings.week_start_day)
        for habit in load_habits(root)
    ]
    return {"today": day.isoformat(), "weekStart": start.isoformat(), "habits": rows}


@app.get("/api/habits/{habit_id}/stats")
def api_habit_stats(habit_id: str, username: str = Depends(get_current_user)) -> dict[str, Any]:
    root = _workspace_root()
    settings = load_settings(root)
    habit = next((h for h in load_habits(root) if h.id == habit_id), None)
    if habit is None:
        raise HTTPException(status_code=404, detail=f"Habit not found: {habit_id}")
    stats = habit_stats(
        habit, load_workspace_completions(root), _today(root),
        settings.streak_lookback_days, settings.week_start_day,
    )
    return {"habitId": habit_id, **stats.to_dict()}


@app.get("/api/analytics")
def api_analytics(days: int | None = Query(default=None, ge=0, le=MAX_WINDOW_DAYS), username: str = Depends(get_current_user)) -> dict[str, Any]:
    """Top-level completion totals over the last N days."""
    root = _workspace_root()
    settings = load_settings(root)
    window = settings.analytics_window_days if days is None else days
    summary = summarize(load_habits(root), load_workspace_completions(root), _today(root), window)
    return summary.to_dict()


@app.get("/api/analytics/streaks")
def api_streaks(limit: int = Query(default=8, ge=1), username: str = Depends(get_current_user)) -> dict[str, Any]:
    root = _workspace_root()
    settings = load_settings(root)
    entries = rank_streaks(
        load_habits(root), load_workspace_completions(root), _today(root),
        limit=limit, lookback_days=settings.streak_lookback_days, week_start_day=settings.week_start_day,
    )
    return {"streaks": [e.to_dict() for e in entries]}


@app.get("/api/dashboard")
def api_dashboard(username: str = Depends(get_current_user)) -> dict[str, Any]:
    root = _workspace_root()
    settings = load_settings(root)
    return build_dashboard(
        load_habits(root),
        load_workspace_completions(root),
        _today(root),
        window_days=settings.analytics_window_days,
        week_start_day=settings.week_start_day,
        lookback_days=settings.streak_lookback_days,
    )


@app.post("/api/onboarding/traits")
def api_onboarding_traits(payload: dict[str, Any] = Body(...), username: str = Depends(get_current_user)) -> dict[str, Any]:
    """Derive the trait profile once and store it; later calls return the stored one."""
    root = _workspace_root()
    path = _profile_path(root)
    existing = read_yaml(path)
    if existing.get("traits"):
        return {"ok": True, "created": False, "traits": TraitProfile.from_dict(existing["traits"]).to_dict()}

    profile = derive_traits(payload)
    write_yaml_atomic(path, {"traits": profile.to_dict()})
    logger.info("Stored trait profile for %s: %s", username, profile.to_dict())
    return {"ok": True, "created": True, "traits": profile.to_dict()}


@app.get("/api/profile/traits")
def api_get_traits(username: str = Depends(get_current_user)) -> dict[str, Any]:
    root = _workspace_root()
    data = read_yaml(_profile_path(root))
    return {"traits": TraitProfile.from_dict(data.get("traits") or {}).to_dict()}


@app.post("/api/completions/cleanup")
def api_cleanup_completions(
    payload: dict[str, Any] = Body(default={}),
    username: str = Depends(get_current_user),
) -> dict[str, Any]:
    """Drop day-name and unreadable keys from a keyed completions.json; nested entries are kept."""
    root = _workspace_root()
    path = _completions_path(root)
    data = read_json(path, default={})
    if not isinstance(data, dict) or (data and not any(classify_key(k) != "other" for k in data)):
        raise HTTPException(status_code=409, detail="completions.json is not a keyed completion store")

    cleaned, report = reconcile_completion_keys(data, canonical=bool(payload.get("canonical", False)))
    if not payload.get("dry_run", False):
        write_json_atomic(path, cleaned)
    return {"ok": True, "dryRun": bool(payload.get("dry_run", False)), "report": report.to_dict()}
