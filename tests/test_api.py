"""Tests for api/app.py — JSON endpoints over a temporary workspace."""

import json

import pytest
import yaml
from fastapi.testclient import TestClient

from api.app import app


@pytest.fixture
def client(workspace, monkeypatch):
    monkeypatch.delenv("HABITCORE_USERNAME", raising=False)
    monkeypatch.delenv("HABITCORE_PASSWORD", raising=False)
    return TestClient(app)


def test_healthz(client):
    assert client.get("/healthz").json() == {"ok": "true"}


def test_list_habits(client):
    body = client.get("/api/habits").json()
    rows = {row["id"]: row for row in body["habits"]}
    assert rows["read"]["streak"] == 3
    assert rows["run"]["streak"] == 0
    assert rows["stretch"]["scheduleLabel"] == "Weekends"
    assert rows["read"]["weeklyProgress"]["target"] == 7
    assert rows["run"]["weeklyProgress"]["target"] == 3


def test_list_habits_bad_date(client):
    assert client.get("/api/habits", params={"on": "June 3rd"}).status_code == 400


def test_habit_stats(client):
    body = client.get("/api/habits/read/stats").json()
    assert body["habitId"] == "read"
    assert body["totalCompletions"] == 3
    assert body["currentStreak"] == 3
    assert body["longestStreak"] == 3
    assert client.get("/api/habits/nope/stats").status_code == 404


def test_analytics_uses_configured_window(client):
    body = client.get("/api/analytics").json()
    assert body["totalHabits"] == 3
    assert body["totalCompletions"] == 3
    assert body["activeHabits"] == 1
    # 3 completions over 3 habits x 7 days
    assert body["averageCompletionRate"] == 14
    assert body["windowDays"] == 6


def test_analytics_days_param(client):
    body = client.get("/api/analytics", params={"days": 30}).json()
    assert body["totalCompletions"] == 4
    assert body["activeHabits"] == 2
    assert client.get("/api/analytics", params={"days": -1}).status_code == 422


def test_streaks(client):
    body = client.get("/api/analytics/streaks", params={"limit": 1}).json()
    assert body["streaks"] == [{
        "habitId": "read",
        "name": "Read 20 pages",
        "fullName": "Read 20 pages",
        "streak": 3,
        "color": "#6366f1",
        "icon": "📚",
    }]


def test_dashboard(client):
    body = client.get("/api/dashboard").json()
    assert body["summary"]["totalCompletions"] == 3
    assert body["bestStreak"] == 3
    assert len(body["habits"]) == 3


def test_traits_created_once(client, workspace):
    first = client.post("/api/onboarding/traits", json={"goals": ["creative"], "capacity": "full"}).json()
    assert first["created"] is True
    assert first["traits"]["tone"] == "playful"
    assert first["traits"]["accountability"] == "tough"
    stored = yaml.safe_load((workspace / "profile.yaml").read_text())
    assert stored["traits"] == first["traits"]

    second = client.post("/api/onboarding/traits", json={"goals": ["productivity"]}).json()
    assert second["created"] is False
    assert second["traits"] == first["traits"]
    assert client.get("/api/profile/traits").json()["traits"] == first["traits"]


def test_traits_bad_payload(client):
    resp = client.post("/api/onboarding/traits", json={"goals": "creative"})
    assert resp.status_code == 400


def test_profile_defaults_without_onboarding(client):
    traits = client.get("/api/profile/traits").json()["traits"]
    assert traits == {"tone": "warm", "focus": "balanced", "verbosity": "concise", "accountability": "gentle"}


def test_cleanup_keyed_store(client, workspace):
    path = workspace / "completions.json"
    path.write_text(json.dumps({
        "2024-06-03_read": True,
        "2024-06-04-run": {"completed": True},
        "Monday-read": True,
        "legacy": True,
    }))

    dry = client.post("/api/completions/cleanup", json={"dry_run": True}).json()
    assert dry["dryRun"] is True
    assert sorted(dry["report"]["droppedKeys"]) == ["Monday-read", "legacy"]
    assert "Monday-read" in json.loads(path.read_text())

    body = client.post("/api/completions/cleanup", json={"canonical": True}).json()
    assert body["report"]["before"]["dayBasedKeys"] == 1
    assert body["report"]["after"]["totalKeys"] == 2
    assert json.loads(path.read_text()) == {
        "2024-06-03_read": True,
        "2024-06-04_run": {"completed": True},
    }


def test_cleanup_refuses_nested_store(client):
    assert client.post("/api/completions/cleanup", json={}).status_code == 409


def test_basic_auth(client, monkeypatch):
    monkeypatch.setenv("HABITCORE_USERNAME", "me")
    monkeypatch.setenv("HABITCORE_PASSWORD", "secret")
    assert client.get("/api/habits").status_code == 401
    assert client.get("/api/habits", auth=("me", "wrong")).status_code == 401
    assert client.get("/api/habits", auth=("me", "secret")).status_code == 200
    assert client.get("/healthz").status_code == 200


def test_analytics_days_above_cap(client):
    assert client.get("/api/analytics", params={"days": 1_000_000}).status_code == 422


def test_cleanup_mixed_store_keeps_nested_records(client, workspace):
    path = workspace / "completions.json"
    data = json.loads(path.read_text())
    data["2024-06-03_run"] = {"completed": True}
    data["Monday-run"] = True
    path.write_text(json.dumps(data))

    body = client.post("/api/completions/cleanup", json={}).json()
    assert body["report"]["droppedKeys"] == ["Monday-run"]
    assert body["report"]["after"]["nestedKeys"] == 2

    saved = json.loads(path.read_text())
    assert saved["read"] == data["read"]
    assert saved["run"] == data["run"]
    assert saved["2024-06-03_run"] == {"completed": True}
    assert client.get("/api/habits/read/stats").json()["currentStreak"] == 3


def test_list_habits_weekly_target(client, workspace):
    path = workspace / "habits.json"
    habits = json.loads(path.read_text())
    habits.append({"_id": "gym", "name": "Gym", "frequency": "weekly", "weeklyTarget": 2})
    path.write_text(json.dumps(habits))

    rows = {row["id"]: row for row in client.get("/api/habits").json()["habits"]}
    assert rows["gym"]["scheduleLabel"] == "2x/week"
    assert rows["gym"]["weeklyProgress"]["target"] == 2
    assert rows["gym"]["streak"] == 0
