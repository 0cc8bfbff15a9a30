import pytest
from httpx import AsyncClient

from fittrack.core.config import get_settings

API = get_settings().api_v1_prefix
DAY = "2025-03-10"
EX = f"{API}/tracking/{DAY}/upper1/exercises"


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    resp = await client.get(f"{API}/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"
    ready = await client.get(f"{API}/health/ready")
    assert ready.json()["database"] == "connected"


@pytest.mark.asyncio
async def test_plans_crud(client: AsyncClient):
    resp = await client.get(f"{API}/plans")
    assert resp.status_code == 200
    assert [p["id"] for p in resp.json()] == ["upper1", "lower", "upper2"]

    invalid = await client.post(f"{API}/plans", json={"name": "X", "subtitle": "Y", "exercises": []})
    assert invalid.status_code == 422

    created = await client.post(
        f"{API}/plans",
        json={
            "name": "Quick",
            "subtitle": "Short session",
            "exercises": [{"name": "Push-up", "sets": "3", "kind": "reps", "reps": "15"}],
        },
    )
    assert created.status_code == 201
    plan_id = created.json()["id"]
    assert created.json()["is_custom"] is True

    assert (await client.get(f"{API}/plans/{plan_id}")).status_code == 200
    assert (await client.delete(f"{API}/plans/{plan_id}")).status_code == 204
    missing = await client.get(f"{API}/plans/{plan_id}")
    assert missing.status_code == 404
    assert plan_id in missing.json()["detail"]

    builtin = await client.delete(f"{API}/plans/upper1")
    assert builtin.status_code == 409


@pytest.mark.asyncio
async def test_schedule(client: AsyncClient):
    resp = await client.put(f"{API}/schedule/{DAY}", json={"plan_id": "upper1"})
    assert resp.status_code == 200
    assert resp.json() == {"date": DAY, "plan_id": "upper1"}

    week = await client.get(f"{API}/schedule/week", params={"day": "2025-03-12"})
    days = week.json()
    assert [d["date"] for d in days][0] == "2025-03-09"
    assert len(days) == 7
    assert days[1]["plan_name"] == "UPPER"
    assert days[2]["plan_id"] is None

    unknown = await client.put(f"{API}/schedule/{DAY}", json={"plan_id": "nope"})
    assert unknown.status_code == 404

    cleared = await client.put(f"{API}/schedule/{DAY}", json={"plan_id": None})
    assert cleared.json()["plan_id"] is None


@pytest.mark.asyncio
async def test_tracking_counts_and_completion(client: AsyncClient):
    await client.patch(f"{API}/preferences", json={"auto_rest_on_increment": False})

    for _ in range(5):
        resp = await client.post(f"{EX}/u1-2/increment")
    body = resp.json()
    assert body["completed_sets"] == 3
    assert body["completed"] is True
    assert body["rest_remaining_sec"] == 0

    resp = await client.put(f"{EX}/u1-2/count", json={"count": 1})
    assert resp.json()["completed"] is False

    toggled = await client.post(f"{EX}/u1-7/toggle")
    assert toggled.json()["completed"] is True

    progress = await client.get(f"{API}/tracking/{DAY}/upper1")
    data = progress.json()
    assert data["session_state"] == "active"
    assert data["completion_percent"] == 14
    assert len(data["exercises"]) == 7

    unknown = await client.post(f"{EX}/l-1/increment")
    assert unknown.status_code == 404


@pytest.mark.asyncio
async def test_rest_timer_endpoints(client: AsyncClient):
    idle = await client.get(f"{EX}/u1-1/rest")
    assert idle.json()["active"] is False

    bad = await client.post(f"{EX}/u1-1/rest", json={"duration_sec": 0})
    assert bad.status_code == 422

    started = await client.post(f"{EX}/u1-1/rest", json={"duration_sec": 90})
    assert started.status_code == 201
    assert started.json()["duration_sec"] == 90
    assert 0 < started.json()["remaining_sec"] <= 90

    default = await client.post(f"{EX}/u1-1/rest", json={})
    assert default.json()["duration_sec"] == 60

    assert (await client.delete(f"{EX}/u1-1/rest")).status_code == 204
    assert (await client.get(f"{EX}/u1-1/rest")).json()["active"] is False


@pytest.mark.asyncio
async def test_log_sets_finish_and_history(client: AsyncClient):
    logged = await client.post(f"{EX}/u1-1/sets", json={"weight": 40})
    assert logged.status_code == 201
    body = logged.json()
    assert body["completed_sets"] == 1
    assert body["logs"][0]["reps"] == 12
    assert body["rest_remaining_sec"] > 0
    assert body["best_one_rep_max"] == 56.0

    await client.post(f"{EX}/u1-1/sets", json={"weight": 44, "reps": 8})
    fixed = await client.put(f"{EX}/u1-1/sets/1", json={"weight": 42, "reps": 10})
    assert fixed.json()["weight"] == 42
    sets = await client.get(f"{EX}/u1-1/sets")
    assert [s["set_index"] for s in sets.json()] == [1, 2]

    status = await client.get(f"{API}/sessions/status", params={"plan_id": "upper1", "day": DAY})
    assert status.json()["state"] == "active"

    finished = await client.post(f"{API}/sessions/finish", json={"plan_id": "upper1", "date": DAY})
    assert finished.status_code == 201
    session = finished.json()
    assert session["total_sets"] == 2
    assert session["rest_count"] == 2
    assert session["rest_avg_sec"] == 60
    assert [(pb["exercise_id"], pb["value"], pb["metric"]) for pb in session["new_pbs"]] == [
        ("u1-1", 56.0, "1RM")
    ]
    assert session["duration_sec"] >= 1

    status = await client.get(f"{API}/sessions/status", params={"plan_id": "upper1", "day": DAY})
    assert status.json()["state"] == "idle"

    history = await client.get(f"{API}/sessions")
    assert [s["id"] for s in history.json()] == [session["id"]]
    assert (await client.get(f"{API}/sessions/{session['id']}")).status_code == 200
    assert (await client.get(f"{API}/sessions/nope")).status_code == 404

    prs = await client.get(f"{API}/pr/recent")
    assert prs.json()[0]["plan_name"] == "UPPER"

    streak = await client.get(f"{API}/streak", params={"today": DAY})
    assert streak.json()["current_streak"] == 1
    assert streak.json()["weekly_target"] == 3
    assert streak.json()["last_workout_date"] == DAY

    weekly = await client.get(f"{API}/analytics/summary/weekly", params={"today": DAY})
    assert weekly.json()["count"] == 1
    trend = await client.get(f"{API}/analytics/one-rm")
    assert trend.json()[0]["exercise_id"] == "u1-1"

    assert (await client.delete(f"{API}/sessions")).status_code == 204
    assert (await client.get(f"{API}/sessions")).json() == []


@pytest.mark.asyncio
async def test_open_and_finish_validation(client: AsyncClient):
    opened = await client.post(f"{API}/sessions/open", json={"plan_id": "lower", "date": DAY})
    assert opened.json()["state"] == "active"
    assert opened.json()["started_at"] is not None

    bad_date = await client.post(f"{API}/sessions/open", json={"plan_id": "lower", "date": "10/03/2025"})
    assert bad_date.status_code == 422
    missing = await client.post(f"{API}/sessions/finish", json={"plan_id": "nope", "date": DAY})
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_adherence(client: AsyncClient):
    await client.put(f"{API}/schedule/{DAY}", json={"plan_id": "upper1"})
    await client.post(f"{EX}/u1-1/toggle")
    resp = await client.get(f"{API}/analytics/adherence", params={"today": "2025-03-12"})
    data = resp.json()
    assert data["weekly_percent"] == 0
    assert data["weekly_exercises_completed"] == 1
    assert data["monthly_exercises_completed"] == 1


@pytest.mark.asyncio
async def test_goals_and_preferences(client: AsyncClient):
    goals = await client.get(f"{API}/goals")
    assert goals.json()["weekly_target"] == 3

    invalid = await client.put(f"{API}/goals", json={"reminders_enabled": True, "reminder_time": "7pm"})
    assert invalid.status_code == 400
    assert "HH:mm" in invalid.json()["detail"]

    too_many = await client.put(f"{API}/goals", json={"weekly_target": 8})
    assert too_many.status_code == 422

    applied = await client.put(f"{API}/goals", json={"weekly_target": 5, "reminders_enabled": True})
    assert applied.status_code == 200
    assert applied.json()["settings"]["weekly_target"] == 5
    reminders = await client.get(f"{API}/goals/reminders")
    assert len(reminders.json()) == len(applied.json()["settings"]["scheduled_reminder_ids"])
    assert (await client.get(f"{API}/goals/next-reminder")).json() is not None

    prefs = await client.get(f"{API}/preferences")
    assert prefs.json() == {"rest_default_sec": 60, "auto_rest_on_increment": True, "rest_presets": [30, 60, 90, 120]}
    updated = await client.patch(f"{API}/preferences", json={"rest_default_sec": 90})
    assert updated.json()["rest_default_sec"] == 90
    assert (await client.patch(f"{API}/preferences", json={"rest_default_sec": 0})).status_code == 422


@pytest.mark.asyncio
async def test_adherence_counts_whole_week_and_month(client: AsyncClient):
    await client.put(f"{API}/schedule/2025-03-11", json={"plan_id": "lower"})
    await client.put(f"{API}/schedule/2025-03-13", json={"plan_id": "upper1"})
    for i in range(1, 7):
        await client.post(f"{API}/tracking/2025-03-11/lower/exercises/l-{i}/toggle")

    resp = await client.get(f"{API}/analytics/adherence", params={"today": "2025-03-11"})
    data = resp.json()
    assert data["weekly_percent"] == 50
    assert data["monthly_percent"] == 50
    assert data["weekly_exercises_completed"] == 6


@pytest.mark.asyncio
async def test_recent_workouts(client: AsyncClient):
    await client.put(f"{API}/schedule/{DAY}", json={"plan_id": "upper1"})
    await client.post(f"{EX}/u1-7/toggle")
    resp = await client.get(f"{API}/analytics/recent-workouts", params={"today": "2025-03-12"})
    assert resp.status_code == 200
    assert resp.json() == [{"date": DAY, "plan_name": "UPPER", "color": "#64b5f6", "days_ago": 2}]
