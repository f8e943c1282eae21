import pathlib
import sys

from fastapi.testclient import TestClient

ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.main import app  # noqa: E402


client = TestClient(app)

GOALS = [
    {
        "_id": "g1",
        "title": "Health",
        "tasks": [
            {"_id": "a", "name": "run", "estTime": 30, "day": "Mon", "completed": True, "timeSpent": 35},
            {"_id": "b", "name": "swim", "estTime": 45, "day": "Tue", "completed": True, "timeSpent": 40},
            {"_id": "c", "name": "yoga", "estTime": 20, "day": "Thu"},
        ],
    },
    {"_id": "g2", "title": "Work", "tasks": [{"_id": "d", "name": "standup", "estTime": 15, "repeatType": "daily"}]},
]


def test_health():
    res = client.get("/health")
    assert res.status_code == 200
    assert res.json() == {"status": "ok"}


def test_config_limits():
    res = client.get("/config/limits")
    assert res.status_code == 200
    data = res.json()
    assert data["goalLimit"] > 0 and data["taskLimit"] > 0


def test_completion_endpoint():
    res = client.post("/analytics/completion", json={"goals": GOALS})
    assert res.status_code == 200
    assert res.json() == {"completionRate": 50, "productivityScore": 50}


def test_streak_endpoint_requires_today():
    res = client.post("/analytics/streak", json={"snapshots": []})
    assert res.status_code == 400
    bad = client.post("/analytics/streak", json={"snapshots": [], "today": "yesterday"})
    assert bad.status_code == 400


def test_streak_endpoint():
    snapshots = [{"date": "2025-06-10", "tasksCompleted": 2}, {"date": "2025-06-11", "tasksCompleted": 1}]
    res = client.post("/analytics/streak", json={"snapshots": snapshots, "today": "2025-06-11"})
    assert res.status_code == 200
    assert res.json() == {"streak": 2}


def test_weekly_streak_endpoint():
    res = client.post("/analytics/weekly-streak", json={"goals": GOALS, "today": "2025-06-11"})
    assert res.status_code == 200
    data = res.json()
    assert data["streak"] == 2
    assert data["dayStats"]["Thu"] == {"hasPlannedTasks": True, "allCompleted": False}

    with_repeats = client.post("/analytics/weekly-streak", json={"goals": GOALS, "today": "2025-06-11", "includeRepeating": True})
    assert with_repeats.json()["streak"] == 0


def test_focus_time_endpoint():
    by_goals = client.post("/analytics/focus-time", json={"goals": GOALS})
    assert by_goals.json() == {"plannedMinutes": 110, "completedMinutes": 75}
    by_tasks = client.post("/analytics/focus-time", json={"tasks": GOALS[0]["tasks"][:1]})
    assert by_tasks.json() == {"plannedMinutes": 30, "completedMinutes": 35}


def test_focus_time_endpoint_with_out_of_range_numbers():
    body = '{"goals": [{"title": "Huge", "description": 5, "tasks": [{"name": "a", "estTime": 1e400}, {"name": "b", "estTime": 10}]}]}'
    res = client.post("/analytics/focus-time", content=body, headers={"Content-Type": "application/json"})
    assert res.status_code == 200
    assert res.json() == {"plannedMinutes": 10, "completedMinutes": 0}


def test_weekly_load_endpoint():
    res = client.post("/analytics/weekly-load", json={"goals": GOALS})
    assert res.status_code == 200
    data = res.json()
    assert data["maxLoadDay"] == "Tue"
    assert data["totalMinutes"] == 30 + 45 + 20 + 15 * 7


def test_weekly_summary_endpoint():
    res = client.post("/analytics/weekly-summary", json={"goals": GOALS, "weekOf": "2025-06-02"})
    assert res.status_code == 200
    data = res.json()
    assert data["weekOf"] == "2025-06-02"
    assert data["goalsPlanned"] == 2
    assert data["goalsAchieved"] == 0
    assert data["focusTimeSpent"] == 1.3


def test_dashboard_endpoint():
    payload = {
        "weeklyGoals": GOALS,
        "todaysTasks": GOALS[0]["tasks"],
        "dailySnapshots": [{"date": "2025-06-11", "tasksCompleted": 1}],
        "today": "2025-06-11",
    }
    res = client.post("/analytics/dashboard", json=payload)
    assert res.status_code == 200
    data = res.json()
    assert data["weeklyCompletion"] == 50
    assert data["streak"] == 1
    assert data["weeklyStreak"] == 2
    assert data["focusTimeLabel"] == "1.3h"


def test_plan_import_endpoint():
    plan = {"title": "Learn Spanish", "tasks": [{"name": "Lesson 1", "estTime": 30}, {"name": "Lesson 2", "estTime": 25}]}
    res = client.post("/plans/import", json={"goal": plan, "weekOf": "2025-06-09", "today": "2025-06-13"})
    assert res.status_code == 200
    data = res.json()
    assert data["availableDays"] == ["Fri", "Sat", "Sun"]
    assert [task["day"] for task in data["goal"]["tasks"]] == ["Fri", "Sat"]
    assert data["goal"]["id"] is None


def test_plan_import_rejects_bad_input():
    past = client.post(
        "/plans/import",
        json={"goal": {"title": "x", "tasks": [{"name": "a", "estTime": 5}]}, "weekOf": "2025-06-02", "today": "2025-06-13"},
    )
    assert past.status_code == 400
    invalid = client.post("/plans/import", json={"goal": {"title": "x", "tasks": []}, "weekOf": "2025-06-09", "today": "2025-06-09"})
    assert invalid.status_code == 400
    assert isinstance(invalid.json()["detail"], list)
    missing = client.post("/plans/import", json={"weekOf": "2025-06-09", "today": "2025-06-09"})
    assert missing.status_code == 400
