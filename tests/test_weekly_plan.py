import pathlib
import sys

import pytest

ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.config import Settings  # noqa: E402
from app.orchestrator.change_tracker import ChangeTracker  # noqa: E402
from app.orchestrator.weekly_plan import PlanValidationError, available_days, import_generated_plan, validate_generated_plan  # noqa: E402


def _plan(count=3, **overrides):
    plan = {"title": "Learn Spanish", "tasks": [{"name": f"Lesson {idx + 1}", "estTime": 30} for idx in range(count)]}
    plan.update(overrides)
    return plan


def test_valid_plan_passes_schema():
    assert validate_generated_plan(_plan(), Settings())["valid"]


def test_schema_errors_carry_paths():
    plan = _plan()
    plan["tasks"][0]["estTime"] = 0
    result = validate_generated_plan(plan, Settings())
    assert not result["valid"]
    assert any(error.startswith("tasks/0/estTime") for error in result["errors"])

    missing_title = validate_generated_plan({"tasks": _plan()["tasks"]}, Settings())
    assert any("title" in error for error in missing_title["errors"])


def test_blank_title_and_task_limit():
    assert validate_generated_plan(_plan(title="   "), Settings())["errors"] == ["title must not be blank"]
    assert not validate_generated_plan(_plan(count=3), Settings(plan_max_tasks=2))["valid"]
    assert not validate_generated_plan("not a plan", Settings())["valid"]


def test_available_days_for_current_past_and_future_weeks():
    assert available_days("2025-06-09", "2025-06-11") == ["Wed", "Thu", "Fri", "Sat", "Sun"]
    assert available_days("2025-06-11", "2025-06-11") == ["Wed", "Thu", "Fri", "Sat", "Sun"]
    assert available_days("2025-06-09", "2025-06-01") == ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
    assert available_days("2025-06-09", "2025-06-20") == []


def test_import_spreads_tasks_over_available_days():
    goal = import_generated_plan(_plan(count=6), "2025-06-09", ["Wed", "Thu", "Fri", "Sat", "Sun"], Settings())
    assert goal.is_draft
    assert goal.weekOf == "2025-06-09"
    assert [task.day for task in goal.tasks] == ["Wed", "Thu", "Fri", "Sat", "Sun", "Wed"]
    assert all(task.repeatType == "none" and not task.completed for task in goal.tasks)


def test_import_defaults_to_whole_week():
    goal = import_generated_plan(_plan(count=2), settings=Settings())
    assert [task.day for task in goal.tasks] == ["Mon", "Tue"]
    assert goal.weekOf is None


def test_import_rejects_invalid_plan():
    with pytest.raises(PlanValidationError) as excinfo:
        import_generated_plan(_plan(tasks=[]), settings=Settings())
    assert excinfo.value.errors


class _RecordingWriter:
    def __init__(self):
        self.created = []

    async def create(self, goal):
        self.created.append(goal)
        return "plan-1"

    async def update(self, goal_id, goal):
        raise AssertionError("drafts are never updated")

    async def delete(self, goal_id):
        raise AssertionError("drafts are never deleted")


@pytest.mark.asyncio
async def test_imported_plan_is_saved_as_new_goal():
    goal = import_generated_plan(_plan(), "2025-06-09", settings=Settings())
    writer = _RecordingWriter()
    result = await ChangeTracker().reconcile_batch([goal], writer)
    assert [saved.id for saved in result.created] == ["plan-1"]
    assert writer.created[0].title == "Learn Spanish"
