from typing import Any, Dict, Iterable, Optional, Tuple

from ..config import Settings, get_settings
from ..schemas.goal import parse_goals


def _limits(settings: Optional[Settings]) -> Settings:
    return settings or get_settings()


def count_plan(goals: Optional[Iterable[Any]]) -> Tuple[int, int]:
    parsed = parse_goals(goals)
    return len(parsed), sum(len(goal.tasks) for goal in parsed)


def will_exceed_limits(
    existing_goals: int,
    existing_tasks: int,
    new_goals: int,
    new_tasks: int,
    settings: Optional[Settings] = None,
) -> bool:
    limits = _limits(settings)
    return existing_goals + new_goals > limits.goal_limit or existing_tasks + new_tasks > limits.task_limit


def can_add_goal(goal_count: int, settings: Optional[Settings] = None) -> bool:
    return goal_count < _limits(settings).goal_limit


def can_add_task(task_count: int, settings: Optional[Settings] = None) -> bool:
    return task_count < _limits(settings).task_limit


def limits_payload(settings: Optional[Settings] = None) -> Dict[str, int]:
    limits = _limits(settings)
    return {"goalLimit": limits.goal_limit, "taskLimit": limits.task_limit}
