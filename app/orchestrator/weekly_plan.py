import json
import logging
from copy import deepcopy
from datetime import timedelta
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import jsonschema

from ..config import Settings, get_settings
from ..schemas.goal import WEEKDAYS, Goal, Task, to_day

logger = logging.getLogger(__name__)


class PlanValidationError(ValueError):
    def __init__(self, errors: List[str]) -> None:
        super().__init__(f"Generated plan is invalid: {'; '.join(errors)}")
        self.errors = errors


def _load_schema() -> Dict[str, Any]:
    schema_path = Path(__file__).with_name("weekly_plan.schema.json")
    with schema_path.open("r", encoding="utf-8") as f:
        return json.load(f)["schema"]


_base_schema = _load_schema()


@lru_cache(maxsize=8)
def _validator(max_tasks: int) -> jsonschema.Draft7Validator:
    schema = deepcopy(_base_schema)
    schema["properties"]["tasks"]["maxItems"] = max_tasks
    return jsonschema.Draft7Validator(schema)


def validate_generated_plan(plan: Any, settings: Optional[Settings] = None) -> Dict[str, Any]:
    validator = _validator((settings or get_settings()).plan_max_tasks)
    errors = sorted(validator.iter_errors(plan), key=lambda e: list(e.path))
    messages = [f"{'/'.join(map(str, err.path))} {err.message}".strip() for err in errors]
    if not messages and not plan["title"].strip():
        messages.append("title must not be blank")
    if not messages:
        return {"valid": True}
    return {"valid": False, "errors": messages}


def available_days(week_of: Any, today: Any) -> List[str]:
    """Weekdays of the week starting at ``week_of`` that are not yet over."""
    start = to_day(week_of)
    start -= timedelta(days=start.weekday())
    current = to_day(today)
    if current < start:
        return list(WEEKDAYS)
    if current >= start + timedelta(days=7):
        return []
    return list(WEEKDAYS[current.weekday():])


def import_generated_plan(
    plan: Any,
    week_of: Any = None,
    days: Optional[Sequence[str]] = None,
    settings: Optional[Settings] = None,
) -> Goal:
    validation = validate_generated_plan(plan, settings)
    if not validation["valid"]:
        raise PlanValidationError(validation["errors"])
    spread = [day for day in (days or ()) if day in WEEKDAYS] or list(WEEKDAYS)
    tasks = [
        Task(
            name=item["name"],
            estTime=item["estTime"],
            day=spread[index % len(spread)],
            repeatType="none",
            completed=False,
        )
        for index, item in enumerate(plan["tasks"])
    ]
    logger.info("Imported generated plan %r with %d task(s)", plan["title"].strip(), len(tasks))
    return Goal(
        title=plan["title"],
        tasks=tasks,
        weekOf=to_day(week_of).isoformat() if week_of else None,
        description=plan.get("description") if isinstance(plan.get("description"), str) else None,
    )
