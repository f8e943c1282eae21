import math
from datetime import date, datetime
from typing import Any, Iterable, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

Weekday = Literal["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
RepeatType = Literal["none", "daily", "alternate"]

WEEKDAYS: Tuple[str, ...] = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
REPEAT_TYPES: Tuple[str, ...] = ("none", "daily", "alternate")


def _to_minutes(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    if not math.isfinite(number):
        return 0
    return max(int(number), 0)


def _to_id(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)


def to_day(value: Any) -> date:
    """Truncate a date, datetime or ISO string to its calendar day."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if len(text) > 10:
            return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
        return date.fromisoformat(text)
    raise ValueError(f"Unsupported date value: {value!r}")


def weekday_of(value: date) -> str:
    return WEEKDAYS[value.weekday()]


class Task(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = Field(default=None, alias="_id")
    name: str = ""
    estTime: int = 0
    timeSpent: Optional[int] = None
    day: Optional[Weekday] = None
    repeatType: RepeatType = "none"
    completed: bool = False

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Optional[str]:
        return _to_id(value)

    @field_validator("name", mode="before")
    @classmethod
    def _coerce_name(cls, value: Any) -> str:
        return value.strip() if isinstance(value, str) else ""

    @field_validator("estTime", mode="before")
    @classmethod
    def _coerce_est_time(cls, value: Any) -> int:
        return _to_minutes(value)

    @field_validator("timeSpent", mode="before")
    @classmethod
    def _coerce_time_spent(cls, value: Any) -> Optional[int]:
        if value is None:
            return None
        return _to_minutes(value)

    @field_validator("day", mode="before")
    @classmethod
    def _coerce_day(cls, value: Any) -> Optional[str]:
        return value if value in WEEKDAYS else None

    @field_validator("repeatType", mode="before")
    @classmethod
    def _coerce_repeat(cls, value: Any) -> str:
        return value if value in REPEAT_TYPES else "none"

    @field_validator("completed", mode="before")
    @classmethod
    def _coerce_completed(cls, value: Any) -> bool:
        if isinstance(value, str):
            return value.strip().lower() == "true"
        return bool(value)

    @property
    def is_repeating(self) -> bool:
        return self.repeatType != "none"

    def scheduled_days(self) -> Tuple[str, ...]:
        # Both repeat types are spread over the whole week.
        if self.is_repeating:
            return WEEKDAYS
        return (self.day,) if self.day else ()


class GoalState(BaseModel):
    """The user-editable part of a goal, compared by the change tracker."""

    title: str = ""
    tasks: List[Task] = Field(default_factory=list)

    @field_validator("title", mode="before")
    @classmethod
    def _coerce_title(cls, value: Any) -> str:
        return value.strip() if isinstance(value, str) else ""

    @field_validator("tasks", mode="before")
    @classmethod
    def _coerce_tasks(cls, value: Any) -> List[Any]:
        if not isinstance(value, (list, tuple)):
            return []
        return [item for item in value if isinstance(item, (dict, Task))]


class Goal(GoalState):
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = Field(default=None, alias="_id")
    weekOf: Optional[str] = None
    category: str = "general"
    description: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Optional[str]:
        return _to_id(value)

    @field_validator("weekOf", mode="before")
    @classmethod
    def _coerce_week_of(cls, value: Any) -> Optional[str]:
        if isinstance(value, (date, datetime)):
            return value.isoformat()
        return value if isinstance(value, str) and value else None

    @field_validator("category", mode="before")
    @classmethod
    def _coerce_category(cls, value: Any) -> str:
        return value if isinstance(value, str) and value else "general"

    @field_validator("description", mode="before")
    @classmethod
    def _coerce_description(cls, value: Any) -> Optional[str]:
        return value if isinstance(value, str) else None

    @property
    def is_draft(self) -> bool:
        return self.id is None

    def state(self) -> GoalState:
        return GoalState(title=self.title, tasks=list(self.tasks))


class DailySnapshot(BaseModel):
    date: date
    tasksCompleted: int = 0

    @field_validator("date", mode="before")
    @classmethod
    def _truncate_date(cls, value: Any) -> date:
        return to_day(value)

    @field_validator("tasksCompleted", mode="before")
    @classmethod
    def _coerce_count(cls, value: Any) -> int:
        return _to_minutes(value)


def parse_tasks(raw: Optional[Iterable[Any]]) -> List[Task]:
    if not raw or isinstance(raw, (str, bytes, dict)):
        return []
    tasks: List[Task] = []
    for item in raw:
        if isinstance(item, Task):
            tasks.append(item)
        elif isinstance(item, dict):
            try:
                tasks.append(Task.model_validate(item))
            except ValidationError:
                # Unreadable entries are left out rather than failing the whole list.
                continue
    return tasks


def parse_goals(raw: Optional[Iterable[Any]]) -> List[Goal]:
    if not raw or isinstance(raw, (str, bytes, dict)):
        return []
    goals: List[Goal] = []
    for item in raw:
        if isinstance(item, Goal):
            goals.append(item)
        elif isinstance(item, dict):
            try:
                goals.append(Goal.model_validate(item))
            except ValidationError:
                continue
    return goals


def parse_snapshots(raw: Optional[Iterable[Any]]) -> List[DailySnapshot]:
    if not raw or isinstance(raw, (str, bytes, dict)):
        return []
    snapshots: List[DailySnapshot] = []
    for item in raw:
        if isinstance(item, DailySnapshot):
            snapshots.append(item)
            continue
        if not isinstance(item, dict):
            continue
        try:
            snapshots.append(DailySnapshot.model_validate(item))
        except ValueError:
            # Snapshots without a readable date cannot take part in a streak.
            continue
    return snapshots
