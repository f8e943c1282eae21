import asyncio
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Literal, Optional, Protocol, Tuple, Union

from ..schemas.goal import Goal, GoalState, parse_goals

logger = logging.getLogger(__name__)

WriteOperation = Literal["create", "update", "delete"]
StateInput = Union[Goal, GoalState, Dict[str, Any]]


class GoalWriteError(RuntimeError):
    """Raised by goal writers when the goals API rejects a write."""


class GoalWriter(Protocol):
    async def create(self, goal: Goal) -> str:
        ...

    async def update(self, goal_id: str, goal: Goal) -> None:
        ...

    async def delete(self, goal_id: str) -> None:
        ...


@dataclass
class GoalWriteFailure:
    goal: Goal
    operation: WriteOperation
    error: str


@dataclass
class ReconcileResult:
    created: List[Goal] = field(default_factory=list)
    updated: List[Goal] = field(default_factory=list)
    skipped: List[Goal] = field(default_factory=list)
    failures: List[GoalWriteFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    @property
    def first_error(self) -> Optional[str]:
        return self.failures[0].error if self.failures else None

    def message(self) -> str:
        parts: List[str] = []
        if self.created:
            parts.append(f"saved {len(self.created)} new goal(s)")
        if self.updated:
            parts.append(f"updated {len(self.updated)} goal(s)")
        if self.skipped:
            parts.append(f"skipped {len(self.skipped)} unchanged goal(s)")
        text = f"Successfully {', '.join(parts)}." if parts else "No changes to save."
        if self.failures:
            text += f" {len(self.failures)} goal(s) failed: {self.first_error}"
        return text


def _coerce_state(state: StateInput) -> GoalState:
    if isinstance(state, Goal):
        return state.state()
    if isinstance(state, GoalState):
        return state
    return GoalState.model_validate(state or {})


def serialize_state(state: StateInput) -> str:
    payload = _coerce_state(state).model_dump(exclude_none=True)
    return json.dumps(payload, sort_keys=True)


def _with_source(goals: Optional[Iterable[Any]]) -> List[Tuple[Any, Goal]]:
    if not goals or isinstance(goals, (str, bytes, dict)):
        return []
    pairs: List[Tuple[Any, Goal]] = []
    for item in goals:
        for goal in parse_goals([item]):
            pairs.append((item, goal))
    return pairs


class ChangeTracker:
    """Baselines of each goal's last saved state, keyed by goal id.

    One tracker belongs to one page view. A goal without a baseline always
    counts as changed.
    """

    def __init__(self) -> None:
        self._snapshots: Dict[str, str] = {}
        self._lock = asyncio.Lock()

    def __contains__(self, goal_id: object) -> bool:
        return goal_id in self._snapshots

    def __len__(self) -> int:
        return len(self._snapshots)

    def store_snapshot(self, goal_id: str, state: StateInput) -> None:
        self._snapshots[goal_id] = serialize_state(state)

    def has_changed(self, goal_id: Optional[str], state: StateInput) -> bool:
        if not goal_id:
            return True
        stored = self._snapshots.get(goal_id)
        if stored is None:
            return True
        return serialize_state(state) != stored

    def forget(self, goal_id: str) -> None:
        self._snapshots.pop(goal_id, None)

    def reload(self, goals: Optional[Iterable[Any]]) -> List[Goal]:
        parsed = parse_goals(goals)
        self._snapshots.clear()
        for goal in parsed:
            if goal.id:
                self.store_snapshot(goal.id, goal)
        return parsed

    def refresh(self, goal: Union[Goal, Dict[str, Any]]) -> Goal:
        parsed = goal if isinstance(goal, Goal) else Goal.model_validate(goal)
        if parsed.id:
            self.store_snapshot(parsed.id, parsed)
        return parsed

    async def reconcile_batch(self, goals: Optional[Iterable[Any]], writer: GoalWriter) -> ReconcileResult:
        result = ReconcileResult()
        async with self._lock:
            for source, goal in _with_source(goals):
                if not goal.title:
                    logger.debug("Skipping goal without a title")
                    result.skipped.append(goal)
                    continue
                if goal.is_draft:
                    await self._create(goal, source, writer, result)
                elif self.has_changed(goal.id, goal):
                    await self._update(goal, writer, result)
                else:
                    logger.debug("Skipping unchanged goal %s", goal.id)
                    result.skipped.append(goal)
        logger.info(
            "Saved goals: %d created, %d updated, %d skipped, %d failed",
            len(result.created),
            len(result.updated),
            len(result.skipped),
            len(result.failures),
        )
        return result

    async def _create(self, goal: Goal, source: Any, writer: GoalWriter, result: ReconcileResult) -> None:
        try:
            goal_id = await writer.create(goal)
            if not goal_id:
                raise GoalWriteError("Server did not return a goal id")
        except Exception as error:  # pylint: disable=broad-except
            logger.warning("Failed to create goal %r: %s", goal.title, error)
            result.failures.append(GoalWriteFailure(goal=goal, operation="create", error=str(error)))
            return
        # The caller keeps the same goal, so the next save sees it as saved.
        goal.id = str(goal_id)
        if isinstance(source, dict):
            source["id" if "id" in source else "_id"] = goal.id
        self.store_snapshot(goal.id, goal)
        logger.info("Created goal %s", goal.id)
        result.created.append(goal)

    async def _update(self, goal: Goal, writer: GoalWriter, result: ReconcileResult) -> None:
        try:
            await writer.update(goal.id, goal)
        except Exception as error:  # pylint: disable=broad-except
            logger.warning("Failed to update goal %s: %s", goal.id, error)
            result.failures.append(GoalWriteFailure(goal=goal, operation="update", error=str(error)))
            return
        self.store_snapshot(goal.id, goal)
        logger.info("Updated goal %s", goal.id)
        result.updated.append(goal)

    async def delete_goal(self, goal_id: Optional[str], writer: GoalWriter) -> bool:
        """Delete a saved goal right away; unsaved goals only need local removal."""
        if not goal_id:
            return True
        async with self._lock:
            if goal_id not in self._snapshots:
                return True
            try:
                await writer.delete(goal_id)
            except Exception as error:  # pylint: disable=broad-except
                logger.error("Failed to delete goal %s: %s", goal_id, error)
                return False
            self.forget(goal_id)
        logger.info("Deleted goal %s", goal_id)
        return True
