from datetime import date
from typing import Any, Dict

from fastapi import APIRouter, HTTPException

from ..orchestrator.analytics import (
    build_dashboard,
    calculate_current_streak,
    calculate_daily_completion_stats,
    calculate_productivity_score,
    compute_daily_streak,
    compute_focus_time_stats,
    compute_focus_time_stats_for_tasks,
    compute_weekly_completion_rate,
    compute_weekly_load,
    summarize_week,
)
from ..orchestrator.limits import limits_payload
from ..schemas.goal import to_day, weekday_of

router = APIRouter(prefix="", tags=["analytics"])


def _required_day(body: Dict[str, Any], key: str) -> date:
    value = body.get(key)
    if not value:
        raise HTTPException(status_code=400, detail=f"{key} required")
    try:
        return to_day(value)
    except ValueError as error:
        raise HTTPException(status_code=400, detail=f"{key} must be an ISO date") from error


@router.get("/config/limits")
async def config_limits() -> Dict[str, int]:
    return limits_payload()


@router.post("/analytics/completion")
async def completion(body: Dict[str, Any]) -> Dict[str, Any]:
    goals = body.get("goals")
    return {
        "completionRate": compute_weekly_completion_rate(goals),
        "productivityScore": calculate_productivity_score(goals),
    }


@router.post("/analytics/streak")
async def streak(body: Dict[str, Any]) -> Dict[str, Any]:
    today = _required_day(body, "today")
    return {"streak": compute_daily_streak(body.get("snapshots"), today)}


@router.post("/analytics/weekly-streak")
async def weekly_streak(body: Dict[str, Any]) -> Dict[str, Any]:
    today = _required_day(body, "today")
    day_stats = calculate_daily_completion_stats(body.get("goals"), include_repeating=bool(body.get("includeRepeating")))
    return {
        "streak": calculate_current_streak(day_stats, weekday_of(today)),
        "dayStats": {day: stats.model_dump() for day, stats in day_stats.items()},
    }


@router.post("/analytics/focus-time")
async def focus_time(body: Dict[str, Any]) -> Dict[str, Any]:
    if "tasks" in body:
        return compute_focus_time_stats_for_tasks(body.get("tasks")).model_dump()
    return compute_focus_time_stats(body.get("goals")).model_dump()


@router.post("/analytics/weekly-load")
async def weekly_load(body: Dict[str, Any]) -> Dict[str, Any]:
    return compute_weekly_load(body.get("goals")).model_dump()


@router.post("/analytics/weekly-summary")
async def weekly_summary(body: Dict[str, Any]) -> Dict[str, Any]:
    week_of = _required_day(body, "weekOf")
    return summarize_week(body.get("goals"), week_of).model_dump()


@router.post("/analytics/dashboard")
async def dashboard(body: Dict[str, Any]) -> Dict[str, Any]:
    today = _required_day(body, "today")
    result = build_dashboard(
        body.get("weeklyGoals"),
        body.get("todaysTasks"),
        body.get("dailySnapshots"),
        today,
        include_repeating=bool(body.get("includeRepeating")),
    )
    return result.model_dump()
