from typing import Any, Dict

from fastapi import APIRouter, HTTPException

from ..orchestrator.weekly_plan import PlanValidationError, available_days, import_generated_plan

router = APIRouter(prefix="/plans", tags=["plans"])


@router.post("/import")
async def import_plan(body: Dict[str, Any]) -> Dict[str, Any]:
    plan = body.get("goal")
    week_of = body.get("weekOf")
    today = body.get("today")
    if not plan:
        raise HTTPException(status_code=400, detail="goal required")
    if not week_of or not today:
        raise HTTPException(status_code=400, detail="weekOf and today required")
    try:
        days = available_days(week_of, today)
    except ValueError as error:
        raise HTTPException(status_code=400, detail="weekOf and today must be ISO dates") from error
    if not days:
        raise HTTPException(status_code=400, detail="That week is already over")
    try:
        goal = import_generated_plan(plan, week_of, days)
    except PlanValidationError as error:
        raise HTTPException(status_code=400, detail=error.errors) from error
    return {"goal": goal.model_dump(), "availableDays": days}
