"""Day assignments: which plan is scheduled on which calendar day."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends

from fittrack.api.deps import get_session_manager, get_store
from fittrack.db.kv_store import SqlKeyValueStore
from fittrack.schemas.tracking import AssignmentUpdate, DaySchedule, DayWorkoutAssignment
from fittrack.services.dates import date_key, week_dates
from fittrack.services.plan_catalog import PlanCatalog
from fittrack.services.session_lifecycle import SessionManager

router = APIRouter()


async def _day_schedule(catalog: PlanCatalog, manager: SessionManager, day: date) -> DaySchedule:
    key = date_key(day)
    plan = await catalog.plan_for_date(key)
    if plan is None:
        return DaySchedule(date=key)
    tracking = manager.tracking(catalog.store)
    return DaySchedule(
        date=key,
        plan_id=plan.id,
        plan_name=plan.name,
        color=plan.color,
        completion_percent=await tracking.completion_percent(plan, key),
    )


@router.get("/week", response_model=list[DaySchedule])
async def week_schedule(
    day: date | None = None,
    store: SqlKeyValueStore = Depends(get_store),
    manager: SessionManager = Depends(get_session_manager),
):
    """Sunday-to-Saturday week containing `day` (default today)."""
    catalog = PlanCatalog(store)
    return [await _day_schedule(catalog, manager, d) for d in week_dates(day or date.today())]


@router.get("/{day}", response_model=DaySchedule)
async def get_day(
    day: date,
    store: SqlKeyValueStore = Depends(get_store),
    manager: SessionManager = Depends(get_session_manager),
):
    return await _day_schedule(PlanCatalog(store), manager, day)


@router.put("/{day}", response_model=DayWorkoutAssignment)
async def assign_day(
    day: date,
    payload: AssignmentUpdate,
    store: SqlKeyValueStore = Depends(get_store),
):
    """Assign a plan to the day, or clear it with plan_id=null."""
    return await PlanCatalog(store).assign(date_key(day), payload.plan_id)
