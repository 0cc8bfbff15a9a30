"""Workout plans: built-in catalog plus user-created custom plans."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from fittrack.api.deps import get_session_manager, get_store
from fittrack.db.kv_store import SqlKeyValueStore
from fittrack.schemas.plan import WorkoutPlan, WorkoutPlanCreate
from fittrack.services.plan_catalog import PlanCatalog
from fittrack.services.session_lifecycle import SessionManager

router = APIRouter()


@router.get("", response_model=list[WorkoutPlan])
async def list_plans(store: SqlKeyValueStore = Depends(get_store)):
    """Built-in plans first, then custom plans in creation order."""
    return await PlanCatalog(store).list_plans()


@router.post("", response_model=WorkoutPlan, status_code=201)
async def create_plan(payload: WorkoutPlanCreate, store: SqlKeyValueStore = Depends(get_store)):
    """Create a custom plan (name, description and at least one exercise required)."""
    return await PlanCatalog(store).create_custom_plan(payload)


@router.get("/{plan_id}", response_model=WorkoutPlan)
async def get_plan(plan_id: str, store: SqlKeyValueStore = Depends(get_store)):
    return await PlanCatalog(store).get_plan(plan_id)


@router.delete("/{plan_id}", status_code=204)
async def delete_plan(
    plan_id: str,
    store: SqlKeyValueStore = Depends(get_store),
    manager: SessionManager = Depends(get_session_manager),
):
    """Delete a custom plan; its days are unassigned and its day progress removed."""
    await PlanCatalog(store).delete_custom_plan(plan_id, manager.timer_lock)
    return None
