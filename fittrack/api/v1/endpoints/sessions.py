"""Workout sessions: open/finish a plan for a day, and the finished-session history."""

from __future__ import annotations

from datetime import date, datetime, timezone

from fastapi import APIRouter, Depends, Query

from fittrack.api.deps import get_session_manager, get_store
from fittrack.db.kv_store import SqlKeyValueStore
from fittrack.schemas.session import SessionOpen, SessionStatus, WorkoutSession
from fittrack.services.dates import date_key
from fittrack.services.plan_catalog import PlanCatalog
from fittrack.services.session_lifecycle import SessionHistory, SessionManager

router = APIRouter()


def _status(manager: SessionManager, plan_id: str, key: str) -> SessionStatus:
    return SessionStatus(
        plan_id=plan_id,
        date=key,
        state=manager.state(plan_id, key).value,
        started_at=manager.started_at(plan_id, key),
    )


@router.post("/open", response_model=SessionStatus)
async def open_session(
    payload: SessionOpen,
    store: SqlKeyValueStore = Depends(get_store),
    manager: SessionManager = Depends(get_session_manager),
):
    """Start tracking a plan for a day. Opening an active session is a no-op."""
    plan = await PlanCatalog(store).get_plan(payload.plan_id)
    manager.open(plan.id, payload.date, datetime.now(timezone.utc))
    return _status(manager, plan.id, payload.date)


@router.get("/status", response_model=SessionStatus)
async def session_status(
    plan_id: str,
    day: date,
    manager: SessionManager = Depends(get_session_manager),
):
    return _status(manager, plan_id, date_key(day))


@router.post("/finish", response_model=WorkoutSession, status_code=201)
async def finish_session(
    payload: SessionOpen,
    store: SqlKeyValueStore = Depends(get_store),
    manager: SessionManager = Depends(get_session_manager),
):
    """
    Finish the workout: snapshot progress, detect new 1RM personal bests and
    append the session to history. Without a prior open the session starts now.
    """
    plan = await PlanCatalog(store).get_plan(payload.plan_id)
    return await manager.finish(store, plan, payload.date, datetime.now(timezone.utc))


@router.get("", response_model=list[WorkoutSession])
async def list_sessions(
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=500),
    store: SqlKeyValueStore = Depends(get_store),
):
    """History, newest first."""
    sessions = await SessionHistory(store).list_sessions()
    return sessions[skip : skip + limit]


@router.get("/{session_id}", response_model=WorkoutSession)
async def get_session(session_id: str, store: SqlKeyValueStore = Depends(get_store)):
    return await SessionHistory(store).get_session(session_id)


@router.delete("", status_code=204)
async def clear_history(store: SqlKeyValueStore = Depends(get_store)):
    """Delete all finished sessions. Day progress and set logs are kept."""
    await SessionHistory(store).clear()
    return None
