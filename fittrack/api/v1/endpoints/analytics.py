"""History insights: summaries, session records, 1RM trends, plan adherence, recent workout days."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query

from fittrack.api.deps import get_session_manager, get_store
from fittrack.db.kv_store import SqlKeyValueStore
from fittrack.schemas.analytics import (
    AdherenceRead,
    OneRepMaxSeries,
    PeriodSummary,
    RecentWorkout,
    SessionRecords,
)
from fittrack.services.analytics import (
    completed_exercise_total,
    monthly_summary,
    one_rep_max_history,
    plan_adherence,
    recent_workouts,
    session_records,
    weekly_summary,
)
from fittrack.services.dates import month_dates, week_dates
from fittrack.services.plan_catalog import PlanCatalog
from fittrack.services.session_lifecycle import SessionHistory, SessionManager

router = APIRouter()


@router.get("/summary/weekly", response_model=PeriodSummary)
async def weekly(today: date | None = None, store: SqlKeyValueStore = Depends(get_store)):
    """Sessions from Sunday of the current week through today."""
    sessions = await SessionHistory(store).all_sessions()
    return weekly_summary(sessions, today or date.today())


@router.get("/summary/monthly", response_model=PeriodSummary)
async def monthly(today: date | None = None, store: SqlKeyValueStore = Depends(get_store)):
    sessions = await SessionHistory(store).all_sessions()
    return monthly_summary(sessions, today or date.today())


@router.get("/records", response_model=SessionRecords)
async def records(store: SqlKeyValueStore = Depends(get_store)):
    """Session ids holding the longest duration, most sets and best completion."""
    return session_records(await SessionHistory(store).all_sessions())


@router.get("/one-rm", response_model=list[OneRepMaxSeries])
async def one_rep_max_trend(store: SqlKeyValueStore = Depends(get_store)):
    """
    Estimated 1RM over time per exercise (Epley: weight * (1 + reps/30)),
    one point per logged set in finished sessions.
    """
    return one_rep_max_history(await SessionHistory(store).all_sessions())


@router.get("/adherence", response_model=AdherenceRead)
async def adherence(
    today: date | None = None,
    store: SqlKeyValueStore = Depends(get_store),
    manager: SessionManager = Depends(get_session_manager),
):
    """
    Share of assigned days whose plan was fully completed, plus the number
    of exercises checked off. Ranges are the whole current week and month,
    so an assigned day still ahead counts as not yet done.
    """
    today = today or date.today()
    catalog = PlanCatalog(store)
    assignments = await catalog.assignments()
    plans = await catalog.list_plans()
    completed = await manager.tracking(store).completed_records()

    week = week_dates(today)
    month = month_dates(today)
    return AdherenceRead(
        weekly_percent=plan_adherence(week, assignments, plans, completed),
        monthly_percent=plan_adherence(month, assignments, plans, completed),
        weekly_exercises_completed=completed_exercise_total(completed, week),
        monthly_exercises_completed=completed_exercise_total(completed, month),
    )


@router.get("/recent-workouts", response_model=list[RecentWorkout])
async def recent_workout_days(
    today: date | None = None,
    limit: int = Query(5, ge=1, le=50),
    store: SqlKeyValueStore = Depends(get_store),
    manager: SessionManager = Depends(get_session_manager),
):
    """Most recent days with checked-off exercises, newest first."""
    catalog = PlanCatalog(store)
    return recent_workouts(
        await manager.tracking(store).completed_records(),
        await catalog.assignments(),
        await catalog.list_plans(),
        today or date.today(),
        limit,
    )
