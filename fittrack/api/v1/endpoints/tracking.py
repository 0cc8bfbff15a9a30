"""Live tracking for a plan on a day: set counts, completion, rest timers, set logs.

Any mutation opens the session for (plan, day) if it is not already active.
"""

from __future__ import annotations

from datetime import date, datetime, timezone

from fastapi import APIRouter, Depends

from fittrack.api.deps import get_session_manager, get_store
from fittrack.core.config import get_settings
from fittrack.core.exceptions import ExerciseNotFoundError
from fittrack.core.numbers import round_half_up
from fittrack.db.kv_store import SqlKeyValueStore
from fittrack.schemas.plan import Exercise, WorkoutPlan
from fittrack.schemas.tracking import (
    ExerciseProgress,
    PlanProgress,
    RestTimerRead,
    RestTimerStart,
    SetCountUpdate,
    SetLog,
    SetLogCreate,
    SetLogUpdate,
)
from fittrack.services.dates import date_key
from fittrack.services.one_rep_max import SetLogBook, best_one_rep_max
from fittrack.services.plan_catalog import PlanCatalog
from fittrack.services.preferences import load_preferences
from fittrack.services.session_lifecycle import SessionManager
from fittrack.services.tracking_store import TrackingStore, remaining_seconds

router = APIRouter()


def _now() -> datetime:
    return datetime.now(timezone.utc)


async def _resolve(store: SqlKeyValueStore, plan_id: str, exercise_id: str) -> tuple[WorkoutPlan, Exercise]:
    plan = await PlanCatalog(store).get_plan(plan_id)
    exercise = plan.exercise(exercise_id)
    if exercise is None:
        raise ExerciseNotFoundError(plan_id, exercise_id)
    return plan, exercise


async def _progress(
    tracking: TrackingStore, plan: WorkoutPlan, exercise: Exercise, key: str, now: datetime
) -> ExerciseProgress:
    logs = await SetLogBook(tracking.store).logs_for_exercise(plan.id, exercise.id, key)
    return ExerciseProgress(
        exercise_id=exercise.id,
        name=exercise.name,
        target_sets=exercise.target_sets,
        completed_sets=await tracking.get_count(plan.id, exercise.id, key),
        completed=await tracking.is_completed(plan.id, exercise.id, key),
        rest_remaining_sec=await tracking.get_remaining_seconds(plan.id, exercise.id, key, now),
        best_one_rep_max=round_half_up(best_one_rep_max(logs), 1),
        logs=logs,
    )


@router.get("/{day}/{plan_id}", response_model=PlanProgress)
async def plan_progress(
    day: date,
    plan_id: str,
    store: SqlKeyValueStore = Depends(get_store),
    manager: SessionManager = Depends(get_session_manager),
):
    """Per-exercise progress for the plan on the day."""
    key = date_key(day)
    plan = await PlanCatalog(store).get_plan(plan_id)
    tracking = manager.tracking(store)
    now = _now()
    return PlanProgress(
        plan_id=plan.id,
        date=key,
        session_state=manager.state(plan.id, key).value,
        completion_percent=await tracking.completion_percent(plan, key),
        exercises=[await _progress(tracking, plan, ex, key, now) for ex in plan.exercises],
    )


@router.put("/{day}/{plan_id}/exercises/{exercise_id}/count", response_model=ExerciseProgress)
async def set_count(
    day: date,
    plan_id: str,
    exercise_id: str,
    payload: SetCountUpdate,
    store: SqlKeyValueStore = Depends(get_store),
    manager: SessionManager = Depends(get_session_manager),
):
    """Set the completed-set count (clamped to [0, target sets])."""
    plan, exercise = await _resolve(store, plan_id, exercise_id)
    key, now = date_key(day), _now()
    manager.open(plan.id, key, now)
    tracking = manager.tracking(store)
    await tracking.set_count(plan.id, exercise.id, key, payload.count, exercise.target_sets)
    return await _progress(tracking, plan, exercise, key, now)


@router.post("/{day}/{plan_id}/exercises/{exercise_id}/increment", response_model=ExerciseProgress)
async def increment_sets(
    day: date,
    plan_id: str,
    exercise_id: str,
    store: SqlKeyValueStore = Depends(get_store),
    manager: SessionManager = Depends(get_session_manager),
):
    """One more set done; starts a rest timer when auto-rest is on."""
    plan, exercise = await _resolve(store, plan_id, exercise_id)
    key, now = date_key(day), _now()
    manager.open(plan.id, key, now)
    tracking = manager.tracking(store)
    await tracking.increment(plan.id, exercise.id, key, exercise.target_sets)
    prefs = await load_preferences(store, get_settings().rest_default_seconds)
    if prefs.auto_rest_on_increment:
        await tracking.start_rest_timer(plan.id, exercise.id, key, prefs.rest_default_sec, now)
    return await _progress(tracking, plan, exercise, key, now)


@router.post("/{day}/{plan_id}/exercises/{exercise_id}/decrement", response_model=ExerciseProgress)
async def decrement_sets(
    day: date,
    plan_id: str,
    exercise_id: str,
    store: SqlKeyValueStore = Depends(get_store),
    manager: SessionManager = Depends(get_session_manager),
):
    plan, exercise = await _resolve(store, plan_id, exercise_id)
    key, now = date_key(day), _now()
    manager.open(plan.id, key, now)
    tracking = manager.tracking(store)
    await tracking.decrement(plan.id, exercise.id, key, exercise.target_sets)
    return await _progress(tracking, plan, exercise, key, now)


@router.post("/{day}/{plan_id}/exercises/{exercise_id}/toggle", response_model=ExerciseProgress)
async def toggle_completion(
    day: date,
    plan_id: str,
    exercise_id: str,
    store: SqlKeyValueStore = Depends(get_store),
    manager: SessionManager = Depends(get_session_manager),
):
    """Check/uncheck an exercise directly (e.g. cooldown); set count is not changed."""
    plan, exercise = await _resolve(store, plan_id, exercise_id)
    key, now = date_key(day), _now()
    manager.open(plan.id, key, now)
    tracking = manager.tracking(store)
    await tracking.toggle_completion(plan.id, exercise.id, key)
    return await _progress(tracking, plan, exercise, key, now)


# ── Rest timer ───────────────────────────────────────────────────────────

@router.get("/{day}/{plan_id}/exercises/{exercise_id}/rest", response_model=RestTimerRead)
async def get_rest_timer(
    day: date,
    plan_id: str,
    exercise_id: str,
    store: SqlKeyValueStore = Depends(get_store),
    manager: SessionManager = Depends(get_session_manager),
):
    key = date_key(day)
    timer = await manager.tracking(store).get_rest_timer(plan_id, exercise_id, key)
    if timer is None:
        return RestTimerRead(plan_id=plan_id, exercise_id=exercise_id, date=key, active=False)
    remaining = remaining_seconds(timer, _now())
    return RestTimerRead(
        plan_id=plan_id,
        exercise_id=exercise_id,
        date=key,
        active=remaining > 0,
        remaining_sec=remaining,
        duration_sec=timer.duration_sec,
        ends_at=timer.ends_at,
    )


@router.post("/{day}/{plan_id}/exercises/{exercise_id}/rest", response_model=RestTimerRead, status_code=201)
async def start_rest_timer(
    day: date,
    plan_id: str,
    exercise_id: str,
    payload: RestTimerStart,
    store: SqlKeyValueStore = Depends(get_store),
    manager: SessionManager = Depends(get_session_manager),
):
    """Start (or restart) a rest timer; defaults to the preferred rest length."""
    plan, exercise = await _resolve(store, plan_id, exercise_id)
    key, now = date_key(day), _now()
    manager.open(plan.id, key, now)
    duration = payload.duration_sec
    if duration is None:
        duration = (await load_preferences(store, get_settings().rest_default_seconds)).rest_default_sec
    timer = await manager.tracking(store).start_rest_timer(plan.id, exercise.id, key, duration, now)
    return RestTimerRead(
        plan_id=plan.id,
        exercise_id=exercise.id,
        date=key,
        active=True,
        remaining_sec=remaining_seconds(timer, now),
        duration_sec=timer.duration_sec,
        ends_at=timer.ends_at,
    )


@router.delete("/{day}/{plan_id}/exercises/{exercise_id}/rest", status_code=204)
async def cancel_rest_timer(
    day: date,
    plan_id: str,
    exercise_id: str,
    store: SqlKeyValueStore = Depends(get_store),
    manager: SessionManager = Depends(get_session_manager),
):
    """Cancel an accidental rest timer (also un-counts its rest for the session)."""
    await manager.tracking(store).cancel_rest_timer(plan_id, exercise_id, date_key(day))
    return None


# ── Set logs ─────────────────────────────────────────────────────────────

@router.get("/{day}/{plan_id}/exercises/{exercise_id}/sets", response_model=list[SetLog])
async def list_sets(
    day: date,
    plan_id: str,
    exercise_id: str,
    store: SqlKeyValueStore = Depends(get_store),
):
    return await SetLogBook(store).logs_for_exercise(plan_id, exercise_id, date_key(day))


@router.post("/{day}/{plan_id}/exercises/{exercise_id}/sets", response_model=ExerciseProgress, status_code=201)
async def log_set(
    day: date,
    plan_id: str,
    exercise_id: str,
    payload: SetLogCreate,
    store: SqlKeyValueStore = Depends(get_store),
    manager: SessionManager = Depends(get_session_manager),
):
    """Log a set (weight, reps), count it toward the target and start the rest timer."""
    plan, exercise = await _resolve(store, plan_id, exercise_id)
    key, now = date_key(day), _now()
    manager.open(plan.id, key, now)
    reps = payload.reps if payload.reps is not None else exercise.default_reps
    await SetLogBook(store).log_set(plan.id, exercise.id, key, payload.weight, reps)
    tracking = manager.tracking(store)
    await tracking.increment(plan.id, exercise.id, key, exercise.target_sets)
    prefs = await load_preferences(store, get_settings().rest_default_seconds)
    await tracking.start_rest_timer(plan.id, exercise.id, key, prefs.rest_default_sec, now)
    return await _progress(tracking, plan, exercise, key, now)


@router.put("/{day}/{plan_id}/exercises/{exercise_id}/sets/{set_index}", response_model=SetLog)
async def update_set(
    day: date,
    plan_id: str,
    exercise_id: str,
    set_index: int,
    payload: SetLogUpdate,
    store: SqlKeyValueStore = Depends(get_store),
):
    """Correct a logged set's weight/reps (upsert by set index)."""
    plan, exercise = await _resolve(store, plan_id, exercise_id)
    log = SetLog(
        plan_id=plan.id,
        exercise_id=exercise.id,
        date=date_key(day),
        set_index=set_index,
        weight=payload.weight,
        reps=payload.reps,
    )
    return await SetLogBook(store).upsert_set(log)
