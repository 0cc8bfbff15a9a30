"""Plan catalog: built-in + custom plans, and which plan is assigned to which day."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone

from fittrack.core.builtin_plans import BUILTIN_PLAN_IDS, BUILTIN_PLANS
from fittrack.core.enums import ExerciseKind
from fittrack.core.constants import (
    COMPLETED_EXERCISES_KEY,
    CUSTOM_PLANS_KEY,
    REST_TIMERS_KEY,
    SET_COUNTS_KEY,
    WORKOUT_ASSIGNMENTS_KEY,
)
from fittrack.core.exceptions import PlanNotDeletableError, PlanNotFoundError
from fittrack.db.kv_store import KeyValueStore, load_list, save_list
from fittrack.schemas.plan import Exercise, WorkoutPlan, WorkoutPlanCreate
from fittrack.schemas.tracking import (
    CompletedExercise,
    DayWorkoutAssignment,
    ExerciseSetCount,
    RestTimer,
)

logger = logging.getLogger(__name__)


class PlanCatalog:
    def __init__(self, store: KeyValueStore):
        self.store = store

    async def custom_plans(self, strict: bool = False) -> list[WorkoutPlan]:
        return await load_list(self.store, CUSTOM_PLANS_KEY, WorkoutPlan, strict=strict)

    async def list_plans(self) -> list[WorkoutPlan]:
        return [*BUILTIN_PLANS, *await self.custom_plans()]

    async def find_plan(self, plan_id: str) -> WorkoutPlan | None:
        return next((p for p in await self.list_plans() if p.id == plan_id), None)

    async def get_plan(self, plan_id: str) -> WorkoutPlan:
        plan = await self.find_plan(plan_id)
        if plan is None:
            raise PlanNotFoundError(plan_id)
        return plan

    async def create_custom_plan(self, payload: WorkoutPlanCreate, now: datetime | None = None) -> WorkoutPlan:
        """Persist a new custom plan. Payload is already validated by its schema."""
        stamp = int((now or datetime.now(timezone.utc)).timestamp() * 1000)
        existing = await self.custom_plans(strict=True)
        taken = {p.id for p in existing} | BUILTIN_PLAN_IDS
        plan_id = f"custom-{stamp}"
        suffix = 1
        while plan_id in taken:
            plan_id = f"custom-{stamp}-{suffix}"
            suffix += 1

        plan = WorkoutPlan(
            id=plan_id,
            name=payload.name.strip(),
            subtitle=payload.subtitle.strip(),
            icon=payload.icon,
            color=payload.color,
            is_custom=True,
            exercises=tuple(
                Exercise(
                    id=f"ex-{stamp}-{i + 1}",
                    name=ex.name.strip(),
                    sets=ex.sets.strip(),
                    reps=ex.reps.strip() if ex.kind == ExerciseKind.REPS and ex.reps else None,
                    duration=ex.duration.strip() if ex.kind == ExerciseKind.DURATION and ex.duration else None,
                    notes=ex.notes,
                )
                for i, ex in enumerate(payload.exercises)
            ),
        )
        await save_list(self.store, CUSTOM_PLANS_KEY, [*existing, plan])
        logger.info("Custom workout plan created: %s (%s)", plan.id, plan.name)
        return plan

    async def delete_custom_plan(self, plan_id: str, timer_lock: asyncio.Lock | None = None) -> None:
        """Delete a custom plan and its per-day tracking records.
        Set logs and finished sessions are kept for history.

        timer_lock is the lock guarding rest timers against the background ticker.
        """
        if plan_id in BUILTIN_PLAN_IDS:
            raise PlanNotDeletableError(f"Built-in plan '{plan_id}' cannot be deleted")
        existing = await self.custom_plans(strict=True)
        remaining = [p for p in existing if p.id != plan_id]
        if len(remaining) == len(existing):
            raise PlanNotFoundError(plan_id)
        await save_list(self.store, CUSTOM_PLANS_KEY, remaining)

        assignments = await self.assignments(strict=True)
        await save_list(
            self.store,
            WORKOUT_ASSIGNMENTS_KEY,
            [
                DayWorkoutAssignment(date=a.date, plan_id=None) if a.plan_id == plan_id else a
                for a in assignments
            ],
        )
        for key, model in (
            (COMPLETED_EXERCISES_KEY, CompletedExercise),
            (SET_COUNTS_KEY, ExerciseSetCount),
        ):
            records = await load_list(self.store, key, model, strict=True)
            await save_list(self.store, key, [r for r in records if r.plan_id != plan_id])
        async with timer_lock or asyncio.Lock():
            timers = await load_list(self.store, REST_TIMERS_KEY, RestTimer, strict=True)
            await save_list(self.store, REST_TIMERS_KEY, [t for t in timers if t.plan_id != plan_id])
        logger.info("Workout plan deleted: %s", plan_id)

    # ── Day assignments ──────────────────────────────────────────────────

    async def assignments(self, strict: bool = False) -> list[DayWorkoutAssignment]:
        return await load_list(self.store, WORKOUT_ASSIGNMENTS_KEY, DayWorkoutAssignment, strict=strict)

    async def assign(self, date: str, plan_id: str | None) -> DayWorkoutAssignment:
        """Assign a plan to a day (last write wins); plan_id=None clears the day."""
        if plan_id is not None:
            await self.get_plan(plan_id)
        assignment = DayWorkoutAssignment(date=date, plan_id=plan_id)
        others = [a for a in await self.assignments(strict=True) if a.date != date]
        await save_list(self.store, WORKOUT_ASSIGNMENTS_KEY, [*others, assignment])
        logger.info("Workout assigned to %s: %s", date, plan_id)
        return assignment

    async def assigned_plan_id(self, date: str) -> str | None:
        return next((a.plan_id for a in await self.assignments() if a.date == date), None)

    async def plan_for_date(self, date: str) -> WorkoutPlan | None:
        plan_id = await self.assigned_plan_id(date)
        return await self.find_plan(plan_id) if plan_id else None
