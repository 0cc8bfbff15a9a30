"""Set/rest tracking store.

Per (plan, exercise, date): completed-set counts, completion records and
rest timers, persisted through the key-value store. Rest events live in an
in-memory journal owned by the session manager and are used only for
session rest statistics.
"""

from __future__ import annotations

import asyncio
import logging
import math
from datetime import datetime, timedelta

from fittrack.core.constants import (
    COMPLETED_EXERCISES_KEY,
    REST_TIMERS_KEY,
    SET_COUNTS_KEY,
)
from fittrack.core.exceptions import InvalidInputError
from fittrack.core.numbers import percent
from fittrack.db.kv_store import KeyValueStore, load_list, save_list
from fittrack.schemas.plan import WorkoutPlan
from fittrack.schemas.tracking import (
    CompletedExercise,
    ExerciseSetCount,
    RestEvent,
    RestTimer,
)

logger = logging.getLogger(__name__)


class RestEventJournal:
    """Append-only list of rest events for sessions in progress (not persisted)."""

    def __init__(self) -> None:
        self._events: list[RestEvent] = []

    def append(self, event: RestEvent) -> None:
        self._events.append(event)

    def remove_latest(self, plan_id: str, exercise_id: str, date: str) -> RestEvent | None:
        """Drop only the most recent event for the key; earlier rests stay counted."""
        for i in range(len(self._events) - 1, -1, -1):
            if self._events[i].matches(plan_id, exercise_id, date):
                return self._events.pop(i)
        return None

    def for_session(self, plan_id: str, date: str) -> list[RestEvent]:
        return [e for e in self._events if e.plan_id == plan_id and e.date == date]

    def clear_session(self, plan_id: str, date: str) -> None:
        self._events = [e for e in self._events if not (e.plan_id == plan_id and e.date == date)]

    def __len__(self) -> int:
        return len(self._events)


class TrackingStore:
    def __init__(self, store: KeyValueStore, journal: RestEventJournal, timer_lock: asyncio.Lock | None = None):
        self.store = store
        self.journal = journal
        # Shared by every store over the same data, the rest ticker included
        self.timer_lock = timer_lock or asyncio.Lock()

    # ── Set counts & completion ──────────────────────────────────────────

    async def get_count(self, plan_id: str, exercise_id: str, date: str, strict: bool = False) -> int:
        counts = await load_list(self.store, SET_COUNTS_KEY, ExerciseSetCount, strict=strict)
        return next((c.count for c in counts if c.matches(plan_id, exercise_id, date)), 0)

    async def set_count(self, plan_id: str, exercise_id: str, date: str, count: int, target_sets: int) -> int:
        """Clamp count to [0, target_sets], store it and sync the completion record.

        The only way a set count changes completion: done iff count >= target > 0.
        """
        count = max(0, min(count, target_sets))
        counts = await load_list(self.store, SET_COUNTS_KEY, ExerciseSetCount, strict=True)
        for record in counts:
            if record.matches(plan_id, exercise_id, date):
                record.count = count
                break
        else:
            counts.append(ExerciseSetCount(plan_id=plan_id, exercise_id=exercise_id, date=date, count=count))
        await save_list(self.store, SET_COUNTS_KEY, counts)

        done = target_sets > 0 and count >= target_sets
        completed = await self._completed(strict=True)
        already = any(c.matches(plan_id, exercise_id, date) for c in completed)
        if done and not already:
            completed.append(CompletedExercise(plan_id=plan_id, exercise_id=exercise_id, date=date))
            await save_list(self.store, COMPLETED_EXERCISES_KEY, completed)
        elif not done and already:
            await save_list(
                self.store,
                COMPLETED_EXERCISES_KEY,
                [c for c in completed if not c.matches(plan_id, exercise_id, date)],
            )
        return count

    async def increment(self, plan_id: str, exercise_id: str, date: str, target_sets: int) -> int:
        current = await self.get_count(plan_id, exercise_id, date)
        return await self.set_count(plan_id, exercise_id, date, current + 1, target_sets)

    async def decrement(self, plan_id: str, exercise_id: str, date: str, target_sets: int) -> int:
        current = await self.get_count(plan_id, exercise_id, date)
        return await self.set_count(plan_id, exercise_id, date, current - 1, target_sets)

    async def _completed(self, strict: bool = False) -> list[CompletedExercise]:
        return await load_list(self.store, COMPLETED_EXERCISES_KEY, CompletedExercise, strict=strict)

    async def completed_records(self) -> list[CompletedExercise]:
        return await self._completed()

    async def is_completed(self, plan_id: str, exercise_id: str, date: str, strict: bool = False) -> bool:
        return any(c.matches(plan_id, exercise_id, date) for c in await self._completed(strict))

    async def toggle_completion(self, plan_id: str, exercise_id: str, date: str) -> bool:
        """Flip the completion flag directly. Set counts are left untouched."""
        completed = await self._completed(strict=True)
        remaining = [c for c in completed if not c.matches(plan_id, exercise_id, date)]
        if len(remaining) == len(completed):
            remaining.append(CompletedExercise(plan_id=plan_id, exercise_id=exercise_id, date=date))
            now_completed = True
        else:
            now_completed = False
        await save_list(self.store, COMPLETED_EXERCISES_KEY, remaining)
        logger.info("Exercise %s %s on %s", exercise_id, "completed" if now_completed else "unchecked", date)
        return now_completed

    async def completion_percent(self, plan: WorkoutPlan, date: str) -> int:
        if not plan.exercises:
            return 0
        completed = await self._completed()
        done = sum(1 for ex in plan.exercises if any(c.matches(plan.id, ex.id, date) for c in completed))
        return percent(done, len(plan.exercises))

    # ── Rest timers ──────────────────────────────────────────────────────

    async def rest_timers(self, strict: bool = False) -> list[RestTimer]:
        return await load_list(self.store, REST_TIMERS_KEY, RestTimer, strict=strict)

    async def start_rest_timer(
        self, plan_id: str, exercise_id: str, date: str, duration_sec: int, now: datetime
    ) -> RestTimer:
        """Start (or restart) the rest timer for the key and journal a rest event."""
        if duration_sec <= 0:
            raise InvalidInputError("Rest duration must be a positive number of seconds.")
        timer = RestTimer(
            plan_id=plan_id,
            exercise_id=exercise_id,
            date=date,
            ends_at=now + timedelta(seconds=duration_sec),
            duration_sec=duration_sec,
            notified=False,
        )
        async with self.timer_lock:
            others = [t for t in await self.rest_timers(strict=True) if not t.matches(plan_id, exercise_id, date)]
            await save_list(self.store, REST_TIMERS_KEY, [*others, timer])
        self.journal.append(
            RestEvent(
                plan_id=plan_id,
                exercise_id=exercise_id,
                date=date,
                started_at=now,
                duration_sec=duration_sec,
            )
        )
        return timer

    async def cancel_rest_timer(self, plan_id: str, exercise_id: str, date: str) -> bool:
        """Remove the timer and the latest matching rest event. Returns whether a timer existed."""
        async with self.timer_lock:
            timers = await self.rest_timers(strict=True)
            remaining = [t for t in timers if not t.matches(plan_id, exercise_id, date)]
            if len(remaining) != len(timers):
                await save_list(self.store, REST_TIMERS_KEY, remaining)
        self.journal.remove_latest(plan_id, exercise_id, date)
        return len(remaining) != len(timers)

    async def get_rest_timer(self, plan_id: str, exercise_id: str, date: str) -> RestTimer | None:
        return next((t for t in await self.rest_timers() if t.matches(plan_id, exercise_id, date)), None)

    async def get_remaining_seconds(self, plan_id: str, exercise_id: str, date: str, now: datetime) -> int:
        timer = await self.get_rest_timer(plan_id, exercise_id, date)
        return remaining_seconds(timer, now) if timer else 0

    async def tick(self, now: datetime) -> list[RestTimer]:
        """Mark timers that have run out as notified and return them.

        A timer is returned by exactly one tick; later ticks skip it.
        """
        async with self.timer_lock:
            timers = await self.rest_timers(strict=True)
            due = [t for t in timers if not t.notified and t.ends_at <= now]
            if not due:
                return []
            for timer in due:
                timer.notified = True
            await save_list(self.store, REST_TIMERS_KEY, timers)
        return due


def remaining_seconds(timer: RestTimer, now: datetime) -> int:
    """Whole seconds left (rounded up), 0 once the timer has run out."""
    remaining = (timer.ends_at - now).total_seconds()
    return math.ceil(remaining) if remaining > 0 else 0
