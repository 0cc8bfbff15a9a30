"""Workout session lifecycle: open a plan for a day, finish it into a history record.

States per (plan, date): IDLE -> ACTIVE on open, ACTIVE -> IDLE on finish
(producing one immutable WorkoutSession). Closing without finishing keeps
all incrementally saved progress but logs no session.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError

from fittrack.core.constants import SESSIONS_KEY
from fittrack.core.enums import SessionState
from fittrack.core.exceptions import SessionNotFoundError, SessionPersistError
from fittrack.core.numbers import percent, round_half_up
from fittrack.db.kv_store import KeyValueStore, load_list, save_list
from fittrack.schemas.plan import WorkoutPlan
from fittrack.schemas.session import SessionExercise, WorkoutSession
from fittrack.services.one_rep_max import SetLogBook, best_by_exercise, detect_personal_bests
from fittrack.services.tracking_store import RestEventJournal, TrackingStore

logger = logging.getLogger(__name__)


class SessionHistory:
    """Persisted list of finished sessions. Append-only, whole-list read-modify-write."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    async def all_sessions(self, strict: bool = False) -> list[WorkoutSession]:
        """Stored order (oldest first); invalid entries are dropped."""
        return await load_list(self.store, SESSIONS_KEY, WorkoutSession, strict=strict)

    async def list_sessions(self) -> list[WorkoutSession]:
        """Newest first by end time."""
        return sorted(await self.all_sessions(), key=lambda s: s.ended_at, reverse=True)

    async def get_session(self, session_id: str) -> WorkoutSession:
        session = next((s for s in await self.all_sessions() if s.id == session_id), None)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    async def append(self, session: WorkoutSession) -> None:
        await save_list(self.store, SESSIONS_KEY, [*await self.all_sessions(strict=True), session])

    async def clear(self) -> None:
        await self.store.remove(SESSIONS_KEY)
        logger.info("Workout history cleared")


class SessionManager:
    """Process-wide session state: start times, the rest-event journal and the rest timer lock."""

    def __init__(self) -> None:
        self.journal = RestEventJournal()
        self._started_at: dict[tuple[str, str], datetime] = {}
        self._finish_lock = asyncio.Lock()
        self.timer_lock = asyncio.Lock()

    def state(self, plan_id: str, date: str) -> SessionState:
        return SessionState.ACTIVE if (plan_id, date) in self._started_at else SessionState.IDLE

    def started_at(self, plan_id: str, date: str) -> datetime | None:
        return self._started_at.get((plan_id, date))

    def open(self, plan_id: str, date: str, now: datetime) -> datetime:
        """IDLE -> ACTIVE. Re-opening an active session keeps its original start."""
        key = (plan_id, date)
        if key not in self._started_at:
            self._started_at[key] = now
            logger.info("Session opened: plan=%s date=%s", plan_id, date)
        return self._started_at[key]

    def tracking(self, store: KeyValueStore) -> TrackingStore:
        return TrackingStore(store, self.journal, self.timer_lock)

    async def finish(self, store: KeyValueStore, plan: WorkoutPlan, date: str, now: datetime) -> WorkoutSession:
        """ACTIVE -> IDLE, appending the finished session to history.

        State is reset even if the history write fails; the failure is then
        raised as SessionPersistError.
        """
        async with self._finish_lock:
            tracking = self.tracking(store)
            history = SessionHistory(store)
            started_at = self._started_at.get((plan.id, date), now)
            try:
                session = await self._build_session(tracking, history, plan, date, started_at, now)
                await history.append(session)
            except SQLAlchemyError as e:
                logger.exception("Error saving workout session for plan=%s date=%s", plan.id, date)
                raise SessionPersistError("Failed to save workout session.") from e
            finally:
                self._started_at.pop((plan.id, date), None)
                self.journal.clear_session(plan.id, date)
            logger.info("Workout session saved: %s", session.id)
            return session

    async def _build_session(
        self,
        tracking: TrackingStore,
        history: SessionHistory,
        plan: WorkoutPlan,
        date: str,
        started_at: datetime,
        ended_at: datetime,
    ) -> WorkoutSession:
        snapshot = [
            SessionExercise(
                exercise_id=ex.id,
                name=ex.name,
                target_sets=ex.target_sets,
                completed_sets=await tracking.get_count(plan.id, ex.id, date, strict=True),
                completed=await tracking.is_completed(plan.id, ex.id, date, strict=True),
            )
            for ex in plan.exercises
        ]
        completed_count = sum(1 for item in snapshot if item.completed)

        session_logs = await SetLogBook(tracking.store).logs_for_session(plan.id, date, strict=True)
        prior_best = best_by_exercise(await history.all_sessions(strict=True))
        new_pbs = detect_personal_bests(plan, session_logs, prior_best)

        rests = self.journal.for_session(plan.id, date)
        rest_total = sum(e.duration_sec for e in rests)
        rest_avg = int(round_half_up(rest_total / len(rests))) if rests else 0

        ended_ms = int(ended_at.timestamp() * 1000)
        return WorkoutSession(
            id=f"{date}_{plan.id}_{ended_ms}",
            date=date,
            plan_id=plan.id,
            plan_name=plan.name,
            color=plan.color,
            started_at=started_at,
            ended_at=ended_at,
            duration_sec=max(1, int(round_half_up((ended_at - started_at).total_seconds()))),
            exercises=tuple(snapshot),
            completion_percent=percent(completed_count, len(snapshot)),
            total_sets=sum(item.completed_sets for item in snapshot),
            rest_count=len(rests),
            rest_avg_sec=rest_avg,
            set_logs=tuple(session_logs),
            new_pbs=tuple(new_pbs),
        )
