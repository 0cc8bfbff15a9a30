"""Set log and 1RM engine: log sets, estimate 1RM, detect personal bests."""

from __future__ import annotations

from collections.abc import Iterable

from fittrack.core.constants import ONE_REP_MAX_REPS_DIVISOR, SET_LOGS_KEY
from fittrack.core.enums import PBMetric
from fittrack.core.numbers import round_half_up
from fittrack.db.kv_store import KeyValueStore, load_list, save_list
from fittrack.schemas.plan import WorkoutPlan
from fittrack.schemas.session import PersonalBest, WorkoutSession
from fittrack.schemas.tracking import SetLog


def estimate_one_rep_max(weight: float, reps: int) -> float:
    """Epley: 1RM = weight * (1 + reps/30). Non-physical inputs give 0."""
    if weight <= 0 or reps <= 0:
        return 0.0
    return weight * (1 + reps / ONE_REP_MAX_REPS_DIVISOR)


def best_one_rep_max(logs: Iterable[SetLog]) -> float:
    return max((estimate_one_rep_max(log.weight, log.reps) for log in logs), default=0.0)


def best_by_exercise(sessions: Iterable[WorkoutSession]) -> dict[str, float]:
    """All-time best 1RM per exercise id over every session's set logs."""
    best: dict[str, float] = {}
    for session in sessions:
        for log in session.set_logs:
            one_rm = estimate_one_rep_max(log.weight, log.reps)
            if one_rm > best.get(log.exercise_id, 0):
                best[log.exercise_id] = one_rm
    return best


def detect_personal_bests(
    plan: WorkoutPlan,
    session_logs: Iterable[SetLog],
    prior_best: dict[str, float],
) -> list[PersonalBest]:
    """
    A PB is recorded when this session's best 1RM for an exercise is > 0 and
    strictly greater than the best from all prior sessions. Ties are not PBs.
    """
    logs = list(session_logs)
    pbs: list[PersonalBest] = []
    for ex in plan.exercises:
        best_now = best_one_rep_max(log for log in logs if log.exercise_id == ex.id)
        if best_now > 0 and best_now > prior_best.get(ex.id, 0):
            pbs.append(
                PersonalBest(
                    exercise_id=ex.id,
                    name=ex.name,
                    metric=PBMetric.ONE_REP_MAX,
                    value=round_half_up(best_now, 1),
                )
            )
    return pbs


class SetLogBook:
    """Set logs keyed by (plan, exercise, date, set_index); upsert by index."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    async def all_logs(self, strict: bool = False) -> list[SetLog]:
        return await load_list(self.store, SET_LOGS_KEY, SetLog, strict=strict)

    async def logs_for_exercise(self, plan_id: str, exercise_id: str, date: str) -> list[SetLog]:
        logs = [log for log in await self.all_logs() if log.matches(plan_id, exercise_id, date)]
        return sorted(logs, key=lambda log: log.set_index)

    async def logs_for_session(self, plan_id: str, date: str, strict: bool = False) -> list[SetLog]:
        return [log for log in await self.all_logs(strict) if log.plan_id == plan_id and log.date == date]

    async def next_set_index(self, plan_id: str, exercise_id: str, date: str) -> int:
        logs = await self.logs_for_exercise(plan_id, exercise_id, date)
        return (logs[-1].set_index if logs else 0) + 1

    async def upsert_set(self, log: SetLog) -> SetLog:
        """Insert, or replace the log with the same key and set index."""
        logs = [
            existing
            for existing in await self.all_logs(strict=True)
            if not (
                existing.matches(log.plan_id, log.exercise_id, log.date)
                and existing.set_index == log.set_index
            )
        ]
        await save_list(self.store, SET_LOGS_KEY, [*logs, log])
        return log

    async def log_set(self, plan_id: str, exercise_id: str, date: str, weight: float, reps: int) -> int:
        """Append a set with the next sequential index and return that index."""
        index = await self.next_set_index(plan_id, exercise_id, date)
        await self.upsert_set(
            SetLog(plan_id=plan_id, exercise_id=exercise_id, date=date, set_index=index, weight=weight, reps=reps)
        )
        return index
