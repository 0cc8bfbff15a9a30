"""History analytics over finished sessions: summaries, streaks, PBs, 1RM trends, adherence.

Pure functions; callers load the session list, goals and assignments.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Sequence
from datetime import date, timedelta

from fittrack.core.builtin_plans import WORKOUT_COLORS
from fittrack.core.numbers import percent, round_half_up
from fittrack.schemas.analytics import (
    OneRepMaxPoint,
    OneRepMaxSeries,
    PeriodSummary,
    PersonalBestEntry,
    RecentWorkout,
    SessionRecords,
)
from fittrack.schemas.plan import WorkoutPlan
from fittrack.schemas.session import WorkoutSession
from fittrack.schemas.tracking import CompletedExercise, DayWorkoutAssignment
from fittrack.services.dates import date_key, month_dates, parse_date_key, week_start
from fittrack.services.one_rep_max import estimate_one_rep_max


def period_summary(sessions: Iterable[WorkoutSession], start: date, end: date) -> PeriodSummary:
    """Totals for sessions dated within [start, end]."""
    in_range = [s for s in sessions if start <= parse_date_key(s.date) <= end]
    count = len(in_range)
    return PeriodSummary(
        start=date_key(start),
        end=date_key(end),
        count=count,
        sets=sum(s.total_sets for s in in_range),
        duration_sec=sum(s.duration_sec for s in in_range),
        avg_completion=int(round_half_up(sum(s.completion_percent for s in in_range) / count)) if count else 0,
    )


def weekly_summary(sessions: Iterable[WorkoutSession], today: date) -> PeriodSummary:
    """Sunday of this week up to today."""
    return period_summary(sessions, week_start(today), today)


def monthly_summary(sessions: Iterable[WorkoutSession], today: date) -> PeriodSummary:
    days = month_dates(today)
    return period_summary(sessions, days[0], days[-1])


def _session_days(sessions: Iterable[WorkoutSession]) -> list[date]:
    return sorted({parse_date_key(s.date) for s in sessions})


def current_streak(sessions: Iterable[WorkoutSession], today: date) -> int:
    """Consecutive days with a session, walking back from today; 0 if none today."""
    days = set(_session_days(sessions))
    streak = 0
    cursor = today
    while cursor in days:
        streak += 1
        cursor -= timedelta(days=1)
    return streak


def longest_streak(sessions: Iterable[WorkoutSession]) -> int:
    longest = 0
    run = 0
    prev: date | None = None
    for d in _session_days(sessions):
        run = run + 1 if prev is not None and (d - prev).days == 1 else 1
        longest = max(longest, run)
        prev = d
    return longest


def weekly_goal_streak(
    sessions: Iterable[WorkoutSession],
    weekly_target: int,
    today: date,
    max_weeks: int = 260,
) -> int:
    """
    Consecutive weeks (Sunday start), walking back from the current week, with
    at least weekly_target sessions. The scan stops after max_weeks.
    """
    if weekly_target <= 0:
        return 0
    counts = Counter(week_start(parse_date_key(s.date)) for s in sessions)
    streak = 0
    cursor = week_start(today)
    for _ in range(max_weeks):
        if counts.get(cursor, 0) < weekly_target:
            break
        streak += 1
        cursor -= timedelta(weeks=1)
    return streak


def last_workout_date(sessions: Iterable[WorkoutSession]) -> str | None:
    days = _session_days(sessions)
    return date_key(days[-1]) if days else None


def recent_personal_bests(sessions: Iterable[WorkoutSession], limit: int = 10) -> list[PersonalBestEntry]:
    """All sessions' PBs, newest session date first."""
    items = [
        PersonalBestEntry(**pb.model_dump(), date=s.date, plan_name=s.plan_name, color=s.color)
        for s in sessions
        for pb in s.new_pbs
    ]
    items.sort(key=lambda item: item.date, reverse=True)
    return items[:limit]


def one_rep_max_history(sessions: Iterable[WorkoutSession]) -> list[OneRepMaxSeries]:
    """Per exercise, chronological 1RM estimates (one point per set with weight and reps)."""
    series: dict[str, OneRepMaxSeries] = {}
    for s in sessions:
        names = {ex.exercise_id: ex.name for ex in s.exercises}
        for log in s.set_logs:
            one_rm = estimate_one_rep_max(log.weight, log.reps)
            if one_rm <= 0:
                continue
            entry = series.setdefault(
                log.exercise_id,
                OneRepMaxSeries(exercise_id=log.exercise_id, name=names.get(log.exercise_id, log.exercise_id)),
            )
            entry.values.append(OneRepMaxPoint(date=s.date, one_rep_max=one_rm))
    for entry in series.values():
        entry.values.sort(key=lambda point: point.date)
    return list(series.values())


def session_records(sessions: Sequence[WorkoutSession]) -> SessionRecords:
    if not sessions:
        return SessionRecords()
    return SessionRecords(
        longest_duration=max(sessions, key=lambda s: s.duration_sec).id,
        most_sets=max(sessions, key=lambda s: s.total_sets).id,
        best_completion=max(sessions, key=lambda s: s.completion_percent).id,
    )


def _completed_keys(completed: Iterable[CompletedExercise]) -> set[tuple[str, str, str]]:
    return {(c.plan_id, c.exercise_id, c.date) for c in completed}


def plan_adherence(
    dates: Iterable[date],
    assignments: Iterable[DayWorkoutAssignment],
    plans: Iterable[WorkoutPlan],
    completed: Iterable[CompletedExercise],
) -> int:
    """
    Percent of days in range with an assigned plan whose every exercise was
    marked completed that day. 0 when no day in range is assigned.
    """
    assigned = {a.date: a.plan_id for a in assignments if a.plan_id is not None}
    plans_by_id = {p.id: p for p in plans}
    done = _completed_keys(completed)

    assigned_days = 0
    completed_days = 0
    for d in dates:
        key = date_key(d)
        plan_id = assigned.get(key)
        if plan_id is None:
            continue
        assigned_days += 1
        plan = plans_by_id.get(plan_id)
        if plan is not None and all((plan.id, ex.id, key) in done for ex in plan.exercises):
            completed_days += 1
    return percent(completed_days, assigned_days)


def completed_exercise_total(completed: Iterable[CompletedExercise], dates: Iterable[date]) -> int:
    """Number of completion records falling on the given dates."""
    keys = {date_key(d) for d in dates}
    return sum(1 for c in completed if c.date in keys)


def recent_workouts(
    completed: Iterable[CompletedExercise],
    assignments: Iterable[DayWorkoutAssignment],
    plans: Iterable[WorkoutPlan],
    today: date,
    limit: int = 5,
) -> list[RecentWorkout]:
    """Latest distinct days with a completion, labelled with that day's assigned plan."""
    days = sorted({c.date for c in completed}, reverse=True)[:limit]
    assigned = {a.date: a.plan_id for a in assignments}
    plans_by_id = {p.id: p for p in plans}
    items = []
    for key in days:
        plan = plans_by_id.get(assigned.get(key) or "")
        items.append(
            RecentWorkout(
                date=key,
                plan_name=plan.name if plan else "Unknown",
                color=plan.color if plan else WORKOUT_COLORS["Blue"],
                days_ago=abs((today - parse_date_key(key)).days),
            )
        )
    return items
