"""History and analytics response schemas."""

from pydantic import BaseModel

from fittrack.schemas.session import PersonalBest


class PeriodSummary(BaseModel):
    start: str
    end: str
    count: int = 0
    sets: int = 0
    duration_sec: int = 0
    avg_completion: int = 0


class StreakRead(BaseModel):
    current_streak: int
    longest_streak: int
    weekly_goal_streak: int
    weekly_target: int
    last_workout_date: str | None = None


class PersonalBestEntry(PersonalBest):
    date: str
    plan_name: str
    color: str


class OneRepMaxPoint(BaseModel):
    date: str
    one_rep_max: float  # unrounded Epley estimate; round for display


class OneRepMaxSeries(BaseModel):
    exercise_id: str
    name: str
    values: list[OneRepMaxPoint] = []


class SessionRecords(BaseModel):
    """Best sessions by duration, total sets and completion (session ids)."""

    longest_duration: str | None = None
    most_sets: str | None = None
    best_completion: str | None = None


class AdherenceRead(BaseModel):
    weekly_percent: int
    monthly_percent: int
    weekly_exercises_completed: int
    monthly_exercises_completed: int


class RecentWorkout(BaseModel):
    """A day with checked-off exercises and the plan assigned to it."""

    date: str
    plan_name: str
    color: str
    days_ago: int
