"""Per-day tracking records: assignments, set counts, completions, rest timers, set logs."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class DayWorkoutAssignment(BaseModel):
    date: str
    plan_id: str | None = None


class ExerciseKey(BaseModel):
    """(plan, exercise, date) join key shared by all per-exercise records."""

    plan_id: str
    exercise_id: str
    date: str

    def matches(self, plan_id: str, exercise_id: str, date: str) -> bool:
        return self.plan_id == plan_id and self.exercise_id == exercise_id and self.date == date


class CompletedExercise(ExerciseKey):
    pass


class ExerciseSetCount(ExerciseKey):
    count: int = 0


class RestTimer(ExerciseKey):
    ends_at: datetime
    duration_sec: int
    notified: bool = False


class RestEvent(ExerciseKey):
    """Session-scoped record of a started rest, used for rest statistics only."""

    model_config = ConfigDict(frozen=True)

    started_at: datetime
    duration_sec: int


class SetLog(ExerciseKey):
    set_index: int = Field(..., ge=1)
    weight: float = 0
    reps: int = 0


# ── Request / response payloads ──────────────────────────────────────────

class AssignmentUpdate(BaseModel):
    plan_id: str | None = None


class SetCountUpdate(BaseModel):
    count: int


class RestTimerStart(BaseModel):
    duration_sec: int | None = Field(None, gt=0)


class SetLogCreate(BaseModel):
    weight: float = 0
    reps: int | None = None  # defaults to the exercise's prescribed reps


class SetLogUpdate(BaseModel):
    weight: float = 0
    reps: int = 0


class ExerciseProgress(BaseModel):
    exercise_id: str
    name: str
    target_sets: int
    completed_sets: int
    completed: bool
    rest_remaining_sec: int = 0
    best_one_rep_max: float = 0
    logs: list[SetLog] = []


class PlanProgress(BaseModel):
    plan_id: str
    date: str
    session_state: str
    completion_percent: int
    exercises: list[ExerciseProgress]


class DaySchedule(BaseModel):
    date: str
    plan_id: str | None = None
    plan_name: str | None = None
    color: str | None = None
    completion_percent: int = 0


class RestTimerRead(BaseModel):
    plan_id: str
    exercise_id: str
    date: str
    active: bool
    remaining_sec: int = 0
    duration_sec: int | None = None
    ends_at: datetime | None = None
