"""Finished workout session record and its parts."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from fittrack.core.enums import PBMetric
from fittrack.schemas.tracking import SetLog


class SessionExercise(BaseModel):
    """Per-exercise progress snapshot taken at finish time."""

    model_config = ConfigDict(frozen=True)

    exercise_id: str
    name: str
    target_sets: int
    completed_sets: int
    completed: bool


class PersonalBest(BaseModel):
    model_config = ConfigDict(frozen=True)

    exercise_id: str
    name: str
    metric: PBMetric = PBMetric.ONE_REP_MAX
    value: float


class WorkoutSession(BaseModel):
    """Immutable history record, created once when a session is finished.
    Plan name and color are denormalized so history survives plan deletion."""

    model_config = ConfigDict(frozen=True)

    id: str
    date: str
    plan_id: str
    plan_name: str
    color: str
    started_at: datetime
    ended_at: datetime
    duration_sec: int = Field(..., ge=1)
    exercises: tuple[SessionExercise, ...] = ()
    completion_percent: int
    total_sets: int
    rest_count: int = 0
    rest_avg_sec: int = 0
    set_logs: tuple[SetLog, ...] = ()
    new_pbs: tuple[PersonalBest, ...] = ()


class SessionOpen(BaseModel):
    plan_id: str
    date: str

    @field_validator("date")
    @classmethod
    def _check_date(cls, v: str) -> str:
        datetime.strptime(v, "%Y-%m-%d")
        return v


class SessionStatus(BaseModel):
    plan_id: str
    date: str
    state: str
    started_at: datetime | None = None
