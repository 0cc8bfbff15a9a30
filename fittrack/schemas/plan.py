"""Workout plan and exercise schemas."""

import re

from pydantic import BaseModel, ConfigDict, Field, model_validator

from fittrack.core.enums import ExerciseKind


class Exercise(BaseModel):
    """One exercise inside a plan. Immutable once the plan is saved."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    sets: str  # target sets as typed by the user, e.g. "4"
    reps: str | None = None  # "12" or a range like "12–15"
    duration: str | None = None  # "30–45 seconds"
    notes: str | None = None

    @property
    def target_sets(self) -> int:
        digits = re.sub(r"[^\d]", "", str(self.sets).strip())
        return int(digits) if digits else 0

    @property
    def default_reps(self) -> int:
        """First integer in the reps string (lower end of a range), 0 if none."""
        if not self.reps:
            return 0
        match = re.search(r"\d+", self.reps)
        return int(match.group()) if match else 0

    @property
    def kind(self) -> ExerciseKind:
        return ExerciseKind.REPS if self.reps else ExerciseKind.DURATION


class WorkoutPlan(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    subtitle: str
    exercises: tuple[Exercise, ...] = ()
    icon: str
    color: str
    is_custom: bool = False

    def exercise(self, exercise_id: str) -> Exercise | None:
        return next((ex for ex in self.exercises if ex.id == exercise_id), None)


class ExerciseCreate(BaseModel):
    """Exercise as entered on the create-plan form."""

    name: str = Field(..., max_length=255)
    sets: str
    kind: ExerciseKind = ExerciseKind.REPS
    reps: str | None = None
    duration: str | None = None
    notes: str | None = None

    @model_validator(mode="after")
    def _check_required_fields(self):
        if not self.name.strip() or not self.sets.strip():
            raise ValueError("Please enter exercise name and sets.")
        if not re.search(r"\d", self.sets):
            raise ValueError("Sets must contain a number.")
        if self.kind == ExerciseKind.REPS and not (self.reps or "").strip():
            raise ValueError("Please enter reps for this exercise.")
        if self.kind == ExerciseKind.DURATION and not (self.duration or "").strip():
            raise ValueError("Please enter duration for this exercise.")
        return self


class WorkoutPlanCreate(BaseModel):
    name: str = Field(..., max_length=255)
    subtitle: str = Field(..., max_length=255)
    color: str = "#64b5f6"
    icon: str = "figure.strengthtraining.traditional"
    exercises: list[ExerciseCreate] = []

    @model_validator(mode="after")
    def _check_required_fields(self):
        if not self.name.strip():
            raise ValueError("Please enter a workout name.")
        if not self.subtitle.strip():
            raise ValueError("Please enter a workout description.")
        if not self.exercises:
            raise ValueError("Please add at least one exercise to your workout.")
        return self
