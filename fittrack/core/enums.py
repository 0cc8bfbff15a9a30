"""Shared enums for services and API."""

from enum import Enum


class SessionState(str, Enum):
    """Lifecycle of a workout session for a (plan, date) pair."""

    IDLE = "idle"
    ACTIVE = "active"


class PBMetric(str, Enum):
    """Metric a personal best is measured in."""

    ONE_REP_MAX = "1RM"  # Estimated one-rep max (Epley)


class ExerciseKind(str, Enum):
    """How an exercise is prescribed."""

    REPS = "reps"  # Sets x reps
    DURATION = "duration"  # Time-based (e.g. Plank, cooldown)
