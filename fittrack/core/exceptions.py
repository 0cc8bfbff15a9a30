"""Domain errors and their HTTP handlers."""

from fastapi import Request, status
from fastapi.responses import JSONResponse


class FitTrackError(Exception):
    """Base for all engine errors. Subclasses set an HTTP status."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInputError(FitTrackError):
    """User input rejected before any state change."""


class PlanNotFoundError(FitTrackError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, plan_id: str):
        super().__init__(f"Workout plan '{plan_id}' not found")
        self.plan_id = plan_id


class ExerciseNotFoundError(FitTrackError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, plan_id: str, exercise_id: str):
        super().__init__(f"Exercise '{exercise_id}' not found in plan '{plan_id}'")
        self.plan_id = plan_id
        self.exercise_id = exercise_id


class SessionNotFoundError(FitTrackError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, session_id: str):
        super().__init__(f"Workout session '{session_id}' not found")


class PlanNotDeletableError(FitTrackError):
    status_code = status.HTTP_409_CONFLICT


class SessionPersistError(FitTrackError):
    """Session record could not be written; in-memory state already reset."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


async def fittrack_exception_handler(request: Request, exc: FitTrackError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})
