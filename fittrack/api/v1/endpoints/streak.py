"""Streak calculation endpoint."""

from datetime import date

from fastapi import APIRouter, Depends

from fittrack.api.deps import get_goals_service, get_store
from fittrack.core.config import get_settings
from fittrack.db.kv_store import SqlKeyValueStore
from fittrack.schemas.analytics import StreakRead
from fittrack.services.analytics import (
    current_streak,
    last_workout_date,
    longest_streak,
    weekly_goal_streak,
)
from fittrack.services.reminders import GoalsService
from fittrack.services.session_lifecycle import SessionHistory

router = APIRouter()


@router.get("", response_model=StreakRead)
async def get_streak(
    today: date | None = None,
    store: SqlKeyValueStore = Depends(get_store),
    goals: GoalsService = Depends(get_goals_service),
):
    """
    Current streak (consecutive days with a finished session ending today),
    longest ever streak, and consecutive weeks meeting the weekly goal.
    """
    today = today or date.today()
    sessions = await SessionHistory(store).all_sessions()
    target = (await goals.load()).weekly_target
    return StreakRead(
        current_streak=current_streak(sessions, today),
        longest_streak=longest_streak(sessions),
        weekly_goal_streak=weekly_goal_streak(
            sessions, target, today, max_weeks=get_settings().weekly_goal_lookback_weeks
        ),
        weekly_target=target,
        last_workout_date=last_workout_date(sessions),
    )
