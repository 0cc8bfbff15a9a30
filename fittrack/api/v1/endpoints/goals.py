"""Weekly goal and training reminder settings."""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends

from fittrack.api.deps import get_goals_service, get_reminder_scheduler
from fittrack.schemas.goals import GoalsApplyResult, GoalsSettings, GoalsSettingsUpdate, ScheduledReminder
from fittrack.services.reminders import GoalsService, StoredReminderScheduler, next_occurrence

router = APIRouter()


@router.get("", response_model=GoalsSettings)
async def get_goals(goals: GoalsService = Depends(get_goals_service)):
    return await goals.load()


@router.put("", response_model=GoalsApplyResult)
async def apply_goals(payload: GoalsSettingsUpdate, goals: GoalsService = Depends(get_goals_service)):
    """Save goals; previously scheduled reminders are replaced."""
    return await goals.apply(payload)


@router.get("/next-reminder", response_model=datetime | None)
async def next_reminder(goals: GoalsService = Depends(get_goals_service)):
    """Next reminder slot from the saved settings, or null."""
    settings = await goals.load()
    return next_occurrence(settings, datetime.now().astimezone(), goals.lookahead_weeks)


@router.get("/reminders", response_model=list[ScheduledReminder])
async def pending_reminders(scheduler: StoredReminderScheduler = Depends(get_reminder_scheduler)):
    reminders = await scheduler.pending()
    return sorted(reminders, key=lambda r: r.fire_at)
