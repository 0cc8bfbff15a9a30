"""Shared FastAPI dependencies: key-value store, session manager, reminder scheduler."""

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from fittrack.core.config import get_settings
from fittrack.db.kv_store import SqlKeyValueStore
from fittrack.db.session import get_db
from fittrack.services.reminders import GoalsService, StoredReminderScheduler
from fittrack.services.session_lifecycle import SessionManager


async def get_store(db: AsyncSession = Depends(get_db)) -> SqlKeyValueStore:
    return SqlKeyValueStore(db)


def get_session_manager(request: Request) -> SessionManager:
    """Process-wide manager created in the app lifespan."""
    return request.app.state.session_manager


def get_reminder_scheduler(store: SqlKeyValueStore = Depends(get_store)) -> StoredReminderScheduler:
    settings = get_settings()
    return StoredReminderScheduler(
        store,
        permission_granted=settings.reminders_permission_granted,
        weeks=settings.reminder_schedule_weeks,
    )


def get_goals_service(
    store: SqlKeyValueStore = Depends(get_store),
    scheduler: StoredReminderScheduler = Depends(get_reminder_scheduler),
) -> GoalsService:
    return GoalsService(store, scheduler, lookahead_weeks=get_settings().reminder_lookahead_weeks)
