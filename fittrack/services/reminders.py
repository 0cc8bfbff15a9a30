"""Weekly goals and training reminders.

Reminders are one-shot occurrences on the preferred weekdays at the
reminder time, scheduled ahead for a fixed number of weeks. The scheduler
is an external capability; StoredReminderScheduler keeps the pending
occurrences in the key-value store for a local notifier to deliver.
"""

from __future__ import annotations

import logging
import re
import uuid
from datetime import datetime, time, timedelta, timezone
from typing import Protocol

from fittrack.core.constants import (
    DEFAULT_REMINDER_HOUR,
    DEFAULT_REMINDER_MINUTE,
    GOALS_SETTINGS_KEY,
    REMINDER_TIME_PATTERN,
    SCHEDULED_REMINDERS_KEY,
)
from fittrack.core.exceptions import InvalidInputError
from fittrack.db.kv_store import KeyValueStore, load_list, load_model, save_list, save_model
from fittrack.schemas.goals import (
    GoalsApplyResult,
    GoalsSettings,
    GoalsSettingsUpdate,
    ScheduledReminder,
)
from fittrack.services.dates import week_start

logger = logging.getLogger(__name__)

PERMISSION_DENIED_MESSAGE = "Please enable notification permissions in system settings to get reminders."


class ReminderScheduler(Protocol):
    async def check_or_request_permission(self) -> bool: ...

    async def cancel(self, ids: list[str]) -> None: ...

    async def schedule(self, settings: GoalsSettings) -> list[str]: ...


def is_valid_reminder_time(value: str) -> bool:
    return re.match(REMINDER_TIME_PATTERN, str(value).strip()) is not None


def parse_reminder_time(value: str) -> time:
    """Strict HH:mm (24h); anything else falls back to 18:00."""
    match = re.match(REMINDER_TIME_PATTERN, str(value).strip())
    if not match:
        return time(DEFAULT_REMINDER_HOUR, DEFAULT_REMINDER_MINUTE)
    return time(int(match.group(1)), int(match.group(2)))


def build_reminder_times(settings: GoalsSettings, now: datetime, weeks: int) -> list[datetime]:
    """Preferred-day/time slots strictly after now, over `weeks` weeks starting this week.

    Slots carry now's tzinfo, so pass a local-time `now`.
    """
    at = parse_reminder_time(settings.reminder_time)
    result: list[datetime] = []
    for w in range(weeks):
        start = week_start(now.date() + timedelta(weeks=w))
        for day in settings.preferred_days:
            slot = datetime.combine(start + timedelta(days=day), at, tzinfo=now.tzinfo)
            if slot > now:
                result.append(slot)
    return sorted(result)


def next_occurrence(settings: GoalsSettings, now: datetime, lookahead_weeks: int = 2) -> datetime | None:
    """Next reminder slot predicted from settings alone (no scheduler query)."""
    if not settings.reminders_enabled or not settings.preferred_days:
        return None
    slots = build_reminder_times(settings, now, lookahead_weeks)
    return slots[0] if slots else None


class StoredReminderScheduler:
    """Local scheduler: pending occurrences live under one key-value entry."""

    def __init__(self, store: KeyValueStore, permission_granted: bool = True, weeks: int = 8):
        self.store = store
        self.permission_granted = permission_granted
        self.weeks = weeks

    async def check_or_request_permission(self) -> bool:
        return self.permission_granted

    async def pending(self, strict: bool = False) -> list[ScheduledReminder]:
        return await load_list(self.store, SCHEDULED_REMINDERS_KEY, ScheduledReminder, strict=strict)

    async def cancel(self, ids: list[str]) -> None:
        if not ids:
            return
        drop = set(ids)
        pending = await self.pending(strict=True)
        await save_list(self.store, SCHEDULED_REMINDERS_KEY, [r for r in pending if r.id not in drop])

    async def schedule(self, settings: GoalsSettings, now: datetime | None = None) -> list[str]:
        if not settings.reminders_enabled or not settings.preferred_days:
            return []
        now = now or datetime.now().astimezone()
        created = [
            ScheduledReminder(id=uuid.uuid4().hex, fire_at=slot)
            for slot in build_reminder_times(settings, now, self.weeks)
        ]
        await save_list(self.store, SCHEDULED_REMINDERS_KEY, [*await self.pending(strict=True), *created])
        logger.info("Scheduled %d workout reminders", len(created))
        return [r.id for r in created]


class GoalsService:
    def __init__(self, store: KeyValueStore, scheduler: ReminderScheduler, lookahead_weeks: int = 2):
        self.store = store
        self.scheduler = scheduler
        self.lookahead_weeks = lookahead_weeks

    async def load(self, strict: bool = False) -> GoalsSettings:
        return await load_model(self.store, GOALS_SETTINGS_KEY, GoalsSettings, GoalsSettings, strict=strict)

    async def apply(self, payload: GoalsSettingsUpdate, now: datetime | None = None) -> GoalsApplyResult:
        """Validate, reschedule reminders and persist the goals settings.

        Permission denial is not an error: the preference stays enabled but
        nothing is scheduled.
        """
        now = now or datetime.now().astimezone()
        current = await self.load(strict=True)
        merged = current.model_dump()
        merged.update(payload.model_dump(exclude_none=True))
        try:
            settings = GoalsSettings.model_validate(merged)
        except ValueError as e:
            raise InvalidInputError(str(e)) from e

        if settings.reminders_enabled:
            if not is_valid_reminder_time(settings.reminder_time):
                raise InvalidInputError("Please enter a valid time in HH:mm (24-hour) format.")
            if not settings.preferred_days:
                raise InvalidInputError("Select at least one preferred training day to schedule reminders.")

        granted = await self.scheduler.check_or_request_permission() if settings.reminders_enabled else False
        if current.scheduled_reminder_ids:
            await self.scheduler.cancel(current.scheduled_reminder_ids)
        new_ids: list[str] = []
        if settings.reminders_enabled and granted:
            new_ids = await self.scheduler.schedule(settings)

        final = settings.model_copy(
            update={
                "scheduled_reminder_ids": new_ids,
                "updated_at": now.astimezone(timezone.utc),
            }
        )
        await save_model(self.store, GOALS_SETTINGS_KEY, final)

        message = None
        if settings.reminders_enabled and not granted:
            logger.info("Reminder permission denied; no reminders scheduled")
            message = PERMISSION_DENIED_MESSAGE
        return GoalsApplyResult(
            settings=final,
            permission_granted=granted,
            next_reminder=next_occurrence(final, now, self.lookahead_weeks) if granted else None,
            message=message,
        )
