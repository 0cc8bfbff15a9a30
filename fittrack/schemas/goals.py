"""Goals & reminders settings and preference schemas."""

from datetime import datetime, timezone

from pydantic import BaseModel, Field, field_validator

from fittrack.core.constants import DEFAULT_REST_SEC, MAX_WEEKLY_TARGET, REST_PRESET_OPTIONS


class GoalsSettings(BaseModel):
    weekly_target: int = Field(3, ge=0, le=MAX_WEEKLY_TARGET)  # sessions per week
    preferred_days: list[int] = [1, 3, 5]  # 0=Sun ... 6=Sat
    reminders_enabled: bool = False
    reminder_time: str = "18:00"  # "HH:mm", validated on apply
    scheduled_reminder_ids: list[str] = []
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @field_validator("preferred_days")
    @classmethod
    def _normalize_days(cls, v: list[int]) -> list[int]:
        if any(d < 0 or d > 6 for d in v):
            raise ValueError("Preferred days must be weekday indices 0 (Sun) to 6 (Sat).")
        return sorted(set(v))


class GoalsSettingsUpdate(BaseModel):
    weekly_target: int | None = Field(None, ge=0, le=MAX_WEEKLY_TARGET)
    preferred_days: list[int] | None = None
    reminders_enabled: bool | None = None
    reminder_time: str | None = None


class GoalsApplyResult(BaseModel):
    settings: GoalsSettings
    permission_granted: bool
    next_reminder: datetime | None = None
    message: str | None = None


class Preferences(BaseModel):
    rest_default_sec: int = Field(DEFAULT_REST_SEC, gt=0)
    auto_rest_on_increment: bool = True
    rest_presets: tuple[int, ...] = REST_PRESET_OPTIONS  # quick-pick rest lengths


class PreferencesUpdate(BaseModel):
    rest_default_sec: int | None = Field(None, gt=0)
    auto_rest_on_increment: bool | None = None


class ScheduledReminder(BaseModel):
    """One pending reminder occurrence held by the local scheduler."""

    id: str
    fire_at: datetime
    title: str = "Time to Train"
    body: str = "Stay consistent. Your workout is scheduled now."
