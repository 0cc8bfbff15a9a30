"""Application constants."""

# Storage keys (one JSON document per logical entity)
COMPLETED_EXERCISES_KEY = "completedExercises"
WORKOUT_ASSIGNMENTS_KEY = "workoutAssignments"
CUSTOM_PLANS_KEY = "customWorkoutPlans"
SET_COUNTS_KEY = "exerciseSetCounts"
REST_TIMERS_KEY = "restTimers"
SET_LOGS_KEY = "setLogs"
SESSIONS_KEY = "workoutSessions"
GOALS_SETTINGS_KEY = "goalsSettings_v1"
REST_DEFAULT_SEC_KEY = "restDefaultSec"
AUTO_REST_KEY = "autoRestOnIncrement_v1"
SCHEDULED_REMINDERS_KEY = "scheduledReminders"

# Rest timer
DEFAULT_REST_SEC = 60
REST_PRESET_OPTIONS = (30, 60, 90, 120)

# Goals
MAX_WEEKLY_TARGET = 7
DEFAULT_REMINDER_HOUR = 18
DEFAULT_REMINDER_MINUTE = 0
REMINDER_TIME_PATTERN = r"^([01]\d|2[0-3]):([0-5]\d)$"

# 1RM (Epley)
ONE_REP_MAX_REPS_DIVISOR = 30
