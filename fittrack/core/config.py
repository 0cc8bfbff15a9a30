"""Application configuration from environment variables."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment (and .env file)."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # App
    app_name: str = "FitTrack API"
    debug: bool = False
    environment: str = "development"
    log_level: str = "INFO"

    # API
    api_v1_prefix: str = "/api/v1"

    # Database backing the key-value store (SQLite locally, PostgreSQL via asyncpg if configured)
    database_url: str = "sqlite+aiosqlite:///./fittrack.db"

    # Pool (only applied to server databases)
    database_pool_size: int = 5
    database_max_overflow: int = 10

    # CORS: comma-separated list of allowed origins in production
    cors_origins: str = ""

    # Rest timers
    rest_default_seconds: int = 60
    rest_tick_interval_seconds: float = 1.0
    rest_ticker_enabled: bool = True

    # Goals & reminders
    reminder_schedule_weeks: int = 8
    reminder_lookahead_weeks: int = 2
    reminders_permission_granted: bool = True

    # History
    weekly_goal_lookback_weeks: int = 260
    recent_pb_limit: int = 10

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    @property
    def sync_database_url(self) -> str:
        """Synchronous URL for Alembic and tooling (async driver stripped)."""
        return (
            self.database_url.replace("+aiosqlite", "")
            .replace("+asyncpg", "+psycopg2")
        )


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance."""
    return Settings()
