"""Alembic environment for the kv_entries schema.

Uses the sync variant of DATABASE_URL; SQLite runs in batch mode since it
cannot ALTER most constraints in place.
"""

from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine, pool

from fittrack.core.config import get_settings
from fittrack.db.base import Base
from fittrack.models import *  # noqa: F401, F403 - register all models

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

settings = get_settings()
url = settings.sync_database_url
config.set_main_option("sqlalchemy.url", url)

_configure_kwargs = {
    "target_metadata": Base.metadata,
    "render_as_batch": settings.is_sqlite,
    "compare_type": True,
}


def run_migrations_offline() -> None:
    """Emit SQL to stdout without a DB connection."""
    context.configure(
        url=url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **_configure_kwargs,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    connectable = create_engine(url, poolclass=pool.NullPool)
    try:
        with connectable.connect() as connection:
            context.configure(connection=connection, **_configure_kwargs)
            with context.begin_transaction():
                context.run_migrations()
    finally:
        connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
