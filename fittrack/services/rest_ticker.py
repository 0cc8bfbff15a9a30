"""Periodic driver for rest timers: once per interval, signal timers that just ran out."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from fittrack.db.kv_store import SqlKeyValueStore
from fittrack.schemas.tracking import RestTimer
from fittrack.services.session_lifecycle import SessionManager

logger = logging.getLogger(__name__)


async def tick_once(
    session_maker: async_sessionmaker[AsyncSession],
    manager: SessionManager,
    now: datetime | None = None,
) -> list[RestTimer]:
    """Run one tick; each expired timer is reported here exactly once."""
    now = now or datetime.now(timezone.utc)
    async with session_maker() as db:
        due = await manager.tracking(SqlKeyValueStore(db)).tick(now)
    for timer in due:
        logger.info(
            "Rest timer finished: plan=%s exercise=%s date=%s (%ss)",
            timer.plan_id,
            timer.exercise_id,
            timer.date,
            timer.duration_sec,
        )
    return due


async def rest_ticker_loop(
    session_maker: async_sessionmaker[AsyncSession],
    manager: SessionManager,
    interval: float = 1.0,
) -> None:
    while True:
        await asyncio.sleep(interval)
        try:
            await tick_once(session_maker, manager)
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("Rest timer tick failed")
