"""Rest-timer preferences: default rest length and auto-rest after a set."""

from __future__ import annotations

from fittrack.core.constants import AUTO_REST_KEY, DEFAULT_REST_SEC, REST_DEFAULT_SEC_KEY
from fittrack.db.kv_store import KeyValueStore, load_scalar, save_scalar
from fittrack.schemas.goals import Preferences, PreferencesUpdate


async def load_preferences(store: KeyValueStore, default_rest_sec: int = DEFAULT_REST_SEC) -> Preferences:
    rest = await load_scalar(store, REST_DEFAULT_SEC_KEY, int, default_rest_sec)
    auto_rest = await load_scalar(store, AUTO_REST_KEY, bool, True)
    return Preferences(
        rest_default_sec=rest if rest > 0 else default_rest_sec,
        auto_rest_on_increment=auto_rest,
    )


async def update_preferences(
    store: KeyValueStore, payload: PreferencesUpdate, default_rest_sec: int = DEFAULT_REST_SEC
) -> Preferences:
    if payload.rest_default_sec is not None:
        await save_scalar(store, REST_DEFAULT_SEC_KEY, payload.rest_default_sec)
    if payload.auto_rest_on_increment is not None:
        await save_scalar(store, AUTO_REST_KEY, payload.auto_rest_on_increment)
    return await load_preferences(store, default_rest_sec)
