"""Rest-timer preferences."""

from fastapi import APIRouter, Depends

from fittrack.api.deps import get_store
from fittrack.core.config import get_settings
from fittrack.db.kv_store import SqlKeyValueStore
from fittrack.schemas.goals import Preferences, PreferencesUpdate
from fittrack.services.preferences import load_preferences, update_preferences

router = APIRouter()


@router.get("", response_model=Preferences)
async def get_preferences(store: SqlKeyValueStore = Depends(get_store)):
    return await load_preferences(store, get_settings().rest_default_seconds)


@router.patch("", response_model=Preferences)
async def patch_preferences(payload: PreferencesUpdate, store: SqlKeyValueStore = Depends(get_store)):
    """Update the default rest length and/or auto-rest after a logged set."""
    return await update_preferences(store, payload, get_settings().rest_default_seconds)
