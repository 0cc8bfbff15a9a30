"""Personal bests (estimated 1RM) broken in finished sessions."""

from fastapi import APIRouter, Depends, Query

from fittrack.api.deps import get_store
from fittrack.core.config import get_settings
from fittrack.db.kv_store import SqlKeyValueStore
from fittrack.schemas.analytics import PersonalBestEntry
from fittrack.services.analytics import recent_personal_bests
from fittrack.services.session_lifecycle import SessionHistory

router = APIRouter()


@router.get("/recent", response_model=list[PersonalBestEntry])
async def recent_prs(
    limit: int | None = Query(None, ge=1, le=100),
    store: SqlKeyValueStore = Depends(get_store),
):
    """Most recent PBs, newest session date first."""
    sessions = await SessionHistory(store).all_sessions()
    return recent_personal_bests(sessions, limit or get_settings().recent_pb_limit)
