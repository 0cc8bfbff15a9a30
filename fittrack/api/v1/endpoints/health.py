"""Health check endpoint."""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from fittrack.db.session import get_db

router = APIRouter()


@router.get("")
async def health(request: Request):
    """Liveness plus whether the rest-timer ticker is running."""
    ticker = getattr(request.app.state, "rest_ticker", None)
    return {"status": "ok", "rest_ticker": ticker is not None and not ticker.done()}


@router.get("/ready")
async def readiness(db: AsyncSession = Depends(get_db)):
    """Readiness: app + DB connectivity."""
    try:
        await db.execute(text("SELECT 1"))
        return {"status": "ok", "database": "connected"}
    except SQLAlchemyError as e:
        return JSONResponse(
            status_code=500,
            content={"status": "error", "database": str(e)},
        )
