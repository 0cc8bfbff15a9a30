"""FastAPI application factory and lifespan."""

import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from fittrack.api.v1 import api_router
from fittrack.core.config import get_settings
from fittrack.core.exceptions import FitTrackError, fittrack_exception_handler
from fittrack.db.session import async_session_maker, engine
from fittrack.services.rest_ticker import rest_ticker_loop
from fittrack.services.session_lifecycle import SessionManager

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: session manager and rest-timer ticker; shutdown: cleanup."""
    # Tables come from Alembic (alembic upgrade head)
    app.state.session_manager = SessionManager()
    app.state.rest_ticker = None
    if settings.rest_ticker_enabled:
        app.state.rest_ticker = asyncio.create_task(
            rest_ticker_loop(
                async_session_maker,
                app.state.session_manager,
                interval=settings.rest_tick_interval_seconds,
            )
        )
        logger.info("Rest timer ticker started (every %ss)", settings.rest_tick_interval_seconds)
    yield
    if app.state.rest_ticker is not None:
        app.state.rest_ticker.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await app.state.rest_ticker
    await engine.dispose()


def create_application() -> FastAPI:
    app = FastAPI(
        title=settings.app_name,
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    # CORS: allow localhost in dev; otherwise CORS_ORIGINS env (comma-separated)
    if settings.debug:
        cors_origins = ["*"]
    elif settings.environment == "development":
        cors_origins = ["http://localhost:3000", "http://127.0.0.1:3000"]
    else:
        cors_origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(FitTrackError, fittrack_exception_handler)

    @app.get("/")
    def root():
        return {"status": "ok", "message": "FitTrack API"}

    app.include_router(api_router, prefix=settings.api_v1_prefix)
    return app


app = create_application()
