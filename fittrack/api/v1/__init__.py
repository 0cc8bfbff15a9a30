"""API v1 router aggregation."""

from fastapi import APIRouter

from fittrack.api.v1.endpoints import (
    analytics,
    goals,
    health,
    plans,
    pr,
    preferences,
    schedule,
    sessions,
    streak,
    tracking,
)

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(plans.router, prefix="/plans", tags=["plans"])
api_router.include_router(schedule.router, prefix="/schedule", tags=["schedule"])
api_router.include_router(tracking.router, prefix="/tracking", tags=["tracking"])
api_router.include_router(sessions.router, prefix="/sessions", tags=["sessions"])

api_router.include_router(pr.router, prefix="/pr", tags=["pr"])
api_router.include_router(analytics.router, prefix="/analytics", tags=["analytics"])
api_router.include_router(streak.router, prefix="/streak", tags=["streak"])
api_router.include_router(goals.router, prefix="/goals", tags=["goals"])
api_router.include_router(preferences.router, prefix="/preferences", tags=["preferences"])
