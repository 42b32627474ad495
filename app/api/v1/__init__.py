"""API v1 router aggregation."""

from fastapi import APIRouter

from app.api.v1.endpoints import exercises, health, history, sessions, templates

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(exercises.router, prefix="/exercises", tags=["exercises"])
api_router.include_router(sessions.router, prefix="/sessions", tags=["sessions"])
api_router.include_router(templates.router, prefix="/templates", tags=["templates"])
api_router.include_router(history.router, prefix="/history", tags=["history"])
