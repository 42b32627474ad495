"""Shared FastAPI dependencies."""

from fastapi import Request

from app.services.session_manager import WorkoutTracker


def get_tracker(request: Request) -> WorkoutTracker:
    """The process-wide tracker created at startup."""
    return request.app.state.tracker
