"""Workout session lifecycle and set ledger endpoints."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends

from app.api.deps import get_tracker
from app.schemas.workout import (
    ExerciseGroup,
    SessionSummary,
    WorkoutSessionCreate,
    WorkoutSessionRead,
    WorkoutSetCreate,
    WorkoutSetFields,
    WorkoutSetView,
)
from app.services.session_manager import WorkoutTracker

router = APIRouter()


@router.get("/current", response_model=WorkoutSessionRead | None)
async def get_current_session(tracker: WorkoutTracker = Depends(get_tracker)):
    """Session on screen (active or opened for review) with its sets, or null."""
    return tracker.current_view()


@router.get("/active", response_model=WorkoutSessionRead | None)
async def get_active_session(tracker: WorkoutTracker = Depends(get_tracker)):
    """Re-read the session with no ended_at from the store and put it on screen; null when none."""
    return await tracker.load_active_session()


@router.get("/recent", response_model=list[WorkoutSessionRead])
async def list_recent_sessions(tracker: WorkoutTracker = Depends(get_tracker)):
    """Finished sessions, most recently ended first."""
    return await tracker.refresh_recent_sessions()


@router.post("", response_model=WorkoutSessionRead, status_code=201)
async def start_session(
    payload: WorkoutSessionCreate,
    tracker: WorkoutTracker = Depends(get_tracker),
):
    """Start an empty session. 409 while another session is active."""
    return await tracker.start_session(payload.name)


@router.post("/from-template/{template_id}", response_model=WorkoutSessionRead, status_code=201)
async def start_session_from_template(
    template_id: uuid.UUID,
    tracker: WorkoutTracker = Depends(get_tracker),
):
    """Start a session with the template's sets already in the ledger."""
    return await tracker.start_session_from_template(template_id)


@router.post("/finish", status_code=204)
async def finish_session(tracker: WorkoutTracker = Depends(get_tracker)):
    """Close the session on screen, stamping ended_at if it was still open."""
    await tracker.finish_session()
    return None


@router.post("/{session_id}/open", response_model=WorkoutSessionRead)
async def open_session(
    session_id: uuid.UUID,
    tracker: WorkoutTracker = Depends(get_tracker),
):
    """Open an existing session (finished ones too) for review."""
    return await tracker.open_session(session_id)


@router.delete("/{session_id}", status_code=204)
async def delete_session(
    session_id: uuid.UUID,
    tracker: WorkoutTracker = Depends(get_tracker),
):
    """Delete a session and its sets."""
    await tracker.delete_session(session_id)
    return None


@router.get("/current/groups", response_model=list[ExerciseGroup])
async def get_current_groups(tracker: WorkoutTracker = Depends(get_tracker)):
    """Sets of the session on screen grouped by exercise, in order of first appearance."""
    return tracker.grouped_sets()


@router.get("/current/summary", response_model=SessionSummary)
async def get_current_summary(tracker: WorkoutTracker = Depends(get_tracker)):
    """Duration and total volume of the session on screen."""
    return tracker.session_summary()


@router.post("/current/sets", response_model=WorkoutSetView, status_code=201)
async def add_set(
    payload: WorkoutSetCreate,
    tracker: WorkoutTracker = Depends(get_tracker),
):
    """Append a set; weight defaults to the last set of the same exercise in this session."""
    return await tracker.add_set(payload.exercise_id)


@router.post("/current/exercises", response_model=WorkoutSetView, status_code=201)
async def add_exercise(
    payload: WorkoutSetCreate,
    tracker: WorkoutTracker = Depends(get_tracker),
):
    """Bring a new exercise into the session (creates its first set)."""
    return await tracker.add_exercise_to_session(payload.exercise_id)


@router.patch("/current/sets/{set_id}", response_model=WorkoutSetView)
async def update_set(
    set_id: uuid.UUID,
    payload: WorkoutSetFields,
    tracker: WorkoutTracker = Depends(get_tracker),
):
    """Update weight, reps, set_order or completed."""
    return await tracker.update_set(set_id, payload)


@router.delete("/current/sets/{set_id}", status_code=204)
async def delete_set(
    set_id: uuid.UUID,
    tracker: WorkoutTracker = Depends(get_tracker),
):
    """Remove a set from the session on screen."""
    await tracker.delete_set(set_id)
    return None
