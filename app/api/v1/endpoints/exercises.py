"""Exercise CRUD endpoints."""

import uuid

from fastapi import APIRouter, Depends

from app.api.deps import get_tracker
from app.schemas.exercise import ExerciseCreate, ExerciseRead, ExerciseUpdate
from app.services.session_manager import WorkoutTracker

router = APIRouter()


@router.get("", response_model=list[ExerciseRead])
async def list_exercises(tracker: WorkoutTracker = Depends(get_tracker)):
    """List exercises sorted by name."""
    return await tracker.refresh_exercises()


@router.post("", response_model=ExerciseRead, status_code=201)
async def create_exercise(
    payload: ExerciseCreate,
    tracker: WorkoutTracker = Depends(get_tracker),
):
    return await tracker.create_exercise(payload.name, payload.muscle_group)


@router.patch("/{exercise_id}", response_model=ExerciseRead)
async def update_exercise(
    exercise_id: uuid.UUID,
    payload: ExerciseUpdate,
    tracker: WorkoutTracker = Depends(get_tracker),
):
    """Update an exercise (partial)."""
    return await tracker.update_exercise(exercise_id, payload)


@router.delete("/{exercise_id}", status_code=204)
async def delete_exercise(
    exercise_id: uuid.UUID,
    tracker: WorkoutTracker = Depends(get_tracker),
):
    """Delete an exercise and every set logged for it."""
    await tracker.delete_exercise(exercise_id)
    return None
