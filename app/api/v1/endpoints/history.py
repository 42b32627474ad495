"""Exercise history - what you did last time (progressive overload hint)."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends

from app.api.deps import get_tracker
from app.schemas.workout import ExerciseHistory
from app.services.session_manager import WorkoutTracker

router = APIRouter()


@router.get("/exercises/{exercise_id}", response_model=ExerciseHistory | None)
async def get_exercise_history(
    exercise_id: uuid.UUID,
    tracker: WorkoutTracker = Depends(get_tracker),
):
    """
    Weight/reps of the most recent set for this exercise from any session
    other than the one on screen. Null when there is none.
    """
    return await tracker.get_exercise_history(exercise_id)
