"""Workout templates - save a routine and start sessions from it."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends

from app.api.deps import get_tracker
from app.schemas.template import WorkoutTemplateCreate, WorkoutTemplateRead
from app.services.session_manager import WorkoutTracker

router = APIRouter()


@router.get("", response_model=list[WorkoutTemplateRead])
async def list_templates(tracker: WorkoutTracker = Depends(get_tracker)):
    """List templates, newest first, items in routine order."""
    return await tracker.refresh_templates()


@router.post("", response_model=WorkoutTemplateRead, status_code=201)
async def create_template(
    payload: WorkoutTemplateCreate,
    tracker: WorkoutTracker = Depends(get_tracker),
):
    """Save a template; exercises keep the order given, each with the default sets target."""
    return await tracker.save_template(payload.name, payload.exercise_ids)


@router.delete("/{template_id}", status_code=204)
async def delete_template(
    template_id: uuid.UUID,
    tracker: WorkoutTracker = Depends(get_tracker),
):
    await tracker.delete_template(template_id)
    return None
