"""Workout template schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.core.constants import DEFAULT_SETS_TARGET
from app.schemas.exercise import ExerciseRef


class TemplateItemRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    exercise_id: UUID | None = None
    order_index: int
    sets_target: int = DEFAULT_SETS_TARGET
    exercise: ExerciseRef | None = None


class WorkoutTemplateCreate(BaseModel):
    """Name plus exercises in routine order; every item gets the default sets_target."""

    name: str = Field(..., min_length=1, max_length=255)
    exercise_ids: list[UUID] = Field(..., min_length=1)


class WorkoutTemplateRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    created_at: datetime
    items: list[TemplateItemRead] = []
