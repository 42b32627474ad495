"""Workout session and set schemas.

Sets have two shapes: ``WorkoutSetFields`` is what the store accepts on
update (literal columns only), ``WorkoutSetView`` is what callers read
(columns plus the joined exercise). ``persisted_fields`` is the single place
that turns arbitrary update input into the persisted shape.
"""

from collections.abc import Iterator, Mapping
from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.core.constants import UNKNOWN_EXERCISE_NAME
from app.schemas.exercise import ExerciseRef


class WorkoutSetFields(BaseModel):
    """Persisted columns a set update may touch. Anything else is dropped."""

    model_config = ConfigDict(extra="ignore")

    weight: float | None = Field(None, ge=0)
    reps: int | None = Field(None, ge=0)
    set_order: int | None = Field(None, ge=1)
    completed: bool | None = None


def persisted_fields(updates: Mapping[str, Any] | WorkoutSetFields) -> dict[str, Any]:
    """Reduce an update (possibly carrying join/derived keys) to storable columns."""
    if not isinstance(updates, WorkoutSetFields):
        updates = WorkoutSetFields.model_validate(dict(updates))
    return updates.model_dump(exclude_unset=True, exclude_none=True)


class WorkoutSetCreate(BaseModel):
    exercise_id: UUID


class WorkoutSetView(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    session_id: UUID
    exercise_id: UUID
    weight: float = 0
    reps: int = 0
    set_order: int
    completed: bool = False
    created_at: datetime | None = None
    exercise: ExerciseRef | None = None

    @property
    def exercise_name(self) -> str:
        return self.exercise.name if self.exercise else UNKNOWN_EXERCISE_NAME


class WorkoutSessionCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)


class WorkoutSessionRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    started_at: datetime
    ended_at: datetime | None = None
    sets: list[WorkoutSetView] = []

    @property
    def is_active(self) -> bool:
        return self.ended_at is None


class ExerciseGroup(BaseModel):
    """Sets of one exercise, in set_order, for display."""

    exercise_id: UUID
    exercise_name: str
    sets: list[WorkoutSetView] = []

    def numbered(self) -> Iterator[tuple[int, WorkoutSetView]]:
        """Yield (1-based position within this group, set)."""
        return enumerate(self.sets, start=1)


class SessionSummary(BaseModel):
    session_id: UUID
    duration_minutes: int
    total_volume: float
    set_count: int
    exercise_count: int


class ExerciseHistory(BaseModel):
    """Most recent weight/reps recorded for an exercise in another session."""

    weight: float
    reps: int
