"""Exercise catalog: plain CRUD over the exercises table."""

from __future__ import annotations

import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundError
from app.models.exercise import Exercise
from app.schemas.exercise import ExerciseCreate, ExerciseRead, ExerciseUpdate


async def list_exercises(db: AsyncSession, owner_id: uuid.UUID) -> list[ExerciseRead]:
    result = await db.execute(
        select(Exercise).where(Exercise.owner_id == owner_id).order_by(Exercise.name)
    )
    return [ExerciseRead.model_validate(e) for e in result.scalars().all()]


async def get_owned_exercise(db: AsyncSession, owner_id: uuid.UUID, exercise_id: uuid.UUID) -> Exercise:
    result = await db.execute(
        select(Exercise).where(Exercise.id == exercise_id, Exercise.owner_id == owner_id)
    )
    exercise = result.scalar_one_or_none()
    if not exercise:
        raise NotFoundError("Exercise", exercise_id)
    return exercise


async def create_exercise(
    db: AsyncSession, owner_id: uuid.UUID, payload: ExerciseCreate
) -> ExerciseRead:
    exercise = Exercise(owner_id=owner_id, **payload.model_dump())
    db.add(exercise)
    await db.flush()
    await db.refresh(exercise)
    return ExerciseRead.model_validate(exercise)


async def update_exercise(
    db: AsyncSession,
    owner_id: uuid.UUID,
    exercise_id: uuid.UUID,
    payload: ExerciseUpdate,
) -> ExerciseRead:
    """Partial update; unset fields are left alone."""
    exercise = await get_owned_exercise(db, owner_id, exercise_id)
    for k, v in payload.model_dump(exclude_unset=True).items():
        setattr(exercise, k, v)
    await db.flush()
    await db.refresh(exercise)
    return ExerciseRead.model_validate(exercise)


async def delete_exercise(db: AsyncSession, owner_id: uuid.UUID, exercise_id: uuid.UUID) -> None:
    """Delete an exercise. Its sets go with it; template items keep their slot with no exercise."""
    exercise = await get_owned_exercise(db, owner_id, exercise_id)
    await db.delete(exercise)
    await db.flush()
