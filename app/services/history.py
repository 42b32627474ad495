"""History oracle - what you lifted last time for an exercise (progressive overload hint)."""

from __future__ import annotations

import uuid
from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.workout import WorkoutSession, WorkoutSet
from app.schemas.workout import ExerciseHistory


async def get_exercise_history(
    db: AsyncSession,
    owner_id: uuid.UUID,
    exercise_id: uuid.UUID,
    exclude_session_ids: Iterable[uuid.UUID | None] = (),
) -> ExerciseHistory | None:
    """
    Return weight/reps of the most recently created set for this exercise.
    Pass the sessions being logged or viewed in exclude_session_ids so the
    answer always comes from another session.
    """
    excluded = {sid for sid in exclude_session_ids if sid is not None}
    stmt = (
        select(WorkoutSet.weight, WorkoutSet.reps)
        .join(WorkoutSession, WorkoutSession.id == WorkoutSet.session_id)
        .where(
            WorkoutSet.exercise_id == exercise_id,
            WorkoutSession.owner_id == owner_id,
        )
        .order_by(WorkoutSet.created_at.desc(), WorkoutSet.set_order.desc())
        .limit(1)
    )
    if excluded:
        stmt = stmt.where(WorkoutSet.session_id.not_in(excluded))
    row = (await db.execute(stmt)).one_or_none()
    if row is None:
        return None
    return ExerciseHistory(weight=float(row.weight or 0), reps=int(row.reps or 0))
