"""Set ledger - the ordered, locally mirrored list of sets in one session.

Mutations are optimistic: the in-memory list changes first, the store call
follows, and a failed call puts the captured original back before the error
reaches the caller.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload

from app.core.constants import SET_ORDER_MAX_ATTEMPTS
from app.core.exceptions import NotFoundError, StoreError
from app.db.session import store_call
from app.models.workout import WorkoutSet
from app.schemas.workout import (
    ExerciseGroup,
    WorkoutSetFields,
    WorkoutSetView,
    persisted_fields,
)
from app.services.exercise_catalog import get_owned_exercise

logger = logging.getLogger(__name__)

ORDER_CONSTRAINT = "uq_workout_sets_session_order"


def next_set_order(sets: Iterable[WorkoutSetView]) -> int:
    """max(set_order) + 1 over a snapshot, 1 when empty."""
    return max((s.set_order or 0 for s in sets), default=0) + 1


def is_order_collision(exc: BaseException | None) -> bool:
    """True when an IntegrityError comes from the (session_id, set_order) unique constraint."""
    if not isinstance(exc, IntegrityError):
        return False
    message = str(exc.orig)
    # PostgreSQL names the constraint, SQLite lists its columns
    return ORDER_CONSTRAINT in message or "workout_sets.set_order" in message


def default_weight(sets: Sequence[WorkoutSetView], exercise_id: uuid.UUID) -> float:
    """Weight of the latest set of this exercise in the snapshot, else 0."""
    for s in reversed(sets):
        if s.exercise_id == exercise_id:
            return s.weight
    return 0


def group_sets_by_exercise(sets: Iterable[WorkoutSetView]) -> list[ExerciseGroup]:
    """Group by exercise in order of first appearance after sorting by set_order."""
    groups: dict[uuid.UUID, ExerciseGroup] = {}
    for s in sorted(sets, key=lambda x: x.set_order or 0):
        group = groups.get(s.exercise_id)
        if group is None:
            group = groups[s.exercise_id] = ExerciseGroup(
                exercise_id=s.exercise_id, exercise_name=s.exercise_name
            )
        group.sets.append(s)
    return list(groups.values())


async def load_session_sets(db: AsyncSession, session_id: uuid.UUID) -> list[WorkoutSetView]:
    """All sets of a session with exercise names, in set_order."""
    result = await db.execute(
        select(WorkoutSet)
        .where(WorkoutSet.session_id == session_id)
        .options(selectinload(WorkoutSet.exercise))
        .order_by(WorkoutSet.set_order, WorkoutSet.created_at)
    )
    return [WorkoutSetView.model_validate(s) for s in result.scalars().all()]


class SetLedger:
    """In-memory mirror of one session's sets plus the store calls that change them."""

    def __init__(
        self,
        session_maker: async_sessionmaker[AsyncSession],
        session_id: uuid.UUID,
        owner_id: uuid.UUID,
        sets: Iterable[WorkoutSetView] = (),
    ) -> None:
        self._session_maker = session_maker
        self.session_id = session_id
        self.owner_id = owner_id
        self._sets: list[WorkoutSetView] = sorted(sets, key=lambda s: s.set_order or 0)

    @property
    def sets(self) -> list[WorkoutSetView]:
        return list(self._sets)

    def __len__(self) -> int:
        return len(self._sets)

    def get(self, set_id: uuid.UUID) -> WorkoutSetView | None:
        return next((s for s in self._sets if s.id == set_id), None)

    def _index_of(self, set_id: uuid.UUID) -> int:
        for idx, s in enumerate(self._sets):
            if s.id == set_id:
                return idx
        raise NotFoundError("Set", set_id)

    def groups(self) -> list[ExerciseGroup]:
        return group_sets_by_exercise(self._sets)

    async def reload(self) -> list[WorkoutSetView]:
        """Replace the local list with what the store has."""
        async with store_call(self._session_maker, "reload_sets") as db:
            self._sets = await load_session_sets(db, self.session_id)
        return self.sets

    async def add_set(self, exercise_id: uuid.UUID) -> WorkoutSetView:
        """
        Append a set for exercise_id. Weight copies the last set of the same
        exercise in this session; reps start at 0. The order is computed from
        the local snapshot; if the store already holds that order (another
        writer got there first) the ledger reloads and tries the next one.
        An exercise the owner does not have raises NotFoundError.
        """
        attempt = 1
        while True:
            set_order = next_set_order(self._sets)
            weight = default_weight(self._sets, exercise_id)
            try:
                async with store_call(self._session_maker, "add_set") as db:
                    await get_owned_exercise(db, self.owner_id, exercise_id)
                    row = WorkoutSet(
                        session_id=self.session_id,
                        exercise_id=exercise_id,
                        weight=weight,
                        reps=0,
                        set_order=set_order,
                        completed=False,
                    )
                    db.add(row)
                    await db.flush()
                    result = await db.execute(
                        select(WorkoutSet)
                        .where(WorkoutSet.id == row.id)
                        .options(selectinload(WorkoutSet.exercise))
                    )
                    view = WorkoutSetView.model_validate(result.scalar_one())
            except StoreError as exc:
                if not is_order_collision(exc.__cause__) or attempt >= SET_ORDER_MAX_ATTEMPTS:
                    raise
                logger.warning(
                    "set_order %s already taken in session %s (attempt %s); reloading",
                    set_order,
                    self.session_id,
                    attempt,
                )
                await self.reload()
                attempt += 1
                continue
            self._sets.append(view)
            return view

    async def add_exercise(self, exercise_id: uuid.UUID) -> WorkoutSetView:
        """A new exercise enters the session with its first set."""
        return await self.add_set(exercise_id)

    async def update_set(
        self,
        set_id: uuid.UUID,
        updates: Mapping[str, Any] | WorkoutSetFields,
    ) -> WorkoutSetView:
        """Merge locally, then persist the literal columns; restore the original on failure."""
        fields = persisted_fields(updates)
        idx = self._index_of(set_id)
        original = self._sets[idx]
        merged = original.model_copy(update=fields)
        self._sets[idx] = merged
        if not fields:
            return merged
        try:
            async with store_call(self._session_maker, "update_set") as db:
                result = await db.execute(
                    update(WorkoutSet).where(WorkoutSet.id == set_id).values(**fields)
                )
                if result.rowcount == 0:
                    raise NotFoundError("Set", set_id)
        except Exception:
            logger.exception("Failed to update set %s; restoring local copy", set_id)
            self._restore(original)
            raise
        return merged

    async def delete_set(self, set_id: uuid.UUID) -> None:
        """Remove locally, then in the store; put the set back where it was on failure."""
        idx = self._index_of(set_id)
        removed = self._sets.pop(idx)
        try:
            async with store_call(self._session_maker, "delete_set") as db:
                await db.execute(delete(WorkoutSet).where(WorkoutSet.id == set_id))
        except Exception:
            logger.exception("Failed to delete set %s; restoring local copy", set_id)
            self._sets.insert(min(idx, len(self._sets)), removed)
            raise

    def _restore(self, original: WorkoutSetView) -> None:
        for idx, s in enumerate(self._sets):
            if s.id == original.id:
                self._sets[idx] = original
                return
        self._sets.append(original)
        self._sets.sort(key=lambda s: s.set_order or 0)
