"""Workout templates: persistence and expansion into concrete sets."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable, Sequence
from typing import Protocol

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.constants import DEFAULT_SETS_TARGET
from app.core.exceptions import NotFoundError, TemplateValidationError
from app.models.template import TemplateItem, WorkoutTemplate
from app.models.workout import WorkoutSet
from app.schemas.template import WorkoutTemplateCreate, WorkoutTemplateRead

logger = logging.getLogger(__name__)


class TemplateItemLike(Protocol):
    exercise_id: uuid.UUID | None
    order_index: int
    sets_target: int | None


def expand_template(session_id: uuid.UUID, items: Iterable[TemplateItemLike]) -> list[WorkoutSet]:
    """
    Turn template items into unsaved set rows for a new session.

    Items are taken in order_index order. Each item with an exercise yields
    sets_target blank sets (weight 0, reps 0). set_order comes from one
    counter shared by all items, starting at 1. Items whose exercise is gone
    are skipped.
    """
    rows: list[WorkoutSet] = []
    order = 1
    for item in sorted(items, key=lambda i: i.order_index):
        if item.exercise_id is None:
            logger.debug("Skipping template item %s with no exercise", item.order_index)
            continue
        for _ in range(item.sets_target or DEFAULT_SETS_TARGET):
            rows.append(
                WorkoutSet(
                    session_id=session_id,
                    exercise_id=item.exercise_id,
                    weight=0,
                    reps=0,
                    set_order=order,
                    completed=False,
                )
            )
            order += 1
    return rows


def _template_query(owner_id: uuid.UUID):
    return (
        select(WorkoutTemplate)
        .where(WorkoutTemplate.owner_id == owner_id)
        .options(selectinload(WorkoutTemplate.items).selectinload(TemplateItem.exercise))
    )


async def get_template(
    db: AsyncSession, owner_id: uuid.UUID, template_id: uuid.UUID
) -> WorkoutTemplate:
    """Template row with items (ordered) and their exercises loaded."""
    result = await db.execute(
        _template_query(owner_id)
        .where(WorkoutTemplate.id == template_id)
        .execution_options(populate_existing=True)
    )
    template = result.scalar_one_or_none()
    if not template:
        raise NotFoundError("Template", template_id)
    return template


async def list_templates(db: AsyncSession, owner_id: uuid.UUID) -> list[WorkoutTemplateRead]:
    """All templates, newest first, items in order_index order."""
    result = await db.execute(_template_query(owner_id).order_by(WorkoutTemplate.created_at.desc()))
    return [WorkoutTemplateRead.model_validate(t) for t in result.scalars().all()]


async def save_template(
    db: AsyncSession,
    owner_id: uuid.UUID,
    name: str,
    exercise_ids: Sequence[uuid.UUID],
) -> WorkoutTemplateRead:
    """
    Persist a template and its items. order_index follows the caller's list
    (1-based); sets_target is always the default.
    """
    payload = _validated(name, exercise_ids)
    template = WorkoutTemplate(owner_id=owner_id, name=payload.name)
    db.add(template)
    await db.flush()
    template_id = template.id
    db.add_all(
        TemplateItem(
            template_id=template_id,
            exercise_id=exercise_id,
            order_index=idx,
            sets_target=DEFAULT_SETS_TARGET,
        )
        for idx, exercise_id in enumerate(payload.exercise_ids, start=1)
    )
    await db.flush()
    return WorkoutTemplateRead.model_validate(await get_template(db, owner_id, template_id))


def _validated(name: str, exercise_ids: Sequence[uuid.UUID]) -> WorkoutTemplateCreate:
    if not name or not name.strip():
        raise TemplateValidationError("Template name is required")
    if not exercise_ids:
        raise TemplateValidationError("Template needs at least one exercise")
    return WorkoutTemplateCreate(name=name.strip(), exercise_ids=list(exercise_ids))


async def delete_template(db: AsyncSession, owner_id: uuid.UUID, template_id: uuid.UUID) -> None:
    template = await get_template(db, owner_id, template_id)
    await db.delete(template)
    await db.flush()
