"""Workout template - a named, ordered list of exercises to expand into sets."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.constants import DEFAULT_SETS_TARGET
from app.db.base import Base


class WorkoutTemplate(Base):
    """Saved routine (name + items in order_index order)."""

    __tablename__ = "workout_templates"

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    owner_id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    items: Mapped[list["TemplateItem"]] = relationship(
        "TemplateItem",
        back_populates="template",
        cascade="all, delete-orphan",
        order_by="TemplateItem.order_index",
    )


class TemplateItem(Base):
    """Exercise slot in a template. exercise_id is NULL once the exercise is deleted."""

    __tablename__ = "workout_template_items"

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    template_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("workout_templates.id", ondelete="CASCADE"), nullable=False
    )
    exercise_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("exercises.id", ondelete="SET NULL"), nullable=True
    )
    order_index: Mapped[int] = mapped_column(Integer, nullable=False)
    sets_target: Mapped[int] = mapped_column(Integer, default=DEFAULT_SETS_TARGET, nullable=False)

    template: Mapped["WorkoutTemplate"] = relationship("WorkoutTemplate", back_populates="items")
    exercise: Mapped["Exercise"] = relationship("Exercise", back_populates="template_items")
