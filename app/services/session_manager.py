"""Session lifecycle - the single entry point the presentation layer talks to.

``WorkoutTracker`` owns the active-session state, the session on screen with
its set ledger, and the cached read models (exercises, templates, recent
finished sessions). Reads that fail are logged and leave the previous value in
place; mutations that fail raise and leave local state as it was.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Union

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload

from app.core.exceptions import ActiveSessionError, NoActiveSessionError, NotFoundError, WorkoutError
from app.db.session import store_call
from app.models.workout import WorkoutSession, WorkoutSet
from app.schemas.exercise import ExerciseCreate, ExerciseRead, ExerciseUpdate
from app.schemas.template import WorkoutTemplateRead
from app.schemas.workout import (
    ExerciseGroup,
    ExerciseHistory,
    SessionSummary,
    WorkoutSessionRead,
    WorkoutSetFields,
    WorkoutSetView,
)
from app.services import exercise_catalog, history, template_expansion
from app.services.set_ledger import SetLedger, load_session_sets

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NoActiveSession:
    """No session is being logged."""


@dataclass(frozen=True)
class ActiveSession:
    session_id: uuid.UUID


SessionState = Union[NoActiveSession, ActiveSession]


def _utc(dt: datetime) -> datetime:
    # SQLite hands back naive datetimes; treat them as UTC
    return dt.replace(tzinfo=timezone.utc) if dt.tzinfo is None else dt


def _session_read(session: WorkoutSession, sets: Sequence[WorkoutSetView] = ()) -> WorkoutSessionRead:
    # Built by hand so session.sets is never lazy-loaded outside the unit of work
    return WorkoutSessionRead(
        id=session.id,
        name=session.name,
        started_at=session.started_at,
        ended_at=session.ended_at,
        sets=list(sets),
    )


def _session_with_sets_query():
    return select(WorkoutSession).options(
        selectinload(WorkoutSession.sets).selectinload(WorkoutSet.exercise)
    )


def _session_read_with_sets(session: WorkoutSession) -> WorkoutSessionRead:
    sets = sorted(session.sets, key=lambda s: (s.set_order, s.created_at))
    return _session_read(session, [WorkoutSetView.model_validate(s) for s in sets])


class WorkoutTracker:
    """Active session state machine plus the actions that drive it."""

    def __init__(
        self,
        session_maker: async_sessionmaker[AsyncSession],
        owner_id: uuid.UUID,
        recent_limit: int = 10,
    ) -> None:
        self._session_maker = session_maker
        self.owner_id = owner_id
        self.recent_limit = recent_limit
        # guard and insert of a new session must not interleave
        self._start_lock = asyncio.Lock()

        self.state: SessionState = NoActiveSession()
        self.current: WorkoutSessionRead | None = None
        self.ledger: SetLedger | None = None

        self.exercises: list[ExerciseRead] = []
        self.templates: list[WorkoutTemplateRead] = []
        self.recent_sessions: list[WorkoutSessionRead] = []
        self.loaded = False

    # ── State ────────────────────────────────────────────────────────────

    @property
    def active_session_id(self) -> uuid.UUID | None:
        return self.state.session_id if isinstance(self.state, ActiveSession) else None

    @property
    def active_sets(self) -> list[WorkoutSetView]:
        return self.ledger.sets if self.ledger else []

    def _show(self, session: WorkoutSessionRead, sets: Sequence[WorkoutSetView]) -> None:
        self.current = session.model_copy(update={"sets": []})
        self.ledger = SetLedger(self._session_maker, session.id, self.owner_id, sets)
        if session.ended_at is None:
            self.state = ActiveSession(session.id)

    def _clear(self) -> None:
        """Close the session on screen; the active pointer goes with it only if it pointed there."""
        if self.current is not None and self.active_session_id == self.current.id:
            self.state = NoActiveSession()
        self.current = None
        self.ledger = None

    def current_view(self) -> WorkoutSessionRead | None:
        """The session on screen with its ledger as it stands locally."""
        if self.current is None:
            return None
        return self.current.model_copy(update={"sets": self.active_sets})

    def _require_ledger(self) -> SetLedger:
        if self.current is None or self.ledger is None:
            raise NoActiveSessionError("No session is open")
        return self.ledger

    # ── Reads (failures are logged, state is kept) ───────────────────────

    async def load(self) -> None:
        """Initial load of every read model."""
        await self.refresh_exercises()
        await self.refresh_templates()
        await self.refresh_recent_sessions()
        await self.load_active_session()
        self.loaded = True

    async def refresh_exercises(self) -> list[ExerciseRead]:
        try:
            async with store_call(self._session_maker, "list_exercises") as db:
                self.exercises = await exercise_catalog.list_exercises(db, self.owner_id)
        except WorkoutError:
            logger.exception("Failed to fetch exercises")
        return self.exercises

    async def refresh_templates(self) -> list[WorkoutTemplateRead]:
        try:
            async with store_call(self._session_maker, "list_templates") as db:
                self.templates = await template_expansion.list_templates(db, self.owner_id)
        except WorkoutError:
            logger.exception("Failed to fetch templates")
        return self.templates

    async def refresh_recent_sessions(self) -> list[WorkoutSessionRead]:
        """Finished sessions, most recently ended first, with their sets."""
        try:
            async with store_call(self._session_maker, "list_recent_sessions") as db:
                result = await db.execute(
                    _session_with_sets_query()
                    .where(
                        WorkoutSession.owner_id == self.owner_id,
                        WorkoutSession.ended_at.is_not(None),
                    )
                    .order_by(WorkoutSession.ended_at.desc())
                    .limit(self.recent_limit)
                )
                self.recent_sessions = [_session_read_with_sets(s) for s in result.scalars().all()]
        except WorkoutError:
            logger.exception("Failed to fetch recent sessions")
        return self.recent_sessions

    async def load_active_session(self) -> WorkoutSessionRead | None:
        """
        Pick up the session with no ended_at (e.g. after an app restart) and put
        it on screen. With none in the store the pointer is reset and None is
        returned; a finished session open for review stays open.
        """
        try:
            async with store_call(self._session_maker, "load_active_session") as db:
                result = await db.execute(
                    _session_with_sets_query()
                    .where(
                        WorkoutSession.owner_id == self.owner_id,
                        WorkoutSession.ended_at.is_(None),
                    )
                    .order_by(WorkoutSession.started_at.desc())
                )
                rows = result.scalars().all()
                active = [_session_read_with_sets(s) for s in rows]
        except WorkoutError:
            logger.exception("Failed to check for an active session")
            return self.current_view()
        if len(active) > 1:
            logger.warning(
                "%d active sessions for owner %s; using the most recent (%s)",
                len(active),
                self.owner_id,
                active[0].id,
            )
        if not active:
            if self.current is not None and self.current.ended_at is None:
                self._clear()
            self.state = NoActiveSession()
            return None
        self._show(active[0], active[0].sets)
        return self.current_view()

    async def active_session_count(self) -> int:
        """How many sessions have no ended_at in the store. Anything above 1 is a bug."""
        async with store_call(self._session_maker, "count_active_sessions") as db:
            return await self._count_active(db)

    async def _count_active(self, db: AsyncSession) -> int:
        result = await db.execute(
            select(func.count(WorkoutSession.id)).where(
                WorkoutSession.owner_id == self.owner_id,
                WorkoutSession.ended_at.is_(None),
            )
        )
        return int(result.scalar() or 0)

    async def get_exercise_history(self, exercise_id: uuid.UUID) -> ExerciseHistory | None:
        """Last weight/reps for exercise_id outside the active session and the one on screen."""
        exclude = [self.active_session_id, self.current.id if self.current else None]
        try:
            async with store_call(self._session_maker, "get_exercise_history") as db:
                return await history.get_exercise_history(db, self.owner_id, exercise_id, exclude)
        except WorkoutError:
            logger.exception("Failed to fetch history for exercise %s", exercise_id)
            return None

    # ── Session lifecycle ────────────────────────────────────────────────

    async def _ensure_can_start(self, db: AsyncSession) -> None:
        if isinstance(self.state, ActiveSession):
            raise ActiveSessionError(f"Session {self.state.session_id} is still active")
        if await self._count_active(db):
            raise ActiveSessionError("Another active session exists; finish it first")

    async def start_session(self, name: str) -> WorkoutSessionRead:
        """Create an empty session and make it the active one."""
        async with self._start_lock:
            async with store_call(self._session_maker, "start_session") as db:
                await self._ensure_can_start(db)
                session = WorkoutSession(
                    owner_id=self.owner_id,
                    name=name,
                    started_at=datetime.now(timezone.utc),
                )
                db.add(session)
                await db.flush()
                await db.refresh(session)
                view = _session_read(session)
            logger.info("Started session %s (%s)", view.id, view.name)
            self._show(view, [])
        return self.current_view()

    async def start_session_from_template(self, template_id: uuid.UUID) -> WorkoutSessionRead:
        """
        Create a session named after the template and pre-fill its ledger.
        Session row and sets are written in one transaction, so a failure
        leaves neither behind and no session on screen. A refused start or an
        unknown template leaves the current view untouched.
        """
        async with self._start_lock:
            try:
                async with store_call(self._session_maker, "start_session_from_template") as db:
                    await self._ensure_can_start(db)
                    template = await template_expansion.get_template(db, self.owner_id, template_id)
                    session = WorkoutSession(
                        owner_id=self.owner_id,
                        name=template.name,
                        started_at=datetime.now(timezone.utc),
                    )
                    db.add(session)
                    await db.flush()
                    await db.refresh(session)
                    db.add_all(template_expansion.expand_template(session.id, template.items))
                    await db.flush()
                    sets = await load_session_sets(db, session.id)
                    view = _session_read(session)
            except (ActiveSessionError, NotFoundError):
                raise
            except Exception:
                logger.exception("Failed to start session from template %s", template_id)
                self._clear()
                raise
            logger.info("Started session %s from template %s with %d sets", view.id, template_id, len(sets))
            self._show(view, sets)
        return self.current_view()

    async def open_session(self, session: WorkoutSessionRead | uuid.UUID) -> WorkoutSessionRead:
        """
        Show an existing session (finished ones too) with its full ledger.
        Nothing is written; a failed ledger read leaves the session with no sets.
        """
        if isinstance(session, uuid.UUID):
            async with store_call(self._session_maker, "get_session") as db:
                row = await db.get(WorkoutSession, session)
                if row is None or row.owner_id != self.owner_id:
                    raise NotFoundError("Session", session)
                session = _session_read(row)
        try:
            async with store_call(self._session_maker, "open_session") as db:
                sets = await load_session_sets(db, session.id)
        except WorkoutError:
            logger.exception("Failed to load sets for session %s", session.id)
            sets = []
        self._show(session, sets)
        return self.current_view()

    async def finish_session(self) -> None:
        """Stamp ended_at on the session on screen (if still open) and close it."""
        if self.current is None:
            raise NoActiveSessionError("No session is open")
        if self.current.ended_at is None:
            async with store_call(self._session_maker, "finish_session") as db:
                row = await db.get(WorkoutSession, self.current.id)
                if row is None:
                    raise NotFoundError("Session", self.current.id)
                row.ended_at = datetime.now(timezone.utc)
                await db.flush()
            logger.info("Finished session %s", self.current.id)
        self._clear()
        await self.refresh_recent_sessions()

    async def delete_session(self, session_id: uuid.UUID) -> None:
        """Delete a session and its sets; closes it if it is the one on screen."""
        async with store_call(self._session_maker, "delete_session") as db:
            row = await db.get(WorkoutSession, session_id)
            if row is None or row.owner_id != self.owner_id:
                raise NotFoundError("Session", session_id)
            await db.delete(row)
            await db.flush()
        self.recent_sessions = [s for s in self.recent_sessions if s.id != session_id]
        if self.current is not None and self.current.id == session_id:
            self._clear()
        if self.active_session_id == session_id:
            self.state = NoActiveSession()

    def session_summary(self) -> SessionSummary:
        """Duration and volume of the session on screen."""
        ledger = self._require_ledger()
        started = _utc(self.current.started_at)
        ended = _utc(self.current.ended_at) if self.current.ended_at else datetime.now(timezone.utc)
        sets = ledger.sets
        return SessionSummary(
            session_id=self.current.id,
            duration_minutes=max(0, int((ended - started).total_seconds() // 60)),
            total_volume=sum(s.weight * s.reps for s in sets),
            set_count=len(sets),
            exercise_count=len({s.exercise_id for s in sets}),
        )

    # ── Set ledger ───────────────────────────────────────────────────────

    async def add_set(self, exercise_id: uuid.UUID) -> WorkoutSetView:
        return await self._require_ledger().add_set(exercise_id)

    async def add_exercise_to_session(self, exercise_id: uuid.UUID) -> WorkoutSetView:
        return await self._require_ledger().add_exercise(exercise_id)

    async def update_set(
        self, set_id: uuid.UUID, updates: Mapping[str, Any] | WorkoutSetFields
    ) -> WorkoutSetView:
        return await self._require_ledger().update_set(set_id, updates)

    async def delete_set(self, set_id: uuid.UUID) -> None:
        await self._require_ledger().delete_set(set_id)

    def grouped_sets(self) -> list[ExerciseGroup]:
        return self.ledger.groups() if self.ledger else []

    # ── Exercise catalog ─────────────────────────────────────────────────

    async def create_exercise(self, name: str, muscle_group: str | None = None) -> ExerciseRead:
        payload = ExerciseCreate(name=name, muscle_group=muscle_group)
        async with store_call(self._session_maker, "create_exercise") as db:
            exercise = await exercise_catalog.create_exercise(db, self.owner_id, payload)
        self.exercises = sorted([*self.exercises, exercise], key=lambda e: e.name.lower())
        return exercise

    async def update_exercise(
        self, exercise_id: uuid.UUID, updates: Mapping[str, Any] | ExerciseUpdate
    ) -> ExerciseRead:
        payload = updates if isinstance(updates, ExerciseUpdate) else ExerciseUpdate(**updates)
        async with store_call(self._session_maker, "update_exercise") as db:
            exercise = await exercise_catalog.update_exercise(db, self.owner_id, exercise_id, payload)
        self.exercises = sorted(
            [exercise if e.id == exercise_id else e for e in self.exercises],
            key=lambda e: e.name.lower(),
        )
        return exercise

    async def delete_exercise(self, exercise_id: uuid.UUID) -> None:
        async with store_call(self._session_maker, "delete_exercise") as db:
            await exercise_catalog.delete_exercise(db, self.owner_id, exercise_id)
        self.exercises = [e for e in self.exercises if e.id != exercise_id]

    # ── Templates ────────────────────────────────────────────────────────

    async def save_template(self, name: str, exercise_ids: Sequence[uuid.UUID]) -> WorkoutTemplateRead:
        async with store_call(self._session_maker, "save_template") as db:
            template = await template_expansion.save_template(db, self.owner_id, name, exercise_ids)
        await self.refresh_templates()
        return template

    async def delete_template(self, template_id: uuid.UUID) -> None:
        async with store_call(self._session_maker, "delete_template") as db:
            await template_expansion.delete_template(db, self.owner_id, template_id)
        self.templates = [t for t in self.templates if t.id != template_id]
