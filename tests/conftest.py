"""Shared fixtures: in-memory SQLite store, tracker, API client."""

import os

# Point the app engine at SQLite before anything imports app.db.session
os.environ.setdefault("DATABASE_DSN", "sqlite+aiosqlite:///:memory:")

import uuid
from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401 - register all models
from app.api.deps import get_tracker
from app.db.base import Base
from app.db.session import build_session_maker
from app.main import app as fastapi_app
from app.models.workout import WorkoutSession, WorkoutSet
from app.services.session_manager import WorkoutTracker

OWNER_ID = uuid.UUID("00000000-0000-0000-0000-000000000001")


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):
        """Enable foreign key constraints in SQLite connections."""
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return build_session_maker(engine)


@pytest.fixture
def tracker(session_maker):
    return WorkoutTracker(session_maker, OWNER_ID)


@pytest_asyncio.fixture
async def bench(tracker):
    return await tracker.create_exercise("Bench Press", "chest")


@pytest_asyncio.fixture
async def squat(tracker):
    return await tracker.create_exercise("Squat", "legs")


@pytest_asyncio.fixture
async def barbell_row(tracker):
    return await tracker.create_exercise("Barbell Row", "back")


@pytest.fixture
def insert_session(session_maker):
    """Write a session (and optional sets) straight to the store, bypassing the tracker."""

    async def _insert(name="Old session", ended=True, started_at=None, sets=()):
        started_at = started_at or datetime(2026, 1, 1, 8, 0, tzinfo=timezone.utc)
        async with session_maker() as db:
            session = WorkoutSession(
                owner_id=OWNER_ID,
                name=name,
                started_at=started_at,
                ended_at=started_at + timedelta(hours=1) if ended else None,
            )
            db.add(session)
            await db.flush()
            for order, (exercise_id, weight, reps, created_at) in enumerate(sets, start=1):
                db.add(
                    WorkoutSet(
                        session_id=session.id,
                        exercise_id=exercise_id,
                        weight=weight,
                        reps=reps,
                        set_order=order,
                        created_at=created_at,
                    )
                )
            await db.commit()
            return session.id

    return _insert


@pytest_asyncio.fixture
async def client(tracker):
    fastapi_app.dependency_overrides[get_tracker] = lambda: tracker
    async with AsyncClient(transport=ASGITransport(app=fastapi_app), base_url="http://test") as c:
        yield c
    fastapi_app.dependency_overrides.clear()

