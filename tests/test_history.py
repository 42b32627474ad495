"""Exercise history: last weight/reps for an exercise outside the current session."""

import uuid
from datetime import datetime, timezone

import pytest

from app.services.history import get_exercise_history


def _at(day, hour=8):
    return datetime(2026, 1, day, hour, 0, tzinfo=timezone.utc)


@pytest.mark.asyncio
async def test_no_history(tracker, bench):
    assert await tracker.get_exercise_history(bench.id) is None


@pytest.mark.asyncio
async def test_most_recently_created_set_wins(tracker, insert_session, bench):
    await insert_session("Mon", started_at=_at(5), sets=[(bench.id, 70, 10, _at(5)), (bench.id, 80, 8, _at(5, 9))])
    await insert_session("Wed", started_at=_at(7), sets=[(bench.id, 75, 6, _at(7))])

    last = await tracker.get_exercise_history(bench.id)

    assert (last.weight, last.reps) == (75, 6)


@pytest.mark.asyncio
async def test_recency_is_by_set_time_not_weight(tracker, insert_session, bench):
    await insert_session("Heavy", started_at=_at(3), sets=[(bench.id, 120, 1, _at(3))])
    await insert_session("Light", started_at=_at(4), sets=[(bench.id, 40, 15, _at(4))])

    last = await tracker.get_exercise_history(bench.id)

    assert (last.weight, last.reps) == (40, 15)


@pytest.mark.asyncio
async def test_other_exercises_are_ignored(tracker, insert_session, bench, squat):
    await insert_session("Mixed", sets=[(bench.id, 60, 8, _at(2)), (squat.id, 100, 5, _at(2, 10))])

    last = await tracker.get_exercise_history(bench.id)

    assert (last.weight, last.reps) == (60, 8)


@pytest.mark.asyncio
async def test_session_on_screen_is_excluded(tracker, insert_session, bench):
    await insert_session("Last week", sets=[(bench.id, 50, 10, _at(1))])
    await tracker.start_session("Today")
    s = await tracker.add_set(bench.id)
    await tracker.update_set(s.id, {"weight": 90, "reps": 3})

    last = await tracker.get_exercise_history(bench.id)

    assert (last.weight, last.reps) == (50, 10)


@pytest.mark.asyncio
async def test_only_current_session_has_the_exercise(tracker, bench):
    await tracker.start_session("First time")
    await tracker.add_set(bench.id)

    assert await tracker.get_exercise_history(bench.id) is None


@pytest.mark.asyncio
async def test_history_is_scoped_to_owner(session_maker, insert_session, bench):
    await insert_session("Mine", sets=[(bench.id, 50, 10, _at(1))])

    async with session_maker() as db:
        assert await get_exercise_history(db, uuid.uuid4(), bench.id) is None


@pytest.mark.asyncio
async def test_active_session_is_excluded_while_reviewing_another(tracker, insert_session, bench):
    old = await insert_session("Last week", sets=[(bench.id, 50, 10, _at(1))])
    await tracker.start_session("Now")
    s = await tracker.add_set(bench.id)
    await tracker.update_set(s.id, {"weight": 99, "reps": 5})

    await tracker.open_session(old)

    assert tracker.active_session_id is not None
    # the reviewed session is excluded too, so nothing else is left
    assert await tracker.get_exercise_history(bench.id) is None


@pytest.mark.asyncio
async def test_active_session_excluded_but_third_session_found(tracker, insert_session, bench):
    await insert_session("Two weeks ago", started_at=_at(1), sets=[(bench.id, 40, 12, _at(1))])
    old = await insert_session("Last week", started_at=_at(8), sets=[(bench.id, 50, 10, _at(8))])
    await tracker.start_session("Now")
    s = await tracker.add_set(bench.id)
    await tracker.update_set(s.id, {"weight": 99, "reps": 5})

    await tracker.open_session(old)
    last = await tracker.get_exercise_history(bench.id)

    assert (last.weight, last.reps) == (40, 12)


@pytest.mark.asyncio
async def test_several_sessions_can_be_excluded(tracker, session_maker, insert_session, bench):
    await insert_session("First", started_at=_at(1), sets=[(bench.id, 40, 12, _at(1))])
    second = await insert_session("Second", started_at=_at(2), sets=[(bench.id, 45, 10, _at(2))])
    third = await insert_session("Third", started_at=_at(3), sets=[(bench.id, 50, 8, _at(3))])

    async with session_maker() as db:
        last = await get_exercise_history(db, tracker.owner_id, bench.id, [third, second, None])

    assert (last.weight, last.reps) == (40, 12)
