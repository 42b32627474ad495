"""HTTP surface: routes drive the tracker and domain errors map to status codes."""

import uuid

import pytest

API = "/api/v1"


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get(f"{API}/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"


@pytest.mark.asyncio
async def test_exercise_crud(client):
    created = await client.post(f"{API}/exercises", json={"name": "Squat", "muscle_group": "legs"})
    assert created.status_code == 201
    exercise_id = created.json()["id"]

    patched = await client.patch(f"{API}/exercises/{exercise_id}", json={"muscle_group": "quads"})
    assert patched.status_code == 200
    assert patched.json() == {"id": exercise_id, "name": "Squat", "muscle_group": "quads"}

    listed = await client.get(f"{API}/exercises")
    assert [e["name"] for e in listed.json()] == ["Squat"]

    assert (await client.delete(f"{API}/exercises/{exercise_id}")).status_code == 204
    assert (await client.delete(f"{API}/exercises/{exercise_id}")).status_code == 404


@pytest.mark.asyncio
async def test_exercise_validation(client):
    response = await client.post(f"{API}/exercises", json={"name": ""})

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_logging_a_session_end_to_end(client, bench, squat):
    started = await client.post(f"{API}/sessions", json={"name": "Treino A"})
    assert started.status_code == 201
    session_id = started.json()["id"]
    assert started.json()["ended_at"] is None

    first = (await client.post(f"{API}/sessions/current/sets", json={"exercise_id": str(bench.id)})).json()
    await client.post(f"{API}/sessions/current/exercises", json={"exercise_id": str(squat.id)})
    patched = await client.patch(
        f"{API}/sessions/current/sets/{first['id']}",
        json={"weight": 60, "reps": 8, "completed": True, "exercise": {"name": "ignored"}},
    )
    assert patched.status_code == 200
    assert (patched.json()["weight"], patched.json()["reps"], patched.json()["completed"]) == (60, 8, True)
    second = (await client.post(f"{API}/sessions/current/sets", json={"exercise_id": str(bench.id)})).json()
    assert second["weight"] == 60
    assert second["set_order"] == 3

    groups = (await client.get(f"{API}/sessions/current/groups")).json()
    assert [g["exercise_name"] for g in groups] == ["Bench Press", "Squat"]
    assert [s["set_order"] for s in groups[0]["sets"]] == [1, 3]

    summary = (await client.get(f"{API}/sessions/current/summary")).json()
    assert summary["set_count"] == 3
    assert summary["exercise_count"] == 2
    assert summary["total_volume"] == 480

    assert (await client.delete(f"{API}/sessions/current/sets/{second['id']}")).status_code == 204
    current = (await client.get(f"{API}/sessions/current")).json()
    assert [s["set_order"] for s in current["sets"]] == [1, 2]

    assert (await client.post(f"{API}/sessions/finish")).status_code == 204
    assert (await client.get(f"{API}/sessions/current")).json() is None
    recent = (await client.get(f"{API}/sessions/recent")).json()
    assert recent[0]["id"] == session_id
    assert recent[0]["ended_at"] is not None

    history = await client.get(f"{API}/history/exercises/{bench.id}")
    assert history.json() == {"weight": 60, "reps": 8}


@pytest.mark.asyncio
async def test_second_start_conflicts(client):
    await client.post(f"{API}/sessions", json={"name": "One"})

    response = await client.post(f"{API}/sessions", json={"name": "Two"})

    assert response.status_code == 409
    assert "active" in response.json()["detail"]


@pytest.mark.asyncio
async def test_set_routes_without_session_conflict(client, bench):
    assert (await client.post(f"{API}/sessions/current/sets", json={"exercise_id": str(bench.id)})).status_code == 409
    assert (await client.post(f"{API}/sessions/finish")).status_code == 409
    assert (await client.get(f"{API}/sessions/current/summary")).status_code == 409
    assert (await client.get(f"{API}/sessions/current/groups")).json() == []


@pytest.mark.asyncio
async def test_unknown_ids_are_404(client):
    await client.post(f"{API}/sessions", json={"name": "Open"})
    missing = uuid.uuid4()

    assert (await client.patch(f"{API}/sessions/current/sets/{missing}", json={"reps": 1})).status_code == 404
    assert (await client.delete(f"{API}/sessions/{missing}")).status_code == 404
    assert (await client.post(f"{API}/sessions/{missing}/open")).status_code == 404
    assert (await client.delete(f"{API}/templates/{missing}")).status_code == 404


@pytest.mark.asyncio
async def test_negative_reps_rejected(client, bench):
    await client.post(f"{API}/sessions", json={"name": "Open"})
    s = (await client.post(f"{API}/sessions/current/sets", json={"exercise_id": str(bench.id)})).json()

    response = await client.patch(f"{API}/sessions/current/sets/{s['id']}", json={"reps": -1})

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_template_flow(client, bench, squat):
    created = await client.post(
        f"{API}/templates", json={"name": "Full body", "exercise_ids": [str(squat.id), str(bench.id)]}
    )
    assert created.status_code == 201
    template = created.json()
    assert [i["order_index"] for i in template["items"]] == [1, 2]
    assert [i["sets_target"] for i in template["items"]] == [3, 3]

    started = await client.post(f"{API}/sessions/from-template/{template['id']}")
    assert started.status_code == 201
    body = started.json()
    assert body["name"] == "Full body"
    assert [s["set_order"] for s in body["sets"]] == [1, 2, 3, 4, 5, 6]
    assert [s["exercise_id"] for s in body["sets"]] == [str(squat.id)] * 3 + [str(bench.id)] * 3

    again = await client.post(f"{API}/sessions/from-template/{template['id']}")
    assert again.status_code == 409

    assert (await client.delete(f"{API}/templates/{template['id']}")).status_code == 204
    assert (await client.get(f"{API}/templates")).json() == []


@pytest.mark.asyncio
async def test_template_needs_exercises(client):
    response = await client.post(f"{API}/templates", json={"name": "Empty", "exercise_ids": []})

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_delete_active_session_over_http(client):
    session_id = (await client.post(f"{API}/sessions", json={"name": "Oops"})).json()["id"]

    assert (await client.delete(f"{API}/sessions/{session_id}")).status_code == 204
    assert (await client.get(f"{API}/sessions/active")).json() is None
    assert (await client.post(f"{API}/sessions", json={"name": "Again"})).status_code == 201


@pytest.mark.asyncio
async def test_adding_set_for_unknown_exercise_is_404(client):
    await client.post(f"{API}/sessions", json={"name": "Open"})

    response = await client.post(f"{API}/sessions/current/sets", json={"exercise_id": str(uuid.uuid4())})

    assert response.status_code == 404
