"""
Integration tests for the HTTP API.
"""

import httpx
import pytest

from focusplan.api import deps
from focusplan.infrastructure.auth.mock_auth import MockAuthProvider
from focusplan.infrastructure.local.calendar_provider import LocalCalendarProvider
from focusplan.services.planner_service import PlannerService
from main import create_app
from tests.helpers import PLAN_DATE


@pytest.fixture
async def app(session_factory, settings, task_repo, proposal_repo, block_repo, session_repo):
    application = create_app()
    calendar = LocalCalendarProvider(session_factory=session_factory)
    application.dependency_overrides[deps.get_task_repository] = lambda: task_repo
    application.dependency_overrides[deps.get_proposal_repository] = lambda: proposal_repo
    application.dependency_overrides[deps.get_block_repository] = lambda: block_repo
    application.dependency_overrides[deps.get_session_repository] = lambda: session_repo
    application.dependency_overrides[deps.get_calendar_provider] = lambda: calendar
    application.dependency_overrides[deps.get_planner_service] = lambda: PlannerService(
        task_repo, calendar, proposal_repo, block_repo, settings=settings
    )
    return application


@pytest.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as http:
        yield http


async def _create_task(client, **payload):
    response = await client.post("/api/tasks", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


async def test_health(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


async def test_plan_confirm_and_track_a_day(client):
    report = await _create_task(
        client, title="Write report", priority="high", estimated_minutes=90, due_date=PLAN_DATE.isoformat()
    )
    await _create_task(client, title="Inbox zero", priority="low", estimated_minutes=60)

    response = await client.post("/api/planning/propose", json={"plan_date": PLAN_DATE.isoformat()})
    assert response.status_code == 200, response.text
    proposal = response.json()
    assert [b["title"] for b in proposal["blocks"]] == ["Write report", "Inbox zero"]
    assert proposal["blocks"][0]["reason"] == "high priority, due today"
    block_ids = [b["id"] for b in proposal["blocks"]]

    body = {"proposal_id": proposal["id"], "accept_block_ids": block_ids}
    confirmed = (await client.post("/api/planning/confirm", json=body)).json()
    assert sorted(c["block_id"] for c in confirmed["created"]) == sorted(block_ids)

    again = (await client.post("/api/planning/confirm", json=body)).json()
    assert again["created"] == []
    assert {s["reason"] for s in again["skipped"]} == {"already_confirmed"}

    fetched = (await client.get(f"/api/planning/proposals/{proposal['id']}")).json()
    assert fetched["status"] == "confirmed"
    assert {b["state"] for b in fetched["blocks"]} == {"confirmed"}

    # Confirmed blocks are now calendar events, so they count as busy
    free = (await client.get("/api/planning/free-time", params={"date": PLAN_DATE.isoformat()})).json()
    assert len(free) == 1
    assert free[0]["start"].startswith("2030-01-07T11:30")

    started = await client.post(f"/api/exec/{report['id']}/start")
    assert started.status_code == 200
    assert (await client.post(f"/api/exec/{report['id']}/start")).status_code == 409
    stopped = await client.post(f"/api/exec/{report['id']}/stop")
    assert stopped.status_code == 200
    assert stopped.json()["duration_minutes"] >= 0
    assert (await client.post(f"/api/exec/{report['id']}/stop")).status_code == 404

    done = await client.post(f"/api/exec/{report['id']}/done")
    assert done.status_code == 200
    assert done.json()["status"] == "done"
    assert (await client.post(f"/api/exec/{report['id']}/done")).status_code == 404

    sessions = (await client.get(f"/api/exec/{report['id']}/sessions")).json()
    assert len(sessions) == 1

    daily = (await client.get("/api/insights/daily", params={"date": PLAN_DATE.isoformat()})).json()
    assert daily["minutes"]["planned"] == 150
    assert daily["minutes"]["confirmed"] == 150

    weekly = await client.get("/api/insights/weekly", params={"week_start": PLAN_DATE.isoformat()})
    assert weekly.status_code == 200
    assert len(weekly.json()["days"]) == 7

    deleted = await client.delete(f"/api/tasks/{report['id']}")
    assert deleted.status_code == 200
    assert deleted.json()["calendar_events_deleted"] == 1
    assert (await client.get(f"/api/tasks/{report['id']}")).status_code == 404


async def test_confirm_errors(client):
    await _create_task(client, title="Only task", estimated_minutes=30)
    old = (await client.post("/api/planning/propose", json={"plan_date": PLAN_DATE.isoformat()})).json()
    new = (await client.post("/api/planning/propose", json={"plan_date": PLAN_DATE.isoformat()})).json()

    stale = await client.post(
        "/api/planning/confirm", json={"proposal_id": old["id"], "accept_block_ids": []}
    )
    assert stale.status_code == 409

    unknown_block = await client.post(
        "/api/planning/confirm",
        json={"proposal_id": new["id"], "accept_block_ids": [old["blocks"][0]["id"]]},
    )
    assert unknown_block.status_code == 422

    missing = await client.get("/api/planning/proposals/00000000-0000-0000-0000-000000000000")
    assert missing.status_code == 404


async def test_task_crud(client):
    task = await _create_task(client, title="Draft", estimated_minutes=20)

    patched = await client.patch(f"/api/tasks/{task['id']}", json={"priority": "high"})
    assert patched.json()["priority"] == "high"

    listed = (await client.get("/api/tasks")).json()
    assert [t["id"] for t in listed] == [task["id"]]

    assert (await client.post("/api/tasks", json={"title": ""})).status_code == 422


async def test_auth_required_scopes_tasks_per_user(app, client):
    app.dependency_overrides[deps.get_auth_provider] = lambda: MockAuthProvider(enabled=True)

    assert (await client.get("/api/tasks")).status_code == 401
    bad_scheme = await client.get("/api/tasks", headers={"Authorization": "Basic alice"})
    assert bad_scheme.status_code == 401

    alice = {"Authorization": "Bearer alice"}
    created = await client.post("/api/tasks", json={"title": "Alice only"}, headers=alice)
    assert created.status_code == 201
    assert created.json()["user_id"] == "alice"

    bob = {"Authorization": "Bearer bob"}
    assert (await client.get("/api/tasks", headers=bob)).json() == []
    assert (await client.get(f"/api/tasks/{created.json()['id']}", headers=bob)).status_code == 404


async def test_patch_status_goes_through_tracking(client):
    task = await _create_task(client, title="Tracked", estimated_minutes=30)
    assert (await client.post(f"/api/exec/{task['id']}/start")).status_code == 200

    back_to_todo = await client.patch(f"/api/tasks/{task['id']}", json={"status": "todo"})
    assert back_to_todo.status_code == 409

    done = await client.patch(f"/api/tasks/{task['id']}", json={"status": "done"})
    assert done.status_code == 200
    assert done.json()["status"] == "done"
    assert done.json()["sessions_count"] == 1

    sessions = (await client.get(f"/api/exec/{task['id']}/sessions")).json()
    assert [s["ended_at"] is not None for s in sessions] == [True]
    assert sessions[0]["duration_minutes"] is not None
    assert (await client.post(f"/api/exec/{task['id']}/stop")).status_code == 404
