"""Route tests for the session queries: real tracker over the in-memory store."""

from __future__ import annotations

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from decoy_sensor.api.errors import register_exception_handlers
from decoy_sensor.aggregator import Aggregator
from decoy_sensor.tracker import SessionTracker


@pytest.fixture
async def client(tracker: SessionTracker, aggregator: Aggregator) -> AsyncClient:
    from decoy_sensor.api.routes import sessions

    app = FastAPI()
    register_exception_handlers(app)
    app.include_router(sessions.router)
    app.state.tracker = tracker
    app.state.aggregator = aggregator
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c


async def test_get_session_not_found(client: AsyncClient) -> None:
    response = await client.get("/sessions/sess_missing")
    assert response.status_code == 404
    assert response.json() == {"detail": "Session not found"}


async def test_get_session_found(client: AsyncClient, tracker: SessionTracker) -> None:
    session_id = await tracker.start_session("admin", "203.0.113.7")
    data = (await client.get(f"/sessions/{session_id}")).json()
    assert data["session_id"] == session_id
    assert data["identity_label"] == "admin"
    assert data["status"] == "active"


async def test_list_sessions_filters_by_status(client: AsyncClient, tracker: SessionTracker) -> None:
    kept = await tracker.start_session()
    ended = await tracker.start_session()
    await tracker.end_session(ended, reason="logout")

    active = (await client.get("/sessions?status=active")).json()
    assert [s["session_id"] for s in active] == [kept]
    everything = (await client.get("/sessions")).json()
    assert len(everything) == 2


async def test_active_sessions(client: AsyncClient, tracker: SessionTracker) -> None:
    session_id = await tracker.start_session()
    data = (await client.get("/sessions/active")).json()
    assert [s["session_id"] for s in data] == [session_id]


async def test_active_sessions_as_of_before_start(client: AsyncClient, tracker: SessionTracker) -> None:
    await tracker.start_session()
    response = await client.get("/sessions/active", params={"as_of": "2000-01-01T00:00:00+00:00"})
    assert response.json() == []
