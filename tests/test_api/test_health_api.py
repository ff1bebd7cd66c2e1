"""Route test for GET /health."""

from __future__ import annotations

from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from decoy_sensor.recorder import EventRecorder
from decoy_sensor.store.client import Repositories
from decoy_sensor.store.memory import InMemoryEventStore, InMemorySessionStore


async def test_health_reports_in_memory_backend(recorder: EventRecorder) -> None:
    from decoy_sensor.api.routes import health

    app = FastAPI()
    app.include_router(health.router)
    app.state.repositories = Repositories(events=InMemoryEventStore(), sessions=InMemorySessionStore())
    app.state.recorder = recorder

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {
        "status": "ok",
        "storage": "memory",
        "db": "in-memory",
        "pending_events": 0,
    }
