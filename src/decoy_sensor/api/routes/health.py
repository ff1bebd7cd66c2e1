"""GET /health: liveness check."""

from __future__ import annotations

from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/health")
async def health(request: Request) -> dict:  # type: ignore[type-arg]
    repositories = request.app.state.repositories
    recorder = request.app.state.recorder
    return {
        "status": "ok",
        "storage": repositories.backend,
        "db": await repositories.ping(),
        "pending_events": recorder.pending,
    }
