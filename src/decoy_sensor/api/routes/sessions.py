"""Session queries: GET /sessions, /sessions/active, /sessions/{id}."""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, Query

from decoy_sensor.aggregator import Aggregator
from decoy_sensor.api.dependencies import get_aggregator, get_tracker
from decoy_sensor.errors import UnknownSession
from decoy_sensor.model.session import SessionRecord, SessionStatus
from decoy_sensor.tracker import SessionTracker

router = APIRouter()


async def _require_session(session_id: str, tracker: SessionTracker) -> SessionRecord:
    record = await tracker.get_session(session_id)
    if record is None:
        raise UnknownSession(session_id)
    return record


@router.get("/sessions", response_model=list[SessionRecord])
async def list_sessions(
    status: SessionStatus | None = Query(None),
    tracker: SessionTracker = Depends(get_tracker),
) -> list[SessionRecord]:
    return await tracker.list_sessions(status=status)


@router.get("/sessions/active", response_model=list[SessionRecord])
async def active_sessions(
    as_of: datetime | None = Query(None),
    aggregator: Aggregator = Depends(get_aggregator),
) -> list[SessionRecord]:
    return await aggregator.sessions_active_as_of(as_of)


@router.get("/sessions/{session_id}", response_model=SessionRecord)
async def get_session(
    session_id: str,
    tracker: SessionTracker = Depends(get_tracker),
) -> SessionRecord:
    return await _require_session(session_id, tracker)
