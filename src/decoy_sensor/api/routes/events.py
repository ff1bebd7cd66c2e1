"""Event log queries: GET /events, /events/summary, /events/kind/{kind}, /events/severity/{severity}, /sessions/{id}/events."""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, Query

from decoy_sensor.aggregator import KIND_LABELS, Aggregator, EventSummary, Severity, severity_for_kind
from decoy_sensor.api.dependencies import get_aggregator
from decoy_sensor.model.event import EVENT_KINDS, AttackEvent, EventKind

router = APIRouter()


@router.get("/events", response_model=list[AttackEvent])
async def list_events(
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=500),
    kind: EventKind | None = Query(None),
    since: datetime | None = Query(None),
    aggregator: Aggregator = Depends(get_aggregator),
) -> list[AttackEvent]:
    return await aggregator.recent_events(skip=skip, limit=limit, kind=kind, since=since)


@router.get("/events/summary", response_model=EventSummary)
async def summary(aggregator: Aggregator = Depends(get_aggregator)) -> EventSummary:
    return await aggregator.summary()


@router.get("/events/kinds", response_model=list[dict])
async def event_kinds() -> list[dict]:  # type: ignore[type-arg]
    return [
        {"kind": kind, "label": KIND_LABELS.get(kind, kind), "severity": severity_for_kind(kind)}
        for kind in EVENT_KINDS
    ]


@router.get("/events/kind/{kind}", response_model=list[AttackEvent])
async def events_by_kind(
    kind: EventKind,
    aggregator: Aggregator = Depends(get_aggregator),
) -> list[AttackEvent]:
    return await aggregator.events_by_kind(kind)


@router.get("/events/severity/{severity}", response_model=list[AttackEvent])
async def events_by_severity(
    severity: Severity,
    aggregator: Aggregator = Depends(get_aggregator),
) -> list[AttackEvent]:
    return await aggregator.events_by_severity(severity)


@router.get("/sessions/{session_id}/events", response_model=list[AttackEvent])
async def events_for_session(
    session_id: str,
    aggregator: Aggregator = Depends(get_aggregator),
) -> list[AttackEvent]:
    return await aggregator.events_for_session(session_id)
