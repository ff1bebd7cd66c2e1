"""Aggregator: read-only queries over the event log and the session table.

Nothing here mutates state. Because every write goes through the same
repositories, a query issued after record() has returned sees that event.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Literal

from pydantic import BaseModel

from decoy_sensor.model.event import EVENT_KINDS, AttackEvent, EventKind
from decoy_sensor.model.session import SessionRecord

if TYPE_CHECKING:
    from decoy_sensor.store.base import EventRepository, SessionRepository

Severity = Literal["critical", "warning", "info"]

_SEVERITY: dict[str, Severity] = {
    "sql_injection_attempt": "critical",
    "brute_force_detected": "critical",
    "malicious_file_upload": "critical",
    "xss_attempt": "warning",
    "login_attempt": "warning",
}

KIND_LABELS: dict[str, str] = {
    "sql_injection_attempt": "SQL Injection",
    "xss_attempt": "XSS Attack",
    "login_attempt": "Login Attempt",
    "login_success": "Login Success",
    "login_failure": "Login Failure",
    "brute_force_detected": "Brute Force",
    "file_upload_attempt": "File Upload",
    "malicious_file_upload": "Malicious File",
    "page_visit": "Page Visit",
    "search_performed": "Search",
    "report_submission": "Report Submission",
    "dashboard_access": "Dashboard Access",
    "logout": "Logout",
}


def _aware(ts: datetime) -> datetime:
    return ts if ts.tzinfo is not None else ts.replace(tzinfo=timezone.utc)


def severity_for_kind(kind: str) -> Severity:
    return _SEVERITY.get(kind, "info")


def severity_bucket(event: AttackEvent) -> Severity:
    """Triage bucket for an event, fixed by its kind."""
    return severity_for_kind(event.event_kind)


class EventSummary(BaseModel):
    total_events: int
    distinct_sessions: int
    active_sessions: int
    by_severity: dict[str, int]
    by_kind: dict[str, int]


class Aggregator:
    def __init__(self, events: EventRepository, sessions: SessionRepository) -> None:
        self._events = events
        self._sessions = sessions

    async def events_for_session(self, session_id: str) -> list[AttackEvent]:
        return await self._events.for_session(session_id)

    async def events_by_kind(self, kind: EventKind) -> list[AttackEvent]:
        return await self._events.by_kind(kind)

    async def events_by_severity(self, severity: Severity) -> list[AttackEvent]:
        kinds = [k for k in EVENT_KINDS if severity_for_kind(k) == severity]
        found: list[AttackEvent] = []
        for kind in kinds:
            found.extend(await self._events.by_kind(kind))  # type: ignore[arg-type]
        return sorted(found, key=lambda e: e.sequence)

    async def recent_events(
        self,
        skip: int = 0,
        limit: int = 50,
        kind: EventKind | None = None,
        since: datetime | None = None,
    ) -> list[AttackEvent]:
        return await self._events.list_events(skip=skip, limit=limit, kind=kind, since=since)

    async def sessions_active_as_of(self, now: datetime | None = None) -> list[SessionRecord]:
        """Sessions whose status is active and which had started by now."""
        active = await self._sessions.list_sessions(status="active")
        if now is None:
            return active
        return [s for s in active if _aware(s.started_at) <= _aware(now)]

    async def all_sessions(self) -> list[SessionRecord]:
        return await self._sessions.list_sessions()

    async def summary(self) -> EventSummary:
        by_kind = await self._events.count_by_kind()
        by_severity: dict[str, int] = {"critical": 0, "warning": 0, "info": 0}
        for kind, count in by_kind.items():
            by_severity[severity_for_kind(kind)] += count
        return EventSummary(
            total_events=sum(by_kind.values()),
            distinct_sessions=len(await self._events.distinct_sessions()),
            active_sessions=len(await self._sessions.list_sessions(status="active")),
            by_severity=by_severity,
            by_kind=by_kind,
        )
