"""In-process repositories: the default backend and the one used in tests.

Records are copied on the way in and out so callers can never mutate stored
state behind the owning component's back.
"""

from __future__ import annotations

from collections import Counter
from datetime import datetime, timezone

from decoy_sensor.model.event import AttackEvent, EventKind
from decoy_sensor.model.session import SessionRecord, SessionStatus
from decoy_sensor.store.base import EventRepository, SessionRepository


def _aware(ts: datetime) -> datetime:
    return ts if ts.tzinfo is not None else ts.replace(tzinfo=timezone.utc)


class InMemoryEventStore(EventRepository):
    def __init__(self) -> None:
        self._log: list[AttackEvent] = []
        self._by_session: dict[str, list[AttackEvent]] = {}

    async def append(self, event: AttackEvent) -> str:
        stored = event.model_copy(deep=True)
        self._log.append(stored)
        self._by_session.setdefault(stored.session_id, []).append(stored)
        return stored.id

    async def for_session(self, session_id: str) -> list[AttackEvent]:
        events = self._by_session.get(session_id, [])
        return [e.model_copy(deep=True) for e in sorted(events, key=lambda e: e.sequence)]

    async def by_kind(self, kind: EventKind) -> list[AttackEvent]:
        return [e.model_copy(deep=True) for e in self._log if e.event_kind == kind]

    async def list_events(
        self,
        skip: int = 0,
        limit: int = 50,
        kind: EventKind | None = None,
        since: datetime | None = None,
    ) -> list[AttackEvent]:
        matches = [
            e for e in reversed(self._log)
            if (kind is None or e.event_kind == kind)
            and (since is None or _aware(e.occurred_at) >= _aware(since))
        ]
        return [e.model_copy(deep=True) for e in matches[skip:skip + limit]]

    async def count_by_kind(self) -> dict[str, int]:
        return dict(Counter(e.event_kind for e in self._log))

    async def distinct_sessions(self) -> list[str]:
        return list(self._by_session)

    async def max_sequence(self) -> int:
        return max((e.sequence for e in self._log), default=0)


class InMemorySessionStore(SessionRepository):
    def __init__(self) -> None:
        self._sessions: dict[str, SessionRecord] = {}

    async def upsert(self, record: SessionRecord) -> None:
        self._sessions[record.session_id] = record.model_copy()

    async def get(self, session_id: str) -> SessionRecord | None:
        record = self._sessions.get(session_id)
        return record.model_copy() if record else None

    async def list_sessions(self, status: SessionStatus | None = None) -> list[SessionRecord]:
        return [
            r.model_copy() for r in self._sessions.values()
            if status is None or r.status == status
        ]
