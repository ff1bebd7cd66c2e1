"""Abstract repositories for the event log and the session table.

Components receive a repository at construction time; the concrete backend
(in-process or MongoDB) is chosen once in the app lifespan.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from decoy_sensor.model.event import AttackEvent, EventKind
from decoy_sensor.model.session import SessionRecord, SessionStatus


class EventRepository(ABC):
    @abstractmethod
    async def append(self, event: AttackEvent) -> str:
        """Append one event. Raises StorageUnavailable if the write is refused."""
        ...

    @abstractmethod
    async def for_session(self, session_id: str) -> list[AttackEvent]:
        """Events of one session in insertion (sequence) order."""
        ...

    @abstractmethod
    async def by_kind(self, kind: EventKind) -> list[AttackEvent]:
        ...

    @abstractmethod
    async def list_events(
        self,
        skip: int = 0,
        limit: int = 50,
        kind: EventKind | None = None,
        since: datetime | None = None,
    ) -> list[AttackEvent]:
        """Newest-first page of the log."""
        ...

    @abstractmethod
    async def count_by_kind(self) -> dict[str, int]:
        ...

    @abstractmethod
    async def distinct_sessions(self) -> list[str]:
        ...

    @abstractmethod
    async def max_sequence(self) -> int:
        """Highest sequence number stored, 0 for an empty log."""
        ...


class SessionRepository(ABC):
    @abstractmethod
    async def upsert(self, record: SessionRecord) -> None:
        ...

    @abstractmethod
    async def get(self, session_id: str) -> SessionRecord | None:
        ...

    @abstractmethod
    async def list_sessions(self, status: SessionStatus | None = None) -> list[SessionRecord]:
        ...
