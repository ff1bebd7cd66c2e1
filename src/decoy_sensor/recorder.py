"""EventRecorder: the single append path into the event log.

record() never fails from the caller's point of view. Appends are serialized
behind one asyncio.Lock, which also hands out the per-process sequence
number that defines insertion order. If the repository refuses a write the
event is parked in a bounded retry buffer and re-attempted, oldest first,
ahead of the next append.
"""

from __future__ import annotations

import asyncio
from collections import deque

import structlog

from decoy_sensor.aggregator import severity_bucket
from decoy_sensor.config import RecorderConfig
from decoy_sensor.errors import StorageUnavailable
from decoy_sensor.model.event import AttackEvent
from decoy_sensor.store.base import EventRepository

logger = structlog.get_logger(__name__)


class EventRecorder:
    def __init__(self, store: EventRepository, config: RecorderConfig | None = None) -> None:
        self._store = store
        self._config = config or RecorderConfig()
        self._lock = asyncio.Lock()
        self._sequence = 0
        self._pending: deque[AttackEvent] = deque()
        self._dropped = 0

    async def start(self) -> None:
        """Resume sequence numbering from the persisted log."""
        self._sequence = await self._store.max_sequence()
        logger.info("recorder.started", sequence=self._sequence)

    @property
    def pending(self) -> int:
        return len(self._pending)

    @property
    def dropped(self) -> int:
        return self._dropped

    async def record(self, event: AttackEvent) -> str:
        """Append event to the log and return its id."""
        async with self._lock:
            self._sequence += 1
            event.sequence = self._sequence
            await self._flush_locked()
            if self._pending:
                self._buffer(event)
            else:
                await self._append_locked(event)

        self._log(event)
        return event.id

    async def flush(self) -> int:
        """Retry buffered events; return how many are still pending."""
        async with self._lock:
            await self._flush_locked()
            return len(self._pending)

    async def _append_locked(self, event: AttackEvent) -> None:
        try:
            await self._store.append(event)
        except StorageUnavailable as exc:
            logger.error("recorder.append_failed", event_id=event.id, error=str(exc))
            self._buffer(event)
        except Exception:
            logger.exception("recorder.append_crashed", event_id=event.id)
            self._buffer(event)

    async def _flush_locked(self) -> None:
        while self._pending:
            event = self._pending[0]
            try:
                await self._store.append(event)
            except Exception:
                return
            self._pending.popleft()

    def _buffer(self, event: AttackEvent) -> None:
        if len(self._pending) >= self._config.retry_buffer_size:
            lost = self._pending.popleft()
            self._dropped += 1
            logger.error("recorder.buffer_overflow", dropped_event_id=lost.id, dropped_total=self._dropped)
        self._pending.append(event)

    def _log(self, event: AttackEvent) -> None:
        fields = dict(
            event_id=event.id,
            session_id=event.session_id,
            event_kind=event.event_kind,
            source=event.source_identity,
            sequence=event.sequence,
        )
        if severity_bucket(event) == "critical":
            logger.warning("attack.detected", **fields)
        else:
            logger.debug("event.recorded", **fields)
