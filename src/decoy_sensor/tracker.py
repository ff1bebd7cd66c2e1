"""SessionTracker: owns the session table and the login-attempt window.

State machine per session:

    active ──timeout sweep──▶ expired
       └────explicit end────▶ logged_out

Both end states are terminal; touch/end on a terminal or unknown session is
a silent no-op. Every read-modify-write of a session runs under that
session's asyncio.Lock, so touch, end_session and sweep can interleave
freely without lost updates.

Brute-force counting is a query over an in-memory per-identity window, not
over the event log. The tracker reports counts; emitting events is the
caller's job.
"""

from __future__ import annotations

import asyncio
import weakref
from datetime import datetime, timedelta, timezone
from typing import Callable

import structlog

from decoy_sensor.config import BruteForceConfig, SessionConfig
from decoy_sensor.detections import brute_force
from decoy_sensor.detections.base import DetectionResult
from decoy_sensor.detections.brute_force import AttemptWindowState
from decoy_sensor.model.session import ANONYMOUS, EndReason, SessionRecord, SessionStatus
from decoy_sensor.store.base import SessionRepository

logger = structlog.get_logger(__name__)

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


def _aware(ts: datetime) -> datetime:
    return ts if ts.tzinfo is not None else ts.replace(tzinfo=timezone.utc)


class SessionTracker:
    def __init__(
        self,
        store: SessionRepository,
        session_config: SessionConfig | None = None,
        brute_force_config: BruteForceConfig | None = None,
        clock: Clock = _utcnow,
    ) -> None:
        self._store = store
        self._config = session_config or SessionConfig()
        self._bf_config = brute_force_config or BruteForceConfig()
        self._clock = clock
        # A lock lives only while some coroutine holds or waits on it
        self._locks: weakref.WeakValueDictionary[str, asyncio.Lock] = weakref.WeakValueDictionary()
        self._attempts = AttemptWindowState(
            self._bf_config.max_attempts_tracked, self._bf_config.window_seconds
        )

    @property
    def timeout(self) -> timedelta:
        return timedelta(seconds=self._config.timeout_seconds)

    def _lock_for(self, session_id: str) -> asyncio.Lock:
        lock = self._locks.get(session_id)
        if lock is None:
            lock = self._locks[session_id] = asyncio.Lock()
        return lock

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------

    async def start_session(
        self,
        identity_label: str | None = None,
        source_identity: str = "unknown",
    ) -> str:
        """Create a brand-new active session and return its id. Never deduplicates."""
        now = self._clock()
        record = SessionRecord(
            identity_label=identity_label or ANONYMOUS,
            source_identity=source_identity,
            started_at=now,
            last_activity_at=now,
        )
        async with self._lock_for(record.session_id):
            await self._store.upsert(record)
        logger.info(
            "session.started",
            session_id=record.session_id,
            identity=record.identity_label,
            source=source_identity,
        )
        return record.session_id

    async def touch(self, session_id: str) -> None:
        """Move last_activity_at forward to now. Unknown or ended sessions are ignored."""
        async with self._lock_for(session_id):
            record = await self._store.get(session_id)
            if record is None or not record.is_active:
                return
            now = self._clock()
            if _aware(now) > _aware(record.last_activity_at):
                record.last_activity_at = now
                await self._store.upsert(record)

    async def end_session(self, session_id: str, reason: EndReason = "logout") -> SessionRecord | None:
        """End an active session. Idempotent: a terminal session is returned unchanged."""
        async with self._lock_for(session_id):
            record = await self._store.get(session_id)
            if record is None:
                return None
            if not record.is_active:
                return record
            record.status = "expired" if reason == "timeout" else "logged_out"
            record.ended_at = self._clock()
            await self._store.upsert(record)
        logger.info("session.ended", session_id=session_id, status=record.status)
        return record

    async def sweep(self, now: datetime | None = None) -> list[str]:
        """Expire every active session idle for longer than the timeout.

        Each session is re-read and updated under its own lock; cancellation
        takes effect between sessions, never halfway through one.
        """
        now = _aware(now or self._clock())
        expired: list[str] = []
        for candidate in await self._store.list_sessions(status="active"):
            if now - _aware(candidate.last_activity_at) <= self.timeout:
                continue
            if await asyncio.shield(self._expire_if_idle(candidate.session_id, now)):
                expired.append(candidate.session_id)
        forgotten = self._attempts.prune(now)
        if expired or forgotten:
            logger.info("session.sweep", expired=len(expired), identities_forgotten=forgotten)
        return expired

    async def _expire_if_idle(self, session_id: str, now: datetime) -> bool:
        async with self._lock_for(session_id):
            record = await self._store.get(session_id)
            if record is None or not record.is_active:
                return False
            if now - _aware(record.last_activity_at) <= self.timeout:
                return False  # touched since the candidate list was read
            record.status = "expired"
            record.ended_at = now
            await self._store.upsert(record)
            return True

    async def get_session(self, session_id: str) -> SessionRecord | None:
        return await self._store.get(session_id)

    async def list_sessions(self, status: SessionStatus | None = None) -> list[SessionRecord]:
        return await self._store.list_sessions(status=status)

    async def is_active(self, session_id: str | None) -> bool:
        if not session_id:
            return False
        record = await self._store.get(session_id)
        return record is not None and record.is_active

    # ------------------------------------------------------------------
    # Login attempt window
    # ------------------------------------------------------------------

    def note_login_attempt(self, identity_label: str, at: datetime | None = None) -> None:
        self._attempts.record(identity_label, at or self._clock())

    def count_recent_attempts(
        self,
        identity_label: str,
        window: timedelta | None = None,
        now: datetime | None = None,
    ) -> int:
        """Attempts for identity_label within window (default: brute-force window) of now."""
        seconds = int(window.total_seconds()) if window else self._bf_config.window_seconds
        return self._attempts.count_in_window(identity_label, seconds, now or self._clock())

    def check_brute_force(self, identity_label: str, now: datetime | None = None) -> DetectionResult | None:
        count = self.count_recent_attempts(identity_label, now=now)
        return brute_force.detect(identity_label, count, self._attempts, self._bf_config)
