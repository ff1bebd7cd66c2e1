"""AttackEvent Pydantic model: one entry in the append-only event log.

Every interaction the decoy observes is recorded as an AttackEvent, whether
it is an attack indicator (sql_injection_attempt, xss_attempt, ...) or a
plain activity marker (page_visit, logout, ...). The payload is stored in
full; truncation for display is left to the consumer.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Literal, get_args

from pydantic import BaseModel, Field


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


EventKind = Literal[
    "sql_injection_attempt",
    "xss_attempt",
    "malicious_file_upload",
    "file_upload_attempt",
    "brute_force_detected",
    "login_attempt",
    "login_success",
    "login_failure",
    "search_performed",
    "report_submission",
    "page_visit",
    "dashboard_access",
    "logout",
]

EVENT_KINDS: tuple[str, ...] = get_args(EventKind)


class AttackEvent(BaseModel):
    """A classified interaction attached to exactly one session."""

    id: str = Field(default_factory=_new_id)
    sequence: int = 0  # assigned by EventRecorder at append time
    session_id: str
    source_identity: str = "unknown"
    event_kind: EventKind
    payload: str | None = None
    occurred_at: datetime = Field(default_factory=_utcnow)
    user_agent: str | None = None
    page: str | None = None
    context: dict[str, Any] = Field(default_factory=dict)
