"""SessionRecord Pydantic model: one row of the session table."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, Field

SessionStatus = Literal["active", "expired", "logged_out"]
EndReason = Literal["logout", "timeout"]

ANONYMOUS = "anonymous"


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


def new_session_id() -> str:
    return f"sess_{uuid.uuid4().hex[:16]}"


class SessionRecord(BaseModel):
    """A tracked browsing session.

    status moves active → expired (timeout sweep) or active → logged_out
    (explicit end). Both end states are terminal.
    """

    session_id: str = Field(default_factory=new_session_id)
    user_id: str = Field(default_factory=lambda: f"user_{uuid.uuid4().hex[:12]}")
    identity_label: str = ANONYMOUS
    source_identity: str = "unknown"
    started_at: datetime = Field(default_factory=_utcnow)
    last_activity_at: datetime = Field(default_factory=_utcnow)
    ended_at: datetime | None = None
    status: SessionStatus = "active"

    @property
    def is_active(self) -> bool:
        return self.status == "active"
