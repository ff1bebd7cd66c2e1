"""AuthClaim Pydantic model: the decoy bearer credential."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel

ClaimStatus = Literal["valid", "expired", "malformed"]


class AuthClaim(BaseModel):
    """Identity assertion carried by the decoy login token.

    expires_at is always issued_at plus the configured validity window.
    Claims are not persisted; the caller keeps the encoded token.
    """

    username: str
    role: str
    session_id: str
    issued_at: datetime
    expires_at: datetime
    department: str | None = None
    employee_id: str | None = None
