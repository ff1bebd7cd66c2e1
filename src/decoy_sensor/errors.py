"""Exception taxonomy shared by the sensor core and the HTTP layer."""

from __future__ import annotations


class DecoySensorError(Exception):
    """Base class for all sensor errors."""


class MalformedInput(DecoySensorError):
    """Input could not be interpreted. The classifier never raises this."""


class UnknownSession(DecoySensorError):
    def __init__(self, session_id: str) -> None:
        super().__init__(f"Unknown session: {session_id}")
        self.session_id = session_id


class InvalidClaim(DecoySensorError):
    """An auth claim is expired or structurally broken."""

    def __init__(self, status: str, detail: str = "") -> None:
        super().__init__(detail or f"Claim is {status}")
        self.status = status


class StorageUnavailable(DecoySensorError):
    """The event log or session table could not accept a write."""
