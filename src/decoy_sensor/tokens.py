"""TokenIssuer: builds, encodes and validates decoy AuthClaims.

Tokens are real HS256 JWTs signed with the configured secret (PyJWT). A
tampered or foreign token therefore validates as "malformed". Claims are not
stored anywhere; the caller keeps the encoded token.
"""

from __future__ import annotations

import secrets
import string
from datetime import datetime, timedelta, timezone
from typing import Callable

import jwt

from decoy_sensor.config import TokenConfig
from decoy_sensor.errors import InvalidClaim
from decoy_sensor.model.claim import AuthClaim, ClaimStatus
from decoy_sensor.model.session import new_session_id

Clock = Callable[[], datetime]

_EMPLOYEE_ALPHABET = string.ascii_uppercase + string.digits


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


def _aware(ts: datetime) -> datetime:
    return ts if ts.tzinfo is not None else ts.replace(tzinfo=timezone.utc)


def _employee_id() -> str:
    return "EMP_" + "".join(secrets.choice(_EMPLOYEE_ALPHABET) for _ in range(8))


class TokenIssuer:
    def __init__(self, config: TokenConfig | None = None, clock: Clock = _utcnow) -> None:
        self._config = config or TokenConfig()
        self._clock = clock

    @property
    def validity(self) -> timedelta:
        return timedelta(seconds=self._config.validity_seconds)

    def issue(self, username: str, role: str = "admin", session_id: str | None = None) -> AuthClaim:
        # JWT timestamps carry whole seconds; truncate so encode/decode is lossless
        issued_at = _aware(self._clock()).replace(microsecond=0)
        return AuthClaim(
            username=username,
            role=role,
            session_id=session_id or new_session_id(),
            issued_at=issued_at,
            expires_at=issued_at + self.validity,
            department=self._config.department,
            employee_id=_employee_id(),
        )

    def validate(self, claim: AuthClaim | str, now: datetime | None = None) -> ClaimStatus:
        """Return "valid", "expired" or "malformed". Never raises."""
        if isinstance(claim, str):
            try:
                claim = self.decode(claim)
            except InvalidClaim:
                return "malformed"
        if not self._well_formed(claim):
            return "malformed"
        now = _aware(now or self._clock())
        if now < _aware(claim.expires_at):
            return "valid"
        return "expired"

    def refresh(self, claim: AuthClaim | str, now: datetime | None = None) -> AuthClaim:
        """Issue a fresh claim for the same identity and session, if claim is valid."""
        status = self.validate(claim, now=now)
        if status != "valid":
            raise InvalidClaim(status)
        if isinstance(claim, str):
            claim = self.decode(claim)
        return self.issue(claim.username, claim.role, session_id=claim.session_id)

    def encode(self, claim: AuthClaim) -> str:
        payload = {
            "username": claim.username,
            "role": claim.role,
            "session_id": claim.session_id,
            "iat": int(_aware(claim.issued_at).timestamp()),
            "exp": int(_aware(claim.expires_at).timestamp()),
        }
        if claim.department is not None:
            payload["department"] = claim.department
        if claim.employee_id is not None:
            payload["employee_id"] = claim.employee_id
        return jwt.encode(payload, self._config.secret, algorithm=self._config.algorithm)

    def decode(self, token: str) -> AuthClaim:
        """Verify the signature and rebuild the claim. Expiry is checked by validate()."""
        try:
            payload = jwt.decode(
                token,
                self._config.secret,
                algorithms=[self._config.algorithm],
                options={"verify_exp": False, "require": ["exp", "iat"]},
            )
            return AuthClaim(
                username=payload["username"],
                role=payload["role"],
                session_id=payload["session_id"],
                issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
                expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
                department=payload.get("department"),
                employee_id=payload.get("employee_id"),
            )
        except (jwt.InvalidTokenError, KeyError, TypeError, ValueError) as exc:
            raise InvalidClaim("malformed", str(exc)) from exc

    def session_from_token(self, token: str, now: datetime | None = None) -> str | None:
        if self.validate(token, now=now) != "valid":
            return None
        return self.decode(token).session_id

    def _well_formed(self, claim: AuthClaim) -> bool:
        if not claim.username or not claim.role or not claim.session_id:
            return False
        return _aware(claim.expires_at) - _aware(claim.issued_at) == self.validity
