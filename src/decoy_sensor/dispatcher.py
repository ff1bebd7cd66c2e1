"""ActivityDispatcher: bridges decoy page interactions to the sensor core.

Called by the activity routes with raw input from the (excluded) decoy UI.
Each entry point makes sure the caller has a session, runs the classifier or
the brute-force window, and writes the resulting events through the
EventRecorder.

Routing:
    page_visit        → page_visit
    dashboard_access  → dashboard_access
    submit_field      → sql_injection_attempt / xss_attempt (per tag),
                        then search_performed or report_submission
    upload_file       → file_upload_attempt (+ malicious_file_upload)
    login             → login_attempt, per-field tags, brute_force_detected
                        (once per burst), login_success | login_failure
    logout            → logout, session ends as logged_out

The dispatcher fails open: session-table errors are logged and the decoy
flow carries on, because the visitor must never see a refusal.
"""

from __future__ import annotations

import secrets
from dataclasses import dataclass, field
from typing import Any

import structlog

from decoy_sensor.classifier import classify_field, classify_filename, scrub_text
from decoy_sensor.config import DecoyConfig
from decoy_sensor.errors import DecoySensorError
from decoy_sensor.model.claim import AuthClaim
from decoy_sensor.model.event import AttackEvent, EventKind
from decoy_sensor.recorder import EventRecorder
from decoy_sensor.tokens import TokenIssuer
from decoy_sensor.tracker import SessionTracker

logger = structlog.get_logger(__name__)

_FIELD_EVENTS: dict[str, EventKind] = {
    "search_query": "search_performed",
    "report_content": "report_submission",
}


def _scrubbed(value: Any) -> Any:
    if isinstance(value, str):
        return scrub_text(value)
    if isinstance(value, dict):
        return {_scrubbed(k): _scrubbed(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_scrubbed(v) for v in value]
    return value


@dataclass
class ActivityOutcome:
    session_id: str
    events: list[AttackEvent] = field(default_factory=list)

    @property
    def kinds(self) -> list[str]:
        return [e.event_kind for e in self.events]


@dataclass
class LoginOutcome(ActivityOutcome):
    success: bool = False
    claim: AuthClaim | None = None
    token: str | None = None
    attempt_count: int = 0


class ActivityDispatcher:
    def __init__(
        self,
        recorder: EventRecorder,
        tracker: SessionTracker,
        issuer: TokenIssuer,
        decoy: DecoyConfig | None = None,
    ) -> None:
        self._recorder = recorder
        self._tracker = tracker
        self._issuer = issuer
        self._decoy = decoy or DecoyConfig()

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    async def page_visit(
        self,
        session_id: str | None,
        source: str,
        page: str,
        referrer: str | None = None,
        user_agent: str | None = None,
    ) -> ActivityOutcome:
        out = ActivityOutcome(await self._ensure_session(session_id, source))
        await self._emit(
            out, source, "page_visit",
            page=page, user_agent=user_agent,
            context={"page": page, "referrer": referrer},
        )
        return out

    async def dashboard_access(
        self, session_id: str | None, source: str, user_agent: str | None = None
    ) -> ActivityOutcome:
        out = ActivityOutcome(await self._ensure_session(session_id, source))
        await self._emit(out, source, "dashboard_access", page="dashboard", user_agent=user_agent)
        return out

    async def submit_field(
        self,
        session_id: str | None,
        source: str,
        field_name: str,
        value: Any,
        user_agent: str | None = None,
    ) -> ActivityOutcome:
        out = ActivityOutcome(await self._ensure_session(session_id, source))
        text = value if isinstance(value, str) else ("" if value is None else str(value))

        for tag, context in classify_field(field_name, text).items():
            await self._emit(out, source, tag, payload=text, user_agent=user_agent, context=context)

        follow_up = _FIELD_EVENTS.get(field_name)
        if follow_up == "search_performed":
            await self._emit(out, source, follow_up, user_agent=user_agent, context={"query": text})
        elif follow_up == "report_submission":
            await self._emit(
                out, source, follow_up, user_agent=user_agent,
                context={"content_length": len(text)},
            )
        return out

    async def upload_file(
        self,
        session_id: str | None,
        source: str,
        filename: str,
        mime_type: str | None,
        size: int | None,
        user_agent: str | None = None,
    ) -> ActivityOutcome:
        out = ActivityOutcome(await self._ensure_session(session_id, source))
        meta = {"filename": filename, "file_type": mime_type, "file_size": size}
        await self._emit(out, source, "file_upload_attempt", user_agent=user_agent, context=dict(meta))

        for tag in classify_filename(filename, mime_type, size):
            await self._emit(out, source, tag, payload=filename, user_agent=user_agent, context=dict(meta))
        return out

    async def login(
        self,
        session_id: str | None,
        source: str,
        username: str,
        password: str,
        user_agent: str | None = None,
    ) -> LoginOutcome:
        out = LoginOutcome(await self._ensure_session(session_id, source))

        self._tracker.note_login_attempt(username)
        out.attempt_count = self._tracker.count_recent_attempts(username)
        await self._emit(
            out, source, "login_attempt", user_agent=user_agent,
            context={"username": username, "password": password, "attempt_number": out.attempt_count},
        )

        for field_name, value in (("username", username), ("password", password)):
            for tag, context in classify_field(field_name, value).items():
                await self._emit(out, source, tag, payload=value, user_agent=user_agent, context=context)

        burst = self._tracker.check_brute_force(username)
        if burst is not None:
            # Recorded only; the decoy never locks the account out
            await self._emit(out, source, burst.tag, user_agent=user_agent, context=burst.metadata)

        if username == self._decoy.username and password == self._decoy.password:
            await self._grant(out, source, username, user_agent)
        else:
            await self._emit(
                out, source, "login_failure", user_agent=user_agent,
                context={"username": username, "reason": "invalid_credentials"},
            )
        return out

    async def logout(self, session_id: str, source: str = "unknown") -> ActivityOutcome:
        session_id = scrub_text(session_id)
        out = ActivityOutcome(session_id)
        await self._emit(out, source, "logout")
        try:
            await self._tracker.end_session(session_id, reason="logout")
        except DecoySensorError as exc:
            logger.error("dispatcher.end_session_failed", session_id=session_id, error=str(exc))
        return out

    async def touch(self, session_id: str) -> None:
        session_id = scrub_text(session_id)
        try:
            await self._tracker.touch(session_id)
        except DecoySensorError as exc:
            logger.error("dispatcher.touch_failed", session_id=session_id, error=str(exc))

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _grant(self, out: LoginOutcome, source: str, username: str, user_agent: str | None) -> None:
        try:
            new_session = await self._tracker.start_session(username, source)
        except DecoySensorError as exc:
            logger.error("dispatcher.start_session_failed", error=str(exc))
            new_session = out.session_id
        out.session_id = new_session
        out.claim = self._issuer.issue(username, self._decoy.role, session_id=new_session)
        out.token = self._issuer.encode(out.claim)
        out.success = True
        await self._emit(
            out, source, "login_success", user_agent=user_agent,
            context={"username": username, "employee_id": out.claim.employee_id},
        )

    async def _ensure_session(self, session_id: str | None, source: str) -> str:
        try:
            if await self._tracker.is_active(session_id):
                await self._tracker.touch(session_id)  # type: ignore[arg-type]
                return session_id  # type: ignore[return-value]
            return await self._tracker.start_session(None, source)
        except DecoySensorError as exc:
            logger.error("dispatcher.session_unavailable", error=str(exc))
            return scrub_text(session_id) if session_id else f"sess_untracked_{secrets.token_hex(8)}"

    async def _emit(
        self,
        out: ActivityOutcome,
        source: str,
        kind: EventKind,
        payload: str | None = None,
        page: str | None = None,
        user_agent: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        # Raw visitor input must stay serializable for every reader of the log
        event = AttackEvent(
            session_id=scrub_text(out.session_id),
            source_identity=scrub_text(source),
            event_kind=kind,
            payload=_scrubbed(payload),
            page=_scrubbed(page),
            user_agent=_scrubbed(user_agent),
            context={k: v for k, v in _scrubbed(context or {}).items() if v is not None},
        )
        await self._recorder.record(event)
        out.events.append(event)
