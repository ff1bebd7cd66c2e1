"""Unit tests for the ActivityDispatcher decoy flows."""

from __future__ import annotations

from unittest.mock import AsyncMock

from decoy_sensor.aggregator import Aggregator
from decoy_sensor.dispatcher import ActivityDispatcher
from decoy_sensor.errors import StorageUnavailable
from decoy_sensor.tokens import TokenIssuer
from decoy_sensor.tracker import SessionTracker

SOURCE = "203.0.113.7"


async def test_page_visit_creates_session_when_missing(
    dispatcher: ActivityDispatcher, tracker: SessionTracker
) -> None:
    out = await dispatcher.page_visit(None, SOURCE, "/login", referrer="https://search.example")
    assert out.kinds == ["page_visit"]
    record = await tracker.get_session(out.session_id)
    assert record is not None
    assert record.source_identity == SOURCE
    assert out.events[0].context == {"page": "/login", "referrer": "https://search.example"}


async def test_known_session_is_reused_and_touched(
    dispatcher: ActivityDispatcher, tracker: SessionTracker, clock
) -> None:
    session_id = await tracker.start_session(None, SOURCE)
    clock.advance(minutes=2)
    out = await dispatcher.dashboard_access(session_id, SOURCE)
    assert out.session_id == session_id
    assert (await tracker.get_session(session_id)).last_activity_at == clock.now  # type: ignore[union-attr]


async def test_ended_session_is_replaced(dispatcher: ActivityDispatcher, tracker: SessionTracker) -> None:
    session_id = await tracker.start_session(None, SOURCE)
    await tracker.end_session(session_id)
    out = await dispatcher.page_visit(session_id, SOURCE, "/")
    assert out.session_id != session_id


async def test_search_with_sql_injection(dispatcher: ActivityDispatcher, aggregator: Aggregator) -> None:
    out = await dispatcher.submit_field(None, SOURCE, "search_query", "' UNION SELECT * FROM users --")
    assert out.kinds == ["sql_injection_attempt", "search_performed"]
    attack = out.events[0]
    assert attack.payload == "' UNION SELECT * FROM users --"
    assert attack.context["field"] == "search_query"

    stored = await aggregator.events_for_session(out.session_id)
    assert [e.event_kind for e in stored] == out.kinds


async def test_report_with_xss(dispatcher: ActivityDispatcher) -> None:
    out = await dispatcher.submit_field(None, SOURCE, "report_content", "<script>alert(1)</script>")
    assert out.kinds == ["xss_attempt", "report_submission"]
    assert out.events[1].context == {"content_length": len("<script>alert(1)</script>")}


async def test_database_query_records_only_attacks(dispatcher: ActivityDispatcher) -> None:
    clean = await dispatcher.submit_field(None, SOURCE, "database_query", "patients")
    assert clean.kinds == []
    dirty = await dispatcher.submit_field(clean.session_id, SOURCE, "database_query", "DROP TABLE patients")
    assert dirty.kinds == ["sql_injection_attempt"]
    assert dirty.session_id == clean.session_id


async def test_upload_benign_file(dispatcher: ActivityDispatcher) -> None:
    out = await dispatcher.upload_file(None, SOURCE, "scan.png", "image/png", 2048)
    assert out.kinds == ["file_upload_attempt"]
    assert out.events[0].context == {"filename": "scan.png", "file_type": "image/png", "file_size": 2048}


async def test_upload_malicious_file(dispatcher: ActivityDispatcher) -> None:
    out = await dispatcher.upload_file(None, SOURCE, "shell.php", "image/png", 512)
    assert out.kinds == ["file_upload_attempt", "malicious_file_upload"]
    assert out.events[1].payload == "shell.php"


async def test_failed_login(dispatcher: ActivityDispatcher) -> None:
    out = await dispatcher.login(None, SOURCE, "doctor", "letmein")
    assert out.success is False
    assert out.token is None
    assert out.kinds == ["login_attempt", "login_failure"]
    assert out.events[0].context["password"] == "letmein"
    assert out.events[1].context["reason"] == "invalid_credentials"


async def test_decoy_credentials_grant_claim(
    dispatcher: ActivityDispatcher, tracker: SessionTracker, issuer: TokenIssuer
) -> None:
    anonymous = (await dispatcher.page_visit(None, SOURCE, "/login")).session_id
    out = await dispatcher.login(anonymous, SOURCE, "admin", "admin123")

    assert out.success is True
    assert out.kinds == ["login_attempt", "login_success"]
    assert out.session_id != anonymous
    assert out.claim is not None and out.claim.session_id == out.session_id
    assert issuer.validate(out.token) == "valid"  # type: ignore[arg-type]
    record = await tracker.get_session(out.session_id)
    assert record is not None and record.identity_label == "admin"


async def test_sql_injection_in_login_fields(dispatcher: ActivityDispatcher) -> None:
    out = await dispatcher.login(None, SOURCE, "admin' --", "x' OR '1'='1")
    kinds = out.kinds
    assert kinds.count("sql_injection_attempt") == 2
    fields = [e.context["field"] for e in out.events if e.event_kind == "sql_injection_attempt"]
    assert fields == ["username", "password"]


async def test_brute_force_recorded_once_and_login_still_allowed(
    dispatcher: ActivityDispatcher, aggregator: Aggregator
) -> None:
    session_id = None
    for _ in range(6):
        out = await dispatcher.login(session_id, SOURCE, "admin", "wrong")
        session_id = out.session_id
    assert out.attempt_count == 6

    detected = await aggregator.events_by_kind("brute_force_detected")
    assert len(detected) == 1
    assert detected[0].context["attempt_count"] == 5

    granted = await dispatcher.login(session_id, SOURCE, "admin", "admin123")
    assert granted.success is True


async def test_logout_ends_session(dispatcher: ActivityDispatcher, tracker: SessionTracker) -> None:
    session_id = (await dispatcher.page_visit(None, SOURCE, "/")).session_id
    out = await dispatcher.logout(session_id, SOURCE)
    assert out.kinds == ["logout"]
    assert (await tracker.get_session(session_id)).status == "logged_out"  # type: ignore[union-attr]


async def test_session_store_outage_fails_open(dispatcher: ActivityDispatcher, tracker: SessionTracker) -> None:
    tracker.is_active = AsyncMock(side_effect=StorageUnavailable("down"))  # type: ignore[method-assign]
    out = await dispatcher.submit_field(None, SOURCE, "search_query", "<script>")
    assert out.session_id.startswith("sess_untracked_")
    assert "xss_attempt" in out.kinds


async def test_unencodable_input_is_stored_escaped(
    dispatcher: ActivityDispatcher, aggregator: Aggregator
) -> None:
    out = await dispatcher.submit_field(None, SOURCE, "search_query", "\ud800' OR 1=1")
    assert out.kinds == ["sql_injection_attempt", "search_performed"]

    for event in await aggregator.events_for_session(out.session_id):
        # Every stored event must serialize cleanly for the monitoring API
        event.model_dump_json().encode("utf-8")
    attack = out.events[0]
    assert attack.payload == "\\ud800' OR 1=1"
    assert out.events[1].context["query"] == "\\ud800' OR 1=1"


async def test_unencodable_session_id_on_logout(dispatcher: ActivityDispatcher) -> None:
    out = await dispatcher.logout("sess_\udfff", SOURCE)
    assert out.session_id == "sess_\\udfff"
    out.events[0].model_dump_json().encode("utf-8")
