"""Unit tests for the pattern classifier."""

from __future__ import annotations

import pytest

from decoy_sensor.classifier import classify_field, classify_filename, classify_text, scrub_text


def test_tautology_is_sql_only() -> None:
    assert classify_text("' OR '1'='1") == {"sql_injection_attempt"}


def test_img_onerror_is_xss_only() -> None:
    assert classify_text("<img src=x onerror=alert(1)>") == {"xss_attempt"}


def test_input_can_carry_both_tags() -> None:
    tags = classify_text("'><script>alert(1)</script>")
    assert tags == {"sql_injection_attempt", "xss_attempt"}


def test_empty_input_yields_no_tags() -> None:
    assert classify_text("") == set()
    assert classify_text(None) == set()


@pytest.mark.parametrize(
    "payload",
    ["<script>x</script>", "prefix <script src=a.js> suffix", "<script>"],
)
def test_script_element_always_xss(payload: str) -> None:
    assert "xss_attempt" in classify_text(payload)


@pytest.mark.parametrize("payload", ["'", "it's", "a ' b", "x'--"])
def test_unescaped_single_quote_always_sql(payload: str) -> None:
    assert "sql_injection_attempt" in classify_text(payload)


def test_invalid_utf8_bytes_do_not_raise() -> None:
    tags = classify_text(b"\xff\xfe<script>\x80")
    assert "xss_attempt" in tags


def test_non_text_values_are_coerced() -> None:
    assert classify_text(12345) == set()


def test_lone_surrogates_do_not_raise() -> None:
    assert classify_text("\udc80 plain") == set()


@pytest.mark.parametrize("name", ["shell.php", "SHELL.PHP", "a.exe", "b.bat", "c.cmd", "d.scr", "e.jsp", "f.asp"])
def test_blocklisted_filenames_flagged(name: str) -> None:
    assert classify_filename(name, "application/octet-stream", 10) == {"malicious_file_upload"}


@pytest.mark.parametrize("name", ["report.pdf", "letter.docx", "xray.png"])
def test_benign_filenames_not_flagged(name: str) -> None:
    assert classify_filename(name, "application/pdf", 1024) == set()


def test_filename_verdict_ignores_declared_mime() -> None:
    assert classify_filename("shell.php", "image/png", 0) == {"malicious_file_upload"}


def test_classify_field_returns_context_per_tag() -> None:
    found = classify_field("search_query", "' UNION SELECT 1")
    assert set(found) == {"sql_injection_attempt"}
    assert found["sql_injection_attempt"]["field"] == "search_query"
    assert found["sql_injection_attempt"]["patterns"]


def test_classify_field_clean_value() -> None:
    assert classify_field("report_content", "Routine check, all stable.") == {}


def test_lone_surrogate_still_classified() -> None:
    assert classify_text("\ud800' OR 1=1") == {"sql_injection_attempt"}


def test_scrub_text_escapes_lone_surrogates() -> None:
    cleaned = scrub_text("\ud800<script>")
    assert cleaned == "\\ud800<script>"
    cleaned.encode("utf-8")


def test_scrub_text_keeps_valid_text() -> None:
    assert scrub_text("naïve 😀 ' OR 1=1") == "naïve 😀 ' OR 1=1"
