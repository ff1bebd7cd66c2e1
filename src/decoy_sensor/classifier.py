"""Pattern classifier: maps raw input strings and upload metadata to attack tags.

Pure functions with no I/O and no state. Any input is accepted: bytes are
decoded with replacement characters, None and other non-text values are
classified as empty.
"""

from __future__ import annotations

from typing import Any, Literal

from decoy_sensor.detections import malicious_file, sql_injection, xss
from decoy_sensor.detections.base import TagKind

FieldName = Literal["search_query", "report_content", "database_query", "username", "password"]


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).decode("utf-8", errors="replace")
    try:
        return str(value)
    except Exception:
        return ""


def scrub_text(text: str) -> str:
    """Escape lone surrogates so text is always encodable as UTF-8."""
    return text.encode("utf-8", "backslashreplace").decode("utf-8")


def classify_text(value: Any) -> set[TagKind]:
    """Return the attack tags for a free-text input. Empty input → empty set."""
    text = _as_text(value)
    tags: set[TagKind] = set()
    if not text:
        return tags
    if sql_injection.detect(text):
        tags.add("sql_injection_attempt")
    if xss.detect(text):
        tags.add("xss_attempt")
    return tags


def classify_filename(name: Any, declared_mime: str | None = None, size: int | None = None) -> set[TagKind]:
    """Return the attack tags for an upload.

    Only the filename decides; declared_mime and size are accepted so callers
    pass the full descriptor, and end up in the recorded event context.
    """
    filename = _as_text(name)
    if malicious_file.detect(filename):
        return {"malicious_file_upload"}
    return set()


def classify_field(field: str, value: Any) -> dict[TagKind, dict[str, Any]]:
    """Classify a labelled form field, returning per-tag context for event recording."""
    text = _as_text(value)
    found: dict[TagKind, dict[str, Any]] = {}
    for tag in sorted(classify_text(text)):
        detector = sql_injection if tag == "sql_injection_attempt" else xss
        found[tag] = {"field": field, "patterns": detector.matched_patterns(text)}
    return found
