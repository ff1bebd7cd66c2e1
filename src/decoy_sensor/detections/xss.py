"""Cross-site scripting indicator."""

from __future__ import annotations

import re

_FLAGS = re.IGNORECASE | re.DOTALL

_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"<script\b", _FLAGS),
    re.compile(r"javascript\s*:", _FLAGS),
    re.compile(r"on\w+\s*=", _FLAGS),  # inline event handler attribute
    re.compile(r"<iframe\b", _FLAGS),
    re.compile(r"<img\b[^>]*\bonerror\b", _FLAGS),
    re.compile(r"<svg\b[^>]*\bonload\b", _FLAGS),
    re.compile(r"document\s*\.\s*cookie", _FLAGS),
    re.compile(r"eval\s*\(", _FLAGS),
    re.compile(r"alert\s*\(", _FLAGS),
)


def detect(text: str) -> bool:
    """Return True if text carries any XSS indicator."""
    if not text:
        return False
    return any(p.search(text) for p in _PATTERNS)


def matched_patterns(text: str) -> list[str]:
    if not text:
        return []
    return [p.pattern for p in _PATTERNS if p.search(text)]
