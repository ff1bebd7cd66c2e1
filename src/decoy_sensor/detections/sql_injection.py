"""SQL injection indicator.

Fires when the input contains any of:
    - an unescaped quote character (' or ")
    - a SQL keyword as a whole word, case-insensitive
    - a comment marker: --, #, /*
    - a boolean tautology shape: '... or ...=...' / '... and ...=...'
    - a numeric tautology: or 1=1 / and 2=2
"""

from __future__ import annotations

import re

SQL_KEYWORDS = (
    "UNION", "SELECT", "INSERT", "DELETE", "UPDATE",
    "DROP", "CREATE", "ALTER", "EXEC", "EXECUTE",
)

_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"(?<!\\)(?:\\\\)*['\"]"),  # quote not preceded by an odd run of backslashes
    re.compile(r"\b(?:" + "|".join(SQL_KEYWORDS) + r")\b", re.IGNORECASE),
    re.compile(r"--|#|/\*"),
    re.compile(r"'.*\b(?:or|and)\b.*=.*", re.IGNORECASE | re.DOTALL),
    re.compile(r"\b(?:or|and)\b\s+\d+\s*=\s*\d+", re.IGNORECASE),
)


def detect(text: str) -> bool:
    """Return True if text carries any SQL injection indicator."""
    if not text:
        return False
    return any(p.search(text) for p in _PATTERNS)


def matched_patterns(text: str) -> list[str]:
    """Return the source of every pattern that matched, for event context."""
    if not text:
        return []
    return [p.pattern for p in _PATTERNS if p.search(text)]
