"""Malicious upload indicator.

Matches a blocklisted extension anywhere in the lower-cased filename, not
only as the suffix. "report.php.pdf" is therefore flagged; this mirrors how
the decoy portal has always classified uploads.
"""

from __future__ import annotations

BLOCKED_EXTENSIONS = (".exe", ".bat", ".cmd", ".scr", ".php", ".jsp", ".asp")


def matched_extension(filename: str) -> str | None:
    """Return the first blocklisted extension contained in filename, else None."""
    if not filename:
        return None
    lowered = filename.lower()
    for ext in BLOCKED_EXTENSIONS:
        if ext in lowered:
            return ext
    return None


def detect(filename: str) -> bool:
    return matched_extension(filename) is not None
