"""Shared tag vocabulary and DetectionResult: the internal output of stateful detections."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

# Attack-signal tags are a subset of EventKind so a tag maps 1:1 to the
# event recorded for it.
TagKind = Literal[
    "sql_injection_attempt",
    "xss_attempt",
    "malicious_file_upload",
    "brute_force_detected",
]


@dataclass
class DetectionResult:
    tag: TagKind
    identity: str
    description: str
    metadata: dict[str, Any] = field(default_factory=dict)
