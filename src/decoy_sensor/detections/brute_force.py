"""Brute-force login detection.

Login attempts are tracked per identity label in a bounded in-memory
sliding window (collections.deque). The window answers "how many attempts
for this identity within the last N seconds" without scanning the event log.

detect() is a pure threshold check over that count. It reports a burst once:
after firing for an identity it stays quiet until the window drains below the
threshold again. Emitting the brute_force_detected event is left to the caller.
"""

from __future__ import annotations

from collections import deque
from datetime import datetime, timedelta, timezone

from decoy_sensor.config import BruteForceConfig
from decoy_sensor.detections.base import DetectionResult


def _aware(ts: datetime) -> datetime:
    return ts if ts.tzinfo is not None else ts.replace(tzinfo=timezone.utc)


class AttemptWindowState:
    """In-memory sliding window of login attempt timestamps, keyed by identity label.

    Entries older than window_seconds are pruned on write and by prune(), never
    by a count. The wall clock may regress, so pruning scans the whole window
    rather than assuming the deque is sorted.
    """

    def __init__(self, max_attempts: int = 1000, window_seconds: int = 300) -> None:
        self._max_attempts = max_attempts
        self._window = timedelta(seconds=window_seconds)
        self._windows: dict[str, deque[datetime]] = {}
        self._flagged: set[str] = set()

    def __len__(self) -> int:
        return len(self._windows)

    def record(self, identity: str, timestamp: datetime) -> None:
        timestamp = _aware(timestamp)
        if identity in self._windows:
            self._drop_older_than(identity, timestamp - self._window)
        win = self._windows.get(identity)
        if win is None:
            win = self._windows[identity] = deque(maxlen=self._max_attempts)
        win.append(timestamp)

    def count_in_window(self, identity: str, window_seconds: int, as_of: datetime) -> int:
        """Return the number of attempts for identity in [as_of - window, as_of]. Read-only."""
        win = self._windows.get(identity)
        if not win:
            return 0
        as_of = _aware(as_of)
        cutoff = as_of - timedelta(seconds=window_seconds)
        return sum(1 for ts in win if cutoff <= ts <= as_of)

    def prune(self, as_of: datetime) -> int:
        """Drop stale attempts and forget identities left with none. Returns identities dropped."""
        cutoff = _aware(as_of) - self._window
        before = len(self._windows)
        for identity in list(self._windows):
            self._drop_older_than(identity, cutoff)
        return before - len(self._windows)

    def _drop_older_than(self, identity: str, cutoff: datetime) -> None:
        win = self._windows[identity]
        kept = [ts for ts in win if ts >= cutoff]
        if len(kept) == len(win):
            return
        if kept:
            self._windows[identity] = deque(kept, maxlen=self._max_attempts)
        else:
            del self._windows[identity]
            self._flagged.discard(identity)

    def is_flagged(self, identity: str) -> bool:
        return identity in self._flagged

    def flag(self, identity: str) -> None:
        self._flagged.add(identity)

    def clear_flag(self, identity: str) -> None:
        self._flagged.discard(identity)


def detect(
    identity: str,
    attempt_count: int,
    state: AttemptWindowState,
    config: BruteForceConfig,
) -> DetectionResult | None:
    """Return a DetectionResult the first time attempt_count reaches the threshold."""
    if attempt_count < config.attempt_threshold:
        state.clear_flag(identity)
        return None
    if state.is_flagged(identity):
        return None

    state.flag(identity)
    minutes = config.window_seconds // 60
    return DetectionResult(
        tag="brute_force_detected",
        identity=identity,
        description=(
            f"Brute force against '{identity}': {attempt_count} login attempts "
            f"within {config.window_seconds}s (threshold: {config.attempt_threshold})"
        ),
        metadata={
            "username": identity,
            "attempt_count": attempt_count,
            "timeframe": f"{minutes}_minutes",
            "window_seconds": config.window_seconds,
        },
    )
