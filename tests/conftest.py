"""Shared pytest fixtures for the decoy sensor test suite."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Callable

import pytest

from decoy_sensor.aggregator import Aggregator
from decoy_sensor.config import (
    BruteForceConfig,
    DecoyConfig,
    RecorderConfig,
    SessionConfig,
    TokenConfig,
)
from decoy_sensor.detections.brute_force import AttemptWindowState
from decoy_sensor.dispatcher import ActivityDispatcher
from decoy_sensor.model.event import AttackEvent
from decoy_sensor.recorder import EventRecorder
from decoy_sensor.store.memory import InMemoryEventStore, InMemorySessionStore
from decoy_sensor.tokens import TokenIssuer
from decoy_sensor.tracker import SessionTracker

T0 = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
TEST_SECRET = "test-secret-key-with-at-least-32-bytes!!"


class FakeClock:
    """Deterministic clock; call it to read, advance() to move forward."""

    def __init__(self, start: datetime = T0) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def session_config() -> SessionConfig:
    return SessionConfig(timeout_seconds=1800, sweep_interval_seconds=60)


@pytest.fixture
def brute_force_config() -> BruteForceConfig:
    return BruteForceConfig(window_seconds=300, attempt_threshold=5, max_attempts_tracked=100)


@pytest.fixture
def token_config() -> TokenConfig:
    return TokenConfig(validity_seconds=8 * 3600, secret=TEST_SECRET)


@pytest.fixture
def recorder_config() -> RecorderConfig:
    return RecorderConfig(retry_buffer_size=10)


# ---------------------------------------------------------------------------
# Core component fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def event_store() -> InMemoryEventStore:
    return InMemoryEventStore()


@pytest.fixture
def session_store() -> InMemorySessionStore:
    return InMemorySessionStore()


@pytest.fixture
def recorder(event_store: InMemoryEventStore, recorder_config: RecorderConfig) -> EventRecorder:
    return EventRecorder(event_store, recorder_config)


@pytest.fixture
def tracker(
    session_store: InMemorySessionStore,
    session_config: SessionConfig,
    brute_force_config: BruteForceConfig,
    clock: FakeClock,
) -> SessionTracker:
    return SessionTracker(session_store, session_config, brute_force_config, clock=clock)


@pytest.fixture
def issuer(token_config: TokenConfig, clock: FakeClock) -> TokenIssuer:
    return TokenIssuer(token_config, clock=clock)


@pytest.fixture
def aggregator(event_store: InMemoryEventStore, session_store: InMemorySessionStore) -> Aggregator:
    return Aggregator(event_store, session_store)


@pytest.fixture
def dispatcher(
    recorder: EventRecorder,
    tracker: SessionTracker,
    issuer: TokenIssuer,
) -> ActivityDispatcher:
    return ActivityDispatcher(recorder, tracker, issuer, DecoyConfig())


@pytest.fixture
def attempt_state() -> AttemptWindowState:
    return AttemptWindowState(max_attempts=100)


# ---------------------------------------------------------------------------
# Model factories
# ---------------------------------------------------------------------------


@pytest.fixture
def make_event() -> Callable[..., AttackEvent]:
    """Factory: create an AttackEvent with sensible defaults, override via kwargs."""

    def _factory(**kwargs: Any) -> AttackEvent:
        defaults: dict[str, Any] = {
            "session_id": "sess_test",
            "source_identity": "203.0.113.7",
            "event_kind": "page_visit",
            "occurred_at": T0,
        }
        defaults.update(kwargs)
        return AttackEvent(**defaults)

    return _factory
