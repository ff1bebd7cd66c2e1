"""PyYAML loader → typed config dataclasses."""

from __future__ import annotations

import os
import secrets
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

import yaml

StorageBackend = Literal["memory", "mongo"]


def _random_secret() -> str:
    return secrets.token_urlsafe(32)


@dataclass
class SessionConfig:
    timeout_seconds: int = 1800
    sweep_interval_seconds: int = 60


@dataclass
class BruteForceConfig:
    window_seconds: int = 300
    attempt_threshold: int = 5
    max_attempts_tracked: int = 1000


@dataclass
class TokenConfig:
    validity_seconds: int = 8 * 3600
    algorithm: str = "HS256"
    department: str = "AIIMS_ADMIN"
    secret: str = field(default_factory=_random_secret)


@dataclass
class RecorderConfig:
    retry_buffer_size: int = 1000


@dataclass
class DecoyConfig:
    username: str = "admin"
    password: str = "admin123"
    role: str = "admin"


@dataclass
class AppConfig:
    session: SessionConfig = field(default_factory=SessionConfig)
    brute_force: BruteForceConfig = field(default_factory=BruteForceConfig)
    token: TokenConfig = field(default_factory=TokenConfig)
    recorder: RecorderConfig = field(default_factory=RecorderConfig)
    decoy: DecoyConfig = field(default_factory=DecoyConfig)
    storage_backend: StorageBackend = "memory"
    mongo_uri: str = "mongodb://localhost:27017"
    mongo_db: str = "decoy_sensor"
    log_format: str = "console"
    log_level: str = "INFO"


def load_config(path: str | Path | None = None) -> AppConfig:
    """Load thresholds.yaml and return a typed AppConfig.

    Falls back to defaults if the file is absent or a section is missing.
    Environment variables MONGO_URI, MONGO_DB, DECOY_STORAGE,
    DECOY_TOKEN_SECRET, LOG_FORMAT and LOG_LEVEL override the file.
    """
    raw: dict = {}
    if path is None:
        path = Path(__file__).parent.parent.parent / "config" / "thresholds.yaml"

    resolved = Path(path)
    if resolved.exists():
        with resolved.open() as f:
            raw = yaml.safe_load(f) or {}

    session_raw = raw.get("session", {})
    brute_raw = raw.get("brute_force", {})
    token_raw = raw.get("token", {})
    recorder_raw = raw.get("recorder", {})
    decoy_raw = raw.get("decoy", {})
    storage_raw = raw.get("storage", {})

    backend = os.getenv("DECOY_STORAGE", storage_raw.get("backend", "memory"))
    if backend not in ("memory", "mongo"):
        raise ValueError(f"Unknown storage backend: {backend!r}")

    return AppConfig(
        session=SessionConfig(
            timeout_seconds=session_raw.get("timeout_seconds", 1800),
            sweep_interval_seconds=session_raw.get("sweep_interval_seconds", 60),
        ),
        brute_force=BruteForceConfig(
            window_seconds=brute_raw.get("window_seconds", 300),
            attempt_threshold=brute_raw.get("attempt_threshold", 5),
            max_attempts_tracked=brute_raw.get("max_attempts_tracked", 1000),
        ),
        token=TokenConfig(
            validity_seconds=token_raw.get("validity_seconds", 8 * 3600),
            algorithm=token_raw.get("algorithm", "HS256"),
            department=token_raw.get("department", "AIIMS_ADMIN"),
            secret=os.getenv("DECOY_TOKEN_SECRET") or _random_secret(),
        ),
        recorder=RecorderConfig(
            retry_buffer_size=recorder_raw.get("retry_buffer_size", 1000),
        ),
        decoy=DecoyConfig(
            username=decoy_raw.get("username", "admin"),
            password=decoy_raw.get("password", "admin123"),
            role=decoy_raw.get("role", "admin"),
        ),
        storage_backend=backend,
        mongo_uri=os.getenv("MONGO_URI", "mongodb://localhost:27017"),
        mongo_db=os.getenv("MONGO_DB", "decoy_sensor"),
        log_format=os.getenv("LOG_FORMAT", "console"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
    )
