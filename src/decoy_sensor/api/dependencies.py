"""FastAPI dependency providers.

All shared resources (repositories, tracker, recorder, dispatcher, config)
are attached to app.state at startup and retrieved here via Request
injection.
"""

from __future__ import annotations

from fastapi import Request

from decoy_sensor.aggregator import Aggregator
from decoy_sensor.config import AppConfig
from decoy_sensor.dispatcher import ActivityDispatcher
from decoy_sensor.tokens import TokenIssuer
from decoy_sensor.tracker import SessionTracker


def get_config(request: Request) -> AppConfig:
    return request.app.state.config  # type: ignore[no-any-return]


def get_dispatcher(request: Request) -> ActivityDispatcher:
    return request.app.state.dispatcher  # type: ignore[no-any-return]


def get_aggregator(request: Request) -> Aggregator:
    return request.app.state.aggregator  # type: ignore[no-any-return]


def get_tracker(request: Request) -> SessionTracker:
    return request.app.state.tracker  # type: ignore[no-any-return]


def get_issuer(request: Request) -> TokenIssuer:
    return request.app.state.issuer  # type: ignore[no-any-return]


def get_source_identity(request: Request) -> str:
    """First X-Forwarded-For hop, else the peer address. Never resolved further."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    if request.client is not None:
        return request.client.host
    return "unknown"


def get_user_agent(request: Request) -> str | None:
    return request.headers.get("user-agent")
