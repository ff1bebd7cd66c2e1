"""FastAPI application factory with lifespan startup/shutdown."""

from __future__ import annotations

import os
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI

from decoy_sensor.aggregator import Aggregator
from decoy_sensor.api.errors import register_exception_handlers
from decoy_sensor.api.routes import activity, auth, events, health, sessions
from decoy_sensor.config import load_config
from decoy_sensor.dispatcher import ActivityDispatcher
from decoy_sensor.logging_config import configure_logging
from decoy_sensor.recorder import EventRecorder
from decoy_sensor.store.client import open_repositories
from decoy_sensor.sweeper import SessionSweeper
from decoy_sensor.tokens import TokenIssuer
from decoy_sensor.tracker import SessionTracker

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Create shared resources on startup; stop the sweeper and close storage on shutdown."""
    config = load_config()
    configure_logging(config.log_format, config.log_level)

    repositories = await open_repositories(config)

    recorder = EventRecorder(repositories.events, config.recorder)
    await recorder.start()
    tracker = SessionTracker(repositories.sessions, config.session, config.brute_force)
    issuer = TokenIssuer(config.token)
    aggregator = Aggregator(repositories.events, repositories.sessions)
    dispatcher = ActivityDispatcher(recorder, tracker, issuer, config.decoy)

    sweeper = SessionSweeper(tracker, config.session, recorder)
    await sweeper.start()

    # Attach to app.state so dependency providers can access them
    app.state.config = config
    app.state.repositories = repositories
    app.state.recorder = recorder
    app.state.tracker = tracker
    app.state.issuer = issuer
    app.state.aggregator = aggregator
    app.state.dispatcher = dispatcher
    app.state.sweeper = sweeper

    logger.info("sensor.started", storage=repositories.backend)
    yield

    await sweeper.stop()
    pending = await recorder.flush()
    if pending:
        logger.error("sensor.shutdown_with_pending_events", pending=pending)
    repositories.close()


def create_app() -> FastAPI:
    app = FastAPI(
        title="Decoy Sensor",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.include_router(health.router)
    app.include_router(activity.router)
    app.include_router(events.router)
    app.include_router(sessions.router)
    app.include_router(auth.router)
    register_exception_handlers(app)
    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=os.environ.get("HOST", "0.0.0.0"), port=int(os.environ.get("PORT", 8000)))
