"""SessionSweeper: background asyncio task that expires idle sessions."""

from __future__ import annotations

import asyncio
from contextlib import suppress

import structlog

from decoy_sensor.config import SessionConfig
from decoy_sensor.errors import StorageUnavailable
from decoy_sensor.recorder import EventRecorder
from decoy_sensor.tracker import SessionTracker

logger = structlog.get_logger(__name__)


class SessionSweeper:
    """
    Runs SessionTracker.sweep on a fixed interval, independent of request
    volume, and retries any events the recorder had to buffer.
    """

    def __init__(
        self,
        tracker: SessionTracker,
        config: SessionConfig,
        recorder: EventRecorder | None = None,
    ) -> None:
        self._tracker = tracker
        self._config = config
        self._recorder = recorder
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Start the background sweep task. Called from the FastAPI lifespan."""
        if self.running:
            return
        self._task = asyncio.create_task(self._sweep_loop())

    async def stop(self) -> None:
        if self._task:
            self._task.cancel()
            with suppress(asyncio.CancelledError):
                await self._task
            self._task = None

    async def run_once(self) -> list[str]:
        expired = await self._tracker.sweep()
        if self._recorder is not None and self._recorder.pending:
            await self._recorder.flush()
        return expired

    async def _sweep_loop(self) -> None:
        while True:
            await asyncio.sleep(self._config.sweep_interval_seconds)
            try:
                await self.run_once()
            except StorageUnavailable as exc:
                logger.error("sweeper.storage_unavailable", error=str(exc))
            except Exception:
                # The loop must outlive any single bad tick
                logger.exception("sweeper.tick_failed")
