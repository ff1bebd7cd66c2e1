"""Repository wiring: picks the storage backend once at app startup.

For the mongo backend a single Motor client is created and shared by both
repositories so all routes use the same connection pool.
"""

from __future__ import annotations

from dataclasses import dataclass

from motor.motor_asyncio import AsyncIOMotorClient

from decoy_sensor.config import AppConfig
from decoy_sensor.store.base import EventRepository, SessionRepository
from decoy_sensor.store.events import MongoEventStore
from decoy_sensor.store.memory import InMemoryEventStore, InMemorySessionStore
from decoy_sensor.store.sessions import MongoSessionStore


@dataclass
class Repositories:
    events: EventRepository
    sessions: SessionRepository
    mongo_client: AsyncIOMotorClient | None = None  # type: ignore[type-arg]

    @property
    def backend(self) -> str:
        return "mongo" if self.mongo_client is not None else "memory"

    async def ping(self) -> str:
        if self.mongo_client is None:
            return "in-memory"
        try:
            await self.mongo_client.admin.command("ping")
        except Exception:
            return "unavailable"
        return "connected"

    def close(self) -> None:
        if self.mongo_client is not None:
            self.mongo_client.close()


async def open_repositories(config: AppConfig) -> Repositories:
    """Build the configured repositories; Mongo indexes are ensured (idempotent)."""
    if config.storage_backend == "memory":
        return Repositories(events=InMemoryEventStore(), sessions=InMemorySessionStore())

    client: AsyncIOMotorClient = AsyncIOMotorClient(config.mongo_uri)  # type: ignore[type-arg]
    db = client[config.mongo_db]
    events = MongoEventStore(db)
    sessions = MongoSessionStore(db)
    await events.ensure_indexes()
    await sessions.ensure_indexes()
    return Repositories(events=events, sessions=sessions, mongo_client=client)
