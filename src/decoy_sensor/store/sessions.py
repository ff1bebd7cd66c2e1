"""MongoSessionStore: session table keyed by session_id."""

from __future__ import annotations

from motor.motor_asyncio import AsyncIOMotorDatabase

from decoy_sensor.errors import StorageUnavailable
from decoy_sensor.model.session import SessionRecord, SessionStatus
from decoy_sensor.store.base import SessionRepository
from decoy_sensor.store.events import DRIVER_ERRORS

COLLECTION = "sessions"


class MongoSessionStore(SessionRepository):
    def __init__(self, db: AsyncIOMotorDatabase) -> None:  # type: ignore[type-arg]
        self._col = db[COLLECTION]

    async def ensure_indexes(self) -> None:
        await self._col.create_index([("session_id", 1)], unique=True)
        await self._col.create_index([("status", 1), ("last_activity_at", -1)])

    async def upsert(self, record: SessionRecord) -> None:
        doc = record.model_dump(mode="json")
        try:
            await self._col.update_one(
                {"session_id": record.session_id}, {"$set": doc}, upsert=True
            )
        except DRIVER_ERRORS as exc:
            raise StorageUnavailable(f"session upsert failed: {exc}") from exc

    async def get(self, session_id: str) -> SessionRecord | None:
        try:
            doc = await self._col.find_one({"session_id": session_id}, {"_id": 0})
        except DRIVER_ERRORS as exc:
            raise StorageUnavailable(f"session read failed: {exc}") from exc
        return SessionRecord(**doc) if doc else None

    async def list_sessions(self, status: SessionStatus | None = None) -> list[SessionRecord]:
        query: dict = {}  # type: ignore[type-arg]
        if status:
            query["status"] = status
        cursor = self._col.find(query, {"_id": 0}).sort("started_at", 1)
        try:
            return [SessionRecord(**doc) async for doc in cursor]
        except DRIVER_ERRORS as exc:
            raise StorageUnavailable(f"session listing failed: {exc}") from exc
