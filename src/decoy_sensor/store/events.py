"""MongoEventStore: append-only event log in the events collection.

Documents are never updated or deleted. Reads order by the recorder-assigned
sequence number, not by occurred_at, since the wall clock may regress.
"""

from __future__ import annotations

from datetime import datetime

from bson.errors import BSONError
from motor.motor_asyncio import AsyncIOMotorDatabase
from pydantic import TypeAdapter
from pymongo.errors import PyMongoError

from decoy_sensor.errors import StorageUnavailable
from decoy_sensor.model.event import AttackEvent, EventKind
from decoy_sensor.store.base import EventRepository

COLLECTION = "events"

# Everything the driver can raise for a rejected read or write
DRIVER_ERRORS = (PyMongoError, BSONError, UnicodeEncodeError)

# Query bounds must serialize exactly like stored occurred_at strings
_timestamp: TypeAdapter[datetime] = TypeAdapter(datetime)


class MongoEventStore(EventRepository):
    def __init__(self, db: AsyncIOMotorDatabase) -> None:  # type: ignore[type-arg]
        self._col = db[COLLECTION]

    async def ensure_indexes(self) -> None:
        await self._col.create_index([("sequence", -1)])
        await self._col.create_index([("session_id", 1), ("sequence", 1)])
        await self._col.create_index([("event_kind", 1), ("sequence", 1)])

    async def append(self, event: AttackEvent) -> str:
        doc = event.model_dump(mode="json")
        try:
            await self._col.insert_one(doc)
        except DRIVER_ERRORS as exc:
            raise StorageUnavailable(f"event insert failed: {exc}") from exc
        return event.id

    async def for_session(self, session_id: str) -> list[AttackEvent]:
        return await self._find({"session_id": session_id})

    async def by_kind(self, kind: EventKind) -> list[AttackEvent]:
        return await self._find({"event_kind": kind})

    async def list_events(
        self,
        skip: int = 0,
        limit: int = 50,
        kind: EventKind | None = None,
        since: datetime | None = None,
    ) -> list[AttackEvent]:
        query: dict = {}  # type: ignore[type-arg]
        if kind:
            query["event_kind"] = kind
        if since:
            query["occurred_at"] = {"$gte": _timestamp.dump_python(since, mode="json")}
        return await self._find(query, direction=-1, skip=skip, limit=limit)

    async def count_by_kind(self) -> dict[str, int]:
        pipeline = [{"$group": {"_id": "$event_kind", "count": {"$sum": 1}}}]
        try:
            return {doc["_id"]: doc["count"] async for doc in self._col.aggregate(pipeline)}
        except DRIVER_ERRORS as exc:
            raise StorageUnavailable(f"event count failed: {exc}") from exc

    async def distinct_sessions(self) -> list[str]:
        try:
            return await self._col.distinct("session_id")  # type: ignore[no-any-return]
        except DRIVER_ERRORS as exc:
            raise StorageUnavailable(f"session listing failed: {exc}") from exc

    async def max_sequence(self) -> int:
        try:
            doc = await self._col.find_one({}, {"_id": 0, "sequence": 1}, sort=[("sequence", -1)])
        except DRIVER_ERRORS as exc:
            raise StorageUnavailable(f"sequence lookup failed: {exc}") from exc
        return int(doc["sequence"]) if doc else 0

    async def _find(
        self,
        query: dict,  # type: ignore[type-arg]
        direction: int = 1,
        skip: int = 0,
        limit: int = 0,
    ) -> list[AttackEvent]:
        cursor = self._col.find(query, {"_id": 0}).sort("sequence", direction)
        if skip:
            cursor = cursor.skip(skip)
        if limit:
            cursor = cursor.limit(limit)
        try:
            return [AttackEvent(**doc) async for doc in cursor]
        except DRIVER_ERRORS as exc:
            raise StorageUnavailable(f"event read failed: {exc}") from exc
