from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorClient
from pymongo import DESCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError

from inventory_api.core.config import Settings

INVENTORY_COLLECTION = "inventory"
USERS_COLLECTION = "users"


def create_client(settings: Settings) -> AsyncIOMotorClient:
    return AsyncIOMotorClient(settings.mongo_uri, tz_aware=True)


def _with_id(doc: Dict[str, Any]) -> Dict[str, Any]:
    doc["id"] = str(doc.pop("_id"))
    return doc


def _now() -> datetime:
    return datetime.now(timezone.utc)


class DocumentRepository:
    """find / insert / update / delete-by-id over one collection.

    Identifiers are ObjectId strings; a malformed one raises
    ``bson.errors.InvalidId``. Unique fields are backed by unique indexes,
    so duplicates raise ``DuplicateKeyError`` at write time.
    """

    def __init__(self, collection, unique_fields: Sequence[str] = ()):
        self.collection = collection
        self.unique_fields = tuple(unique_fields)

    async def ensure_indexes(self) -> None:
        for field in self.unique_fields:
            await self.collection.create_index(field, unique=True)
        await self.collection.create_index([("created_at", DESCENDING)])

    async def find_all(self) -> List[Dict[str, Any]]:
        items = []
        async for doc in self.collection.find().sort([("created_at", DESCENDING), ("_id", DESCENDING)]):
            items.append(_with_id(doc))
        return items

    async def find_by_id(self, identifier: str) -> Optional[Dict[str, Any]]:
        doc = await self.collection.find_one({"_id": ObjectId(identifier)})
        return _with_id(doc) if doc else None

    async def find_one(self, **filters: Any) -> Optional[Dict[str, Any]]:
        doc = await self.collection.find_one(filters)
        return _with_id(doc) if doc else None

    async def insert(self, document: Dict[str, Any]) -> Dict[str, Any]:
        now = _now()
        doc = {**document, "created_at": now, "updated_at": now}
        res = await self.collection.insert_one(doc)
        doc["_id"] = res.inserted_id
        return _with_id(doc)

    async def update_by_id(self, identifier: str, changes: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        obj = ObjectId(identifier)
        updated = await self.collection.find_one_and_update(
            {"_id": obj},
            {"$set": {**changes, "updated_at": _now()}},
            return_document=ReturnDocument.AFTER,
        )
        return _with_id(updated) if updated else None

    async def delete_by_id(self, identifier: str) -> bool:
        res = await self.collection.delete_one({"_id": ObjectId(identifier)})
        return bool(res.deleted_count)

    def duplicate_field(self, exc: DuplicateKeyError) -> str:
        details = exc.details or {}
        key_pattern = details.get("keyPattern") or details.get("keyValue") or {}
        if key_pattern:
            return str(next(iter(key_pattern)))
        return self.unique_fields[0] if self.unique_fields else "value"


async def ping(database) -> bool:
    res = await database.command("ping")
    return bool(res.get("ok"))
