from __future__ import annotations
from typing import Any, Optional
from datetime import datetime, timezone

from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pydantic_settings import BaseSettings, SettingsConfigDict
from pymongo import ReturnDocument


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    DATABASE_URL: str = "mongodb://localhost:27017"
    DATABASE_NAME: str = "biobag"
    ADMIN_EMAIL: str = "admin@biobagindia.com"
    ADMIN_PASSWORD: str = "biobag@admin"
    SECRET_KEY: str = "change-me"
    ORDER_NUMBER_PREFIX: str = "ORD-"
    TRACKING_REQUIRE_EMAIL: bool = False
    PORT: int = 8000

settings = Settings()

COLL_PRODUCT = "product"
COLL_ORDER = "order"
COLL_CONTACT = "contact"
COLL_COUNTERS = "counters"

_client: Optional[AsyncIOMotorClient] = None
_db: Optional[AsyncIOMotorDatabase] = None

async def get_db() -> AsyncIOMotorDatabase:
    # Builds the client only; motor connects on first use
    global _client, _db
    if _db is None:
        _client = AsyncIOMotorClient(settings.DATABASE_URL)
        _db = _client[settings.DATABASE_NAME]
    return _db

async def ensure_indexes(db: AsyncIOMotorDatabase) -> None:
    await db[COLL_ORDER].create_index("order_number", unique=True)

def close_db() -> None:
    global _client, _db
    if _client is not None:
        _client.close()
    _client = None
    _db = None

def utcnow() -> datetime:
    return datetime.now(timezone.utc)

def parse_id(value: str) -> Optional[ObjectId]:
    """Return the ObjectId for ``value`` or None when it is not a valid id."""
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None

def to_public(doc: Optional[dict[str, Any]]) -> Optional[dict[str, Any]]:
    if not doc:
        return None
    if "_id" in doc:
        doc["id"] = str(doc.pop("_id"))
    return doc

async def create_document(db: AsyncIOMotorDatabase, collection_name: str, data: dict[str, Any]) -> dict[str, Any]:
    now = utcnow()
    data_with_meta = {**data, "created_at": now, "updated_at": now}
    result = await db[collection_name].insert_one(data_with_meta)
    inserted = await db[collection_name].find_one({"_id": result.inserted_id})
    return to_public(inserted) or {}

async def get_documents(db: AsyncIOMotorDatabase, collection_name: str, filter_dict: dict[str, Any] | None = None, limit: int = 0) -> list[dict[str, Any]]:
    """Newest first. ``limit=0`` returns every matching document."""
    cursor = db[collection_name].find(filter_dict or {}, sort=[("created_at", -1), ("_id", -1)], limit=limit)
    docs = []
    async for d in cursor:
        docs.append(to_public(d))
    return docs

async def get_document(db: AsyncIOMotorDatabase, collection_name: str, doc_id: str, extra: dict[str, Any] | None = None) -> Optional[dict[str, Any]]:
    oid = parse_id(doc_id)
    if oid is None:
        return None
    doc = await db[collection_name].find_one({"_id": oid, **(extra or {})})
    return to_public(doc)

async def update_document(db: AsyncIOMotorDatabase, collection_name: str, doc_id: str, updates: dict[str, Any]) -> Optional[dict[str, Any]]:
    """Apply ``$set`` to one document and return it, or None when it does not exist."""
    oid = parse_id(doc_id)
    if oid is None:
        return None
    doc = await db[collection_name].find_one_and_update(
        {"_id": oid},
        {"$set": {**updates, "updated_at": utcnow()}},
        return_document=ReturnDocument.AFTER,
    )
    return to_public(doc)

async def delete_document(db: AsyncIOMotorDatabase, collection_name: str, doc_id: str) -> bool:
    oid = parse_id(doc_id)
    if oid is None:
        return False
    result = await db[collection_name].delete_one({"_id": oid})
    return result.deleted_count > 0

async def next_sequence(db: AsyncIOMotorDatabase, name: str) -> int:
    counter = await db[COLL_COUNTERS].find_one_and_update(
        {"_id": name},
        {"$inc": {"seq": 1}},
        upsert=True,
        return_document=ReturnDocument.AFTER,
    )
    return int(counter["seq"])
