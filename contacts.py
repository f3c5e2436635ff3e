from __future__ import annotations
import logging
from typing import Any

from fastapi import HTTPException
from motor.motor_asyncio import AsyncIOMotorDatabase

from database import COLL_CONTACT, create_document, delete_document, get_documents, update_document
from schemas import ContactCreate

logger = logging.getLogger("uvicorn.error")


async def submit_contact(db: AsyncIOMotorDatabase, payload: ContactCreate) -> dict[str, Any]:
    saved = await create_document(db, COLL_CONTACT, {**payload.model_dump(), "is_read": False})
    logger.info(f"Contact message received from {payload.email}")
    return saved


async def list_contacts(db: AsyncIOMotorDatabase) -> list[dict[str, Any]]:
    return await get_documents(db, COLL_CONTACT)


async def mark_contact_read(db: AsyncIOMotorDatabase, contact_id: str) -> dict[str, Any]:
    doc = await update_document(db, COLL_CONTACT, contact_id, {"is_read": True})
    if doc is None:
        raise HTTPException(status_code=404, detail="Contact not found")
    return doc


async def delete_contact(db: AsyncIOMotorDatabase, contact_id: str) -> None:
    if not await delete_document(db, COLL_CONTACT, contact_id):
        raise HTTPException(status_code=404, detail="Contact not found")


async def count_unread(db: AsyncIOMotorDatabase) -> int:
    return await db[COLL_CONTACT].count_documents({"is_read": False})
