"""
Order intake and lifecycle.

Status is a flat enumeration: an admin may move an order from any status to
any other. PROGRESS_STEPS is only the order in which the tracking page draws
its progress bar.
"""
from __future__ import annotations
import logging
from typing import Any, Iterable, Optional

from fastapi import HTTPException
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from database import (
    COLL_ORDER,
    create_document,
    delete_document,
    get_document,
    get_documents,
    next_sequence,
    settings,
    to_public,
    update_document,
)
from schemas import Order, OrderCreate, OrderItem, OrderStatus

logger = logging.getLogger("uvicorn.error")

PROGRESS_STEPS = [
    OrderStatus.pending,
    OrderStatus.confirmed,
    OrderStatus.processing,
    OrderStatus.shipped,
    OrderStatus.delivered,
]


def order_total(items: Iterable[OrderItem]) -> float:
    return sum(item.quantity * item.price_per_kg for item in items)


def status_progress(status: OrderStatus | str) -> int:
    status = OrderStatus(status)
    if status == OrderStatus.cancelled:
        return -1
    return PROGRESS_STEPS.index(status)


def format_order_number(seq: int) -> str:
    return f"{settings.ORDER_NUMBER_PREFIX}{seq:03d}"


def normalize_order_number(value: str) -> str:
    return (value or "").strip().upper()


async def submit_order(db: AsyncIOMotorDatabase, payload: OrderCreate) -> dict[str, Any]:
    total = order_total(payload.items)
    try:
        order_number = format_order_number(await next_sequence(db, "order_number"))
        order = Order(
            order_number=order_number,
            status=OrderStatus.pending,
            total_amount=total,
            **payload.model_dump(),
        )
        # items are embedded, so the order and its lines land in one insert
        saved = await create_document(db, COLL_ORDER, order.model_dump(mode="json"))
    except PyMongoError as e:
        logger.error(f"Failed to place order: {e}")
        raise HTTPException(status_code=500, detail="Failed to place order")
    logger.info(f"Order {order_number} placed by {payload.email} for {total:.2f}")
    return saved


async def list_orders(db: AsyncIOMotorDatabase) -> list[dict[str, Any]]:
    return await get_documents(db, COLL_ORDER)


def filter_orders(orders: list[dict[str, Any]], q: Optional[str] = None, status: Optional[str] = None) -> list[dict[str, Any]]:
    if status and status != "all":
        orders = [o for o in orders if o.get("status") == status]
    if q:
        needle = q.strip().lower()
        orders = [
            o for o in orders
            if needle in o.get("order_number", "").lower()
            or needle in o.get("customer_name", "").lower()
            or needle in o.get("email", "").lower()
        ]
    return orders


async def get_order(db: AsyncIOMotorDatabase, order_id: str) -> dict[str, Any]:
    doc = await get_document(db, COLL_ORDER, order_id)
    if doc is None:
        raise HTTPException(status_code=404, detail="Order not found")
    return doc


async def update_order_status(db: AsyncIOMotorDatabase, order_id: str, status: OrderStatus) -> dict[str, Any]:
    # No transition guard; last write wins
    doc = await update_document(db, COLL_ORDER, order_id, {"status": status.value})
    if doc is None:
        raise HTTPException(status_code=404, detail="Order not found")
    logger.info(f"Order {doc['order_number']} status set to {status.value}")
    return doc


async def delete_order(db: AsyncIOMotorDatabase, order_id: str) -> None:
    if not await delete_document(db, COLL_ORDER, order_id):
        raise HTTPException(status_code=404, detail="Order not found")


async def track_order(db: AsyncIOMotorDatabase, order_number: str, email: Optional[str] = None) -> dict[str, Any]:
    """Look an order up by its public number.

    Anyone holding the number sees the full order unless
    TRACKING_REQUIRE_EMAIL is set, in which case ``email`` must match the
    one on the order. A mismatch reads as not found.
    """
    number = normalize_order_number(order_number)
    if not number:
        raise HTTPException(status_code=422, detail="Please enter your order number to track.")
    doc = to_public(await db[COLL_ORDER].find_one({"order_number": number}))
    if doc is None:
        raise HTTPException(status_code=404, detail="Order not found")
    if settings.TRACKING_REQUIRE_EMAIL:
        if not email or email.strip().lower() != doc.get("email", "").lower():
            raise HTTPException(status_code=404, detail="Order not found")
    doc["progress_step"] = status_progress(doc["status"])
    return doc


async def total_revenue(db: AsyncIOMotorDatabase) -> float:
    pipeline = [
        {"$match": {"status": {"$ne": OrderStatus.cancelled.value}}},
        {"$group": {"_id": None, "total": {"$sum": "$total_amount"}}},
    ]
    async for row in db[COLL_ORDER].aggregate(pipeline):
        return float(row["total"])
    return 0.0


async def dashboard_stats(db: AsyncIOMotorDatabase, product_count: int, unread_contacts: int) -> dict[str, Any]:
    """Counted in the store so the figures cover every order, not a listing page."""
    orders = db[COLL_ORDER]
    return {
        "total_orders": await orders.count_documents({}),
        "total_products": product_count,
        "pending_orders": await orders.count_documents({"status": OrderStatus.pending.value}),
        "delivered_orders": await orders.count_documents({"status": OrderStatus.delivered.value}),
        "total_revenue": await total_revenue(db),
        "unread_contacts": unread_contacts,
    }
