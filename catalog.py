from __future__ import annotations
from typing import Any, Optional

from fastapi import HTTPException
from motor.motor_asyncio import AsyncIOMotorDatabase

from database import (
    COLL_PRODUCT,
    create_document,
    delete_document,
    get_document,
    get_documents,
    update_document,
)
from schemas import Product, ProductUpdate

ACTIVE_ONLY = {"is_active": True}

# Default catalog, inserted by /admin/seed into an empty collection
SEED_PRODUCTS: list[dict] = [
    {
        "name": "Custom Bags",
        "description": "100% biodegradable bags made to your size and print. Priced on request.",
        "category": "custom",
        "price_per_kg": 0,
        "sizes": [],
        "features": ["CPCB Certified", "180 Days Decomposition", "Custom Printing Available", "Food Safe"],
    },
    {
        "name": "Compostable Carry Bags",
        "description": "100% biodegradable carry bags made from corn starch. Perfect for retail stores, supermarkets, and daily shopping needs.",
        "category": "carry",
        "price_per_kg": 180,
        "sizes": [
            {"size": "10 X 12", "micron": 25, "capacity": "1 KG", "pcs_per_kg": 178},
            {"size": "13 X 16", "micron": 30, "capacity": "3 KG", "pcs_per_kg": 97},
            {"size": "16 X 20", "micron": 30, "capacity": "5 KG", "pcs_per_kg": 60},
            {"size": "17 X 23", "micron": 40, "capacity": "7 KG", "pcs_per_kg": 45},
            {"size": "20 X 26", "micron": 40, "capacity": "10 KG", "pcs_per_kg": 33},
            {"size": "27 X 30", "micron": 40, "capacity": "15 KG", "pcs_per_kg": 18},
        ],
        "features": ["CPCB Certified", "180 Days Decomposition", "Custom Printing Available", "Food Safe"],
    },
    {
        "name": "Compostable Garbage Bags",
        "description": "Eco-friendly garbage bags that decompose naturally. Ideal for households, offices, and municipal waste management.",
        "category": "garbage",
        "price_per_kg": 160,
        "sizes": [
            {"size": "17 X 19", "micron": 25, "capacity": "1 KG", "pcs_per_kg": 75},
            {"size": "19 X 21", "micron": 25, "capacity": "3 KG", "pcs_per_kg": 60},
            {"size": "20 X 26", "micron": 30, "capacity": "5 KG", "pcs_per_kg": 38},
            {"size": "26 X 30", "micron": 40, "capacity": "7 KG", "pcs_per_kg": 19},
            {"size": "30 X 40", "micron": 50, "capacity": "10 KG", "pcs_per_kg": 10},
        ],
        "features": ["CPCB Certified", "Leak Proof", "Strong & Durable", "Odor Control"],
    },
    {
        "name": "Grocery Bags",
        "description": "Perfect for vegetable vendors, grocery stores, and daily food shopping. Made from plant-based materials.",
        "category": "grocery",
        "price_per_kg": 150,
        "sizes": [
            {"size": "7 X 10", "micron": 25, "capacity": "1/2 KG", "pcs_per_kg": 280},
            {"size": "8 X 12", "micron": 30, "capacity": "1 KG", "pcs_per_kg": 205},
            {"size": "9 X 13", "micron": 30, "capacity": "2 KG", "pcs_per_kg": 145},
            {"size": "10 X 15", "micron": 40, "capacity": "3 KG", "pcs_per_kg": 100},
            {"size": "13 X 20", "micron": 40, "capacity": "5 KG", "pcs_per_kg": 57},
            {"size": "16 X 24", "micron": 40, "capacity": "10 KG", "pcs_per_kg": 40},
        ],
        "features": ["CPCB Certified", "Food Grade", "Water Resistant", "Custom Sizes"],
    },
    {
        "name": "Nursery Bags",
        "description": "Biodegradable bags for plant nurseries. Can be planted directly into soil - no transplant shock.",
        "category": "nursery",
        "price_per_kg": 170,
        "sizes": [
            {"size": "4 X 6", "micron": 30, "capacity": "Small Plants", "pcs_per_kg": 300},
            {"size": "6 X 8", "micron": 40, "capacity": "Medium Plants", "pcs_per_kg": 180},
            {"size": "8 X 10", "micron": 50, "capacity": "Large Plants", "pcs_per_kg": 120},
        ],
        "features": ["CPCB Certified", "Plant Directly", "Root Friendly", "UV Stabilized"],
    },
    {
        "name": "Bio Medical Bags",
        "description": "Color-coded biomedical waste bags as per CPCB guidelines. Safe disposal of medical waste.",
        "category": "medical",
        "price_per_kg": 220,
        "sizes": [
            {"size": "12 X 16", "micron": 50, "capacity": "5 KG", "pcs_per_kg": 50},
            {"size": "16 X 20", "micron": 60, "capacity": "10 KG", "pcs_per_kg": 30},
            {"size": "20 X 26", "micron": 70, "capacity": "15 KG", "pcs_per_kg": 20},
        ],
        "features": ["CPCB Certified", "Color Coded", "Biohazard Symbol", "Hospital Grade"],
    },
]


async def list_products(db: AsyncIOMotorDatabase, active_only: bool = True) -> list[dict[str, Any]]:
    """Storefront reads filter inactive products in the query itself; admin reads pass active_only=False."""
    return await get_documents(db, COLL_PRODUCT, ACTIVE_ONLY if active_only else None)


def filter_products(products: list[dict[str, Any]], category: Optional[str] = None, q: Optional[str] = None) -> list[dict[str, Any]]:
    # In-memory filtering; the catalog is small
    if category and category != "all":
        products = [p for p in products if p.get("category") == category]
    if q:
        needle = q.strip().lower()
        products = [
            p for p in products
            if needle in (p.get("name") or "").lower() or needle in (p.get("description") or "").lower()
        ]
    return products


async def get_product(db: AsyncIOMotorDatabase, product_id: str, active_only: bool = True) -> dict[str, Any]:
    doc = await get_document(db, COLL_PRODUCT, product_id, ACTIVE_ONLY if active_only else None)
    if doc is None:
        raise HTTPException(status_code=404, detail="Product not found")
    return doc


async def create_product(db: AsyncIOMotorDatabase, payload: Product) -> dict[str, Any]:
    return await create_document(db, COLL_PRODUCT, payload.model_dump(mode="json"))


async def update_product(db: AsyncIOMotorDatabase, product_id: str, payload: ProductUpdate) -> dict[str, Any]:
    # sizes, when sent, replace the stored list as a whole
    updates = payload.model_dump(mode="json", exclude_none=True)
    doc = await update_document(db, COLL_PRODUCT, product_id, updates)
    if doc is None:
        raise HTTPException(status_code=404, detail="Product not found")
    return doc


async def delete_product(db: AsyncIOMotorDatabase, product_id: str) -> None:
    if not await delete_document(db, COLL_PRODUCT, product_id):
        raise HTTPException(status_code=404, detail="Product not found")


async def toggle_product_active(db: AsyncIOMotorDatabase, product_id: str) -> dict[str, Any]:
    current = await get_product(db, product_id, active_only=False)
    doc = await update_document(db, COLL_PRODUCT, product_id, {"is_active": not current.get("is_active", True)})
    if doc is None:
        raise HTTPException(status_code=404, detail="Product not found")
    return doc


async def count_products(db: AsyncIOMotorDatabase) -> int:
    return await db[COLL_PRODUCT].count_documents({})


async def seed_products(db: AsyncIOMotorDatabase) -> int:
    if await count_products(db) > 0:
        return 0
    for p in SEED_PRODUCTS:
        await create_document(db, COLL_PRODUCT, Product(**p).model_dump(mode="json"))
    return len(SEED_PRODUCTS)
