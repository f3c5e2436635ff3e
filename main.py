import logging
from typing import List, Optional

from fastapi import Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from motor.motor_asyncio import AsyncIOMotorDatabase
from pydantic import BaseModel
from pymongo.errors import PyMongoError

import auth
import catalog
import contacts
import orders
from database import close_db, ensure_indexes, get_db, settings
from schemas import (
    AuthRequest,
    AuthResponse,
    ContactCreate,
    ContactOut,
    DashboardStats,
    OrderCreate,
    OrderOut,
    Product,
    ProductCategory,
    ProductOut,
    ProductUpdate,
    StatusUpdate,
    TrackedOrder,
)

app = FastAPI(title="Bio Bag India API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

logger = logging.getLogger("uvicorn.error")

admin_only = [Depends(auth.require_admin)]


@app.on_event("startup")
async def startup():
    for name in auth.default_credentials_in_use():
        logger.warning(f"{name} is still the built-in default; set it in the environment before deploying")
    db = await app.dependency_overrides.get(get_db, get_db)()
    try:
        await ensure_indexes(db)
    except PyMongoError as e:
        logger.warning(f"Could not create indexes: {e}")


@app.on_event("shutdown")
async def shutdown():
    close_db()


# ------------------------------- Errors -------------------------------
@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"field": ".".join(str(p) for p in e["loc"][1:]) or str(e["loc"][0]), "message": e["msg"]}
        for e in exc.errors()
    ]
    first = errors[0] if errors else {"field": None, "message": "Invalid request"}
    detail = f"{first['field']}: {first['message']}" if first["field"] else first["message"]
    return JSONResponse(status_code=422, content={"detail": detail, "field": first["field"], "errors": errors})


@app.exception_handler(PyMongoError)
async def database_error_handler(request: Request, exc: PyMongoError):
    logger.error(f"Database error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=503, content={"detail": "Database unavailable"})


# ------------------------------- Public -------------------------------
@app.get("/")
async def root():
    return {"message": "Bio Bag India backend running"}


@app.get("/test")
async def test(db: AsyncIOMotorDatabase = Depends(get_db)):
    response = {"backend": "running", "db": "not-connected", "database_name": settings.DATABASE_NAME}
    try:
        response["collections"] = await db.list_collection_names()
        response["db"] = "connected"
    except PyMongoError as e:
        response["error"] = str(e)
    return response


@app.post("/auth/login", response_model=AuthResponse)
async def login(req: AuthRequest):
    token = auth.login(req.email, req.password)
    return AuthResponse(token=token, role="admin", email=req.email)


@app.get("/products", response_model=List[ProductOut])
async def list_products(
    category: Optional[str] = Query(None),
    q: Optional[str] = Query(None),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    products = await catalog.list_products(db, active_only=True)
    return catalog.filter_products(products, category=category, q=q)


@app.get("/products/{product_id}", response_model=ProductOut)
async def get_product(product_id: str, db: AsyncIOMotorDatabase = Depends(get_db)):
    return await catalog.get_product(db, product_id, active_only=True)


@app.post("/orders", response_model=OrderOut, status_code=201)
async def place_order(payload: OrderCreate, db: AsyncIOMotorDatabase = Depends(get_db)):
    return await orders.submit_order(db, payload)


@app.get("/orders/track/{order_number}", response_model=TrackedOrder)
async def track_order(order_number: str, email: Optional[str] = Query(None), db: AsyncIOMotorDatabase = Depends(get_db)):
    return await orders.track_order(db, order_number, email=email)


@app.post("/contacts", response_model=ContactOut, status_code=201)
async def submit_contact(payload: ContactCreate, db: AsyncIOMotorDatabase = Depends(get_db)):
    return await contacts.submit_contact(db, payload)


# ------------------------------- Admin: products -------------------------------
@app.get("/admin/products", response_model=List[ProductOut], dependencies=admin_only)
async def admin_list_products(
    category: Optional[ProductCategory] = Query(None),
    q: Optional[str] = Query(None),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    products = await catalog.list_products(db, active_only=False)
    return catalog.filter_products(products, category=category.value if category else None, q=q)


@app.post("/admin/products", response_model=ProductOut, status_code=201, dependencies=admin_only)
async def create_product(payload: Product, db: AsyncIOMotorDatabase = Depends(get_db)):
    return await catalog.create_product(db, payload)


@app.put("/admin/products/{product_id}", response_model=ProductOut, dependencies=admin_only)
async def update_product(product_id: str, payload: ProductUpdate, db: AsyncIOMotorDatabase = Depends(get_db)):
    return await catalog.update_product(db, product_id, payload)


@app.delete("/admin/products/{product_id}", dependencies=admin_only)
async def delete_product(product_id: str, db: AsyncIOMotorDatabase = Depends(get_db)):
    await catalog.delete_product(db, product_id)
    return {"deleted": True}


@app.post("/admin/products/{product_id}/toggle", response_model=ProductOut, dependencies=admin_only)
async def toggle_product(product_id: str, db: AsyncIOMotorDatabase = Depends(get_db)):
    return await catalog.toggle_product_active(db, product_id)


class SeedResponse(BaseModel):
    inserted: int


@app.post("/admin/seed", response_model=SeedResponse, dependencies=admin_only)
async def seed(db: AsyncIOMotorDatabase = Depends(get_db)):
    return SeedResponse(inserted=await catalog.seed_products(db))


# ------------------------------- Admin: orders -------------------------------
@app.get("/admin/orders", response_model=List[OrderOut], dependencies=admin_only)
async def admin_list_orders(
    q: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    return orders.filter_orders(await orders.list_orders(db), q=q, status=status)


@app.get("/admin/orders/{order_id}", response_model=OrderOut, dependencies=admin_only)
async def admin_get_order(order_id: str, db: AsyncIOMotorDatabase = Depends(get_db)):
    return await orders.get_order(db, order_id)


@app.patch("/admin/orders/{order_id}/status", response_model=OrderOut, dependencies=admin_only)
async def update_order_status(order_id: str, payload: StatusUpdate, db: AsyncIOMotorDatabase = Depends(get_db)):
    return await orders.update_order_status(db, order_id, payload.status)


@app.delete("/admin/orders/{order_id}", dependencies=admin_only)
async def delete_order(order_id: str, db: AsyncIOMotorDatabase = Depends(get_db)):
    await orders.delete_order(db, order_id)
    return {"deleted": True}


@app.get("/admin/stats", response_model=DashboardStats, dependencies=admin_only)
async def stats(db: AsyncIOMotorDatabase = Depends(get_db)):
    return await orders.dashboard_stats(
        db,
        await catalog.count_products(db),
        await contacts.count_unread(db),
    )


# ------------------------------- Admin: contacts -------------------------------
@app.get("/admin/contacts", response_model=List[ContactOut], dependencies=admin_only)
async def admin_list_contacts(db: AsyncIOMotorDatabase = Depends(get_db)):
    return await contacts.list_contacts(db)


@app.post("/admin/contacts/{contact_id}/read", response_model=ContactOut, dependencies=admin_only)
async def mark_contact_read(contact_id: str, db: AsyncIOMotorDatabase = Depends(get_db)):
    return await contacts.mark_contact_read(db, contact_id)


@app.delete("/admin/contacts/{contact_id}", dependencies=admin_only)
async def delete_contact(contact_id: str, db: AsyncIOMotorDatabase = Depends(get_db)):
    await contacts.delete_contact(db, contact_id)
    return {"deleted": True}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=settings.PORT)
