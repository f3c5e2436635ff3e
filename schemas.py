"""
Database Schemas for Bio Bag India

Each entity model corresponds to a MongoDB collection (lowercased name).
Sizes live inside their product document and items inside their order
document, so a product or an order is always written in one operation.
"""
from __future__ import annotations
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

PHONE_PATTERN = r"^\+?[0-9\s-]{10,15}$"
PINCODE_PATTERN = r"^[0-9]{6}$"


class ProductCategory(str, Enum):
    carry = "carry"
    garbage = "garbage"
    grocery = "grocery"
    courier = "courier"
    nursery = "nursery"
    medical = "medical"
    agriculture = "agriculture"
    custom = "custom"


class OrderStatus(str, Enum):
    pending = "pending"
    confirmed = "confirmed"
    processing = "processing"
    shipped = "shipped"
    delivered = "delivered"
    cancelled = "cancelled"


def _check_email_length(value: str) -> str:
    if len(value) > 255:
        raise ValueError("Email must be less than 255 characters")
    return value


# ------------------------------- Products -------------------------------
class ProductSize(BaseModel):
    size: str = Field(..., min_length=1, description="Dimensions, e.g. 13 X 16")
    micron: int = Field(..., gt=0)
    capacity: str = Field(..., min_length=1, description="Load label, e.g. 3 KG")
    pcs_per_kg: int = Field(..., gt=0)


# Product (collection: "product")
class Product(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=200)
    description: str = ""
    category: ProductCategory
    image: str = "/placeholder.svg"
    price_per_kg: float = Field(..., ge=0, description="Price per kilogram in INR")
    sizes: List[ProductSize] = Field(default_factory=list)
    features: List[str] = Field(default_factory=list)
    is_active: bool = True


class ProductUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    category: Optional[ProductCategory] = None
    image: Optional[str] = None
    price_per_kg: Optional[float] = Field(None, ge=0)
    sizes: Optional[List[ProductSize]] = None
    features: Optional[List[str]] = None
    is_active: Optional[bool] = None


class ProductOut(Product):
    id: str
    created_at: datetime
    updated_at: datetime


# ------------------------------- Orders -------------------------------
class OrderItem(BaseModel):
    product_id: Optional[str] = None
    product_name: str = Field(..., min_length=1)
    size: str = Field(..., min_length=1)
    quantity: int = Field(..., ge=1, le=100000, description="Quantity in kg")
    price_per_kg: float = Field(..., ge=0)


class OrderCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    customer_name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    phone: str = Field(..., pattern=PHONE_PATTERN)
    address: str = Field(..., min_length=10, max_length=500)
    city: str = Field(..., min_length=2, max_length=100)
    state: str = Field(..., min_length=2, max_length=100)
    pincode: str = Field(..., pattern=PINCODE_PATTERN)
    items: List[OrderItem] = Field(..., min_length=1)
    notes: Optional[str] = Field(None, max_length=1000)

    @field_validator("email")
    @classmethod
    def email_length(cls, value: str) -> str:
        return _check_email_length(value)


# Order (collection: "order")
class Order(BaseModel):
    order_number: str
    customer_name: str
    email: str
    phone: str
    address: str
    city: str
    state: str
    pincode: str
    items: List[OrderItem]
    total_amount: float
    status: OrderStatus = OrderStatus.pending
    notes: Optional[str] = None


class OrderOut(Order):
    id: str
    created_at: datetime
    updated_at: datetime


class TrackedOrder(OrderOut):
    progress_step: int


class StatusUpdate(BaseModel):
    status: OrderStatus


class DashboardStats(BaseModel):
    total_orders: int
    total_products: int
    pending_orders: int
    delivered_orders: int
    total_revenue: float
    unread_contacts: int


# ------------------------------- Contacts -------------------------------
class ContactCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    phone: Optional[str] = Field(None, pattern=PHONE_PATTERN)
    company: Optional[str] = Field(None, max_length=100)
    message: str = Field(..., min_length=10, max_length=2000)

    @field_validator("email")
    @classmethod
    def email_length(cls, value: str) -> str:
        return _check_email_length(value)


# Contact (collection: "contact")
class ContactOut(BaseModel):
    id: str
    name: str
    email: str
    phone: Optional[str] = None
    company: Optional[str] = None
    message: str
    is_read: bool = False
    created_at: datetime


# ------------------------------- Auth -------------------------------
class AuthRequest(BaseModel):
    email: EmailStr
    password: str


class AuthResponse(BaseModel):
    token: str
    role: str
    email: EmailStr
