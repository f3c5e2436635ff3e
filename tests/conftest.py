import pytest
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

import auth
from database import get_db
from main import app


@pytest.fixture
def db():
    return AsyncMongoMockClient()["biobag_test"]


@pytest.fixture
def client(db):
    async def override_get_db():
        return db

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers():
    return {"Authorization": f"Bearer {auth.admin_token()}"}


@pytest.fixture
def order_payload():
    return {
        "customer_name": "Rajesh Kumar",
        "email": "rajesh@example.com",
        "phone": "+91 98765 43210",
        "address": "123 Green Street, Sector 5",
        "city": "Mumbai",
        "state": "Maharashtra",
        "pincode": "400001",
        "items": [
            {"product_id": None, "product_name": "Compostable Carry Bags", "size": "16 X 20", "quantity": 100, "price_per_kg": 180},
            {"product_id": None, "product_name": "Compostable Garbage Bags", "size": "19 X 21", "quantity": 50, "price_per_kg": 160},
        ],
        "notes": "Urgent delivery required",
    }


@pytest.fixture
def product_payload():
    return {
        "name": "Compostable Carry Bags",
        "description": "100% biodegradable carry bags made from corn starch.",
        "category": "carry",
        "price_per_kg": 180,
        "sizes": [
            {"size": "10 X 12", "micron": 25, "capacity": "1 KG", "pcs_per_kg": 178},
            {"size": "13 X 16", "micron": 30, "capacity": "3 KG", "pcs_per_kg": 97},
        ],
        "features": ["CPCB Certified", "Food Safe"],
    }
