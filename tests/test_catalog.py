import pytest
from pymongo.errors import PyMongoError

import catalog
from database import COLL_PRODUCT


def create(client, headers, payload):
    res = client.post("/admin/products", json=payload, headers=headers)
    assert res.status_code == 201, res.text
    return res.json()


def test_create_product(client, admin_headers, product_payload):
    product = create(client, admin_headers, product_payload)
    assert product["is_active"] is True
    assert product["image"] == "/placeholder.svg"
    assert [s["size"] for s in product["sizes"]] == ["10 X 12", "13 X 16"]
    assert product["features"] == ["CPCB Certified", "Food Safe"]


def test_product_without_sizes_is_allowed(client, admin_headers, product_payload):
    product = create(client, admin_headers, {**product_payload, "category": "custom", "sizes": [], "price_per_kg": 0})
    assert product["sizes"] == []


@pytest.mark.parametrize(
    "changes",
    [
        {"category": "plastic"},
        {"price_per_kg": -5},
        {"sizes": [{"size": "10 X 12", "micron": 0, "capacity": "1 KG", "pcs_per_kg": 10}]},
        {"sizes": [{"size": "10 X 12", "micron": 25, "capacity": "1 KG", "pcs_per_kg": 0}]},
    ],
)
def test_invalid_products_are_rejected(client, admin_headers, product_payload, changes):
    res = client.post("/admin/products", json={**product_payload, **changes}, headers=admin_headers)
    assert res.status_code == 422


def test_storefront_hides_inactive_products(client, admin_headers, product_payload):
    visible = create(client, admin_headers, product_payload)
    hidden = create(client, admin_headers, {**product_payload, "name": "Old Stock", "is_active": False})

    public_ids = [p["id"] for p in client.get("/products").json()]
    admin_ids = [p["id"] for p in client.get("/admin/products", headers=admin_headers).json()]

    assert public_ids == [visible["id"]]
    assert set(admin_ids) == {visible["id"], hidden["id"]}
    assert client.get(f"/products/{hidden['id']}").status_code == 404
    assert client.get(f"/products/{visible['id']}").status_code == 200


@pytest.mark.anyio
async def test_active_only_query_never_returns_inactive(db):
    await db[COLL_PRODUCT].insert_many([
        {"name": "a", "is_active": True},
        {"name": "b", "is_active": False},
    ])
    assert [p["name"] for p in await catalog.list_products(db, active_only=True)] == ["a"]
    assert {p["name"] for p in await catalog.list_products(db, active_only=False)} == {"a", "b"}


def test_toggle_twice_restores_flag(client, admin_headers, product_payload):
    product = create(client, admin_headers, product_payload)
    url = f"/admin/products/{product['id']}/toggle"
    assert client.post(url, headers=admin_headers).json()["is_active"] is False
    assert client.get("/products").json() == []
    assert client.post(url, headers=admin_headers).json()["is_active"] is True
    assert len(client.get("/products").json()) == 1


def test_update_replaces_sizes_wholesale(client, admin_headers, product_payload):
    product = create(client, admin_headers, product_payload)
    new_sizes = [{"size": "20 X 26", "micron": 40, "capacity": "10 KG", "pcs_per_kg": 33}]
    res = client.put(
        f"/admin/products/{product['id']}",
        json={"sizes": new_sizes, "price_per_kg": 175},
        headers=admin_headers,
    )
    assert res.status_code == 200
    updated = res.json()
    assert updated["sizes"] == new_sizes
    assert updated["price_per_kg"] == 175
    assert updated["name"] == product_payload["name"]


def test_update_without_sizes_keeps_them(client, admin_headers, product_payload):
    product = create(client, admin_headers, product_payload)
    updated = client.put(f"/admin/products/{product['id']}", json={"name": "Carry Bags"}, headers=admin_headers).json()
    assert updated["name"] == "Carry Bags"
    assert len(updated["sizes"]) == 2


def test_update_missing_product(client, admin_headers):
    res = client.put("/admin/products/65f000000000000000000000", json={"name": "x"}, headers=admin_headers)
    assert res.status_code == 404


def test_delete_product_removes_its_sizes(client, admin_headers, product_payload):
    product = create(client, admin_headers, product_payload)
    assert client.delete(f"/admin/products/{product['id']}", headers=admin_headers).json() == {"deleted": True}
    assert client.get("/admin/products", headers=admin_headers).json() == []
    assert client.get(f"/products/{product['id']}").status_code == 404
    assert client.delete(f"/admin/products/{product['id']}", headers=admin_headers).status_code == 404


def test_storefront_filters(client, admin_headers, product_payload):
    create(client, admin_headers, product_payload)
    create(client, admin_headers, {**product_payload, "name": "Garbage Bags", "category": "garbage", "description": "Leak proof"})

    assert [p["name"] for p in client.get("/products", params={"category": "garbage"}).json()] == ["Garbage Bags"]
    assert [p["name"] for p in client.get("/products", params={"q": "CORN"}).json()] == ["Compostable Carry Bags"]
    assert len(client.get("/products", params={"category": "all"}).json()) == 2
    assert client.get("/products", params={"category": "medical"}).json() == []


def test_filter_products():
    products = [
        {"name": "Nursery Bags", "description": "Plant directly", "category": "nursery"},
        {"name": "Grocery Bags", "description": "For vegetable vendors", "category": "grocery"},
        {"name": "Custom", "description": None, "category": "custom"},
    ]
    assert catalog.filter_products(products) == products
    assert catalog.filter_products(products, q="bags") == products[:2]
    assert catalog.filter_products(products, q="VEGETABLE") == [products[1]]
    assert catalog.filter_products(products, category="nursery", q="grocery") == []


def test_seed_only_fills_empty_catalog(client, admin_headers):
    first = client.post("/admin/seed", headers=admin_headers).json()
    assert first["inserted"] == len(catalog.SEED_PRODUCTS)
    assert client.post("/admin/seed", headers=admin_headers).json() == {"inserted": 0}
    custom = client.get("/products", params={"category": "custom"}).json()
    assert custom[0]["sizes"] == []


def test_database_errors_become_503(client, monkeypatch):
    async def broken(db, active_only=True):
        raise PyMongoError("no servers available")

    monkeypatch.setattr(catalog, "list_products", broken)
    res = client.get("/products")
    assert res.status_code == 503
    assert res.json()["detail"] == "Database unavailable"


def test_admin_product_routes_need_token(client, product_payload):
    assert client.post("/admin/products", json=product_payload).status_code == 401
    assert client.get("/admin/products").status_code == 401
