"""Integration tests for the Cart API endpoints via TestClient."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from storefront.api.routes import cart_router
from storefront.cart.store import set_cart_store


@pytest.fixture()
def client(cart_store):
    set_cart_store(cart_store)
    app = FastAPI()
    app.include_router(cart_router)
    return TestClient(app)


def _add(client, **overrides):
    body = {
        "product_id": "prod-001",
        "name": "Hand-embroidered shawl",
        "localized_name": "کڑھائی والی شال",
        "unit_price": 450,
        "available_stock": 5,
        "quantity": 1,
    }
    body.update(overrides)
    return client.post("/cart/items", json=body)


class TestGetCart:
    def test_empty_cart(self, client):
        response = client.get("/cart")
        assert response.status_code == 200
        data = response.json()
        assert data["items"] == []
        assert data["item_count"] == 0
        assert data["totals"] == {"subtotal": 0, "shipping_cost": 150, "total": 150, "free_shipping": False}


class TestAddItemAPI:
    def test_add_returns_cart(self, client):
        response = _add(client, quantity=2)
        assert response.status_code == 200
        data = response.json()
        assert data["item_count"] == 1
        assert data["items"][0]["quantity"] == 2
        assert data["items"][0]["line_total"] == 900
        assert data["totals"]["total"] == 1050

    def test_add_clamps_to_stock(self, client):
        _add(client)
        data = _add(client, quantity=10).json()
        assert data["item_count"] == 1
        assert data["items"][0]["quantity"] == 5

    def test_free_shipping_above_threshold(self, client):
        data = _add(client, quantity=3).json()
        assert data["totals"]["subtotal"] == 1350
        assert data["totals"]["shipping_cost"] == 0
        assert data["totals"]["free_shipping"] is True

    def test_out_of_stock_is_ignored(self, client):
        data = _add(client, available_stock=0).json()
        assert data["item_count"] == 0

    def test_negative_price_rejected(self, client):
        assert _add(client, unit_price=-1).status_code == 422

    def test_persists_to_storage(self, client, storage):
        _add(client)
        assert "prod-001" in storage.get("cart")


class TestUpdateQuantityAPI:
    def test_update_clamps(self, client):
        _add(client)
        assert client.put("/cart/items/prod-001", json={"quantity": 0}).json()["items"][0]["quantity"] == 1
        assert client.put("/cart/items/prod-001", json={"quantity": 99}).json()["items"][0]["quantity"] == 5

    def test_update_unknown_product_is_noop(self, client):
        _add(client)
        data = client.put("/cart/items/missing", json={"quantity": 3}).json()
        assert data["items"][0]["quantity"] == 1


class TestRemoveAndClearAPI:
    def test_remove_item(self, client):
        _add(client, product_id="a")
        _add(client, product_id="b")
        data = client.delete("/cart/items/a").json()
        assert [i["product_id"] for i in data["items"]] == ["b"]

    def test_clear_cart(self, client):
        _add(client)
        data = client.delete("/cart").json()
        assert data["item_count"] == 0
