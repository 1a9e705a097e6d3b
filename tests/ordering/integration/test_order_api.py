"""Integration tests for Order API endpoints via TestClient."""

import pytest
from fastapi.testclient import TestClient
from ordering.order.order import Order
from protean import current_domain


@pytest.fixture()
def client(ordering_app):
    return TestClient(ordering_app)


def _checkout_body(**overrides):
    body = {
        "customerInfo": {
            "name": "Asha Rao",
            "phone": "+919812345678",
            "address": "12 MG Road, Bengaluru 560001",
            "email": "asha@example.com",
        },
        "items": [{"productId": "prod-001", "quantity": 2, "name": "Silk Scarf"}],
    }
    body.update(overrides)
    return body


def _create_order(client):
    """Helper: POST /orders and return the order id."""
    response = client.post("/orders", json=_checkout_body())
    assert response.status_code == 201
    return response.json()["order"]["orderId"]


class TestCreateOrderEndpoint:
    def test_create_order(self, client, catalogue):
        response = client.post("/orders", json=_checkout_body())

        assert response.status_code == 201
        data = response.json()
        assert data["order"]["status"] == "pending"
        assert data["order"]["totalAmount"] == 200.0
        assert data["order"]["customerInfo"]["name"] == "Asha Rao"
        assert data["order"]["items"][0]["productId"] == "prod-001"
        assert data["notificationLink"].startswith("https://wa.me/")

        order = current_domain.repository_for(Order).get(data["order"]["orderId"])
        assert order.total_amount == 200.0

    def test_invalid_customer_is_400(self, client, catalogue):
        body = _checkout_body(customerInfo={"name": "Asha", "phone": "nope", "address": "12 MG Road, Bengaluru"})
        response = client.post("/orders", json=body)

        assert response.status_code == 400
        assert "phone" in response.json()["error"]

    def test_missing_fields_are_400(self, client, catalogue):
        response = client.post("/orders", json={"items": []})
        assert response.status_code == 400
        assert "error" in response.json()

    def test_empty_items_are_400(self, client, catalogue):
        response = client.post("/orders", json=_checkout_body(items=[]))
        assert response.status_code == 400

    def test_stale_product_is_404_with_product_id(self, client, catalogue):
        body = _checkout_body(items=[{"productId": "prod-gone", "quantity": 1, "name": "Old Lamp"}])
        response = client.post("/orders", json=body)

        assert response.status_code == 404
        assert response.json() == {
            "error": "Product Old Lamp is no longer available",
            "productId": "prod-gone",
            "productName": "Old Lamp",
        }


class TestOrderReadEndpoints:
    def test_get_order(self, client, catalogue):
        order_id = _create_order(client)
        response = client.get(f"/orders/{order_id}")
        assert response.status_code == 200
        assert response.json()["orderId"] == order_id

    def test_public_status_view(self, client, catalogue):
        order_id = _create_order(client)
        response = client.get(f"/orders/{order_id}/status")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "pending"
        assert "notificationLink" not in data

    def test_unknown_order_is_404(self, client):
        response = client.get("/orders/ORD-20261019-0999/status")
        assert response.status_code == 404
        assert response.json() == {"error": "Order ORD-20261019-0999 not found"}

    def test_malformed_order_id_is_404(self, client):
        assert client.get("/orders/banana/status").status_code == 404

    def test_list_orders(self, client, catalogue):
        for _ in range(3):
            _create_order(client)

        response = client.get("/orders", params={"page": 1, "limit": 2})

        assert response.status_code == 200
        data = response.json()
        assert len(data["orders"]) == 2
        assert data["pagination"] == {"current": 1, "pages": 2, "total": 3, "limit": 2}

    def test_list_rejects_oversized_page(self, client):
        assert client.get("/orders", params={"limit": 500}).status_code == 400

    def test_list_search(self, client, catalogue):
        order_id = _create_order(client)

        assert client.get("/orders", params={"search": "asha"}).json()["orders"][0]["orderId"] == order_id
        assert client.get("/orders", params={"search": "scarf"}).json()["pagination"]["total"] == 1
        assert client.get("/orders", params={"search": "tote"}).json()["orders"] == []


class TestStatusEndpoints:
    def test_confirm(self, client, catalogue):
        order_id = _create_order(client)
        response = client.patch(f"/orders/{order_id}/status", json={"status": "confirmed"})

        assert response.status_code == 200
        data = response.json()
        assert data["order"]["status"] == "confirmed"
        assert data["order"]["confirmedAt"] is not None
        assert "Order CONFIRMED" in data["confirmationMessage"]

    def test_illegal_transition_is_409(self, client, catalogue):
        order_id = _create_order(client)
        response = client.patch(f"/orders/{order_id}/status", json={"status": "delivered"})

        assert response.status_code == 409
        assert response.json() == {"error": "Cannot transition order from pending to delivered"}

    def test_unknown_status_is_400(self, client, catalogue):
        order_id = _create_order(client)
        response = client.patch(f"/orders/{order_id}/status", json={"status": "lost"})
        assert response.status_code == 400

    def test_status_change_on_unknown_order_is_404(self, client):
        response = client.patch("/orders/ORD-20261019-0999/status", json={"status": "confirmed"})
        assert response.status_code == 404

    def test_cancel(self, client, catalogue):
        order_id = _create_order(client)
        response = client.patch(f"/orders/{order_id}/cancel", json={"reason": "Ordered twice"})

        assert response.status_code == 200
        assert response.json()["order"]["status"] == "cancelled"
        assert response.json()["order"]["cancellationReason"] == "Ordered twice"

    def test_cancel_without_reason_is_400(self, client, catalogue):
        order_id = _create_order(client)
        assert client.patch(f"/orders/{order_id}/cancel", json={}).status_code == 400


class TestSyncEndpoint:
    def test_sync_creates_and_reports(self, client):
        envelope = {
            "orderId": "ORD-20261001-0004",
            "customerInfo": {"name": "Ravi Kumar", "phone": "+919900112233", "address": "7 Park Street, Kolkata"},
            "items": [{"productId": "prod-001", "name": "Silk Scarf", "price": 100.0, "quantity": 1}],
            "totalAmount": 100.0,
        }
        response = client.post("/orders/sync", json={"orders": [envelope, {"orderId": "nope"}]})

        assert response.status_code == 200
        data = response.json()
        assert data["syncedCount"] == 1
        assert data["errorCount"] == 1
        assert data["errors"][0]["orderId"] == "nope"

    def test_clean_sync_omits_errors(self, client):
        response = client.post("/orders/sync", json={"orders": []})
        assert response.json() == {"syncedCount": 0, "errorCount": 0}

    def test_orders_must_be_an_array(self, client):
        assert client.post("/orders/sync", json={"orders": "all of them"}).status_code == 400
        assert client.post("/orders/sync", json={}).status_code == 400


class TestFavoriteEndpoints:
    def test_favorite_and_unfavorite(self, client, catalogue):
        response = client.post("/products/prod-001/favorite")
        assert response.status_code == 200
        assert response.json() == {"productId": "prod-001", "favoriteCount": 1}

        response = client.delete("/products/prod-001/favorite")
        assert response.json() == {"productId": "prod-001", "favoriteCount": 0}

    def test_unknown_product_is_404(self, client, catalogue):
        assert client.post("/products/prod-missing/favorite").status_code == 404


class TestHealthEndpoint:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "domains": {"ordering": {"name": "ordering"}}}
