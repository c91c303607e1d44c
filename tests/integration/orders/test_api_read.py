"""Integration tests for GET /api/v1/orders/{id}/."""

from __future__ import annotations

from uuid import uuid4

import pytest

pytestmark = pytest.mark.integration


@pytest.fixture()
def placed_order_id(auth_client, make_basket, mug, sweatshirt, address_payload, queue_name):
    basket = make_basket((mug, "9.99", 2), (sweatshirt, "19.50", 1))
    response = auth_client.post(
        "/api/v1/orders/",
        {"basket_id": basket.pk, "shipping_address": address_payload},
        format="json",
    )
    assert response.status_code == 201
    return response.json()["order_id"]


class TestRetrieveOrder:
    def test_returns_order_with_items(self, auth_client, placed_order_id, mug):
        response = auth_client.get(f"/api/v1/orders/{placed_order_id}/")

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == placed_order_id
        assert data["buyer_id"] == "buyer-1"
        assert data["total"] == "39.48"
        assert data["ship_to_address"]["city"] == "Kent"
        first = data["order_items"][0]
        assert first["item_ordered"]["catalog_item_id"] == mug.pk
        assert first["item_ordered"]["product_name"] == "Mug"
        assert first["unit_price"] == "9.99"
        assert first["units"] == 2
        assert first["subtotal"] == "19.98"

    def test_unknown_id_returns_404(self, auth_client):
        response = auth_client.get(f"/api/v1/orders/{uuid4()}/")
        assert response.status_code == 404

    def test_invalid_id_returns_404(self, auth_client):
        response = auth_client.get("/api/v1/orders/not-a-uuid/")
        assert response.status_code == 404

    def test_placed_orders_cannot_be_modified(self, auth_client, placed_order_id):
        url = f"/api/v1/orders/{placed_order_id}/"
        assert auth_client.patch(url, {"buyer_id": "x"}, format="json").status_code == 405
        assert auth_client.delete(url).status_code == 405

    def test_requires_authentication(self, api_client):
        response = api_client.get(f"/api/v1/orders/{uuid4()}/")
        assert response.status_code == 401
