"""Integration tests for checkout idempotency.

Covers:
- Replaying the same Idempotency-Key returns the same order (200) and
  publishes nothing new.
- Different keys create distinct orders.
- Requests without a key are never deduplicated.
"""

from __future__ import annotations

import pytest

from modules.core.models import OutboxEvent
from modules.orders.models import Order

pytestmark = pytest.mark.integration

URL = "/api/v1/orders/"


@pytest.fixture()
def order_payload(make_basket, mug, sweatshirt, address_payload, queue_name):
    basket = make_basket((mug, "9.99", 2), (sweatshirt, "19.50", 1))
    return {"basket_id": basket.pk, "shipping_address": address_payload}


class TestOrderIdempotencyReplay:
    def test_replay_same_key_returns_same_order(
        self, auth_client, order_payload, drain_queue
    ):
        responses = [
            auth_client.post(
                URL, order_payload, format="json", HTTP_IDEMPOTENCY_KEY="replay-key-abc"
            )
            for _ in range(3)
        ]

        assert [r.status_code for r in responses] == [201, 200, 200]
        assert Order.objects.count() == 1
        first = responses[0].json()
        for response in responses[1:]:
            data = response.json()
            assert data["order_id"] == first["order_id"]
            assert data["replayed"] is True
        assert OutboxEvent.objects.count() == 1
        assert len(drain_queue()) == 1

    def test_key_is_stored_on_order(self, auth_client, order_payload):
        auth_client.post(URL, order_payload, format="json", HTTP_IDEMPOTENCY_KEY="k-store")
        assert Order.objects.get().idempotency_key == "k-store"


class TestOrderIdempotencyDifferentKeys:
    def test_different_keys_create_two_orders(self, auth_client, order_payload):
        r1 = auth_client.post(URL, order_payload, format="json", HTTP_IDEMPOTENCY_KEY="key-alpha")
        r2 = auth_client.post(URL, order_payload, format="json", HTTP_IDEMPOTENCY_KEY="key-beta")

        assert r1.status_code == r2.status_code == 201
        assert r1.json()["order_id"] != r2.json()["order_id"]
        assert Order.objects.count() == 2

    def test_no_key_creates_new_order_each_time(self, auth_client, order_payload):
        auth_client.post(URL, order_payload, format="json")
        auth_client.post(URL, order_payload, format="json")
        assert Order.objects.count() == 2
