from decimal import Decimal
from uuid import uuid4

import pytest

from django.contrib.auth import get_user_model
from django.core.cache import cache
from kombu import Connection
from rest_framework.test import APIClient

from modules.baskets.models import Basket, BasketItem
from modules.catalog.models import CatalogItem
from modules.catalog.uri import CATALOG_BASE_URL_PLACEHOLDER


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture(autouse=True)
def _clear_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture()
def api_client():
    """DRF APIClient for testing API endpoints."""
    return APIClient()


@pytest.fixture()
def auth_client():
    """APIClient with a force-authenticated Django user."""
    client = APIClient()
    user = get_user_model().objects.create_user(
        username="buyer", password="testpass123"
    )
    client.force_authenticate(user=user)
    return client


@pytest.fixture()
def api_client_with_correlation(api_client):
    """APIClient pre-configured with a known correlation ID header."""
    cid = "test-correlation-id-fixture"
    api_client.defaults["HTTP_X_REQUEST_ID"] = cid
    return api_client, cid


# ---------------------------------------------------------------------------
# Catalog / basket data
# ---------------------------------------------------------------------------


@pytest.fixture()
def mug():
    return CatalogItem.objects.create(
        name="Mug",
        price=Decimal("9.99"),
        picture_uri=f"{CATALOG_BASE_URL_PLACEHOLDER}/images/products/2.png",
    )


@pytest.fixture()
def sweatshirt():
    return CatalogItem.objects.create(
        name="Sweatshirt",
        price=Decimal("19.50"),
        picture_uri=f"{CATALOG_BASE_URL_PLACEHOLDER}/images/products/1.png",
    )


@pytest.fixture()
def make_basket():
    """Factory: ``make_basket((catalog_item, unit_price, quantity), ...)``."""

    def _make(*lines, buyer_id="buyer-1"):
        basket = Basket.objects.create(buyer_id=buyer_id)
        for item, unit_price, quantity in lines:
            BasketItem.objects.create(
                basket=basket,
                catalog_item_id=item.pk if hasattr(item, "pk") else item,
                unit_price=Decimal(unit_price),
                quantity=quantity,
            )
        return basket

    return _make


@pytest.fixture()
def address_payload():
    return {
        "street": "123 Main St.",
        "city": "Kent",
        "state": "OH",
        "country": "United States",
        "zip_code": "44240",
    }


# ---------------------------------------------------------------------------
# Broker
# ---------------------------------------------------------------------------


@pytest.fixture()
def queue_name(settings):
    """Isolated in-memory queue per test."""
    name = f"orderitems-{uuid4().hex[:8]}"
    settings.ORDERS_QUEUE_NAME = name
    return name


@pytest.fixture()
def drain_queue(queue_name):
    """Return every message currently sitting on the test queue."""

    def _drain():
        messages = []
        with Connection("memory://") as conn:
            queue = conn.SimpleQueue(queue_name)
            while True:
                try:
                    message = queue.get(block=False)
                except queue.Empty:
                    break
                message.ack()
                messages.append(message)
            queue.close()
        return messages

    return _drain
