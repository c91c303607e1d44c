"""Composition root for the Orders context.

The only place that turns Django settings into an ``OrderingConfig`` and
wires concrete repositories and adapters into the service.
"""

from __future__ import annotations

from typing import Optional

import httpx

from modules.baskets.repositories import BasketDjangoRepository
from modules.catalog.repositories import CatalogDjangoRepository
from modules.catalog.uri import UriComposer
from modules.core.outbox import OutboxRelay
from modules.orders.config import OrderingConfig
from modules.orders.constants import DELIVERY_TOPIC, ORDER_ITEMS_TOPIC
from modules.orders.delivery import HttpDeliveryNotifier
from modules.orders.publishers import KombuQueuePublisher
from modules.orders.repositories import OrderDjangoRepository
from modules.orders.services import OrderService
from shared.infrastructure.bus import InMemoryMessageRouter


def build_message_router(
    config: OrderingConfig,
    delivery_transport: Optional[httpx.BaseTransport] = None,
) -> InMemoryMessageRouter:
    router = InMemoryMessageRouter()
    router.subscribe(
        ORDER_ITEMS_TOPIC,
        KombuQueuePublisher(
            connection_url=config.queue_connection.get_secret_value(),
            queue_name=config.queue_name,
            timeout=config.queue_timeout,
            max_retries=config.queue_max_retries,
        ),
    )
    # Registered even when disabled so rows queued before a switch-off drain.
    router.subscribe(
        DELIVERY_TOPIC,
        HttpDeliveryNotifier(
            base_url=config.delivery_order_base_url,
            order_key=config.delivery_order_key.get_secret_value(),
            timeout=config.delivery_timeout,
            transport=delivery_transport,
        ),
    )
    return router


def build_outbox_relay(
    config: Optional[OrderingConfig] = None,
    delivery_transport: Optional[httpx.BaseTransport] = None,
) -> OutboxRelay:
    config = config or OrderingConfig.from_settings()
    return OutboxRelay(
        build_message_router(config, delivery_transport),
        max_retries=config.outbox_max_retries,
        backoff=config.outbox_retry_backoff,
    )


def build_order_service(
    config: Optional[OrderingConfig] = None,
    delivery_transport: Optional[httpx.BaseTransport] = None,
) -> OrderService:
    config = config or OrderingConfig.from_settings()
    return OrderService(
        basket_repository=BasketDjangoRepository(),
        catalog_repository=CatalogDjangoRepository(
            UriComposer(config.catalog_base_url)
        ),
        order_repository=OrderDjangoRepository(),
        relay=build_outbox_relay(config, delivery_transport),
        config=config,
    )
