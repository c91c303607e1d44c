"""Django ORM implementation of the Order repository.

Satisfies ``IOrderRepository`` using Django's QuerySet API.  Writes are
wrapped in ``transaction.atomic()`` so the Order aggregate (Order +
OrderItems) is persisted atomically; when the caller already holds a
transaction the block becomes a savepoint.
"""

from __future__ import annotations

from decimal import Decimal
from typing import List, Optional, Sequence
from uuid import UUID

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction

from modules.core.middleware import get_correlation_id
from modules.core.models import OutboxEvent
from modules.orders.dtos import OrderDTO
from modules.orders.exceptions import OrderIntegrityError
from modules.orders.messages import IntegrationMessage
from modules.orders.models import Order, OrderItem
from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)


class OrderDjangoRepository(IOrderRepository):
    """Concrete Order repository backed by Django ORM."""

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    @transaction.atomic
    def add(self, order: OrderDTO, idempotency_key: Optional[str] = None) -> OrderDTO:
        address = order.ship_to_address
        entity = Order(
            buyer_id=order.buyer_id,
            ship_to_street=address.street,
            ship_to_city=address.city,
            ship_to_state=address.state,
            ship_to_country=address.country,
            ship_to_zip_code=address.zip_code,
            total_amount=order.total,
            idempotency_key=idempotency_key,
        )
        entity.save()

        persisted_total = Decimal("0.00")
        for item_dto in order.order_items:
            item = OrderItem(
                order=entity,
                catalog_item_id=item_dto.item_ordered.catalog_item_id,
                product_name=item_dto.item_ordered.product_name,
                picture_uri=item_dto.item_ordered.picture_uri,
                unit_price=item_dto.unit_price,
                units=item_dto.units,
            )
            item.save()
            persisted_total += item.subtotal

        if persisted_total != order.total:
            raise OrderIntegrityError(
                f"Order total {order.total} does not match the sum of its "
                f"items {persisted_total}."
            )

        logger.info(
            "order.persisted",
            order_id=str(entity.id),
            item_count=len(order.order_items),
            total=str(order.total),
        )
        return OrderDTO.from_entity(entity)

    @transaction.atomic
    def enqueue_messages(
        self, order_id: UUID, messages: Sequence[IntegrationMessage]
    ) -> List[OutboxEvent]:
        correlation_id = get_correlation_id()
        events = []
        for message in messages:
            events.append(
                OutboxEvent.objects.create(
                    event_type=message.SCHEMA_NAME,
                    schema_version=message.SCHEMA_VERSION,
                    payload=message.to_payload(),
                    aggregate_id=str(order_id),
                    topic=message.TOPIC,
                    correlation_id=correlation_id,
                )
            )
        logger.info(
            "order.messages_enqueued",
            order_id=str(order_id),
            topics=[event.topic for event in events],
        )
        return events

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get_by_id(self, id: UUID) -> Optional[OrderDTO]:
        """Returns ``None`` for non-existent or invalid IDs."""
        try:
            entity = Order.objects.prefetch_related("items").filter(id=id).first()
        except (ValueError, ValidationError):
            return None
        return OrderDTO.from_entity(entity) if entity else None

    def get_by_idempotency_key(self, key: str) -> Optional[OrderDTO]:
        entity = (
            Order.objects.prefetch_related("items")
            .filter(idempotency_key=key)
            .first()
        )
        return OrderDTO.from_entity(entity) if entity else None
