"""Outbound message schemas owned by the Orders context.

Each schema is named and versioned independently of the Order aggregate so
downstream consumers keep a stable contract.  Wire format is compact JSON
with camelCase keys; schema name and version travel as message headers,
not in the body.

- ``OrderNotification`` (v1) → order-items queue:
  ``{"items":[{"itemId":10,"quantity":2}]}``
- ``DeliveryRequest`` (v1) → delivery endpoint:
  ``{"finalPrice":..,"items":[..],"shippingAddress":{..}}``
"""

from __future__ import annotations

from decimal import Decimal
from typing import Annotated, Any, ClassVar, Dict, Tuple

from pydantic import BaseModel, ConfigDict, PlainSerializer
from pydantic.alias_generators import to_camel

from modules.orders.constants import DELIVERY_TOPIC, ORDER_ITEMS_TOPIC
from modules.orders.dtos import OrderDTO

Money = Annotated[
    Decimal, PlainSerializer(float, return_type=float, when_used="json")
]


class _WireModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class IntegrationMessage(_WireModel):
    """Base for top-level messages written to the outbox."""

    SCHEMA_NAME: ClassVar[str]
    SCHEMA_VERSION: ClassVar[int] = 1
    TOPIC: ClassVar[str]

    def to_json(self) -> bytes:
        return self.model_dump_json(by_alias=True).encode("utf-8")

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


# ---------------------------------------------------------------------------
# Order-items notification (queue)
# ---------------------------------------------------------------------------


class OrderNotificationItem(_WireModel):
    item_id: int
    quantity: int


class OrderNotification(IntegrationMessage):
    """Line items only: no prices, no address."""

    SCHEMA_NAME: ClassVar[str] = "OrderNotification"
    TOPIC: ClassVar[str] = ORDER_ITEMS_TOPIC

    items: Tuple[OrderNotificationItem, ...]

    @classmethod
    def from_order(cls, order: OrderDTO) -> OrderNotification:
        return cls(
            items=tuple(
                OrderNotificationItem(
                    item_id=item.item_ordered.catalog_item_id,
                    quantity=item.units,
                )
                for item in order.order_items
            )
        )


# ---------------------------------------------------------------------------
# Delivery request (HTTP)
# ---------------------------------------------------------------------------


class DeliveryItemOrdered(_WireModel):
    catalog_item_id: int
    product_name: str
    picture_uri: str


class DeliveryItem(_WireModel):
    item_ordered: DeliveryItemOrdered
    unit_price: Money
    units: int


class DeliveryAddress(_WireModel):
    street: str
    city: str
    state: str
    country: str
    zip_code: str


class DeliveryRequest(IntegrationMessage):
    SCHEMA_NAME: ClassVar[str] = "DeliveryRequest"
    TOPIC: ClassVar[str] = DELIVERY_TOPIC

    final_price: Money
    items: Tuple[DeliveryItem, ...]
    shipping_address: DeliveryAddress

    @classmethod
    def from_order(cls, order: OrderDTO) -> DeliveryRequest:
        address = order.ship_to_address
        return cls(
            final_price=order.total,
            items=tuple(
                DeliveryItem(
                    item_ordered=DeliveryItemOrdered(
                        catalog_item_id=item.item_ordered.catalog_item_id,
                        product_name=item.item_ordered.product_name,
                        picture_uri=item.item_ordered.picture_uri,
                    ),
                    unit_price=item.unit_price,
                    units=item.units,
                )
                for item in order.order_items
            ),
            shipping_address=DeliveryAddress(
                street=address.street,
                city=address.city,
                state=address.state,
                country=address.country,
                zip_code=address.zip_code,
            ),
        )
