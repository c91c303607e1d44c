"""Order DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.  DTOs are
immutable (``frozen=True``).

- ``AddressDTO``: shipping address, copied verbatim into the order.
- ``CatalogItemOrderedDTO``: frozen catalog snapshot embedded in an item.
- ``OrderItemDTO``: one line of an order.
- ``OrderDTO``: the Order aggregate.  ``total`` is always derived from the
  items, never stored on the DTO.
- ``CreateOrderDTO``: input of the checkout use case.
- ``SideEffectWarning`` / ``CreateOrderResult``: output of the checkout use
  case when the order was created.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Optional, Tuple
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from modules.orders.constants import CommitStatus

if TYPE_CHECKING:
    from modules.orders.models import Order


# ---------------------------------------------------------------------------
# Aggregate
# ---------------------------------------------------------------------------


class AddressDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    street: str = Field(min_length=1, max_length=180)
    city: str = Field(min_length=1, max_length=100)
    state: str = Field(default="", max_length=60)
    country: str = Field(min_length=1, max_length=90)
    zip_code: str = Field(min_length=1, max_length=18)


class CatalogItemOrderedDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    catalog_item_id: int
    product_name: str
    picture_uri: str


class OrderItemDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    item_ordered: CatalogItemOrderedDTO
    unit_price: Decimal
    units: int = Field(ge=1)

    @property
    def subtotal(self) -> Decimal:
        return self.unit_price * self.units


class OrderDTO(BaseModel):
    """Immutable Order aggregate.

    ``id`` and ``order_date`` are ``None`` until the order has been
    persisted; everything else is fixed when the order is built.
    """

    model_config = ConfigDict(frozen=True)

    id: Optional[UUID] = None
    buyer_id: str
    ship_to_address: AddressDTO
    order_items: Tuple[OrderItemDTO, ...]
    order_date: Optional[datetime] = None

    @field_validator("order_items")
    @classmethod
    def order_must_have_items(
        cls, v: Tuple[OrderItemDTO, ...]
    ) -> Tuple[OrderItemDTO, ...]:
        if not v:
            raise ValueError("Order must have at least one item.")
        return v

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total(self) -> Decimal:
        return sum((item.subtotal for item in self.order_items), Decimal("0"))

    @classmethod
    def from_entity(cls, order: Order) -> OrderDTO:
        """Build the aggregate from an Order model instance.

        Assumes ``items`` are prefetched.
        """
        return cls(
            id=order.id,
            buyer_id=order.buyer_id,
            ship_to_address=AddressDTO(
                street=order.ship_to_street,
                city=order.ship_to_city,
                state=order.ship_to_state,
                country=order.ship_to_country,
                zip_code=order.ship_to_zip_code,
            ),
            order_items=tuple(
                OrderItemDTO(
                    item_ordered=CatalogItemOrderedDTO(
                        catalog_item_id=item.catalog_item_id,
                        product_name=item.product_name,
                        picture_uri=item.picture_uri,
                    ),
                    unit_price=item.unit_price,
                    units=item.units,
                )
                for item in order.items.all()
            ),
            order_date=order.created_at,
        )


# ---------------------------------------------------------------------------
# Checkout use case
# ---------------------------------------------------------------------------


class CreateOrderDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    basket_id: int
    shipping_address: AddressDTO
    idempotency_key: Optional[str] = Field(default=None, max_length=255)


class SideEffectWarning(BaseModel):
    """A post-persist side effect that did not complete.

    The outbox row stays queued; the relay retries it in the background.
    """

    model_config = ConfigDict(frozen=True)

    stage: str
    topic: str
    outbox_event_id: UUID
    error: str


class CreateOrderResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    order_id: UUID
    status: CommitStatus
    warnings: Tuple[SideEffectWarning, ...] = ()
    replayed: bool = False

    @property
    def is_complete(self) -> bool:
        return self.status == CommitStatus.COMMITTED
