"""Basket DTOs handed to checkout (read-only, immutable)."""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, Tuple

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from modules.baskets.models import Basket


class BasketItemDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    catalog_item_id: int
    unit_price: Decimal
    quantity: int = Field(ge=1)


class BasketDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    buyer_id: str
    items: Tuple[BasketItemDTO, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.items

    @property
    def catalog_item_ids(self) -> set[int]:
        return {item.catalog_item_id for item in self.items}

    @classmethod
    def from_entity(cls, basket: Basket) -> BasketDTO:
        """Assumes ``items`` are prefetched."""
        return cls(
            id=basket.pk,
            buyer_id=basket.buyer_id,
            items=tuple(
                BasketItemDTO(
                    catalog_item_id=item.catalog_item_id,
                    unit_price=item.unit_price,
                    quantity=item.quantity,
                )
                for item in basket.items.all()
            ),
        )
