"""Django ORM implementation of the basket repository."""

from __future__ import annotations

from typing import Optional

from modules.baskets.dtos import BasketDTO
from modules.baskets.models import Basket
from modules.baskets.repositories.interfaces import IBasketRepository


class BasketDjangoRepository(IBasketRepository):
    def get_by_id(self, id: int) -> Optional[BasketDTO]:
        return self.get_with_items(id)

    def get_with_items(self, basket_id: int) -> Optional[BasketDTO]:
        basket = Basket.objects.prefetch_related("items").filter(pk=basket_id).first()
        if basket is None:
            return None
        return BasketDTO.from_entity(basket)
