"""Basket repository interface."""

from __future__ import annotations

from abc import abstractmethod
from typing import Optional

from modules.baskets.dtos import BasketDTO
from modules.core.repositories.interfaces import IReadRepository


class IBasketRepository(IReadRepository[int, BasketDTO]):
    @abstractmethod
    def get_with_items(self, basket_id: int) -> Optional[BasketDTO]:
        """Return the basket with its items, or ``None`` if it does not exist."""
