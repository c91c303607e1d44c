"""Order repository interface (Order Store).

Append-only: an order is added once and read back; there is no update or
delete operation.  Outbox messages produced by a checkout are enqueued
through the same repository so the caller can write both inside one
database transaction.

The Service Layer depends exclusively on this contract (DIP).
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, List, Optional, Sequence
from uuid import UUID

from modules.core.repositories.interfaces import IReadRepository
from modules.orders.dtos import OrderDTO

if TYPE_CHECKING:
    from modules.core.models import OutboxEvent
    from modules.orders.messages import IntegrationMessage


class IOrderRepository(IReadRepository[UUID, OrderDTO]):
    @abstractmethod
    def add(self, order: OrderDTO, idempotency_key: Optional[str] = None) -> OrderDTO:
        """Persist a new order with its items atomically.

        Returns the order as re-read from the store (``id`` and
        ``order_date`` assigned).
        """

    @abstractmethod
    def get_by_idempotency_key(self, key: str) -> Optional[OrderDTO]:
        """Retrieve an order by its idempotency key."""

    @abstractmethod
    def enqueue_messages(
        self, order_id: UUID, messages: Sequence[IntegrationMessage]
    ) -> List[OutboxEvent]:
        """Write one outbox row per message, in order."""
