"""Order domain exceptions.

Raised by the Service Layer when an order cannot be created.  The API
layer (Views) catches these and translates them into HTTP responses.
A post-persist failure is never raised: it is reported as a warning on
``CreateOrderResult`` because the order already exists.
"""

from __future__ import annotations

from typing import Iterable, Optional

from shared.domain.bus import MessageDeliveryError


class OrderingError(Exception):
    """Base class; ``stage`` is the checkout stage that failed."""

    def __init__(self, message: str, *, stage: Optional[str] = None) -> None:
        super().__init__(message)
        self.stage = stage


class BasketNotFound(OrderingError):
    """The basket does not exist (caller error, not retryable)."""


class OrderValidationError(OrderingError):
    """The request cannot produce an order (caller error, not retryable)."""


class EmptyBasketError(OrderValidationError):
    """The basket has no items to check out."""


class OrderIntegrityError(OrderingError):
    """Basket and catalog are out of sync, or an order invariant broke.

    Signals data corruption: never retried blindly.
    """

    def __init__(
        self,
        message: str,
        *,
        missing_item_ids: Iterable[int] = (),
        stage: Optional[str] = None,
    ) -> None:
        super().__init__(message, stage=stage)
        self.missing_item_ids = tuple(missing_item_ids)


class DependencyError(OrderingError, MessageDeliveryError):
    """A collaborator (catalog, store, queue, delivery) failed or timed out."""

    def __init__(
        self, dependency: str, message: str, *, stage: Optional[str] = None
    ) -> None:
        super().__init__(message, stage=stage)
        self.dependency = dependency


class OrderNotFound(OrderingError):
    """The requested order does not exist."""


class ImmutableOrderError(OrderingError):
    """An attempt was made to modify a placed order."""


class InvalidStageTransition(RuntimeError):
    """The checkout workflow tried to skip or revisit a stage (a defect)."""
