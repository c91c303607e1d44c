"""Order service layer (Use Cases).

``OrderService.create_order`` is the Order Commit Orchestrator: it turns a
basket into a placed order and fans the result out to the order-items
queue and, when enabled, the delivery endpoint.

Ordering and failure policy:
1. Validate the basket (missing / empty → raised, nothing written).
2. Resolve catalog snapshots and build the order (integrity problems →
   raised, nothing written).
3. Persist the order **and** its outbox rows in one transaction.  This is
   the commit point: a failure here is raised and nothing exists.
4. Dispatch the outbox rows (queue, then delivery).  A failure here does
   not undo the order; it is returned as a warning and the row is retried
   by the ``orders.relay_outbox`` task.

``create_order`` must run outside an enclosing transaction
(``ATOMIC_REQUESTS`` off) so step 4 only ever sees committed orders.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional, Tuple
from uuid import UUID

import structlog
from django.db import DatabaseError, IntegrityError, transaction

from modules.orders.builder import build_order
from modules.orders.constants import TOPIC_STAGES, CheckoutStage, CommitStatus
from modules.orders.dtos import (
    CreateOrderDTO,
    CreateOrderResult,
    OrderDTO,
    SideEffectWarning,
)
from modules.orders.exceptions import (
    BasketNotFound,
    DependencyError,
    EmptyBasketError,
    OrderIntegrityError,
    OrderNotFound,
)
from modules.orders.messages import DeliveryRequest, IntegrationMessage, OrderNotification
from modules.orders.saga import CheckoutSaga

if TYPE_CHECKING:
    from modules.baskets.repositories.interfaces import IBasketRepository
    from modules.catalog.repositories.interfaces import ICatalogRepository
    from modules.core.models import OutboxEvent
    from modules.core.outbox import OutboxRelay
    from modules.orders.config import OrderingConfig
    from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)


class OrderService:
    """Application service for Order use-cases.

    Receives repositories, the outbox relay and its configuration via
    constructor injection (DIP).
    """

    def __init__(
        self,
        basket_repository: IBasketRepository,
        catalog_repository: ICatalogRepository,
        order_repository: IOrderRepository,
        relay: OutboxRelay,
        config: OrderingConfig,
    ) -> None:
        self._basket_repo = basket_repository
        self._catalog_repo = catalog_repository
        self._order_repo = order_repository
        self._relay = relay
        self._config = config

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def create_order(self, dto: CreateOrderDTO) -> CreateOrderResult:
        """Check out a basket.

        Returns:
            ``CreateOrderResult`` with status ``COMMITTED``, or
            ``COMMITTED_WITH_WARNINGS`` when a post-persist side effect is
            still pending.

        Raises (the order was **not** created):
            BasketNotFound: basket does not exist.
            EmptyBasketError: basket has no items.
            OrderIntegrityError: basket references unknown catalog items.
            DependencyError: basket, catalog or order store unavailable.
        """
        saga = CheckoutSaga(dto.basket_id)
        log = logger.bind(basket_id=dto.basket_id)
        log.info("order.creation_started")

        # 0. Idempotency check
        if dto.idempotency_key:
            existing = self._find_by_idempotency_key(dto.idempotency_key, saga)
            if existing:
                log.info(
                    "order.idempotency_hit",
                    order_id=str(existing.id),
                    key=dto.idempotency_key,
                )
                saga.advance(CheckoutStage.COMMITTED)
                return self._replayed(existing)

        # 1. Validate basket
        try:
            basket = self._basket_repo.get_with_items(dto.basket_id)
        except DatabaseError as exc:
            raise saga.fail(
                DependencyError("basket", f"Basket store unavailable: {exc}")
            ) from exc
        if basket is None:
            log.info("order.basket_not_found")
            raise saga.fail(BasketNotFound(f"Basket {dto.basket_id} not found."))
        if basket.is_empty:
            log.info("order.basket_empty")
            raise saga.fail(EmptyBasketError(f"Basket {dto.basket_id} is empty."))

        # 2. Resolve catalog snapshots and build
        saga.advance(CheckoutStage.BUILDING)
        try:
            snapshots = self._catalog_repo.list_snapshots(basket.catalog_item_ids)
        except DatabaseError as exc:
            raise saga.fail(
                DependencyError("catalog", f"Catalog unavailable: {exc}")
            ) from exc
        try:
            order = build_order(basket, snapshots, dto.shipping_address)
        except OrderIntegrityError as exc:
            log.error(
                "order.integrity_violation",
                error=str(exc),
                missing_item_ids=list(exc.missing_item_ids),
            )
            raise saga.fail(exc)

        # 3. Persist order + outbox rows (commit point)
        saga.advance(CheckoutStage.PERSISTING)
        try:
            placed, outbox = self._persist(order, dto.idempotency_key)
        except IntegrityError as exc:
            replay = self._resolve_duplicate(dto.idempotency_key)
            if replay is not None:
                log.info("order.idempotency_race", order_id=str(replay.id))
                saga.advance(CheckoutStage.COMMITTED)
                return self._replayed(replay)
            raise saga.fail(
                DependencyError("order_store", f"Order could not be stored: {exc}")
            ) from exc
        except OrderIntegrityError as exc:
            log.error("order.integrity_violation", error=str(exc))
            raise saga.fail(exc)
        except DatabaseError as exc:
            raise saga.fail(
                DependencyError("order_store", f"Order store unavailable: {exc}")
            ) from exc

        log = log.bind(order_id=str(placed.id))
        log.info("order.created", total=str(placed.total))

        # 4. Post-commit side effects
        warnings: List[SideEffectWarning] = []
        for event in outbox:
            saga.advance(TOPIC_STAGES[event.topic])
            warning = self._dispatch(event)
            if warning is not None:
                log.warning(
                    "order.side_effect_failed",
                    stage=warning.stage,
                    topic=warning.topic,
                    outbox_event_id=str(warning.outbox_event_id),
                    error=warning.error,
                )
                warnings.append(warning)

        status = (
            CommitStatus.COMMITTED_WITH_WARNINGS if warnings else CommitStatus.COMMITTED
        )
        saga.advance(CheckoutStage(status.value))
        log.info("order.committed", status=status, warning_count=len(warnings))
        return CreateOrderResult(
            order_id=placed.id,
            status=status,
            warnings=tuple(warnings),
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_order(self, order_id: UUID) -> OrderDTO:
        """Raises ``OrderNotFound`` if the order does not exist."""
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise OrderNotFound(f"Order {order_id} not found.")
        return order

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _persist(
        self, order: OrderDTO, idempotency_key: Optional[str]
    ) -> Tuple[OrderDTO, List[OutboxEvent]]:
        with transaction.atomic():
            placed = self._order_repo.add(order, idempotency_key=idempotency_key)
            outbox = self._order_repo.enqueue_messages(
                placed.id, self._messages_for(placed)
            )
        return placed, outbox

    def _messages_for(self, placed: OrderDTO) -> List[IntegrationMessage]:
        messages: List[IntegrationMessage] = [OrderNotification.from_order(placed)]
        if self._config.delivery_notification_enabled:
            messages.append(DeliveryRequest.from_order(placed))
        return messages

    def _dispatch(self, event: OutboxEvent) -> Optional[SideEffectWarning]:
        try:
            if self._relay.dispatch(event):
                return None
            error = event.error_message or ""
        except Exception as exc:
            # The order is committed; the row keeps its last committed state
            # and the relay picks it up.
            logger.exception(
                "order.dispatch_error",
                outbox_event_id=str(event.id),
                topic=event.topic,
            )
            error = f"Outbox dispatch failed: {type(exc).__name__}: {exc}"
        return SideEffectWarning(
            stage=TOPIC_STAGES[event.topic],
            topic=event.topic,
            outbox_event_id=event.id,
            error=error,
        )

    def _find_by_idempotency_key(
        self, key: str, saga: CheckoutSaga
    ) -> Optional[OrderDTO]:
        try:
            return self._order_repo.get_by_idempotency_key(key)
        except DatabaseError as exc:
            raise saga.fail(
                DependencyError("order_store", f"Order store unavailable: {exc}")
            ) from exc

    def _resolve_duplicate(self, key: Optional[str]) -> Optional[OrderDTO]:
        if not key:
            return None
        try:
            return self._order_repo.get_by_idempotency_key(key)
        except DatabaseError:
            return None

    @staticmethod
    def _replayed(order: OrderDTO) -> CreateOrderResult:
        return CreateOrderResult(
            order_id=order.id,
            status=CommitStatus.COMMITTED,
            replayed=True,
        )
