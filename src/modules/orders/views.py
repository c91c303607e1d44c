"""Order API views.

Exposes the ``OrderService`` via HTTP using DRF ViewSets.
Domain exceptions are caught and translated into HTTP status codes:

- ``BasketNotFound`` / ``OrderNotFound`` → 404
- ``OrderValidationError`` (incl. ``EmptyBasketError``) → 400
- ``OrderIntegrityError`` → 409
- ``DependencyError`` → 503

A created order answers 201, or 202 when a side effect is still pending
in the outbox.  An idempotent replay answers 200.
"""

from __future__ import annotations

from uuid import UUID

from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.throttling import BaseThrottle
from rest_framework.viewsets import ViewSet

from modules.orders.composition import build_order_service
from modules.orders.dtos import AddressDTO, CreateOrderDTO
from modules.orders.exceptions import (
    BasketNotFound,
    DependencyError,
    OrderIntegrityError,
    OrderNotFound,
    OrderValidationError,
)
from modules.orders.serializers import (
    CreateOrderResultSerializer,
    CreateOrderSerializer,
    OrderSerializer,
)


class OrderViewSet(ViewSet):
    """ViewSet for checkout and order lookup.

    Uses ``OrderService`` built by the composition root.  Does **not**
    extend ``ModelViewSet``: placed orders are immutable, so there is no
    update or delete route.
    """

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = build_order_service()

    def get_throttles(self) -> list[BaseThrottle]:
        """Throttle scopes per action."""
        if self.action == "create":
            self.throttle_scope = "order_creation"
        elif self.action == "retrieve":
            self.throttle_scope = "order_listing"
        return super().get_throttles()

    # ------------------------------------------------------------------
    # Create (checkout)
    # ------------------------------------------------------------------

    def create(self, request: Request) -> Response:
        """POST /api/v1/orders/

        Supports idempotency via the ``Idempotency-Key`` header.
        """
        create_serializer = CreateOrderSerializer(data=request.data)
        create_serializer.is_valid(raise_exception=True)

        data = create_serializer.validated_data
        dto = CreateOrderDTO(
            basket_id=data["basket_id"],
            shipping_address=AddressDTO(**data["shipping_address"]),
            idempotency_key=request.headers.get("Idempotency-Key") or None,
        )

        try:
            result = self._service.create_order(dto)
        except BasketNotFound as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_404_NOT_FOUND)
        except OrderValidationError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        except OrderIntegrityError as exc:
            return Response(
                {
                    "detail": str(exc),
                    "missing_item_ids": list(exc.missing_item_ids),
                },
                status=status.HTTP_409_CONFLICT,
            )
        except DependencyError as exc:
            return Response(
                {"detail": "A dependency is unavailable.", "dependency": exc.dependency},
                status=status.HTTP_503_SERVICE_UNAVAILABLE,
            )

        if result.replayed:
            code = status.HTTP_200_OK
        elif result.is_complete:
            code = status.HTTP_201_CREATED
        else:
            code = status.HTTP_202_ACCEPTED
        out = CreateOrderResultSerializer(result)
        return Response(out.data, status=code)

    # ------------------------------------------------------------------
    # Retrieve
    # ------------------------------------------------------------------

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/orders/{pk}/"""
        try:
            order = self._service.get_order(UUID(str(pk)))
        except (OrderNotFound, ValueError):
            return Response(
                {"detail": "Order not found."},
                status=status.HTTP_404_NOT_FOUND,
            )
        serializer = OrderSerializer(order)
        return Response(serializer.data)
