"""Order and OrderItem models.

Business rules implemented:
- Orders are write-once: no update or delete path exists; ``save()`` on an
  already persisted order or item raises ``ImmutableOrderError``.
- OrderItem freezes the catalog item's display attributes
  (``product_name``, ``picture_uri``) and the basket's ``unit_price`` at
  checkout; later catalog changes never alter a placed order.
- OrderItem ``subtotal`` is always ``units * unit_price`` (calculated on save).
- ``total_amount`` is written once, from the aggregate, and checked against
  the sum of the persisted item subtotals by the repository.
- Idempotency via ``idempotency_key`` unique constraint.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from django.core.validators import MinValueValidator
from django.db import models

from modules.core.models import BaseModel
from modules.orders.exceptions import ImmutableOrderError


class WriteOnceMixin:
    """Rejects any save of a row that already exists."""

    def save(self, *args: Any, **kwargs: Any) -> None:
        if not self._state.adding:
            raise ImmutableOrderError(
                f"{type(self).__name__} {self.pk} is immutable once placed."
            )
        super().save(*args, **kwargs)


class Order(WriteOnceMixin, BaseModel):
    """Placed order.

    The shipping address is embedded (copied verbatim from the checkout
    request), not a reference to an address book entry.

    ``idempotency_key`` is nullable: only checkouts that carry a
    client-provided key store one.  Multiple NULLs do not collide.
    """

    buyer_id: models.CharField = models.CharField(max_length=255, db_index=True)
    ship_to_street: models.CharField = models.CharField(max_length=180)
    ship_to_city: models.CharField = models.CharField(max_length=100)
    ship_to_state: models.CharField = models.CharField(
        max_length=60, blank=True, default=""
    )
    ship_to_country: models.CharField = models.CharField(max_length=90)
    ship_to_zip_code: models.CharField = models.CharField(max_length=18)
    total_amount: models.DecimalField = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
    )
    idempotency_key: models.CharField = models.CharField(
        max_length=255,
        unique=True,
        null=True,
        blank=True,
    )

    class Meta:
        db_table = "orders"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["-created_at"], name="orders_created_idx"),
        ]

    def __str__(self) -> str:
        return f"Order {self.id} ({self.buyer_id})"


class OrderItem(WriteOnceMixin, BaseModel):
    """Line item owned exclusively by its Order."""

    order: models.ForeignKey = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="items",
    )
    catalog_item_id: models.PositiveBigIntegerField = models.PositiveBigIntegerField()
    product_name: models.CharField = models.CharField(max_length=255)
    picture_uri: models.CharField = models.CharField(
        max_length=500, blank=True, default=""
    )
    unit_price: models.DecimalField = models.DecimalField(
        max_digits=10,
        decimal_places=2,
    )
    units: models.PositiveIntegerField = models.PositiveIntegerField(
        validators=[MinValueValidator(1)],
    )
    subtotal: models.DecimalField = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        editable=False,
    )

    class Meta:
        db_table = "order_items"
        ordering = ["created_at", "id"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(units__gte=1),
                name="order_items_units_positive",
            ),
        ]

    def save(self, *args: Any, **kwargs: Any) -> None:
        self.subtotal = self.units * self.unit_price
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.product_name} x{self.units} (${self.subtotal})"
