"""Basket and BasketItem models.

Basket lifecycle (creation, item add/remove) belongs to the storefront;
checkout only reads baskets.  ``BasketItem.unit_price`` is the price the
buyer saw when adding the item and is authoritative at checkout.
"""

from __future__ import annotations

from django.core.validators import MinValueValidator
from django.db import models

from modules.core.models import TimestampedModel


class Basket(TimestampedModel):
    buyer_id = models.CharField(max_length=255, db_index=True)

    class Meta:
        db_table = "baskets"
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"Basket #{self.pk} ({self.buyer_id})"


class BasketItem(TimestampedModel):
    basket = models.ForeignKey(
        "baskets.Basket",
        on_delete=models.CASCADE,
        related_name="items",
    )
    catalog_item_id = models.PositiveBigIntegerField()
    unit_price = models.DecimalField(max_digits=10, decimal_places=2)
    quantity = models.PositiveIntegerField(
        default=1,
        validators=[MinValueValidator(1)],
    )

    class Meta:
        db_table = "basket_items"
        ordering = ["id"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gte=1),
                name="basket_items_quantity_positive",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.catalog_item_id} x{self.quantity}"
