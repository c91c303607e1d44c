"""Catalog item model.

Catalog management is handled elsewhere; this module only reads items to
freeze their display attributes into orders.  Items are soft-deleted so
historic references keep resolving in the admin, while ``alive()`` hides
them from checkout.
"""

from __future__ import annotations

from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models

from modules.core.models import SoftDeleteModel


class CatalogItem(SoftDeleteModel):
    """Product offered in the catalog.

    ``picture_uri`` may contain the ``http://catalogbaseurltobereplaced``
    placeholder; ``UriComposer`` resolves it when a snapshot is taken.
    """

    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )
    picture_uri = models.CharField(max_length=500, blank=True, default="")

    class Meta:
        db_table = "catalog_items"
        ordering = ["name"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(price__gt=0),
                name="catalog_items_price_positive",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.name} (#{self.pk})"
