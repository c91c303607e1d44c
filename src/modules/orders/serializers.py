"""Order DRF serializers for API input/output.

The serializer operates at the Interface layer (API Views).
Business logic lives in the Service Layer, which receives
Pydantic DTOs from ``dtos.py``.  Output serializers read DTOs, never
models, so the API shows exactly what the service returned.
"""

from __future__ import annotations

from rest_framework import serializers

# ---------------------------------------------------------------------------
# Input Serializers
# ---------------------------------------------------------------------------


class ShippingAddressSerializer(serializers.Serializer):
    """Validates the shipping address of a checkout request."""

    street = serializers.CharField(max_length=180)
    city = serializers.CharField(max_length=100)
    state = serializers.CharField(
        max_length=60, required=False, default="", allow_blank=True
    )
    country = serializers.CharField(max_length=90)
    zip_code = serializers.CharField(max_length=18)


class CreateOrderSerializer(serializers.Serializer):
    """Validates the checkout request payload."""

    basket_id = serializers.IntegerField(min_value=1)
    shipping_address = ShippingAddressSerializer()


# ---------------------------------------------------------------------------
# Output Serializers (Read)
# ---------------------------------------------------------------------------


class CatalogItemOrderedSerializer(serializers.Serializer):
    catalog_item_id = serializers.IntegerField()
    product_name = serializers.CharField()
    picture_uri = serializers.CharField()


class OrderItemSerializer(serializers.Serializer):
    """Read serializer for an order line with its catalog snapshot."""

    item_ordered = CatalogItemOrderedSerializer()
    unit_price = serializers.DecimalField(max_digits=10, decimal_places=2)
    units = serializers.IntegerField()
    subtotal = serializers.DecimalField(max_digits=12, decimal_places=2)


class OrderSerializer(serializers.Serializer):
    """Read serializer for an ``OrderDTO``."""

    id = serializers.UUIDField()
    buyer_id = serializers.CharField()
    order_date = serializers.DateTimeField()
    ship_to_address = ShippingAddressSerializer()
    order_items = OrderItemSerializer(many=True)
    total = serializers.DecimalField(max_digits=12, decimal_places=2)


class SideEffectWarningSerializer(serializers.Serializer):
    stage = serializers.CharField()
    topic = serializers.CharField()
    outbox_event_id = serializers.UUIDField()
    error = serializers.CharField()


class CreateOrderResultSerializer(serializers.Serializer):
    """Read serializer for a ``CreateOrderResult``."""

    order_id = serializers.UUIDField()
    status = serializers.CharField()
    replayed = serializers.BooleanField()
    warnings = SideEffectWarningSerializer(many=True)
