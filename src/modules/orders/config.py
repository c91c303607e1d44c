"""Explicit configuration for the checkout workflow.

Built once at the composition root and passed into the service and its
adapters; nothing inside the workflow reads Django settings directly.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, SecretStr


class OrderingConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    queue_connection: SecretStr
    queue_name: str = "orderitems"
    queue_timeout: float = Field(default=5.0, gt=0)
    queue_max_retries: int = Field(default=2, ge=0)

    delivery_notification_enabled: bool = False
    delivery_order_base_url: str = ""
    delivery_order_key: SecretStr = SecretStr("")
    delivery_timeout: float = Field(default=10.0, gt=0)

    outbox_max_retries: int = Field(default=5, ge=1)
    outbox_retry_backoff: float = Field(default=30.0, ge=0)
    outbox_relay_batch_size: int = Field(default=100, ge=1)

    catalog_base_url: str = ""

    @classmethod
    def from_settings(cls, settings=None) -> OrderingConfig:
        if settings is None:
            from django.conf import settings
        return cls(
            queue_connection=settings.ORDERS_QUEUE_CONNECTION,
            queue_name=settings.ORDERS_QUEUE_NAME,
            queue_timeout=settings.ORDERS_QUEUE_TIMEOUT,
            queue_max_retries=settings.ORDERS_QUEUE_MAX_RETRIES,
            delivery_notification_enabled=settings.DELIVERY_NOTIFICATION_ENABLED,
            delivery_order_base_url=settings.DELIVERY_ORDER_BASE_URL,
            delivery_order_key=settings.DELIVERY_ORDER_KEY,
            delivery_timeout=settings.DELIVERY_ORDER_TIMEOUT,
            outbox_max_retries=settings.OUTBOX_MAX_RETRIES,
            outbox_retry_backoff=settings.OUTBOX_RETRY_BACKOFF,
            outbox_relay_batch_size=settings.OUTBOX_RELAY_BATCH_SIZE,
            catalog_base_url=settings.CATALOG_BASE_URL,
        )
