"""Background tasks of the orders module."""

from typing import Optional

import structlog
from celery import shared_task

from modules.orders.composition import build_outbox_relay
from modules.orders.config import OrderingConfig

logger = structlog.get_logger(__name__)


@shared_task(name="orders.relay_outbox")
def relay_outbox(batch_size: Optional[int] = None) -> dict:
    """Re-deliver pending and due failed outbox rows (scheduled by beat)."""
    config = OrderingConfig.from_settings()
    relay = build_outbox_relay(config)
    result = relay.relay_pending(batch_size or config.outbox_relay_batch_size)
    if result["exhausted"]:
        logger.error("outbox.exhausted_rows_pending_review", count=result["exhausted"])
    return result
