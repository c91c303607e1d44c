"""Order domain constants.

Defines the checkout workflow stages, their valid transitions, the commit
outcomes reported to callers and the outbox topics orders publish to.
"""

from django.db import models


class CheckoutStage(models.TextChoices):
    VALIDATING = "VALIDATING", "Validating basket"
    BUILDING = "BUILDING", "Building order"
    PERSISTING = "PERSISTING", "Persisting order"
    NOTIFYING_QUEUE = "NOTIFYING_QUEUE", "Publishing order items"
    NOTIFYING_DELIVERY = "NOTIFYING_DELIVERY", "Notifying delivery"
    COMMITTED = "COMMITTED", "Committed"
    COMMITTED_WITH_WARNINGS = "COMMITTED_WITH_WARNINGS", "Committed with warnings"
    FAILED = "FAILED", "Failed"


# Once PERSISTING has succeeded the order exists: no path leads to FAILED.
# VALIDATING -> COMMITTED is the idempotent replay of an existing order;
# PERSISTING -> COMMITTED is the same replay detected by the unique key.
VALID_STAGE_TRANSITIONS: dict[str, set[str]] = {
    CheckoutStage.VALIDATING: {
        CheckoutStage.BUILDING,
        CheckoutStage.COMMITTED,
        CheckoutStage.FAILED,
    },
    CheckoutStage.BUILDING: {CheckoutStage.PERSISTING, CheckoutStage.FAILED},
    CheckoutStage.PERSISTING: {
        CheckoutStage.NOTIFYING_QUEUE,
        CheckoutStage.COMMITTED,
        CheckoutStage.FAILED,
    },
    CheckoutStage.NOTIFYING_QUEUE: {
        CheckoutStage.NOTIFYING_DELIVERY,
        CheckoutStage.COMMITTED,
        CheckoutStage.COMMITTED_WITH_WARNINGS,
    },
    CheckoutStage.NOTIFYING_DELIVERY: {
        CheckoutStage.COMMITTED,
        CheckoutStage.COMMITTED_WITH_WARNINGS,
    },
    CheckoutStage.COMMITTED: set(),
    CheckoutStage.COMMITTED_WITH_WARNINGS: set(),
    CheckoutStage.FAILED: set(),
}

TERMINAL_STAGES: set[str] = {
    CheckoutStage.COMMITTED,
    CheckoutStage.COMMITTED_WITH_WARNINGS,
    CheckoutStage.FAILED,
}


class CommitStatus(models.TextChoices):
    COMMITTED = "COMMITTED", "Order created"
    COMMITTED_WITH_WARNINGS = (
        "COMMITTED_WITH_WARNINGS",
        "Order created, notification pending",
    )


ORDER_ITEMS_TOPIC = "orders.items"
DELIVERY_TOPIC = "orders.delivery"

TOPIC_STAGES: dict[str, str] = {
    ORDER_ITEMS_TOPIC: CheckoutStage.NOTIFYING_QUEUE,
    DELIVERY_TOPIC: CheckoutStage.NOTIFYING_DELIVERY,
}
