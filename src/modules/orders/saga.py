"""Checkout workflow tracker.

Records the stage a single ``create_order`` call is in and rejects
transitions that are not in ``VALID_STAGE_TRANSITIONS``.  Persisting is the
only commit point: after it, the workflow can end with warnings but never
in ``FAILED``.
"""

from __future__ import annotations

from typing import List

import structlog

from modules.orders.constants import (
    TERMINAL_STAGES,
    VALID_STAGE_TRANSITIONS,
    CheckoutStage,
)
from modules.orders.exceptions import InvalidStageTransition, OrderingError

logger = structlog.get_logger(__name__)


class CheckoutSaga:
    def __init__(self, basket_id: int) -> None:
        self.basket_id = basket_id
        self.stage: str = CheckoutStage.VALIDATING
        self.history: List[str] = [CheckoutStage.VALIDATING]

    @property
    def is_terminal(self) -> bool:
        return self.stage in TERMINAL_STAGES

    def can_advance_to(self, stage: str) -> bool:
        return stage in VALID_STAGE_TRANSITIONS.get(self.stage, set())

    def advance(self, stage: str) -> None:
        if not self.can_advance_to(stage):
            raise InvalidStageTransition(
                f"Cannot move checkout from {self.stage} to {stage}."
            )
        logger.debug(
            "checkout.stage_changed",
            basket_id=self.basket_id,
            old_stage=self.stage,
            new_stage=stage,
        )
        self.stage = stage
        self.history.append(stage)

    def fail(self, error: OrderingError) -> OrderingError:
        """Move to ``FAILED`` and stamp the failing stage on *error*."""
        if error.stage is None:
            error.stage = self.stage
        self.advance(CheckoutStage.FAILED)
        return error
