"""Unit tests for the checkout stage tracker."""

from __future__ import annotations

import pytest

from modules.orders.constants import CheckoutStage
from modules.orders.exceptions import (
    EmptyBasketError,
    InvalidStageTransition,
    OrderIntegrityError,
)
from modules.orders.saga import CheckoutSaga

pytestmark = pytest.mark.unit


class TestCheckoutSaga:
    def test_starts_validating(self):
        saga = CheckoutSaga(basket_id=1)
        assert saga.stage == CheckoutStage.VALIDATING
        assert saga.history == [CheckoutStage.VALIDATING]
        assert saga.is_terminal is False

    def test_happy_path_with_delivery(self):
        saga = CheckoutSaga(basket_id=1)
        for stage in (
            CheckoutStage.BUILDING,
            CheckoutStage.PERSISTING,
            CheckoutStage.NOTIFYING_QUEUE,
            CheckoutStage.NOTIFYING_DELIVERY,
            CheckoutStage.COMMITTED,
        ):
            saga.advance(stage)
        assert saga.is_terminal is True
        assert len(saga.history) == 6

    def test_cannot_skip_persisting(self):
        saga = CheckoutSaga(basket_id=1)
        saga.advance(CheckoutStage.BUILDING)
        with pytest.raises(InvalidStageTransition):
            saga.advance(CheckoutStage.NOTIFYING_QUEUE)

    def test_cannot_fail_after_commit_point(self):
        saga = CheckoutSaga(basket_id=1)
        saga.advance(CheckoutStage.BUILDING)
        saga.advance(CheckoutStage.PERSISTING)
        saga.advance(CheckoutStage.NOTIFYING_QUEUE)
        assert saga.can_advance_to(CheckoutStage.FAILED) is False
        assert saga.can_advance_to(CheckoutStage.COMMITTED_WITH_WARNINGS) is True

    def test_terminal_stage_has_no_exit(self):
        saga = CheckoutSaga(basket_id=1)
        saga.advance(CheckoutStage.COMMITTED)
        with pytest.raises(InvalidStageTransition):
            saga.advance(CheckoutStage.BUILDING)

    def test_fail_stamps_current_stage(self):
        saga = CheckoutSaga(basket_id=1)
        saga.advance(CheckoutStage.BUILDING)
        error = saga.fail(OrderIntegrityError("missing"))
        assert error.stage == CheckoutStage.BUILDING
        assert saga.stage == CheckoutStage.FAILED

    def test_fail_keeps_existing_stage(self):
        saga = CheckoutSaga(basket_id=1)
        error = saga.fail(EmptyBasketError("empty", stage="CUSTOM"))
        assert error.stage == "CUSTOM"
