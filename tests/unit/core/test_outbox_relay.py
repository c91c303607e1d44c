"""Unit tests for OutboxRelay.

Handlers are in-process fakes; rows live in the test database.
"""

from __future__ import annotations

from datetime import timedelta
from unittest.mock import patch

import pytest
from django.db import DatabaseError
from freezegun import freeze_time

from modules.core.models import EventStatus, OutboxEvent
from modules.core.outbox import OutboxRelay
from shared.domain.bus import MessageDeliveryError
from shared.infrastructure.bus import InMemoryMessageRouter

pytestmark = pytest.mark.unit


class RecordingHandler:
    def __init__(self, fail_times: int = 0) -> None:
        self.calls = []
        self._fail_times = fail_times

    def handle(self, payload, headers) -> None:
        self.calls.append((payload, dict(headers)))
        if len(self.calls) <= self._fail_times:
            raise MessageDeliveryError("broker unreachable")


def _event(topic: str = "orders.items", **overrides) -> OutboxEvent:
    defaults = {
        "event_type": "OrderNotification",
        "payload": {"items": [{"itemId": 1, "quantity": 1}]},
        "aggregate_id": "order-1",
        "topic": topic,
    }
    defaults.update(overrides)
    return OutboxEvent.objects.create(**defaults)


class BrokenHandler:
    def handle(self, payload, headers) -> None:
        raise UnicodeEncodeError("ascii", "caf\xe9", 3, 4, "bad header")


def _relay(handler, max_retries: int = 3, backoff: float = 0.0) -> OutboxRelay:
    router = InMemoryMessageRouter()
    router.subscribe("orders.items", handler)
    return OutboxRelay(router, max_retries=max_retries, backoff=backoff)


class TestDispatch:
    def test_success_marks_row_published(self):
        handler = RecordingHandler()
        event = _event(correlation_id="cid-1")

        assert _relay(handler).dispatch(event) is True

        event.refresh_from_db()
        assert event.status == EventStatus.PUBLISHED
        payload, headers = handler.calls[0]
        assert payload == {"items": [{"itemId": 1, "quantity": 1}]}
        assert headers == {
            "message_id": str(event.id),
            "schema": "OrderNotification",
            "schema_version": "1",
            "correlation_id": "cid-1",
        }

    def test_delivery_error_marks_row_failed(self):
        event = _event()

        assert _relay(RecordingHandler(fail_times=1), backoff=5).dispatch(event) is False

        event.refresh_from_db()
        assert event.status == EventStatus.FAILED
        assert event.retry_count == 1
        assert event.error_message == "broker unreachable"
        assert event.next_attempt_at is not None

    def test_published_row_is_not_sent_again(self):
        handler = RecordingHandler()
        event = _event()
        event.mark_as_published()

        assert _relay(handler).dispatch(event) is True
        assert handler.calls == []

    def test_unknown_topic_marks_row_failed(self):
        event = _event(topic="unknown.topic")

        assert _relay(RecordingHandler()).dispatch(event) is False

        event.refresh_from_db()
        assert event.status == EventStatus.FAILED
        assert event.error_message.startswith("LookupError")

    def test_unexpected_handler_error_marks_row_failed(self):
        event = _event()

        assert _relay(BrokenHandler()).dispatch(event) is False

        event.refresh_from_db()
        assert event.status == EventStatus.FAILED
        assert event.retry_count == 1
        assert event.error_message.startswith("UnicodeEncodeError: 'ascii' codec")


class TestRelayPending:
    def test_relays_pending_rows_oldest_first(self):
        handler = RecordingHandler()
        first = _event(aggregate_id="first")
        second = _event(aggregate_id="second")

        result = _relay(handler).relay_pending()

        assert result == {"published": 2, "failed": 0, "exhausted": 0}
        assert [headers["message_id"] for _, headers in handler.calls] == [
            str(first.id),
            str(second.id),
        ]

    def test_broken_row_does_not_block_the_batch(self):
        router = InMemoryMessageRouter()
        handler = RecordingHandler()
        router.subscribe("orders.items", handler)
        router.subscribe("orders.delivery", BrokenHandler())
        relay = OutboxRelay(router, max_retries=2, backoff=0)
        first = _event(aggregate_id="first")
        broken = _event(topic="orders.delivery", aggregate_id="broken")
        last = _event(aggregate_id="last")

        result = relay.relay_pending()

        assert result == {"published": 2, "failed": 1, "exhausted": 0}
        first.refresh_from_db()
        last.refresh_from_db()
        broken.refresh_from_db()
        assert first.status == EventStatus.PUBLISHED
        assert last.status == EventStatus.PUBLISHED
        assert broken.status == EventStatus.FAILED

        assert relay.relay_pending() == {"published": 0, "failed": 1, "exhausted": 1}
        broken.refresh_from_db()
        assert broken.retry_count == 2
        assert len(handler.calls) == 2

    def test_bookkeeping_error_on_one_row_is_isolated(self):
        relay = _relay(RecordingHandler())
        _event(aggregate_id="first")
        _event(aggregate_id="second")

        with patch.object(
            relay, "dispatch", side_effect=[DatabaseError("lock lost"), True]
        ):
            result = relay.relay_pending()

        assert result == {"published": 1, "failed": 1, "exhausted": 0}

    def test_respects_batch_size(self):
        for _ in range(3):
            _event()
        result = _relay(RecordingHandler()).relay_pending(batch_size=2)
        assert result["published"] == 2
        assert OutboxEvent.objects.filter(status=EventStatus.PENDING).count() == 1

    def test_failed_row_retried_after_backoff(self):
        handler = RecordingHandler(fail_times=1)
        relay = _relay(handler, backoff=60)
        event = _event()

        with freeze_time("2026-01-01 12:00:00") as frozen:
            assert relay.relay_pending()["failed"] == 1
            # Not due yet
            assert relay.relay_pending() == {"published": 0, "failed": 0, "exhausted": 0}

            frozen.tick(timedelta(seconds=61))
            assert relay.relay_pending()["published"] == 1

        event.refresh_from_db()
        assert event.status == EventStatus.PUBLISHED
        assert len(handler.calls) == 2

    def test_row_exhausted_after_max_retries(self):
        handler = RecordingHandler(fail_times=10)
        relay = _relay(handler, max_retries=2)
        event = _event()

        relay.relay_pending()
        result = relay.relay_pending()

        assert result == {"published": 0, "failed": 1, "exhausted": 1}
        assert relay.relay_pending() == {"published": 0, "failed": 0, "exhausted": 1}
        event.refresh_from_db()
        assert event.retry_count == 2
        assert len(handler.calls) == 2
