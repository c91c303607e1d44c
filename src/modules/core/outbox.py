"""Outbox relay: delivers ``OutboxEvent`` rows through topic handlers.

Used twice:
- right after a business transaction commits, to deliver the rows it
  produced without waiting for the background worker;
- by the ``orders.relay_outbox`` Celery task, to retry rows that are still
  pending or whose previous attempt failed.
"""

from __future__ import annotations

from typing import Dict, List

import structlog
from django.db import transaction

from modules.core.models import EventStatus, OutboxEvent
from shared.domain.bus import IMessageRouter, MessageDeliveryError

logger = structlog.get_logger(__name__)


class OutboxRelay:
    """Delivers outbox rows and records the outcome on each row.

    ``MessageDeliveryError`` is an expected delivery failure.  Any other
    exception raised by a handler is logged with its traceback and recorded
    on the row the same way, so a broken message is retried and eventually
    exhausted instead of blocking the rows behind it.
    """

    def __init__(
        self,
        router: IMessageRouter,
        max_retries: int = 5,
        backoff: float = 30.0,
    ) -> None:
        self._router = router
        self._max_retries = max_retries
        self._backoff = backoff

    def dispatch(self, event: OutboxEvent) -> bool:
        """Deliver a single row.  Returns ``True`` when it was published."""
        if event.status == EventStatus.PUBLISHED:
            return True

        context = {"correlation_id": event.correlation_id} if event.correlation_id else {}
        with structlog.contextvars.bound_contextvars(**context):
            log = logger.bind(
                outbox_event_id=str(event.id),
                topic=event.topic,
                event_type=event.event_type,
                aggregate_id=event.aggregate_id,
                attempt=event.retry_count + 1,
            )
            try:
                handler = self._router.handler_for(event.topic)
                handler.handle(event.payload, self._headers(event))
            except MessageDeliveryError as exc:
                self._record_failure(event, str(exc), log)
                return False
            except Exception as exc:
                log.exception("outbox.handler_error", error=str(exc))
                self._record_failure(event, f"{type(exc).__name__}: {exc}", log)
                return False

            event.mark_as_published()
            log.info("outbox.published")
            return True

    def relay_pending(self, batch_size: int = 100) -> Dict[str, int]:
        """Deliver the oldest deliverable rows, locking them while in flight.

        ``skip_locked`` lets several workers drain the outbox concurrently
        without delivering the same row twice.  Each row runs in its own
        savepoint: a row whose bookkeeping fails is rolled back alone.
        """
        published = failed = 0
        with transaction.atomic():
            events: List[OutboxEvent] = list(
                OutboxEvent.objects.deliverable(self._max_retries)
                .select_for_update(skip_locked=True)
                .order_by("created_at")[:batch_size]
            )
            for event in events:
                try:
                    with transaction.atomic():
                        delivered = self.dispatch(event)
                except Exception as exc:
                    logger.exception(
                        "outbox.row_skipped",
                        outbox_event_id=str(event.id),
                        error=str(exc),
                    )
                    delivered = False
                if delivered:
                    published += 1
                else:
                    failed += 1

        exhausted = OutboxEvent.objects.exhausted(self._max_retries).count()
        logger.info(
            "outbox.relay_completed",
            published=published,
            failed=failed,
            exhausted=exhausted,
        )
        return {"published": published, "failed": failed, "exhausted": exhausted}

    def _record_failure(self, event: OutboxEvent, error: str, log) -> None:
        event.mark_as_failed(error, backoff=self._backoff)
        if event.retry_count >= self._max_retries:
            log.error("outbox.exhausted", error=error)
        else:
            log.warning(
                "outbox.failed",
                error=error,
                next_attempt_at=event.next_attempt_at.isoformat(),
            )

    @staticmethod
    def _headers(event: OutboxEvent) -> Dict[str, str]:
        return {
            "message_id": str(event.id),
            "schema": event.event_type,
            "schema_version": str(event.schema_version),
            "correlation_id": event.correlation_id,
        }
