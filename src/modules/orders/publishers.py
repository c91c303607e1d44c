"""Queue Publisher: sends ``OrderNotification`` messages to the broker.

Uses kombu, the messaging library underneath Celery, so any broker Celery
can talk to (Redis, RabbitMQ, SQS, in-memory for tests) can carry order
notifications.  A connection is opened per publish and always released.
"""

from __future__ import annotations

from typing import Any, Mapping

import structlog
from kombu import Connection, Queue
from kombu.exceptions import KombuError

from modules.orders.exceptions import DependencyError
from modules.orders.messages import OrderNotification

logger = structlog.get_logger(__name__)


class KombuQueuePublisher:
    """``IMessageHandler`` for the order-items topic."""

    content_type = "application/json"

    def __init__(
        self,
        connection_url: str,
        queue_name: str,
        timeout: float = 5.0,
        max_retries: int = 2,
    ) -> None:
        self._connection_url = connection_url
        self._queue_name = queue_name
        self._timeout = timeout
        self._max_retries = max_retries

    def handle(self, payload: Mapping[str, Any], headers: Mapping[str, str]) -> None:
        message = OrderNotification.model_validate(payload)
        self.publish(message.to_json(), headers)

    def publish(self, body: bytes, headers: Mapping[str, str]) -> None:
        """Send *body* to the configured queue.

        Raises:
            DependencyError: broker unreachable, or the send timed out after
                the configured retries.
        """
        queue = Queue(self._queue_name, routing_key=self._queue_name)
        retry_policy = {
            "max_retries": self._max_retries,
            "interval_start": 0,
            "interval_step": 0.5,
            "interval_max": 2,
        }
        try:
            # transport_options bound the initial connect as well as the send.
            with Connection(
                self._connection_url,
                connect_timeout=self._timeout,
                transport_options=retry_policy,
            ) as connection:
                producer = connection.Producer()
                producer.publish(
                    body,
                    routing_key=self._queue_name,
                    declare=[queue],
                    content_type=self.content_type,
                    content_encoding="utf-8",
                    headers=dict(headers),
                    retry=True,
                    retry_policy=retry_policy,
                    timeout=self._timeout,
                )
        except (KombuError, OSError) as exc:
            logger.warning(
                "queue.publish_failed",
                queue=self._queue_name,
                error=str(exc),
            )
            raise DependencyError(
                "queue", f"Could not publish to queue {self._queue_name!r}: {exc}"
            ) from exc

        logger.info(
            "queue.published",
            queue=self._queue_name,
            message_id=headers.get("message_id"),
        )
