"""Delivery Notifier: posts ``DeliveryRequest`` to the fulfillment endpoint.

The endpoint URL is ``{base_url}{order_key}``; the key is a secret (it may
carry an access code) and is never logged.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

import httpx
import structlog

from modules.orders.exceptions import DependencyError
from modules.orders.messages import DeliveryRequest

logger = structlog.get_logger(__name__)


class HttpDeliveryNotifier:
    """``IMessageHandler`` for the delivery topic."""

    def __init__(
        self,
        base_url: str,
        order_key: str,
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._base_url = base_url
        self._order_key = order_key
        self._timeout = timeout
        self._transport = transport

    @property
    def url(self) -> str:
        return f"{self._base_url}{self._order_key}"

    def handle(self, payload: Mapping[str, Any], headers: Mapping[str, str]) -> None:
        message = DeliveryRequest.model_validate(payload)
        self.notify(message.to_json(), headers)

    def notify(self, body: bytes, headers: Mapping[str, str]) -> None:
        """POST *body* and require a 2xx answer.

        Raises:
            DependencyError: transport failure, timeout or non-2xx status.
        """
        log = logger.bind(endpoint=self._base_url, message_id=headers.get("message_id"))
        request_headers = {
            "Content-Type": "application/json",
            "X-Message-Id": headers.get("message_id", ""),
        }
        correlation_id = headers.get("correlation_id", "")
        # httpx only accepts ASCII header values.
        if correlation_id and correlation_id.isascii():
            request_headers["X-Request-ID"] = correlation_id
        try:
            with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
                response = client.post(self.url, content=body, headers=request_headers)
        except httpx.HTTPError as exc:
            log.warning("delivery.request_failed", error=str(exc))
            raise DependencyError(
                "delivery", f"Delivery endpoint unreachable: {exc}"
            ) from exc

        if not response.is_success:
            log.warning("delivery.rejected", status_code=response.status_code)
            raise DependencyError(
                "delivery",
                f"Delivery endpoint answered {response.status_code}.",
            )
        log.info("delivery.notified", status_code=response.status_code)
