"""Outbound messaging interfaces shared across modules.

Modules that emit post-commit side effects register one ``IMessageHandler``
per outbox topic.  The relay in ``modules.core.outbox`` depends only on
these contracts, never on a concrete broker or HTTP client.
"""

from __future__ import annotations

from typing import Any, Mapping, Protocol


class MessageDeliveryError(Exception):
    """A handler could not deliver a message; the delivery may be retried."""


class IMessageHandler(Protocol):
    """Delivers one outbox payload to its downstream consumer.

    Returning normally means the consumer accepted the message.  Transient
    failures must be raised as ``MessageDeliveryError``.
    """

    def handle(self, payload: Mapping[str, Any], headers: Mapping[str, str]) -> None: ...


class IMessageRouter(Protocol):
    """Topic → handler registry."""

    def subscribe(self, topic: str, handler: IMessageHandler) -> None: ...

    def handler_for(self, topic: str) -> IMessageHandler: ...
