"""In-memory topic router implementation."""

from __future__ import annotations

from typing import Dict

from shared.domain.bus import IMessageHandler, IMessageRouter


class InMemoryMessageRouter(IMessageRouter):
    """Maps each outbox topic to exactly one handler."""

    def __init__(self) -> None:
        self._handlers: Dict[str, IMessageHandler] = {}

    def subscribe(self, topic: str, handler: IMessageHandler) -> None:
        self._handlers[topic] = handler

    def handler_for(self, topic: str) -> IMessageHandler:
        try:
            return self._handlers[topic]
        except KeyError:
            raise LookupError(f"No handler registered for topic {topic!r}.") from None
