"""In-memory event bus implementation."""

from __future__ import annotations

from typing import Dict, Iterable, List, Type

import structlog
from django.db import transaction

from shared.domain.bus import IEventBus, IEventHandler
from shared.domain.events import DomainEvent

logger = structlog.get_logger(__name__)


class InMemoryEventBus(IEventBus):
    """Simple in-process event bus.

    Handlers run synchronously in the publishing thread.
    """

    def __init__(self) -> None:
        self._handlers: Dict[Type[DomainEvent], List[IEventHandler]] = {}

    def subscribe(self, event_class: Type[DomainEvent], handler: IEventHandler) -> None:
        handlers = self._handlers.setdefault(event_class, [])
        if handler not in handlers:
            handlers.append(handler)

    def publish(self, event: DomainEvent) -> None:
        handlers = self._handlers.get(type(event), [])
        logger.debug(
            "event_bus.publish",
            event_name=event.event_name,
            aggregate_id=str(event.aggregate_id),
            handler_count=len(handlers),
        )
        for handler in handlers:
            handler.handle(event)

    def publish_on_commit(self, events: Iterable[DomainEvent]) -> None:
        """Publish ``events`` once the surrounding transaction commits.

        Outside a transaction the events are published immediately; on
        rollback they are dropped together with the data that raised them.
        """
        for event in list(events):
            transaction.on_commit(lambda event=event: self.publish(event))


# Process-wide bus, subscribed once in ``OrdersConfig.ready``
event_bus = InMemoryEventBus()
