"""Event handlers for Orders domain events.

Handlers run after the transaction that raised the event commits; they
only record the business fact in the structured log.
"""

from __future__ import annotations

import structlog

from modules.orders.events import (
    LogisticsAssigned,
    OrderCancelled,
    OrderCreated,
    OrderStatusChanged,
)
from shared.domain.bus import IEventHandler

logger = structlog.get_logger(__name__)


class OrderCreatedHandler(IEventHandler[OrderCreated]):
    def handle(self, event: OrderCreated) -> None:
        logger.info(
            "order.event.created",
            order_id=str(event.aggregate_id),
            consumer_id=str(event.actor_id),
            producer_id=str(event.producer_id),
            total_amount=event.total_amount,
        )


class OrderStatusChangedHandler(IEventHandler[OrderStatusChanged]):
    def handle(self, event: OrderStatusChanged) -> None:
        logger.info(
            "order.event.status_changed",
            order_id=str(event.aggregate_id),
            actor_id=str(event.actor_id),
            old_status=event.old_status,
            new_status=event.new_status,
        )


class OrderCancelledHandler(IEventHandler[OrderCancelled]):
    def handle(self, event: OrderCancelled) -> None:
        logger.info(
            "order.event.cancelled",
            order_id=str(event.aggregate_id),
            actor_id=str(event.actor_id),
            old_status=event.old_status,
            reason=event.reason,
        )


class LogisticsAssignedHandler(IEventHandler[LogisticsAssigned]):
    def handle(self, event: LogisticsAssigned) -> None:
        logger.info(
            "order.event.logistics_assigned",
            order_id=str(event.aggregate_id),
            logistics_id=str(event.logistics_id),
        )


order_created_handler = OrderCreatedHandler()
order_status_changed_handler = OrderStatusChangedHandler()
order_cancelled_handler = OrderCancelledHandler()
logistics_assigned_handler = LogisticsAssignedHandler()
