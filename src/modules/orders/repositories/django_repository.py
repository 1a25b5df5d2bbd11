"""Django ORM implementation of the Order repository.

Satisfies ``IOrderRepository`` using Django's QuerySet API.

Concurrency control: the lifecycle engine reads the order with
``select_for_update()`` and writes it back with an ``UPDATE ... WHERE
version = <read version>``.  A write that matches no row lost a race
and raises ``InvalidStateError``.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Count, F, Q, Sum
from django.utils import timezone

from modules.orders.constants import STATISTICS_STATUSES, OrderStatus
from modules.orders.exceptions import InvalidStateError
from modules.orders.models import Order, OrderStatusHistory
from modules.orders.repositories.interfaces import IOrderRepository
from shared.domain.bus import IEventBus
from shared.infrastructure.bus import event_bus as default_event_bus

logger = structlog.get_logger(__name__)

MUTABLE_FIELDS = (
    "items",
    "total_amount",
    "delivery_fee",
    "status",
    "delivery_address",
    "notes",
    "estimated_delivery_time",
    "delivered_at",
    "logistics_id",
)


class OrderDjangoRepository(IOrderRepository):
    """Concrete Order repository backed by Django ORM."""

    def __init__(self, event_bus: Optional[IEventBus] = None) -> None:
        self._event_bus = event_bus or default_event_bus

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def _base_queryset(self):
        return Order.objects.select_related(
            "consumer", "producer", "logistics"
        ).prefetch_related("status_history")

    def get_by_id(self, id: str) -> Optional[Order]:
        """Retrieve an order with its parties and status history.

        Returns ``None`` for non-existent or invalid IDs.
        """
        try:
            return self._base_queryset().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_for_update(self, id: str) -> Optional[Order]:
        """Retrieve an order with a row-level lock (SELECT FOR UPDATE).

        Must run inside a transaction.  Returns ``None`` for
        non-existent or invalid IDs.
        """
        try:
            return Order.objects.select_for_update().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def list(
        self,
        filters: Optional[Dict[str, Any]] = None,
        ordering: Optional[Sequence[str]] = None,
    ) -> List[Order]:
        """List orders with optional Django ORM look-ups.

        Examples of valid filters::

            {"status": "ready", "logistics__isnull": True}
            {"producer_id": "0190...", "created_at__gte": since}
        """
        queryset = self._base_queryset()
        if filters:
            queryset = queryset.filter(**filters)
        if ordering:
            queryset = queryset.order_by(*ordering)
        return list(queryset)

    def list_for_party(self, field: str, user_id: Any):
        return (
            self._base_queryset()
            .filter(**{f"{field}_id": user_id})
            .order_by("-created_at", "-id")
        )

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    @transaction.atomic
    def save(self, entity: Order) -> Order:
        """Insert a new order or write back a loaded one.

        Updates are conditional on ``entity.version``; pending domain
        events are published once the outer transaction commits.
        """
        if entity._state.adding:
            entity.save()
        else:
            now = timezone.now()
            values = {field: getattr(entity, field) for field in MUTABLE_FIELDS}
            updated = Order.objects.filter(
                id=entity.id, version=entity.version
            ).update(version=F("version") + 1, updated_at=now, **values)
            if updated != 1:
                logger.warning(
                    "order.version_conflict",
                    order_id=str(entity.id),
                    version=entity.version,
                )
                raise InvalidStateError("Order was modified by another request.")
            entity.version += 1
            entity.updated_at = now

        events = entity.pull_domain_events()
        self._event_bus.publish_on_commit(events)
        logger.info(
            "order.saved",
            order_id=str(entity.id),
            version=entity.version,
            event_count=len(events),
        )
        return entity

    @transaction.atomic
    def delete(self, id: str) -> bool:
        """Remove an order and its history; the API never exposes this."""
        try:
            deleted, _ = Order.objects.filter(id=id).delete()
        except (ValueError, ValidationError):
            return False
        if deleted:
            logger.info("order.deleted", order_id=str(id))
        return bool(deleted)

    @transaction.atomic
    def add_history(
        self,
        order: Order,
        new_status: str,
        old_status: Optional[str] = None,
        actor_id: Any = None,
        actor_role: str = "",
        notes: str = "",
    ) -> OrderStatusHistory:
        """Record a status change in the order's audit trail."""
        history = OrderStatusHistory.objects.create(
            order=order,
            old_status=old_status,
            new_status=new_status,
            actor_id=actor_id,
            actor_role=actor_role,
            notes=notes,
        )
        logger.info(
            "order.history_added",
            order_id=str(order.id),
            old_status=old_status,
            new_status=new_status,
        )
        return history

    # ------------------------------------------------------------------
    # Read-side aggregation
    # ------------------------------------------------------------------

    def statistics(
        self, producer_id: Any, start: datetime, end: datetime
    ) -> Dict[str, Any]:
        window = Order.objects.filter(
            producer_id=producer_id, created_at__gte=start, created_at__lte=end
        )
        counts = {status: 0 for status in STATISTICS_STATUSES}
        for row in window.values("status").annotate(count=Count("id")).order_by():
            counts[row["status"]] = row["count"]

        revenue = window.aggregate(
            revenue=Sum("total_amount", filter=Q(status=OrderStatus.DELIVERED))
        )["revenue"]

        return {
            "total": sum(counts.values()),
            **counts,
            "total_revenue": Decimal(revenue or 0).quantize(Decimal("0.01")),
        }
