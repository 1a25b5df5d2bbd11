"""Order repository interface.

Extends ``IRepository[Order]`` with what the lifecycle engine needs:
row-locked reads, versioned writes, status history and the producer
statistics fold.

The Service Layer depends exclusively on this contract (DIP).
"""

from __future__ import annotations

from abc import abstractmethod
from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, Optional

from django.db import models

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.orders.models import Order, OrderStatusHistory


class IOrderRepository(IRepository["Order"]):
    """Repository contract for the Order aggregate root.

    ``save`` of an existing order must be conditional on its ``version``
    and must hand the aggregate's pending domain events to the event bus
    for publication after commit.
    """

    @abstractmethod
    def get_for_update(self, id: str) -> Optional[Order]:
        """Retrieve an order with a row-level lock (SELECT FOR UPDATE)."""

    @abstractmethod
    def list_for_party(
        self, field: str, user_id: Any
    ) -> "models.QuerySet[Order]":
        """Lazy queryset of the orders where ``field`` equals ``user_id``."""

    @abstractmethod
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

    @abstractmethod
    def statistics(
        self, producer_id: Any, start: datetime, end: datetime
    ) -> Dict[str, Any]:
        """Per-status counts and delivered revenue for a producer window."""
