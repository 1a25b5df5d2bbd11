"""Domain events for the Orders bounded context."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from shared.domain.events import DomainEvent


@dataclass(frozen=True)
class OrderCreated(DomainEvent):
    """Raised when an order is placed and its stock reserved."""

    producer_id: Optional[UUID] = None
    total_amount: str = ""


@dataclass(frozen=True)
class OrderStatusChanged(DomainEvent):
    """Raised on every forward transition of the lifecycle."""

    old_status: str = ""
    new_status: str = ""


@dataclass(frozen=True)
class OrderCancelled(DomainEvent):
    """Raised when an order is cancelled and its stock released."""

    old_status: str = ""
    reason: str = ""


@dataclass(frozen=True)
class LogisticsAssigned(DomainEvent):
    """Raised when a courier takes a ready order."""

    logistics_id: Optional[UUID] = None
