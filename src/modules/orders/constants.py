"""Order domain constants.

Defines the status choices and the role-scoped transition table of the
order state machine.  ``allowed_transitions`` is a pure look-up keyed by
``(role, current_status)``; ownership of the order is checked by the
caller.
"""

from __future__ import annotations

from typing import FrozenSet

from django.db import models

from modules.accounts.constants import UserRole


class OrderStatus(models.TextChoices):
    PENDING = "pending", "Pendente"
    CONFIRMED = "confirmed", "Confirmado"
    PREPARING = "preparing", "Em preparo"
    READY = "ready", "Pronto"
    IN_DELIVERY = "in_delivery", "Em entrega"
    DELIVERED = "delivered", "Entregue"
    CANCELLED = "cancelled", "Cancelado"


TRANSITIONS: dict[tuple[str, str], FrozenSet[str]] = {
    (UserRole.PRODUCER, OrderStatus.PENDING): frozenset({OrderStatus.CONFIRMED}),
    (UserRole.PRODUCER, OrderStatus.CONFIRMED): frozenset({OrderStatus.PREPARING}),
    (UserRole.PRODUCER, OrderStatus.PREPARING): frozenset({OrderStatus.READY}),
    (UserRole.LOGISTICS, OrderStatus.READY): frozenset({OrderStatus.IN_DELIVERY}),
    (UserRole.LOGISTICS, OrderStatus.IN_DELIVERY): frozenset({OrderStatus.DELIVERED}),
    (UserRole.CONSUMER, OrderStatus.PENDING): frozenset({OrderStatus.CANCELLED}),
}

# Statuses from which each role may use the dedicated cancel operation.
CANCELLATION_RULES: dict[str, FrozenSet[str]] = {
    UserRole.CONSUMER: frozenset({OrderStatus.PENDING, OrderStatus.CONFIRMED}),
    UserRole.PRODUCER: frozenset({OrderStatus.PENDING}),
}

TERMINAL_STATES: FrozenSet[str] = frozenset(
    {OrderStatus.DELIVERED, OrderStatus.CANCELLED}
)

# Per-status counters reported by the producer statistics.
STATISTICS_STATUSES: tuple[str, ...] = tuple(OrderStatus.values)


def allowed_transitions(role: str, status: str) -> FrozenSet[str]:
    """Statuses ``role`` may move an order to from ``status``."""
    return TRANSITIONS.get((role, status), frozenset())


def can_cancel(role: str, status: str) -> bool:
    return status in CANCELLATION_RULES.get(role, frozenset())
