"""Order domain exceptions.

Raised by the Service Layer when business rules are violated.
The exception handler translates them into the response envelope.
"""

from __future__ import annotations

from modules.core.exceptions import AccessDeniedError, DomainError, NotFoundError


class OrderNotFound(NotFoundError):
    """The requested order does not exist."""

    code = "order_not_found"
    default_message = "Order not found."


class ForbiddenTransitionError(AccessDeniedError):
    """The ``(role, current status, new status)`` triple is not allowed."""

    code = "forbidden_transition"
    default_message = "Status transition not allowed."


class InvalidStateError(DomainError):
    """The order is not in a state that allows the operation."""

    code = "invalid_state"
    default_message = "Order is not in a valid state for this operation."


class AlreadyAssignedError(DomainError):
    """A courier is already assigned to the order."""

    code = "already_assigned"
    default_message = "Order already has a logistics courier assigned."
