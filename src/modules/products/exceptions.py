"""Catalog and inventory domain exceptions.

Raised by the Service Layer when business rules are violated.
The exception handler translates them into the response envelope.
"""

from __future__ import annotations

from modules.core.exceptions import AccessDeniedError, DomainError, NotFoundError


class ProductNotFound(NotFoundError):
    """The requested product does not exist or has been soft-deleted."""

    code = "product_not_found"
    default_message = "Product not found."


class UnavailableError(DomainError):
    """The product is switched off (``is_available=False``)."""

    code = "product_unavailable"
    default_message = "Product is not available."


class InsufficientStockError(DomainError):
    """Stock is lower than the requested quantity."""

    code = "insufficient_stock"
    default_message = "Insufficient stock."


class OwnershipMismatchError(AccessDeniedError):
    """The product belongs to a different producer than expected."""

    code = "ownership_mismatch"
    default_message = "Product does not belong to this producer."
