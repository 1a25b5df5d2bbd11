"""Order DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
These are the contracts between the API layer (DRF Serializers)
and the Service layer.  DTOs are immutable (``frozen=True``).

- ``OrderItemRequestDTO``: one requested line (product + quantity).
- ``DeliveryAddressDTO``: structured delivery address.
- ``CreateOrderDTO``: input for order creation (nested items).
- ``UpdateStatusDTO``: input for a lifecycle transition.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from modules.orders.constants import OrderStatus

# ---------------------------------------------------------------------------
# Input DTOs
# ---------------------------------------------------------------------------


class OrderItemRequestDTO(BaseModel):
    """Immutable DTO for a single order line in a creation request.

    The client sends ``product_id`` and ``quantity``; name, price and unit
    are captured by the Service Layer from the catalog.
    """

    model_config = ConfigDict(frozen=True)

    product_id: UUID
    quantity: int

    @field_validator("quantity")
    @classmethod
    def quantity_must_be_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Quantity must be at least 1.")
        return v


class DeliveryAddressDTO(BaseModel):
    model_config = ConfigDict(frozen=True, extra="allow")

    street: str
    number: str = ""
    complement: str = ""
    neighborhood: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""

    @field_validator("street")
    @classmethod
    def street_required(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("Delivery address street is required.")
        return v


class CreateOrderDTO(BaseModel):
    """Immutable DTO for order creation requests.

    Validates:
    - ``items`` must contain at least one line.
    - Each line quantity must be positive.
    - A product may appear in only one line.
    - ``delivery_fee`` is non-negative.
    """

    model_config = ConfigDict(frozen=True)

    producer_id: UUID
    items: List[OrderItemRequestDTO]
    delivery_address: DeliveryAddressDTO
    delivery_fee: Decimal = Decimal("0.00")
    notes: str = ""
    estimated_delivery_time: Optional[datetime] = None

    @field_validator("items")
    @classmethod
    def items_must_not_be_empty(
        cls, v: List[OrderItemRequestDTO]
    ) -> List[OrderItemRequestDTO]:
        if not v:
            raise ValueError("Order must have at least one item.")
        return v

    @field_validator("delivery_fee")
    @classmethod
    def delivery_fee_non_negative(cls, v: Decimal) -> Decimal:
        if v < 0:
            raise ValueError("Delivery fee cannot be negative.")
        return v

    @model_validator(mode="after")
    def no_duplicate_products(self):
        """Prevent duplicate product IDs in the same order."""
        product_ids = [item.product_id for item in self.items]
        if len(product_ids) != len(set(product_ids)):
            raise ValueError("Duplicate product IDs are not allowed in the same order.")
        return self


class UpdateStatusDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: str
    notes: str = ""

    @field_validator("status")
    @classmethod
    def status_must_be_known(cls, v: str) -> str:
        v = (v or "").strip().lower()
        if v not in OrderStatus.values:
            raise ValueError(f"Unknown order status '{v}'.")
        return v
