"""Product DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
These are the contracts between the API layer (DRF Serializers)
and the Service layer.  DTOs are immutable (``frozen=True``).

- ``CreateProductDTO``: input for product creation.
- ``UpdateProductDTO``: input for partial product updates.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

from modules.products.models import DEFAULT_UNIT

NAME_MIN_LENGTH = 2
DESCRIPTION_MIN_LENGTH = 10


def _check_name(v: str) -> str:
    v = (v or "").strip()
    if len(v) < NAME_MIN_LENGTH:
        raise ValueError(f"Name must be at least {NAME_MIN_LENGTH} characters long.")
    return v


def _check_description(v: str) -> str:
    v = (v or "").strip()
    if len(v) < DESCRIPTION_MIN_LENGTH:
        raise ValueError(
            f"Description must be at least {DESCRIPTION_MIN_LENGTH} characters long."
        )
    return v


def _check_category(v: str) -> str:
    v = (v or "").strip()
    if not v:
        raise ValueError("Category is required.")
    return v


# ---------------------------------------------------------------------------
# Input DTOs
# ---------------------------------------------------------------------------


class CreateProductDTO(BaseModel):
    """Immutable DTO for product creation requests.

    Validates:
    - ``name`` has at least 2 characters, ``description`` at least 10.
    - ``price`` is a Decimal greater than zero.
    - ``stock`` is non-negative.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    description: str
    price: Decimal
    category: str
    stock: int = 0
    unit: str = DEFAULT_UNIT
    image_url: str = ""
    is_available: bool = True

    @field_validator("name")
    @classmethod
    def name_min_length(cls, v: str) -> str:
        return _check_name(v)

    @field_validator("description")
    @classmethod
    def description_min_length(cls, v: str) -> str:
        return _check_description(v)

    @field_validator("category")
    @classmethod
    def category_required(cls, v: str) -> str:
        return _check_category(v)

    @field_validator("price")
    @classmethod
    def price_must_be_positive(cls, v: Decimal) -> Decimal:
        if v <= 0:
            raise ValueError("Price must be greater than zero.")
        return v

    @field_validator("stock")
    @classmethod
    def stock_must_be_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("Stock cannot be negative.")
        return v

    @field_validator("unit")
    @classmethod
    def unit_default(cls, v: str) -> str:
        return (v or "").strip() or DEFAULT_UNIT


class UpdateProductDTO(BaseModel):
    """Immutable DTO for product update requests.

    All fields are optional: only supplied fields will be updated.
    Stock is edited through its own operation, not here.
    """

    model_config = ConfigDict(frozen=True)

    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[Decimal] = None
    category: Optional[str] = None
    unit: Optional[str] = None
    image_url: Optional[str] = None
    is_available: Optional[bool] = None

    @field_validator("name")
    @classmethod
    def name_min_length(cls, v: Optional[str]) -> Optional[str]:
        return v if v is None else _check_name(v)

    @field_validator("description")
    @classmethod
    def description_min_length(cls, v: Optional[str]) -> Optional[str]:
        return v if v is None else _check_description(v)

    @field_validator("category")
    @classmethod
    def category_required(cls, v: Optional[str]) -> Optional[str]:
        return v if v is None else _check_category(v)

    @field_validator("price")
    @classmethod
    def price_must_be_positive(cls, v: Optional[Decimal]) -> Optional[Decimal]:
        if v is not None and v <= 0:
            raise ValueError("Price must be greater than zero.")
        return v

    def changes(self) -> dict:
        """Fields explicitly supplied with a non-null value."""
        return self.model_dump(exclude_none=True)
