"""Product model: catalog entry plus its stock counter.

Business rules implemented:
- Price must be greater than zero (DB check constraint).
- Stock can never go negative (DB check constraint + conditional writes
  in the repository).
- ``is_available`` gates the product independently of stock; consumer
  listings only show ``is_available and stock > 0``.
- Soft delete via ``deleted_at`` (inherited from SoftDeleteModel), so
  orders keep resolving their product references.
"""

from __future__ import annotations

from decimal import Decimal

import structlog
from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models

from modules.core.models import SoftDeleteModel

logger = structlog.get_logger(__name__)

DEFAULT_UNIT = "unidade"


class Product(SoftDeleteModel):
    """Product aggregate root, owned by exactly one producer."""

    producer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="products",
    )
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )
    stock = models.PositiveIntegerField(default=0)
    unit = models.CharField(max_length=32, default=DEFAULT_UNIT)
    category = models.CharField(max_length=100)
    image_url = models.URLField(max_length=500, blank=True, default="")
    is_available = models.BooleanField(default=True)

    class Meta:
        db_table = "products"
        ordering = ["name"]
        indexes = [
            models.Index(
                fields=["is_available", "category"],
                name="products_avail_category_idx",
            ),
            models.Index(fields=["producer"], name="products_producer_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(price__gt=0),
                name="products_price_positive",
            ),
            models.CheckConstraint(
                condition=models.Q(stock__gte=0),
                name="products_stock_non_negative",
            ),
        ]

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def clean(self) -> None:
        super().clean()
        if self.price is not None and self.price <= 0:
            raise ValidationError({"price": "Price must be greater than zero."})
        if self.stock is not None and self.stock < 0:
            raise ValidationError({"stock": "Stock cannot be negative."})

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def is_owned_by(self, producer_id) -> bool:
        return str(self.producer_id) == str(producer_id)

    # ------------------------------------------------------------------
    # Display
    # ------------------------------------------------------------------

    def __str__(self) -> str:
        return f"{self.name} ({self.stock} {self.unit})"
