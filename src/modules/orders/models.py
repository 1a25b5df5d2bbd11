"""Order and OrderStatusHistory models.

Business rules implemented:
- An order targets exactly one producer and embeds its line items as a
  JSON document; the order exclusively owns them.
- Line items capture product name, price and unit at creation time, so
  later catalog edits never change an existing order's totals.
- ``total_amount == sum(price * quantity) + delivery_fee`` after every
  item mutation.
- ``version`` is bumped on every write; the repository uses it as an
  optimistic-concurrency predicate.
- Each status change generates an immutable history record.
- Party FKs use PROTECT to preserve order history.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, List, Optional

import structlog
from django.conf import settings
from django.core.serializers.json import DjangoJSONEncoder
from django.db import models

from modules.core.exceptions import NotFoundError
from modules.core.models import BaseModel
from modules.orders.constants import TERMINAL_STATES, OrderStatus
from shared.domain.events import DomainEventMixin

logger = structlog.get_logger(__name__)

CENT = Decimal("0.01")


def to_money(value: Any) -> Decimal:
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


class Order(DomainEventMixin, BaseModel):
    """Order aggregate root.

    ``items`` is a list of line documents::

        {"product_id": "...", "product_name": "Tomate", "price": "8.50",
         "quantity": 2, "unit": "kg", "subtotal": "17.00"}

    Money values are stored as strings to keep ``Decimal`` precision
    through the JSON column.
    """

    consumer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="orders_placed",
    )
    producer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="orders_received",
    )
    logistics = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="deliveries",
        null=True,
        blank=True,
    )
    items = models.JSONField(default=list, encoder=DjangoJSONEncoder)
    total_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
    )
    delivery_fee = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
    )
    status = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
        default=OrderStatus.PENDING,
    )
    delivery_address = models.JSONField(default=dict, encoder=DjangoJSONEncoder)
    notes = models.TextField(blank=True, default="")
    estimated_delivery_time = models.DateTimeField(null=True, blank=True)
    delivered_at = models.DateTimeField(null=True, blank=True)
    version = models.PositiveIntegerField(default=1)

    class Meta:
        db_table = "orders"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status"], name="orders_status_idx"),
            models.Index(fields=["-created_at"], name="orders_created_idx"),
            models.Index(
                fields=["producer", "created_at"], name="orders_producer_created_idx"
            ),
            models.Index(
                fields=["status", "logistics"], name="orders_status_logistics_idx"
            ),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(delivery_fee__gte=0),
                name="orders_delivery_fee_non_negative",
            ),
        ]

    # ------------------------------------------------------------------
    # Aggregate: line items
    # ------------------------------------------------------------------

    def _find_line(self, product_id: Any) -> Optional[Dict[str, Any]]:
        key = str(product_id)
        for line in self.items:
            if line["product_id"] == key:
                return line
        return None

    def add_item(
        self,
        product_id: Any,
        product_name: str,
        price: Any,
        quantity: int,
        unit: str,
    ) -> Decimal:
        """Append a line or merge into the existing one for ``product_id``.

        Only the in-memory aggregate changes; call ``save`` to persist.
        """
        line = self._find_line(product_id)
        if line is not None:
            line["quantity"] += quantity
            line["subtotal"] = str(to_money(Decimal(line["price"]) * line["quantity"]))
        else:
            price = to_money(price)
            self.items.append(
                {
                    "product_id": str(product_id),
                    "product_name": product_name,
                    "price": str(price),
                    "quantity": quantity,
                    "unit": unit,
                    "subtotal": str(to_money(price * quantity)),
                }
            )
        return self.calculate_total()

    def remove_item(self, product_id: Any) -> Decimal:
        key = str(product_id)
        self.items = [line for line in self.items if line["product_id"] != key]
        return self.calculate_total()

    def update_item_quantity(self, product_id: Any, quantity: int) -> Decimal:
        """Set a line's quantity; ``quantity <= 0`` removes the line.

        Raises:
            NotFoundError: no line exists for ``product_id``.
        """
        line = self._find_line(product_id)
        if line is None:
            raise NotFoundError(f"Item {product_id} not found in order.")
        if quantity <= 0:
            return self.remove_item(product_id)
        line["quantity"] = quantity
        line["subtotal"] = str(to_money(Decimal(line["price"]) * quantity))
        return self.calculate_total()

    def calculate_total(self) -> Decimal:
        items_total = sum(
            (Decimal(line["price"]) * line["quantity"] for line in self.items),
            Decimal("0"),
        )
        self.total_amount = to_money(items_total + to_money(self.delivery_fee or 0))
        return self.total_amount

    # ------------------------------------------------------------------
    # State helpers
    # ------------------------------------------------------------------

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATES

    def is_party(self, user_id: Any) -> bool:
        """``True`` for the consumer, producer or assigned courier."""
        key = str(user_id)
        return key in {
            str(self.consumer_id),
            str(self.producer_id),
            str(self.logistics_id) if self.logistics_id else None,
        }

    def line_quantities(self) -> List[tuple[str, int]]:
        """``(product_id, quantity)`` pairs sorted by product id."""
        return sorted((line["product_id"], line["quantity"]) for line in self.items)

    # ------------------------------------------------------------------
    # Display
    # ------------------------------------------------------------------

    def __str__(self) -> str:
        return f"Order {self.id} ({self.status})"


class OrderStatusHistory(BaseModel):
    """Append-only audit trail for order status transitions.

    Each record captures a single status change with the responsible user
    and optional notes (e.g. cancellation reason).

    Audit records are **immutable**: they must never be edited or
    deleted.  ``actor`` is nullable: ``None`` means the change was
    performed by the system.
    """

    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="status_history",
    )
    old_status = models.CharField(  # noqa: DJ01
        max_length=20,
        choices=OrderStatus.choices,
        null=True,
        blank=True,
    )
    new_status = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
    )
    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    actor_role = models.CharField(max_length=20, blank=True, default="")
    notes = models.TextField(blank=True, default="")

    class Meta:
        db_table = "order_status_history"
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(
                fields=["order", "created_at"],
                name="osh_order_created_idx",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.order_id} : {self.old_status} -> {self.new_status}"
