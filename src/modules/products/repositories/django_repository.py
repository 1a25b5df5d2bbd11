"""Django ORM implementation of the Product repository.

Satisfies ``IProductRepository`` using Django's QuerySet API.
Look-ups follow the Null Object pattern: they return ``None`` instead
of raising, the Service Layer decides what a missing product means.

Stock primitives are ``UPDATE ... WHERE`` statements built with ``F()``
expressions; the affected row count tells whether the write happened.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import F
from django.utils import timezone

from modules.products.models import Product
from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


class ProductDjangoRepository(IProductRepository):
    """Concrete Product repository backed by Django ORM."""

    def get_by_id(self, id: str) -> Optional[Product]:
        """Retrieve a live product by primary key.

        Returns ``None`` for soft-deleted, non-existent or invalid IDs.
        """
        try:
            return Product.objects.alive().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def list(
        self,
        filters: Optional[Dict[str, Any]] = None,
        ordering: Optional[Sequence[str]] = None,
    ) -> List[Product]:
        """List live products with optional Django ORM look-ups.

        Examples of valid filters::

            {"producer_id": "0190..."}
            {"name__icontains": "tomate"}
        """
        queryset = Product.objects.alive()
        if filters:
            queryset = queryset.filter(**filters)
        if ordering:
            queryset = queryset.order_by(*ordering)
        return list(queryset)

    def list_available(
        self, category: Optional[str] = None, search: Optional[str] = None
    ) -> List[Product]:
        filters: Dict[str, Any] = {"is_available": True, "stock__gt": 0}
        if category:
            filters["category"] = category
        if search:
            filters["name__icontains"] = search
        return self.list(filters, ordering=["name"])

    def list_categories(self) -> List[str]:
        return list(
            Product.objects.alive()
            .filter(is_available=True, stock__gt=0)
            .order_by("category")
            .values_list("category", flat=True)
            .distinct()
        )

    @transaction.atomic
    def save(
        self, entity: Product, update_fields: Optional[Sequence[str]] = None
    ) -> Product:
        """Persist (create or update) a product.

        A partial save reloads the row afterwards so the returned
        instance reflects stock moves made since it was read.
        """
        if update_fields is None:
            entity.save()
        else:
            entity.save(update_fields=list(update_fields))
            entity.refresh_from_db()
        logger.info("product.saved", product_id=str(entity.id))
        return entity

    @transaction.atomic
    def delete(self, id: str) -> bool:
        """Soft-delete a product by ID.

        Returns ``True`` if the product was found and soft-deleted,
        ``False`` if no live product exists with the given ID.
        """
        product = self.get_by_id(id)
        if not product:
            return False
        product.delete()
        logger.info("product.soft_deleted", product_id=str(id))
        return True

    # ------------------------------------------------------------------
    # Inventory primitives
    # ------------------------------------------------------------------

    def reserve_stock(self, id: str, quantity: int) -> bool:
        updated = (
            Product.objects.alive()
            .filter(id=id, stock__gte=quantity)
            .update(stock=F("stock") - quantity, updated_at=timezone.now())
        )
        return updated == 1

    def release_stock(self, id: str, quantity: int) -> bool:
        # Soft-deleted products still get their units back.
        updated = Product.objects.filter(id=id).update(
            stock=F("stock") + quantity, updated_at=timezone.now()
        )
        return updated == 1

    def set_stock(self, id: str, stock: int) -> bool:
        updated = (
            Product.objects.alive()
            .filter(id=id)
            .update(stock=stock, updated_at=timezone.now())
        )
        return updated == 1
