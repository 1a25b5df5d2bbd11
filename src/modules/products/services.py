"""Catalog service layer (Use Cases).

Orchestrates the Product aggregate: catalog reads for consumers, catalog
management for producers, and the two inventory primitives consumed by
the order lifecycle.

Business rules enforced here:
- Only the owning producer may edit, restock, toggle or delete a product.
- ``reserve`` never lets stock go below zero.
- Soft-deleted products are invisible to every read and cannot be
  reserved.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

import structlog
from django.db import transaction

from modules.core.exceptions import ValidationError
from modules.products.exceptions import (
    InsufficientStockError,
    OwnershipMismatchError,
    ProductNotFound,
)
from modules.products.models import Product

if TYPE_CHECKING:
    from modules.core.authentication import Actor
    from modules.products.dtos import CreateProductDTO, UpdateProductDTO
    from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


class CatalogService:
    """Application service for catalog and inventory use-cases.

    Receives an ``IProductRepository`` via constructor injection (DIP).
    """

    def __init__(self, repository: IProductRepository) -> None:
        self._repo = repository

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_product(self, id: str) -> Product:
        """Retrieve a single product by ID.

        Raises:
            ProductNotFound: if the product does not exist.
        """
        product = self._repo.get_by_id(id)
        if not product:
            raise ProductNotFound(f"Product {id} not found.")
        return product

    def list_available(
        self, category: Optional[str] = None, search: Optional[str] = None
    ) -> List[Product]:
        """Consumer-facing listing: available and in stock."""
        return self._repo.list_available(category=category, search=search)

    def list_by_producer(self, producer_id: str) -> List[Product]:
        return self._repo.list({"producer_id": producer_id}, ordering=["-created_at"])

    def list_by_category(self, category: str) -> List[Product]:
        return self._repo.list_available(category=category)

    def search_by_name(self, term: str) -> List[Product]:
        return self._repo.list_available(search=term)

    def list_categories(self) -> List[str]:
        return self._repo.list_categories()

    # ------------------------------------------------------------------
    # Commands (producer)
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_product(self, actor: Actor, dto: CreateProductDTO) -> Product:
        product = Product(
            producer_id=actor.id,
            name=dto.name,
            description=dto.description,
            price=dto.price,
            stock=dto.stock,
            unit=dto.unit,
            category=dto.category,
            image_url=dto.image_url,
            is_available=dto.is_available,
        )
        product = self._repo.save(product)
        logger.info(
            "catalog.product_created",
            product_id=str(product.id),
            producer_id=str(actor.id),
        )
        return product

    @transaction.atomic
    def update_product(self, actor: Actor, id: str, dto: UpdateProductDTO) -> Product:
        """Apply the supplied fields to an owned product.

        Raises:
            ProductNotFound: if the product does not exist.
            OwnershipMismatchError: if the actor does not own it.
        """
        product = self._get_owned(actor, id)
        changes = dto.changes()
        for field, value in changes.items():
            setattr(product, field, value)
        product = self._repo.save(product, update_fields=list(changes))
        logger.info("catalog.product_updated", product_id=str(id))
        return product

    @transaction.atomic
    def set_stock(self, actor: Actor, id: str, stock: int) -> Product:
        if stock is None or stock < 0:
            raise ValidationError("Stock cannot be negative.")
        self._get_owned(actor, id)
        if not self._repo.set_stock(id, stock):
            raise ProductNotFound(f"Product {id} not found.")
        logger.info("catalog.stock_set", product_id=str(id), stock=stock)
        return self.get_product(id)

    @transaction.atomic
    def toggle_availability(self, actor: Actor, id: str) -> Product:
        product = self._get_owned(actor, id)
        product.is_available = not product.is_available
        product = self._repo.save(product, update_fields=["is_available"])
        logger.info(
            "catalog.availability_toggled",
            product_id=str(id),
            is_available=product.is_available,
        )
        return product

    @transaction.atomic
    def delete_product(self, actor: Actor, id: str) -> None:
        """Soft-delete an owned product.

        Raises:
            ProductNotFound: if the product does not exist.
            OwnershipMismatchError: if the actor does not own it.
        """
        self._get_owned(actor, id)
        self._repo.delete(id)
        logger.info("catalog.product_deleted", product_id=str(id))

    # ------------------------------------------------------------------
    # Inventory primitives (order lifecycle only)
    # ------------------------------------------------------------------

    def reserve(self, product_id: str, quantity: int) -> None:
        """Claim ``quantity`` units of stock in one conditional write.

        Raises:
            InsufficientStockError: fewer than ``quantity`` units left.
        """
        if not self._repo.reserve_stock(product_id, quantity):
            logger.warning(
                "catalog.stock_reservation_failed",
                product_id=str(product_id),
                quantity=quantity,
            )
            raise InsufficientStockError(
                f"Insufficient stock for product {product_id}."
            )
        logger.info(
            "catalog.stock_reserved", product_id=str(product_id), quantity=quantity
        )

    def release(self, product_id: str, quantity: int) -> None:
        if not self._repo.release_stock(product_id, quantity):
            # Product row is gone entirely; nothing to give back to.
            logger.warning(
                "catalog.stock_release_skipped", product_id=str(product_id)
            )
            return
        logger.info(
            "catalog.stock_released", product_id=str(product_id), quantity=quantity
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _get_owned(self, actor: Actor, id: str) -> Product:
        product = self.get_product(id)
        if not product.is_owned_by(actor.id):
            logger.warning(
                "catalog.ownership_mismatch",
                product_id=str(id),
                actor_id=str(actor.id),
            )
            raise OwnershipMismatchError("You can only manage your own products.")
        return product
