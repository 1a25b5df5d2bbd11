"""Product repository interface.

Extends ``IRepository[Product]`` with the catalog read-model look-ups
and the inventory primitives.  Every stock mutation is a single
conditional write so concurrent requests can never oversell or drive a
counter negative.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, List, Optional, Sequence

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.products.models import Product


class IProductRepository(IRepository["Product"]):
    """Repository contract for the Product aggregate."""

    @abstractmethod
    def save(
        self, entity: Product, update_fields: Optional[Sequence[str]] = None
    ) -> Product:
        """Persist a product.

        With ``update_fields`` only those columns are written, so a
        concurrent stock reservation is never overwritten by an edit.
        """

    @abstractmethod
    def list_available(
        self, category: Optional[str] = None, search: Optional[str] = None
    ) -> List[Product]:
        """Products with ``is_available`` and ``stock > 0``."""

    @abstractmethod
    def list_categories(self) -> List[str]:
        """Sorted distinct categories of available products."""

    @abstractmethod
    def reserve_stock(self, id: str, quantity: int) -> bool:
        """Decrement stock by ``quantity`` only if enough is left.

        Returns ``False`` when no row matched (missing product or
        ``stock < quantity``); nothing is written in that case.
        """

    @abstractmethod
    def release_stock(self, id: str, quantity: int) -> bool:
        """Increment stock by ``quantity``."""

    @abstractmethod
    def set_stock(self, id: str, stock: int) -> bool:
        """Overwrite the stock counter (producer edit)."""
