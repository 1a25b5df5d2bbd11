"""Generic repository interface (Dependency Inversion Principle).

``IRepository[T]`` is the minimal document-store contract consumed by the
service layer: get-by-id, filtered list with sort, save and delete.
Conditional writes (stock reservation, versioned order updates) are
declared on the domain-specific interfaces that need them.

Service-layer code depends on these abstractions, never on the Django
ORM directly.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Generic, List, Optional, Sequence, TypeVar

T = TypeVar("T")


class IRepository(ABC, Generic[T]):
    """Base generic repository contract.

    Type parameter ``T`` represents the domain entity managed by the
    repository (e.g. ``User``, ``Product``, ``Order``).
    """

    @abstractmethod
    def get_by_id(self, id: str) -> Optional[T]:
        """Retrieve an entity by its primary key, ``None`` when absent."""

    @abstractmethod
    def list(
        self,
        filters: Optional[Dict[str, Any]] = None,
        ordering: Optional[Sequence[str]] = None,
    ) -> List[T]:
        """List entities matching ``filters`` sorted by ``ordering``."""

    @abstractmethod
    def save(self, entity: T) -> T:
        """Persist (create or update) an entity."""

    @abstractmethod
    def delete(self, id: str) -> bool:
        """Remove an entity by ID (soft or hard delete)."""
