"""User repository interface.

Extends ``IRepository[User]`` with the email look-up needed for login
and the uniqueness rule on registration.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.accounts.models import User


class IUserRepository(IRepository["User"]):
    """Repository contract for marketplace users."""

    @abstractmethod
    def create(self, data: Dict[str, Any], password: str) -> User:
        """Create a user, hashing ``password``."""

    @abstractmethod
    def get_by_email(self, email: str) -> Optional[User]:
        """Retrieve a user by (case-insensitive) email."""
