"""Django ORM implementation of the User repository.

Error handling follows the Null Object pattern: look-ups return ``None``
instead of raising, the Service Layer decides what a missing user means.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction

from modules.accounts.models import User
from modules.accounts.repositories.interfaces import IUserRepository

logger = structlog.get_logger(__name__)


class UserDjangoRepository(IUserRepository):
    """Concrete User repository backed by Django ORM."""

    def get_by_id(self, id: str) -> Optional[User]:
        """Retrieve a user by primary key.

        Returns ``None`` for non-existent or invalid IDs.
        """
        try:
            return User.objects.filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_by_email(self, email: str) -> Optional[User]:
        return User.objects.filter(email__iexact=email.strip()).first()

    def list(
        self,
        filters: Optional[Dict[str, Any]] = None,
        ordering: Optional[Sequence[str]] = None,
    ) -> List[User]:
        """List users with optional Django ORM look-ups.

        Examples of valid filters::

            {"role": "logistics", "is_active": True}
        """
        queryset = User.objects.all()
        if filters:
            queryset = queryset.filter(**filters)
        if ordering:
            queryset = queryset.order_by(*ordering)
        return list(queryset)

    @transaction.atomic
    def create(self, data: Dict[str, Any], password: str) -> User:
        user = User.objects.create_user(password=password, **data)
        logger.info("user.created", user_id=str(user.id), role=user.role)
        return user

    @transaction.atomic
    def save(self, entity: User) -> User:
        """Persist (create or update) a user."""
        entity.save()
        logger.info("user.saved", user_id=str(entity.id))
        return entity

    @transaction.atomic
    def delete(self, id: str) -> bool:
        """Deactivate a user by ID; accounts are never removed physically.

        Returns ``True`` if the user was found, ``False`` otherwise.
        """
        user = self.get_by_id(id)
        if not user:
            return False
        user.is_active = False
        user.save(update_fields=["is_active", "updated_at"])
        logger.info("user.deactivated", user_id=str(id))
        return True
