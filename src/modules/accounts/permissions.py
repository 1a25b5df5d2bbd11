"""Role-based DRF permissions.

Role checks are static: each class names the roles it admits and the
request's actor role must be one of them.
"""

from __future__ import annotations

from rest_framework.permissions import BasePermission

from modules.accounts.constants import UserRole


class HasRole(BasePermission):
    allowed_roles: frozenset = frozenset()
    message = "Your role is not allowed to perform this action."

    def has_permission(self, request, view) -> bool:
        user = request.user
        return bool(
            user
            and user.is_authenticated
            and getattr(user, "role", None) in self.allowed_roles
        )


class IsProducer(HasRole):
    allowed_roles = frozenset({UserRole.PRODUCER})
    message = "Only producers can perform this action."


class IsConsumer(HasRole):
    allowed_roles = frozenset({UserRole.CONSUMER})
    message = "Only consumers can perform this action."


class IsLogistics(HasRole):
    allowed_roles = frozenset({UserRole.LOGISTICS})
    message = "Only logistics couriers can perform this action."
