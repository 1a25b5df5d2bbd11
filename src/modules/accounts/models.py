"""User model for the three marketplace roles.

Business rules implemented:
- Email is the login identifier and must be unique.
- ``role`` is one of producer / consumer / logistics and never changes
  after registration.
- Passwords are stored hashed (Django password hashers).
- Deactivation is a soft flag (``is_active``); orders keep referencing
  deactivated users.
"""

from __future__ import annotations

from typing import Any

import structlog
from django.contrib.auth.base_user import BaseUserManager
from django.contrib.auth.models import AbstractUser
from django.db import models

from modules.accounts.constants import UserRole
from modules.core.models import BaseModel

logger = structlog.get_logger(__name__)


class UserManager(BaseUserManager):
    """Manager keyed on ``email`` instead of ``username``."""

    def create_user(
        self, email: str, password: str | None = None, **extra_fields: Any
    ) -> User:
        if not email:
            raise ValueError("Email is required.")
        email = self.normalize_email(email).lower()
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(
        self, email: str, password: str | None = None, **extra_fields: Any
    ) -> User:
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        extra_fields.setdefault("role", UserRole.PRODUCER)
        return self.create_user(email, password, **extra_fields)


class User(BaseModel, AbstractUser):
    """Marketplace account (producer, consumer or logistics courier)."""

    username = models.CharField(max_length=150)
    email = models.EmailField(max_length=254, unique=True)
    role = models.CharField(max_length=20, choices=UserRole.choices)
    profile = models.JSONField(default=dict, blank=True)

    objects = UserManager()

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = ["username"]

    class Meta:
        db_table = "users"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["role", "is_active"], name="users_role_active_idx"),
        ]

    # ------------------------------------------------------------------
    # Role helpers
    # ------------------------------------------------------------------

    @property
    def is_producer(self) -> bool:
        return self.role == UserRole.PRODUCER

    @property
    def is_consumer(self) -> bool:
        return self.role == UserRole.CONSUMER

    @property
    def is_logistics(self) -> bool:
        return self.role == UserRole.LOGISTICS

    # ------------------------------------------------------------------
    # Display
    # ------------------------------------------------------------------

    def __str__(self) -> str:
        return f"{self.username} <{self.email}> ({self.role})"
