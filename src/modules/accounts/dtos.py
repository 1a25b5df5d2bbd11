"""Account DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
DTOs are immutable (``frozen=True``).

- ``RegisterUserDTO``: input for registration.
- ``LoginDTO``: credentials for token issuance.
- ``UpdateProfileDTO``: partial profile update.
- ``ChangePasswordDTO``: password rotation.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, field_validator

from modules.accounts.constants import PASSWORD_MIN_LENGTH, USERNAME_MIN_LENGTH


class RoleEnum(StrEnum):
    """Marketplace roles (framework-agnostic: NOT Django TextChoices)."""

    PRODUCER = "producer"
    CONSUMER = "consumer"
    LOGISTICS = "logistics"


def _check_password(v: str) -> str:
    if not v or len(v) < PASSWORD_MIN_LENGTH:
        raise ValueError(
            f"Password must be at least {PASSWORD_MIN_LENGTH} characters long."
        )
    return v


def _check_username(v: str) -> str:
    v = (v or "").strip()
    if len(v) < USERNAME_MIN_LENGTH:
        raise ValueError(
            f"Username must be at least {USERNAME_MIN_LENGTH} characters long."
        )
    return v


class RegisterUserDTO(BaseModel):
    """Immutable DTO for registration requests."""

    model_config = ConfigDict(frozen=True)

    username: str
    email: EmailStr
    password: str
    role: RoleEnum
    profile: Dict[str, Any] = {}

    @field_validator("username")
    @classmethod
    def username_min_length(cls, v: str) -> str:
        return _check_username(v)

    @field_validator("password")
    @classmethod
    def password_min_length(cls, v: str) -> str:
        return _check_password(v)

    @field_validator("email")
    @classmethod
    def email_lowercase(cls, v: str) -> str:
        return v.lower()


class LoginDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    email: EmailStr
    password: str


class UpdateProfileDTO(BaseModel):
    """All fields optional: only supplied fields are applied."""

    model_config = ConfigDict(frozen=True)

    username: Optional[str] = None
    profile: Optional[Dict[str, Any]] = None

    @field_validator("username")
    @classmethod
    def username_min_length(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return _check_username(v)


class ChangePasswordDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    current_password: str
    new_password: str

    @field_validator("new_password")
    @classmethod
    def password_min_length(cls, v: str) -> str:
        return _check_password(v)
