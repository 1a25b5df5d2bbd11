"""Account domain exceptions.

Raised by the Service Layer when business rules are violated.
The exception handler translates them into the response envelope.
"""

from __future__ import annotations

from modules.core.exceptions import AuthenticationError, ConflictError, NotFoundError


class UserNotFound(NotFoundError):
    """The requested user does not exist."""

    default_message = "User not found."


class EmailAlreadyRegistered(ConflictError):
    """Another account already uses this email."""

    default_message = "Email already registered."


class InvalidCredentials(AuthenticationError):
    """Unknown email, wrong password or deactivated account."""

    default_message = "Invalid credentials."
