"""Account service layer (Use Cases).

Registration, login, profile management and deactivation for the three
marketplace roles.  Persistence goes through the injected
``IUserRepository``; tokens are SimpleJWT access/refresh pairs.

Business rules enforced here:
- Email must be unique (409 on collision).
- Deactivated accounts cannot log in.
- Password changes require the current password.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict, Tuple

import structlog
from django.db import transaction
from rest_framework_simplejwt.tokens import RefreshToken

from modules.accounts.exceptions import (
    EmailAlreadyRegistered,
    InvalidCredentials,
    UserNotFound,
)
from modules.core.exceptions import ValidationError

if TYPE_CHECKING:
    from modules.accounts.dtos import (
        ChangePasswordDTO,
        LoginDTO,
        RegisterUserDTO,
        UpdateProfileDTO,
    )
    from modules.accounts.models import User
    from modules.accounts.repositories.interfaces import IUserRepository
    from modules.core.authentication import Actor

logger = structlog.get_logger(__name__)


def issue_tokens(user: User) -> Dict[str, str]:
    """Return a fresh ``{"access", "refresh"}`` pair for ``user``."""
    refresh = RefreshToken.for_user(user)
    return {"access": str(refresh.access_token), "refresh": str(refresh)}


class AccountService:
    """Application service for account use-cases.

    Receives an ``IUserRepository`` via constructor injection (DIP).
    """

    def __init__(self, repository: IUserRepository) -> None:
        self._repo = repository

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def register(self, dto: RegisterUserDTO) -> Tuple[User, Dict[str, str]]:
        """Create a new account and issue its first token pair.

        Raises:
            EmailAlreadyRegistered: if the email is already taken.
        """
        log = logger.bind(email=dto.email, role=dto.role.value)

        if self._repo.get_by_email(dto.email):
            log.warning("user.duplicate_email")
            raise EmailAlreadyRegistered()

        user = self._repo.create(
            {
                "username": dto.username,
                "email": dto.email,
                "role": dto.role.value,
                "profile": dict(dto.profile),
            },
            password=dto.password,
        )
        log.info("user.registered", user_id=str(user.id))
        return user, issue_tokens(user)

    def login(self, dto: LoginDTO) -> Tuple[User, Dict[str, str]]:
        """Check credentials and issue a token pair.

        Raises:
            InvalidCredentials: unknown email, wrong password or the
                account is deactivated.
        """
        user = self._repo.get_by_email(dto.email)
        if not user or not user.check_password(dto.password):
            logger.warning("user.login_failed", email=dto.email)
            raise InvalidCredentials()
        if not user.is_active:
            logger.warning("user.login_inactive", user_id=str(user.id))
            raise InvalidCredentials("Account is deactivated.")

        logger.info("user.logged_in", user_id=str(user.id))
        return user, issue_tokens(user)

    @transaction.atomic
    def update_profile(self, actor: Actor, dto: UpdateProfileDTO) -> User:
        """Merge ``dto.profile`` into the stored profile document."""
        user = self.get_user(str(actor.id))
        if dto.username is not None:
            user.username = dto.username
        if dto.profile is not None:
            user.profile = {**(user.profile or {}), **dto.profile}
        user = self._repo.save(user)
        logger.info("user.profile_updated", user_id=str(user.id))
        return user

    @transaction.atomic
    def change_password(self, actor: Actor, dto: ChangePasswordDTO) -> None:
        """Rotate the password after checking the current one.

        Raises:
            ValidationError: the current password does not match.
        """
        user = self.get_user(str(actor.id))
        if not user.check_password(dto.current_password):
            logger.warning("user.password_mismatch", user_id=str(user.id))
            raise ValidationError("Current password is incorrect.")
        user.set_password(dto.new_password)
        self._repo.save(user)
        logger.info("user.password_changed", user_id=str(user.id))

    @transaction.atomic
    def deactivate(self, actor: Actor) -> None:
        if not self._repo.delete(str(actor.id)):
            raise UserNotFound()
        logger.info("user.account_deactivated", user_id=str(actor.id))

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_user(self, id: str) -> User:
        """Retrieve a single user by ID.

        Raises:
            UserNotFound: if the user does not exist.
        """
        user = self._repo.get_by_id(id)
        if not user:
            raise UserNotFound(f"User {id} not found.")
        return user
