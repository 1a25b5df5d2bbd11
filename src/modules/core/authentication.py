"""Bearer-token authentication that yields a request-scoped actor.

Tokens are SimpleJWT access tokens signed with ``SECRET_KEY`` (HS256).
``ActorJWTAuthentication`` delegates signature, expiry and user look-up
to SimpleJWT and attaches an ``Actor`` (``id`` + ``role``) to the request,
which is the only identity the service layer ever sees.

Security decisions
------------------
* **Fail Closed**: any decode / validation error returns 401.
* Deactivated users are rejected by SimpleJWT's user look-up, so a
  token issued before deactivation stops working immediately.
"""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

import structlog
from rest_framework.request import Request
from rest_framework_simplejwt.authentication import JWTAuthentication

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Actor:
    """Identity of the caller as seen by the services."""

    id: UUID
    role: str

    @classmethod
    def from_user(cls, user) -> Actor:
        return cls(id=user.id, role=user.role)


class ActorJWTAuthentication(JWTAuthentication):
    """DRF authentication class that validates Bearer tokens."""

    def authenticate(self, request: Request):
        """Return ``(user, token)`` or ``None`` when no credentials are sent."""
        result = super().authenticate(request)
        if result is None:
            return None

        user, token = result
        request.actor = Actor.from_user(user)
        structlog.contextvars.bind_contextvars(
            actor_id=str(user.id), actor_role=user.role
        )
        logger.info("jwt_authenticated", actor_id=str(user.id), role=user.role)
        return user, token


def get_actor(request: Request) -> Actor:
    """Return the actor attached to an authenticated request."""
    actor = getattr(request, "actor", None)
    if actor is None:
        actor = Actor.from_user(request.user)
    return actor
