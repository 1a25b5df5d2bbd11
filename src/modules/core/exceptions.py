"""Domain error hierarchy and the DRF exception handler.

Every business-rule violation raised by a service derives from
``DomainError``.  Each class carries the HTTP status it maps to, so the
request boundary (``api_exception_handler``) can translate any of them
into the standard response envelope::

    {"success": false, "message": "...", "errors": [...]}

Errors are never retried; the handler only translates.
"""

from __future__ import annotations

from typing import Any, List, Optional

import structlog
from django.conf import settings
from django.core.exceptions import PermissionDenied as DjangoPermissionDenied
from django.http import Http404
from pydantic import ValidationError as PydanticValidationError
from rest_framework import exceptions as drf_exceptions
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = structlog.get_logger(__name__)


class DomainError(Exception):
    """Base class for errors the API reports back to the caller."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    code: str = "domain_error"
    default_message: str = "Request could not be processed."

    def __init__(
        self, message: Optional[str] = None, errors: Optional[List[Any]] = None
    ) -> None:
        self.message = message or self.default_message
        self.errors = errors or []
        super().__init__(self.message)


class ValidationError(DomainError):
    """Malformed or missing input; correctable by the caller."""

    code = "validation_error"
    default_message = "Invalid data."


class NotFoundError(DomainError):
    """A referenced entity does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"
    default_message = "Resource not found."


class AccessDeniedError(DomainError):
    """The actor is not allowed to perform the operation."""

    status_code = status.HTTP_403_FORBIDDEN
    code = "forbidden"
    default_message = "Access denied."


class AuthenticationError(DomainError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "authentication_failed"
    default_message = "Invalid credentials."


class ConflictError(DomainError):
    status_code = status.HTTP_409_CONFLICT
    code = "conflict"
    default_message = "Resource already exists."


class InternalError(DomainError):
    """Datastore or unexpected failure."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "internal_error"
    default_message = "Internal server error."


# ---------------------------------------------------------------------------
# Envelope helpers
# ---------------------------------------------------------------------------


def _flatten_errors(detail: Any, prefix: str = "") -> List[str]:
    """Flatten DRF error detail (dict / list / str) into readable strings."""
    if isinstance(detail, dict):
        flattened: List[str] = []
        for field, value in detail.items():
            name = f"{prefix}{field}" if not prefix else f"{prefix}.{field}"
            flattened.extend(_flatten_errors(value, name))
        return flattened
    if isinstance(detail, list):
        flattened = []
        for value in detail:
            flattened.extend(_flatten_errors(value, prefix))
        return flattened
    text = str(detail)
    if prefix and prefix != "non_field_errors":
        return [f"{prefix}: {text}"]
    return [text]


def _pydantic_errors(exc: PydanticValidationError) -> List[str]:
    """Render pydantic errors as ``"field.path: message"`` strings."""
    rendered: List[str] = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", ()))
        msg = err.get("msg", "")
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, ") :]
        rendered.append(f"{loc}: {msg}" if loc else msg)
    return rendered


def _error_body(message: str, errors: Optional[List[Any]] = None) -> dict:
    body: dict = {"success": False, "message": message}
    if errors:
        body["errors"] = errors
    return body


def api_exception_handler(exc: Exception, context: dict) -> Optional[Response]:
    """Map any exception raised inside a DRF view to the response envelope."""
    view = context.get("view")
    log = logger.bind(view=type(view).__name__ if view else None)

    if isinstance(exc, DomainError):
        if exc.status_code >= 500:
            log.error("api.domain_error", code=exc.code, error=exc.message)
        else:
            log.info("api.domain_error", code=exc.code, error=exc.message)
        return Response(
            _error_body(exc.message, exc.errors), status=exc.status_code
        )

    if isinstance(exc, PydanticValidationError):
        log.info("api.validation_error", error_count=exc.error_count())
        return Response(
            _error_body(ValidationError.default_message, _pydantic_errors(exc)),
            status=status.HTTP_400_BAD_REQUEST,
        )

    response = exception_handler(exc, context)
    if response is not None:
        if isinstance(exc, drf_exceptions.ValidationError):
            message = ValidationError.default_message
            errors = _flatten_errors(exc.detail)
        elif isinstance(exc, Http404):
            message = NotFoundError.default_message
            errors = []
        elif isinstance(exc, DjangoPermissionDenied):
            message = AccessDeniedError.default_message
            errors = []
        else:
            detail = getattr(exc, "detail", "")
            message = str(detail) if not isinstance(detail, (dict, list)) else ""
            errors = [] if message else _flatten_errors(detail)
            message = message or "Request failed."
        response.data = _error_body(message, errors)
        return response

    log.exception("api.unexpected_error", error_type=type(exc).__name__)
    message = InternalError.default_message
    if settings.DEBUG:
        message = f"{message} {exc}"
    return Response(
        _error_body(message), status=status.HTTP_500_INTERNAL_SERVER_ERROR
    )
