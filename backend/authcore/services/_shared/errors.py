"""
Domain-level exceptions used within the service layer.

These exceptions never depend on Flask or HTTP. The translation to RFC 7807
responses happens in :mod:`authcore.core.errors` through
``BaseService.translate_exceptions()``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from sqlalchemy.exc import IntegrityError

AuthFailureReason = Literal["revoked", "invalid", "expired", "deactivated", "credentials"]


def violates(exc: IntegrityError, constraint_name: str) -> bool:
    """
    Check whether an IntegrityError originates from a specific constraint.

    :param exc: Exception raised by SQLAlchemy during flush/commit.
    :param constraint_name: Constraint name, e.g. ``uq_users_email``.
    :returns: ``True`` when the driver message mentions the constraint.
    """
    message = str(exc.orig).lower() if exc.orig else ""
    return constraint_name.lower() in message


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    These are *not* HTTP errors; the API layer translates them.
    """


@dataclass(slots=True)
class NotFoundError(ServiceError):
    """
    Raised when an entity is not found in the repository.

    :param entity: Entity name (e.g., "User").
    :param key: Identifier or search key.
    """

    entity: str
    key: str | int

    def __str__(self) -> str:
        return f"{self.entity} not found: {self.key}"


@dataclass(slots=True)
class ConflictError(ServiceError):
    """
    Raised when a unique constraint or business rule conflict occurs.

    :param entity: Entity name (e.g., "User").
    :param detail: Short human-readable explanation.
    """

    entity: str
    detail: str

    def __str__(self) -> str:
        return f"Conflict on {self.entity}: {self.detail}"


@dataclass(slots=True)
class AuthenticationError(ServiceError):
    """
    Raised when credentials or a refresh token are rejected.

    ``reason`` tells operators which check failed; ``str()`` only ever
    yields the public message, so the branches look identical to clients.

    :param reason: Internal failure reason, logged but never rendered.
    :param public_message: Client-safe message.
    """

    reason: AuthFailureReason
    public_message: str = "Invalid or expired refresh token"

    def __str__(self) -> str:
        return self.public_message
