"""Service layer public API.

Callers import from :mod:`authcore.services` without knowing the internal
structure.

Re-exports
----------
- Base primitives (from ``authcore.services._shared.base``)
    * :class:`BaseService`

- Errors (from ``authcore.services._shared.errors``)
    * :class:`ServiceError`, :class:`AuthenticationError`,
      :class:`NotFoundError`, :class:`ConflictError`

- Auth service (from ``authcore.services.auth``)
    * :class:`AuthService`
    * DTOs: :class:`RegisterIn`, :class:`LoginIn`, :class:`RefreshIn`,
      :class:`TokenPairOut`, :class:`AuthTokenConfig`

- User service (from ``authcore.services.users``)
    * :class:`UserService`
    * DTOs: :class:`UserOut`

- Maintenance (from ``authcore.services.maintenance``)
    * :class:`TokenMaintenanceService`
"""

from __future__ import annotations

from ._shared.base import BaseService
from ._shared.errors import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    ServiceError,
)
from .auth.dto import AuthTokenConfig, LoginIn, RefreshIn, RegisterIn, TokenPairOut
from .auth.service import AuthService
from .maintenance.service import TokenMaintenanceService
from .users.dto import UserOut
from .users.service import UserService

__all__ = [
    # Base
    "BaseService",
    # Errors
    "ServiceError",
    "AuthenticationError",
    "NotFoundError",
    "ConflictError",
    # Auth
    "AuthService",
    "AuthTokenConfig",
    "RegisterIn",
    "LoginIn",
    "RefreshIn",
    "TokenPairOut",
    # Users
    "UserService",
    "UserOut",
    # Maintenance
    "TokenMaintenanceService",
]
