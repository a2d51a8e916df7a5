from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class RegisterIn:
    """
    Input DTO for registration.

    :param email: Login email.
    :param password: Raw password (hashed by the model).
    :param name: Optional display name.
    """

    email: str
    password: str
    name: str | None = None


@dataclass(frozen=True, slots=True)
class LoginIn:
    """
    Input DTO for login.

    :param email: User email (normalized).
    :param password: Raw password (to be verified).
    """

    email: str
    password: str


@dataclass(frozen=True, slots=True)
class RefreshIn:
    """
    Input DTO for token refresh.

    :param refresh_token: Opaque refresh token presented by the client.
    """

    refresh_token: str


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class TokenPairOut:
    """
    Token response returned by register, login and refresh.

    :param access_token: Signed access JWT.
    :param refresh_token: Opaque single-use refresh token.
    :param expires_in: Access token lifetime in seconds.
    """

    access_token: str
    refresh_token: str
    expires_in: int
    token_type: str = "Bearer"


# ------------------------------ Config DTO -------------------------------- #


@dataclass(frozen=True, slots=True)
class AuthTokenConfig:
    """
    Token lifetimes.

    :param access_expiry: Duration string such as ``"15m"``.
    :param refresh_expiry_days: Refresh token lifetime in days.
    """

    access_expiry: str = "15m"
    refresh_expiry_days: int = 7

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> AuthTokenConfig:
        """Build from a Flask config (``JWT_ACCESS_EXPIRY``, ``JWT_REFRESH_EXPIRY_DAYS``)."""
        return cls(
            access_expiry=str(config.get("JWT_ACCESS_EXPIRY", "15m")),
            refresh_expiry_days=int(config.get("JWT_REFRESH_EXPIRY_DAYS", 7)),
        )
