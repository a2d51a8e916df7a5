"""Cache key layout and TTLs shared by the services that use the cache."""

from __future__ import annotations

from typing import Final

USER_PREFIX: Final[str] = "user:"
USER_EMAIL_PREFIX: Final[str] = "user:email:"
REFRESH_TOKEN_PREFIX: Final[str] = "refresh_token:"
SESSION_PREFIX: Final[str] = "session:"

# Seconds
USER_TTL: Final[int] = 300
USER_BY_EMAIL_TTL: Final[int] = 300
SESSION_TTL: Final[int] = 900
DEFAULT_TTL: Final[int] = 300
SECONDS_PER_DAY: Final[int] = 86_400


def user_key(user_id: str) -> str:
    return f"{USER_PREFIX}{user_id}"


def user_by_email_key(email: str) -> str:
    return f"{USER_EMAIL_PREFIX}{email.strip().lower()}"


def refresh_token_key(token: str) -> str:
    """Blacklist key for a refresh token value."""
    return f"{REFRESH_TOKEN_PREFIX}{token}"


def blacklist_ttl(refresh_expiry_days: int) -> int:
    """TTL covering the longest possible remaining life of a refresh token."""
    return refresh_expiry_days * SECONDS_PER_DAY


def loggable_key(key: str) -> str:
    """Shorten blacklist keys so full token values never reach the logs."""
    if key.startswith(REFRESH_TOKEN_PREFIX):
        return f"{key[: len(REFRESH_TOKEN_PREFIX) + 8]}..."
    return key
