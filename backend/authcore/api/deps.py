"""Shared API helpers: responses, auth guards and per-request service wiring."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from typing import Any, TypeVar

from flask import Response, current_app, jsonify, request
from flask_jwt_extended import verify_jwt_in_request

from authcore.core.extensions import get_redis
from authcore.infra.jwt.flask_jwt_token_provider import JWTTokenProvider
from authcore.infra.redis.redis_cache_store import RedisCacheStore
from authcore.services.auth.dto import AuthTokenConfig
from authcore.services.auth.service import AuthService
from authcore.services.maintenance.service import TokenMaintenanceService
from authcore.services.users.service import UserService

F = TypeVar("F", bound=Callable[..., Any])


def require_auth(func: F) -> F:
    """Ensure the request carries a valid JWT access token."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        verify_jwt_in_request(optional=False)
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def empty_response(status: int = 204) -> Response:
    return current_app.response_class(status=status)


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            request_endpoint = getattr(request, "endpoint", None)
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request_endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]


# --------------------------------------------------------------------------- #
# Service wiring
# --------------------------------------------------------------------------- #


def build_cache_store() -> RedisCacheStore:
    """Wrap the process-wide Redis client with the configured default TTL."""

    return RedisCacheStore(
        get_redis(),
        default_ttl=int(current_app.config.get("CACHE_DEFAULT_TTL", 300)),
    )


def build_user_service() -> UserService:
    return UserService(cache=build_cache_store())


def build_auth_service() -> AuthService:
    """Assemble :class:`AuthService` from app config and the Redis client."""

    cache = build_cache_store()
    return AuthService(
        token_provider=JWTTokenProvider(),
        cache=cache,
        users=UserService(cache=cache),
        token_cfg=AuthTokenConfig.from_mapping(current_app.config),
    )


def build_maintenance_service() -> TokenMaintenanceService:
    return TokenMaintenanceService(cache=build_cache_store())
