"""Version 1 of the HTTP API."""

from __future__ import annotations

from flask import Blueprint, Flask

from .auth import bp as auth_bp
from .health import bp as health_bp

API_VERSION = "v1"

# (blueprint, path below /<API_BASE_PREFIX>/v1)
REGISTRY: list[tuple[Blueprint, str]] = [
    (health_bp, ""),
    (auth_bp, "/auth"),
]


def init_app(app: Flask) -> None:
    """Mount every v1 blueprint under ``API_BASE_PREFIX`` (default ``/api``)."""
    version_prefix = f"{app.config.get('API_BASE_PREFIX', '/api').rstrip('/')}/{API_VERSION}"
    for bp, path in REGISTRY:
        app.register_blueprint(bp, url_prefix=version_prefix + path)
