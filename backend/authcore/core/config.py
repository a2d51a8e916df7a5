"""Environment-driven settings classes for the auth service."""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Final

from dotenv import load_dotenv

ENV_VAR: Final[str] = "APP_ENV"  # 'development' | 'testing' | 'production'
PLACEHOLDER_SECRET: Final[str] = "CHANGE_ME_JWT"

# No-op when no .env file is present
load_dotenv()


def env_bool(name: str, default: bool = False) -> bool:
    """Parse a boolean flag from an environment variable.

    :param name: Environment variable to inspect.
    :type name: str
    :param default: Value returned when the variable is unset.
    :type default: bool
    :returns: ``True`` for ``1/true/yes/y/on`` (any case), else ``False``.
    :rtype: bool
    """
    val = os.getenv(name)
    if val is None:
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "y", "on"}


def env_int(name: str, default: int) -> int:
    """Parse an integer from an environment variable, falling back on junk."""
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        return default


class BaseConfig:
    """Base configuration shared across environments.

    Attributes
    ----------
    API_BASE_PREFIX: str
        Root path for registering API blueprints.
    JWT_SECRET_KEY: str
        Key used by ``flask-jwt-extended`` to sign access tokens.
    JWT_ACCESS_EXPIRY: str
        Access token lifetime as ``<int><s|m|h|d>`` (``"15m"`` by default).
        Unknown units fall back to 900 seconds.
    JWT_REFRESH_EXPIRY_DAYS: int
        Refresh token lifetime in days. Also bounds blacklist entry TTLs.
    REDIS_URL: str | None
        Cache connection URL. Services needing the cache fail fast without it.
    CACHE_DEFAULT_TTL: int
        TTL in seconds for cache writes that do not provide one.
    SQLALCHEMY_DATABASE_URI: str
        Database connection string consumed by SQLAlchemy.
    LOG_LEVEL: str
        Root logging verbosity.
    CORS_ORIGINS: str
        Comma-separated list of allowed origins for CORS.
    """

    API_BASE_PREFIX = "/api"
    APP_VERSION = os.getenv("APP_VERSION", "dev")

    # Secrets
    SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME")
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", PLACEHOLDER_SECRET)

    # Token lifetimes
    JWT_ACCESS_EXPIRY = os.getenv("JWT_ACCESS_EXPIRY", "15m")
    JWT_REFRESH_EXPIRY_DAYS = env_int("JWT_REFRESH_EXPIRY_DAYS", 7)

    # DB
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///./dev.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)

    # Cache
    REDIS_URL = os.getenv("REDIS_URL")
    CACHE_DEFAULT_TTL = env_int("CACHE_DEFAULT_TTL", 300)

    # Flask & JSON
    JSON_SORT_KEYS = False
    PROPAGATE_EXCEPTIONS = False

    # Logging & CORS
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:3000")

    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    """Local development: debug on, Redis on localhost unless overridden."""

    DEBUG = env_bool("FLASK_DEBUG", True)
    REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")
    CORS_MAX_AGE = 600  # 10 minutes


class TestingConfig(BaseConfig):
    """Configuration for automated test runs.

    Notes
    -----
    - Uses an in-memory SQLite database unless ``TEST_DATABASE_URL`` is set.
    - Leaves ``REDIS_URL`` unset; tests install a fakeredis client.
    - Propagates exceptions so pytest can surface tracebacks directly.
    """

    TESTING = True
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    JWT_SECRET_KEY = "testing-secret-key-with-at-least-32-bytes"
    REDIS_URL = None
    PROPAGATE_EXCEPTIONS = True


class ProductionConfig(BaseConfig):
    """Production defaults: no debug, no SQL echo."""

    DEBUG = False
    SQLALCHEMY_ECHO = False
    PROPAGATE_EXCEPTIONS = False


CONFIG_MAP: Mapping[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config() -> type[BaseConfig]:
    """Return the configuration class inferred from ``APP_ENV``.

    Falls back to :class:`DevelopmentConfig` when ``APP_ENV`` is unset or
    unknown.

    :raises RuntimeError: If production is selected with the placeholder
        JWT secret.
    """
    name = os.getenv(ENV_VAR, "development").strip().lower()
    config = CONFIG_MAP.get(name, DevelopmentConfig)
    if config is ProductionConfig and config.JWT_SECRET_KEY == PLACEHOLDER_SECRET:
        raise RuntimeError("JWT_SECRET_KEY must be set in production.")
    return config
