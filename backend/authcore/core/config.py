"""Application settings with environment-based simple classes."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Final

from dotenv import load_dotenv

# Public selector env var (keep neutral name to avoid collisions)
ENV_VAR: Final[str] = "APP_ENV"  # 'development' | 'testing' | 'production'

# HS256 requires a key of at least 256 bits.
MIN_SECRET_BYTES: Final[int] = 32
SUPPORTED_ALGORITHMS: Final[frozenset[str]] = frozenset({"HS256"})


# Loads .env in development (no-op when the file is missing)
load_dotenv()


class ConfigurationError(RuntimeError):
    """Raised at startup when security-relevant configuration is unusable."""


def env_bool(name: str, default: bool = False) -> bool:
    """Parse a boolean flag from an environment variable.

    Parameters
    ----------
    name: str
        Environment variable to inspect.
    default: bool, optional
        Value returned when the variable is unset. Defaults to ``False``.

    Returns
    -------
    bool
        ``True`` if the value resembles ``{"1", "true", "yes", "y", "on"}``
        ignoring case; otherwise ``False`` or ``default`` when missing.
    """
    val = os.getenv(name)
    if val is None:
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "y", "on"}


def env_int(name: str, default: int) -> int:
    """Parse an integer from an environment variable, falling back to ``default``."""
    val = os.getenv(name)
    if val is None or not val.strip():
        return default
    try:
        return int(val)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {val!r}") from exc


class BaseConfig:
    """Base configuration shared across environments.

    Attributes
    ----------
    API_BASE_PREFIX: str
        Root path for registering API blueprints.
    JWT_SECRET_KEY: str
        Symmetric secret for signing bearer tokens. Never defaulted; a missing
        or blank value aborts :func:`authcore.factory.create_app`.
    JWT_ALGORITHM: str
        Pinned signing algorithm. Tokens declaring any other ``alg`` are rejected.
    JWT_ACCESS_TTL_SECONDS: int
        Access token lifetime (15 minutes by default).
    JWT_REFRESH_TTL_SECONDS: int
        Refresh token lifetime (7 days by default).
    SQLALCHEMY_DATABASE_URI: str
        Database connection string consumed by SQLAlchemy.
    SQLALCHEMY_TRACK_MODIFICATIONS: bool
        Disabled to avoid extra overhead from the event system.
    SQLALCHEMY_ECHO: bool
        When ``True`` SQLAlchemy logs SQL statements for debugging.
    PROPAGATE_EXCEPTIONS: bool
        Controls Flask error propagation.
    LOG_LEVEL: str
        Root logging verbosity (``INFO`` by default).
    USE_PROXYFIX: bool
        Honour ``X-Forwarded-*`` headers for the client address.
    PROXY_TRUSTED_HOPS: int
        Number of proxies in front of the app (``0`` ignores forwarded headers).

    Notes
    -----
    Values are primarily sourced from environment variables, enabling
    configuration without code changes.
    """

    API_BASE_PREFIX = "/api"

    # Secrets / tokens
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "")
    JWT_ALGORITHM = "HS256"
    JWT_DECODE_ALGORITHMS = ["HS256"]
    JWT_TOKEN_LOCATION = ["headers"]
    JWT_ACCESS_TTL_SECONDS = env_int("JWT_ACCESS_TTL_SECONDS", 15 * 60)
    JWT_REFRESH_TTL_SECONDS = env_int("JWT_REFRESH_TTL_SECONDS", 7 * 24 * 60 * 60)

    # DB
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///./dev.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)

    # Flask & JSON
    JSON_SORT_KEYS = False
    PROPAGATE_EXCEPTIONS = False

    # Rate limiting (Flask-Limiter) & CORS
    RATELIMIT_ENABLED = env_bool("RATELIMIT_ENABLED", True)
    RATELIMIT_STORAGE_URI = os.getenv("RATELIMIT_STORAGE_URI", "memory://")
    AUTH_LOGIN_RATE_LIMIT = os.getenv("AUTH_LOGIN_RATE_LIMIT", "5 per minute")
    AUTH_REFRESH_RATE_LIMIT = os.getenv("AUTH_REFRESH_RATE_LIMIT", "30 per minute")
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "")
    CORS_MAX_AGE = env_int("CORS_MAX_AGE", 600)

    # Logging & proxy
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    USE_PROXYFIX = env_bool("USE_PROXYFIX", True)
    PROXY_TRUSTED_HOPS = env_int("PROXY_TRUSTED_HOPS", 1)

    # Flask built-ins
    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    """Configuration tailored for local development.

    Notes
    -----
    Enables debug mode by default. The signing secret still has to come from
    the environment (``.env`` is loaded automatically).
    """

    DEBUG = env_bool("FLASK_DEBUG", True)
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)


class TestingConfig(BaseConfig):
    """Configuration for automated test runs.

    Notes
    -----
    - Forces ``TESTING`` mode and disables debug logs.
    - Uses an in-memory SQLite database unless ``TEST_DATABASE_URL`` is set.
    - Ships a fixed signing secret so tests never depend on the environment.
    """

    TESTING = True
    DEBUG = False
    JWT_SECRET_KEY = os.getenv("TEST_JWT_SECRET_KEY", "testing-only-signing-secret-0123456789abcdef")
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)
    PROPAGATE_EXCEPTIONS = True
    RATELIMIT_ENABLED = False


class ProductionConfig(BaseConfig):
    """Configuration defaults for production deployments.

    Notes
    -----
    Keeps debug and SQL echoing disabled while relying on WSGI-level log
    configuration for noise control.
    """

    DEBUG = False
    SQLALCHEMY_ECHO = False
    PROPAGATE_EXCEPTIONS = False


# Map names -> classes (simple, explicit)
CONFIG_MAP: Mapping[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config() -> type[BaseConfig]:
    """Return the configuration class inferred from ``APP_ENV``.

    Returns
    -------
    type[BaseConfig]
        Class to pass to :meth:`flask.Config.from_object`.

    Notes
    -----
    Falls back to :class:`DevelopmentConfig` when ``APP_ENV`` is unset or
    unknown.
    """
    name = os.getenv(ENV_VAR, "development").strip().lower()
    return CONFIG_MAP.get(name, DevelopmentConfig)


# --------------------------------------------------------------------------- #
# Token settings
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class TokenSettings:
    """
    Validated, immutable token configuration.

    :param secret: Signing secret (sensitive, never logged).
    :type secret: str
    :param algorithm: Pinned JWS algorithm identifier.
    :type algorithm: str
    :param access_ttl: Access token lifetime.
    :type access_ttl: timedelta
    :param refresh_ttl: Refresh token lifetime.
    :type refresh_ttl: timedelta
    """

    secret: str
    algorithm: str
    access_ttl: timedelta
    refresh_ttl: timedelta

    def __repr__(self) -> str:
        return (
            f"TokenSettings(secret='***', algorithm={self.algorithm!r}, "
            f"access_ttl={self.access_ttl!r}, refresh_ttl={self.refresh_ttl!r})"
        )


def validate_secret(secret: str | None) -> bytes:
    """Return the key bytes for ``secret`` or raise :class:`ConfigurationError`."""
    if secret is None or not str(secret).strip():
        raise ConfigurationError("JWT secret is not set (JWT_SECRET_KEY).")
    key = str(secret).encode("utf-8")
    if len(key) < MIN_SECRET_BYTES:
        raise ConfigurationError(
            f"JWT secret must be at least {MIN_SECRET_BYTES} bytes for HS256."
        )
    return key


def load_token_settings(config: Mapping[str, Any]) -> TokenSettings:
    """Build :class:`TokenSettings` from a Flask config mapping.

    Parameters
    ----------
    config: Mapping[str, Any]
        Typically ``app.config``.

    Returns
    -------
    TokenSettings
        Validated settings.

    Raises
    ------
    ConfigurationError
        Missing/blank/short secret, unsupported algorithm or non-positive TTLs.
    """
    secret = config.get("JWT_SECRET_KEY")
    validate_secret(secret)

    algorithm = str(config.get("JWT_ALGORITHM", "HS256")).upper()
    if algorithm not in SUPPORTED_ALGORITHMS:
        raise ConfigurationError(f"Unsupported JWT algorithm {algorithm!r}.")

    access_seconds = int(config.get("JWT_ACCESS_TTL_SECONDS", 15 * 60))
    refresh_seconds = int(config.get("JWT_REFRESH_TTL_SECONDS", 7 * 24 * 60 * 60))
    if access_seconds <= 0 or refresh_seconds <= 0:
        raise ConfigurationError("Token TTLs must be positive.")

    return TokenSettings(
        secret=str(secret),
        algorithm=algorithm,
        access_ttl=timedelta(seconds=access_seconds),
        refresh_ttl=timedelta(seconds=refresh_seconds),
    )
