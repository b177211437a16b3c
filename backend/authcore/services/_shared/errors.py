"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and should never import or depend
on Flask or HTTP directly. They serve as stable contracts between the token
codec, the refresh ledger, repositories and application services.

The translation to HTTP responses (RFC 7807) is handled by
``authcore/core/errors.py`` via ``BaseService.translate_exceptions()``.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError


def violates(exc: IntegrityError, constraint_name: str, *, column: str | None = None) -> bool:
    """
    Check whether an IntegrityError originates from a specific constraint.

    Supports PostgreSQL (constraint name lookup) and SQLite (``table.column``).

    Parameters
    ----------
    exc : IntegrityError
        The exception raised by SQLAlchemy during flush/commit.
    constraint_name : str
        The name of the database constraint to match (e.g., 'uq_refresh_tokens_token_hash').
    column : str | None
        Qualified ``table.column`` reported by dialects that omit constraint names.

    Returns
    -------
    bool
        True if the IntegrityError matches the given constraint.
    """
    message = str(exc.orig).lower() if exc.orig else ""
    if constraint_name.lower() in message:
        return True
    return column is not None and column.lower() in message


# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - The API layer translates them to APIError via BaseService.
    """

    pass


# --------------------------------------------------------------------------- #
# Authentication outcomes (the only kinds visible to callers)
# --------------------------------------------------------------------------- #


class InvalidCredentialsError(ServiceError):
    """
    Raised by login for an unknown account *and* for a wrong password.

    Both causes share one message so callers cannot enumerate accounts.
    """

    def __init__(self, message: str = "Invalid email or password") -> None:
        super().__init__(message)


class InvalidRefreshTokenError(ServiceError):
    """
    Raised by refresh for every rejected refresh token.

    Covers not-found, revoked (replay), expired, bad signature, subject
    mismatch and a lost rotation race, all with the same message.
    """

    def __init__(self, message: str = "Invalid refresh token") -> None:
        super().__init__(message)


class AccountDisabledError(ServiceError):
    """Raised when a correctly authenticated account is not ``ACTIVE``."""

    def __init__(
        self, message: str = "Account is disabled. Please contact an administrator."
    ) -> None:
        super().__init__(message)


# --------------------------------------------------------------------------- #
# Token codec errors (internal distinctions)
# --------------------------------------------------------------------------- #


class TokenError(ServiceError):
    """Base class for token verification failures. Never retried."""


class SignatureInvalidError(TokenError):
    """Signature mismatch, rotated secret, tampering or a foreign ``alg``."""


class TokenExpiredError(TokenError):
    """The token's ``exp`` is at or before the current clock reading."""


class MalformedTokenError(TokenError):
    """The string cannot be parsed into the expected claim shape."""


# --------------------------------------------------------------------------- #
# Persistence errors
# --------------------------------------------------------------------------- #


@dataclass(slots=True)
class ConflictError(ServiceError):
    """
    Raised when a unique constraint conflict occurs.

    :param entity: Entity name (e.g., "RefreshToken").
    :type entity: str
    :param detail: Short human-readable explanation.
    :type detail: str
    """

    entity: str
    detail: str

    def __str__(self) -> str:  # pragma: no cover
        return f"Conflict on {self.entity}: {self.detail}"
