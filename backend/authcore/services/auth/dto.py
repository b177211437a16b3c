# authcore/services/auth/dto.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

TOKEN_TYPE_BEARER = "Bearer"

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class LoginIn:
    """
    Input DTO for login.

    :param email: User email as submitted (format is a boundary concern).
    :type email: str
    :param password: Raw password (verified once, never stored or logged).
    :type password: str
    """

    email: str
    password: str


@dataclass(frozen=True, slots=True)
class RefreshIn:
    """
    Input DTO for token refresh.

    :param refresh_token: Raw refresh token string.
    :type refresh_token: str
    """

    refresh_token: str


@dataclass(frozen=True, slots=True)
class RequestContext:
    """
    Opaque request metadata recorded on ledger entries for audit.

    :param user_agent: Originating ``User-Agent`` header.
    :type user_agent: str | None
    :param ip_address: Originating client address.
    :type ip_address: str | None
    """

    user_agent: str | None = None
    ip_address: str | None = None


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class TokenPairOut:
    """
    Output DTO with access and refresh tokens.

    :param access_token: Encoded access JWT.
    :type access_token: str
    :param refresh_token: Encoded refresh JWT.
    :type refresh_token: str
    :param expires_in: Access token lifetime in seconds.
    :type expires_in: int
    :param token_type: Fixed ``"Bearer"`` label.
    :type token_type: str
    """

    access_token: str
    refresh_token: str
    expires_in: int
    token_type: str = TOKEN_TYPE_BEARER


# ------------------------------ Config DTO -------------------------------- #


@dataclass(frozen=True, slots=True)
class AuthTokenConfig:
    """
    Token emission configuration.

    :param access_expires: Access token lifetime.
    :type access_expires: timedelta
    :param refresh_expires: Refresh token lifetime.
    :type refresh_expires: timedelta
    """

    access_expires: timedelta
    refresh_expires: timedelta

    @property
    def access_expires_seconds(self) -> int:
        return int(self.access_expires.total_seconds())
