# authcore/infra/jwt/pyjwt_token_codec.py
from __future__ import annotations

from collections.abc import Sequence
from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import uuid4

import jwt

from authcore.core.config import (
    SUPPORTED_ALGORITHMS,
    ConfigurationError,
    TokenSettings,
    validate_secret,
)
from authcore.services._shared.errors import (
    MalformedTokenError,
    SignatureInvalidError,
    TokenExpiredError,
)
from authcore.services._shared.ports import Claims, Clock, TokenCodec

ROLES_CLAIM = "roles"
REQUIRED_CLAIMS = ("sub", "jti", "iat", "exp")


class JWTTokenCodec(TokenCodec):
    """
    HMAC-signed JWT codec built on PyJWT.

    The signing key is derived from the secret once, at construction, and
    never changes afterwards. Time-based checks read the injected
    :class:`~authcore.services._shared.ports.Clock` instead of the wall clock,
    so PyJWT's own ``exp``/``iat`` validation is switched off.

    :param secret: Configured signing secret (UTF-8, >= 32 bytes).
    :param clock: Time source for ``iat``/``exp`` and expiry checks.
    :param algorithm: Pinned algorithm identifier.
    :raises ConfigurationError: Missing/blank/short secret or unsupported algorithm.
    """

    def __init__(self, *, secret: str, clock: Clock, algorithm: str = "HS256") -> None:
        if algorithm not in SUPPORTED_ALGORITHMS:
            raise ConfigurationError(f"Unsupported JWT algorithm {algorithm!r}.")
        self._key: bytes = validate_secret(secret)
        self._algorithm = algorithm
        self._clock = clock

    @classmethod
    def from_settings(cls, settings: TokenSettings, clock: Clock) -> JWTTokenCodec:
        return cls(secret=settings.secret, clock=clock, algorithm=settings.algorithm)

    @property
    def algorithm(self) -> str:
        return self._algorithm

    # ------------------------------------------------------------------ #
    # Issue
    # ------------------------------------------------------------------ #

    def issue(self, subject: str, roles: Sequence[str], ttl: timedelta) -> str:
        """
        Sign a fresh claim set for ``subject``.

        :param subject: Account identifier (non-empty).
        :param roles: Ordered role names; omitted from the token when empty.
        :param ttl: Positive whole-second lifetime.
        :returns: Compact JWS string.
        :raises ValueError: Empty subject or invalid ttl.
        :raises TypeError: Non-string role entries.
        """
        if not isinstance(subject, str) or not subject:
            raise ValueError("Token subject must be a non-empty string.")
        ttl_seconds = ttl.total_seconds()
        if ttl_seconds <= 0 or ttl_seconds != int(ttl_seconds):
            raise ValueError("Token ttl must be a positive whole number of seconds.")
        role_list = list(roles)
        if any(not isinstance(role, str) for role in role_list):
            raise TypeError("Roles must be strings.")

        issued_at = int(self._clock.now().timestamp())
        payload: dict[str, Any] = {
            "sub": subject,
            "jti": str(uuid4()),
            "iat": issued_at,
            "exp": issued_at + int(ttl_seconds),
        }
        if role_list:
            payload[ROLES_CLAIM] = role_list
        return jwt.encode(payload, self._key, algorithm=self._algorithm)

    # ------------------------------------------------------------------ #
    # Verify
    # ------------------------------------------------------------------ #

    def verify(self, token: str) -> Claims:
        """
        Verify ``token`` and return its claims.

        Signature and algorithm are checked before anything else, so an
        expired token with a bad signature reports ``SignatureInvalidError``.
        """
        if not isinstance(token, str) or not token:
            raise MalformedTokenError("Token must be a non-empty string.")
        try:
            payload = jwt.decode(
                token,
                self._key,
                algorithms=[self._algorithm],
                options={
                    "verify_signature": True,
                    "verify_exp": False,
                    "verify_iat": False,
                    "verify_nbf": False,
                    "require": list(REQUIRED_CLAIMS),
                },
            )
        except (jwt.InvalidSignatureError, jwt.InvalidAlgorithmError) as exc:
            raise SignatureInvalidError(str(exc)) from exc
        except jwt.InvalidTokenError as exc:
            raise MalformedTokenError(str(exc)) from exc

        claims = self._to_claims(payload)
        if claims.expires_at <= self._clock.now():
            raise TokenExpiredError("Token has expired.")
        return claims

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    @staticmethod
    def _epoch(payload: dict[str, Any], name: str) -> datetime:
        value = payload.get(name)
        if isinstance(value, bool) or not isinstance(value, int):
            raise MalformedTokenError(f"Claim {name!r} must be an integer timestamp.")
        return datetime.fromtimestamp(value, tz=UTC)

    @classmethod
    def _to_claims(cls, payload: dict[str, Any]) -> Claims:
        subject = payload.get("sub")
        jti = payload.get("jti")
        if not isinstance(subject, str) or not subject:
            raise MalformedTokenError("Claim 'sub' must be a non-empty string.")
        if not isinstance(jti, str) or not jti:
            raise MalformedTokenError("Claim 'jti' must be a non-empty string.")

        raw_roles = payload.get(ROLES_CLAIM, [])
        if not isinstance(raw_roles, list) or any(not isinstance(r, str) for r in raw_roles):
            raise MalformedTokenError("Claim 'roles' must be a list of strings.")

        issued_at = cls._epoch(payload, "iat")
        expires_at = cls._epoch(payload, "exp")
        if expires_at <= issued_at:
            raise MalformedTokenError("Claim 'exp' must be after 'iat'.")

        return Claims(
            subject=subject,
            roles=tuple(raw_roles),
            jti=jti,
            issued_at=issued_at,
            expires_at=expires_at,
        )
