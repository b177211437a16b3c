from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Protocol


@dataclass(frozen=True, slots=True)
class Claims:
    """
    Verified content of a bearer token.

    Access and refresh tokens share this shape; only the TTL used for
    ``expires_at`` differs.

    :ivar subject: Account identifier (email).
    :ivar roles: Ordered role names, possibly empty.
    :ivar jti: Per-issuance random identifier.
    :ivar issued_at: Issuance instant (UTC, whole seconds).
    :ivar expires_at: Expiry instant (UTC, whole seconds).
    """

    subject: str
    roles: tuple[str, ...]
    jti: str
    issued_at: datetime
    expires_at: datetime


class TokenCodec(Protocol):
    """Port for signing claim sets into compact tokens and verifying them back."""

    def issue(self, subject: str, roles: Sequence[str], ttl: timedelta) -> str:
        """
        Sign a fresh claim set.

        :param subject: Account identifier.
        :param roles: Ordered role names.
        :param ttl: Positive lifetime, whole seconds.
        :returns: Compact token string.
        """
        ...

    def verify(self, token: str) -> Claims:
        """
        Check signature, algorithm and expiry.

        :raises SignatureInvalidError: MAC mismatch or foreign algorithm.
        :raises TokenExpiredError: ``expires_at <= now``.
        :raises MalformedTokenError: Unparseable token or claim shape.
        """
        ...
