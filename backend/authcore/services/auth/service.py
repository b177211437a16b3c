# authcore/services/auth/service.py
from __future__ import annotations

import hashlib
import logging
from datetime import datetime
from typing import NoReturn

from authcore.services._shared.base import BaseService
from authcore.services._shared.errors import (
    AccountDisabledError,
    InvalidCredentialsError,
    InvalidRefreshTokenError,
    TokenError,
)
from authcore.services._shared.ports import (
    DUMMY_PASSWORD_HASH,
    AccountDirectory,
    AccountView,
    Clock,
    PasswordVerifier,
    RefreshLedger,
    TokenCodec,
)
from authcore.services.auth.dto import (
    AuthTokenConfig,
    LoginIn,
    RefreshIn,
    RequestContext,
    TokenPairOut,
)

log = logging.getLogger(__name__)


def hash_token(raw_token: str) -> str:
    """
    One-way hash used as the ledger lookup key.

    :param raw_token: Raw token string as presented by the client.
    :returns: Lowercase SHA-256 hex digest (64 chars).
    """
    return hashlib.sha256(raw_token.encode("utf-8")).hexdigest()


class AuthService(BaseService):
    """
    Authentication lifecycle service (login / refresh with rotation).

    Every rejected request surfaces as one of two coarse errors,
    :class:`InvalidCredentialsError` or :class:`InvalidRefreshTokenError`.
    The precise reason is only logged.

    Refresh tokens are single use. Rotation revokes the presented record with
    a conditional write before a replacement pair is issued, so of two
    concurrent refreshes of the same token exactly one succeeds.
    """

    def __init__(
        self,
        *,
        token_codec: TokenCodec,
        ledger: RefreshLedger,
        accounts: AccountDirectory,
        passwords: PasswordVerifier,
        clock: Clock,
        token_cfg: AuthTokenConfig,
    ) -> None:
        """
        Initialize the service with its collaborators.

        :param token_codec: Signs and verifies bearer tokens.
        :param ledger: Persisted refresh-token records.
        :param accounts: Account lookup.
        :param passwords: Opaque password check.
        :param clock: Time source shared with the codec.
        :param token_cfg: Access/refresh lifetimes.
        """
        self.tokens = token_codec
        self.ledger = ledger
        self.accounts = accounts
        self.passwords = passwords
        self.clock = clock
        self.cfg = token_cfg

    # ------------------------------------------------------------------ #
    # Login
    # ------------------------------------------------------------------ #

    def login(self, dto: LoginIn, ctx: RequestContext | None = None) -> TokenPairOut:
        """
        Authenticate credentials and issue a fresh token pair.

        :param dto: Login input.
        :param ctx: Request metadata stored with the ledger record.
        :returns: Access/refresh token pair.
        :raises InvalidCredentialsError: Unknown email or wrong password.
        :raises AccountDisabledError: Correct credentials, account not active.
        """
        account = self.accounts.find_by_email(dto.email)
        stored_hash = account.password_hash if account is not None else DUMMY_PASSWORD_HASH
        password_ok = self.passwords.matches(dto.password, stored_hash)
        if account is None or not password_ok:
            # Same error for both causes; only the log tells them apart.
            log.info(
                "Login rejected",
                extra={"reason": "unknown_account" if account is None else "bad_password"},
            )
            raise InvalidCredentialsError()

        if not account.active:
            log.info("Login rejected", extra={"reason": "account_disabled", "account_id": account.id})
            raise AccountDisabledError()

        now = self.clock.now()
        self.accounts.record_login(account.id, now)
        pair = self._issue_pair(account, now=now, ctx=ctx or RequestContext())
        log.info("Login succeeded", extra={"account_id": account.id})
        return pair

    # ------------------------------------------------------------------ #
    # Refresh with rotation
    # ------------------------------------------------------------------ #

    def refresh(self, dto: RefreshIn, ctx: RequestContext | None = None) -> TokenPairOut:
        """
        Rotate a refresh token and emit a new token pair.

        Gates, in order: ledger lookup, not revoked, not expired, signature,
        subject matches the owning account, conditional revoke. The first
        failing gate rejects with :class:`InvalidRefreshTokenError`.

        :param dto: Refresh input.
        :param ctx: Request metadata stored with the new ledger record.
        :returns: Replacement access/refresh token pair.
        :raises InvalidRefreshTokenError: Any rejected refresh token.
        :raises AccountDisabledError: The owning account is no longer active.
        """
        raw = dto.refresh_token
        if not isinstance(raw, str) or not raw:
            self._reject("empty_token")
        if not raw.isascii():
            # A compact JWS is always ASCII; anything else cannot be ours.
            self._reject("malformed")

        record = self.ledger.find_by_hash(hash_token(raw))
        if record is None:
            self._reject("not_found")

        if record.revoked:
            # Replay of a consumed (or explicitly revoked) token.
            log.warning(
                "Refresh token replay detected",
                extra={"reason": "revoked", "record_id": record.id, "account_id": record.account_id},
            )
            raise InvalidRefreshTokenError()

        if record.expires_at <= self.clock.now():
            self._reject("expired", record_id=record.id)

        try:
            claims = self.tokens.verify(raw)
        except TokenError as exc:
            self._reject(f"token_{type(exc).__name__}", record_id=record.id)

        account = self.accounts.get(record.account_id)
        if account is None or account.email != claims.subject:
            self._reject("subject_mismatch", record_id=record.id)

        if not account.active:
            log.info("Refresh rejected", extra={"reason": "account_disabled", "account_id": account.id})
            raise AccountDisabledError()

        now = self.clock.now()
        if not self.ledger.revoke_if_active(record.id, now):
            # Another caller rotated this record between our checks and now.
            self._reject("lost_race", record_id=record.id)

        pair = self._issue_pair(account, now=now, ctx=ctx or RequestContext())
        log.info("Refresh token rotated", extra={"account_id": account.id, "record_id": record.id})
        return pair

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    def _issue_pair(self, account: AccountView, *, now: datetime, ctx: RequestContext) -> TokenPairOut:
        """Issue access + refresh tokens and persist the refresh record."""
        access = self.tokens.issue(account.email, account.roles, self.cfg.access_expires)
        refresh = self.tokens.issue(account.email, (), self.cfg.refresh_expires)

        # expires_at comes from the signed claims, never recomputed
        refresh_claims = self.tokens.verify(refresh)
        self.ledger.create(
            account_id=account.id,
            token_hash=hash_token(refresh),
            issued_at=now,
            expires_at=refresh_claims.expires_at,
            user_agent=ctx.user_agent,
            ip_address=ctx.ip_address,
        )
        return TokenPairOut(
            access_token=access,
            refresh_token=refresh,
            expires_in=self.cfg.access_expires_seconds,
        )

    @staticmethod
    def _reject(reason: str, **extra: object) -> NoReturn:
        log.info("Refresh rejected", extra={"reason": reason, **extra})
        raise InvalidRefreshTokenError()
