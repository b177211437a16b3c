# comments in English; reST docstrings
from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime

from sqlalchemy.exc import IntegrityError

from authcore.models.refresh_token import RefreshToken
from authcore.services._shared.errors import ConflictError, violates
from authcore.services._shared.ports import RefreshLedger, RefreshRecordView
from authcore.services._shared.ports.refresh_ledger import ensure_valid_window
from authcore.uow import SQLAlchemyUnitOfWork

TOKEN_HASH_CONSTRAINT = "uq_refresh_tokens_token_hash"


def as_utc(value: datetime | None) -> datetime | None:
    """Label naive datetimes (SQLite drops tzinfo) as UTC."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)


def to_view(row: RefreshToken) -> RefreshRecordView:
    return RefreshRecordView(
        id=row.id,
        account_id=row.user_id,
        token_hash=row.token_hash,
        issued_at=as_utc(row.issued_at),
        expires_at=as_utc(row.expires_at),
        revoked_at=as_utc(row.revoked_at),
        user_agent=row.user_agent,
        ip_address=row.ip_address,
    )


class SQLAlchemyRefreshLedger(RefreshLedger):
    """
    Relational refresh-token ledger.

    Every operation runs in its own Unit of Work and is committed before the
    call returns, so a successful ``revoke_if_active`` is durable before the
    service issues the replacement pair.

    :param uow_factory: Zero-argument callable returning a fresh UoW.
    """

    def __init__(self, uow_factory: Callable[[], SQLAlchemyUnitOfWork] = SQLAlchemyUnitOfWork) -> None:
        self._uow_factory = uow_factory

    def create(
        self,
        *,
        account_id: int,
        token_hash: str,
        issued_at: datetime,
        expires_at: datetime,
        user_agent: str | None = None,
        ip_address: str | None = None,
    ) -> RefreshRecordView:
        """
        Insert a new active row.

        :raises ConflictError: The hash is already recorded.
        :raises ValueError: ``expires_at`` is not after ``issued_at``.
        """
        ensure_valid_window(issued_at, expires_at)
        try:
            with self._uow_factory() as uow:
                row = uow.refresh_tokens.add(
                    RefreshToken(
                        user_id=account_id,
                        token_hash=token_hash,
                        issued_at=issued_at,
                        expires_at=expires_at,
                        user_agent=user_agent,
                        ip_address=ip_address,
                    )
                )
                view = to_view(row)
        except IntegrityError as exc:
            if violates(exc, TOKEN_HASH_CONSTRAINT, column="refresh_tokens.token_hash"):
                raise ConflictError("RefreshToken", "token hash already recorded") from exc
            raise
        return view

    def find_by_hash(self, token_hash: str) -> RefreshRecordView | None:
        with self._uow_factory() as uow:
            row = uow.refresh_tokens.get_by_hash(token_hash)
            return to_view(row) if row is not None else None

    def revoke_if_active(self, record_id: int, now: datetime) -> bool:
        """Conditional revoke; ``True`` only for the caller that flipped the row."""
        with self._uow_factory() as uow:
            return uow.refresh_tokens.revoke_if_active(record_id, now)
