from __future__ import annotations

import threading
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Protocol

from authcore.services._shared.errors import ConflictError


@dataclass(frozen=True, slots=True)
class RefreshRecordView:
    """
    Read-model for a refresh-token ledger entry.

    :ivar id: Record identity.
    :ivar account_id: Owning account (reference only).
    :ivar token_hash: SHA-256 hex digest of the raw refresh token.
    :ivar issued_at: Creation instant (UTC).
    :ivar expires_at: Expiry copied from the verified token claims (UTC).
    :ivar revoked_at: Revocation instant, ``None`` while active.
    :ivar user_agent: Originating user agent (audit only).
    :ivar ip_address: Originating network address (audit only).
    """

    id: int
    account_id: int
    token_hash: str
    issued_at: datetime
    expires_at: datetime
    revoked_at: datetime | None = None
    user_agent: str | None = None
    ip_address: str | None = None

    @property
    def revoked(self) -> bool:
        return self.revoked_at is not None


class RefreshLedger(Protocol):
    """
    Persisted ledger of refresh tokens, keyed by token hash.

    ``revoke_if_active`` MUST be a single atomic conditional write: of two
    concurrent callers for the same record, exactly one gets ``True``.
    """

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
        Persist a new active record.

        :raises ConflictError: If ``token_hash`` already exists.
        :raises ValueError: If ``expires_at`` is not after ``issued_at``.
        """
        ...

    def find_by_hash(self, token_hash: str) -> RefreshRecordView | None:
        """Fetch a record by its token hash (if present)."""
        ...

    def revoke_if_active(self, record_id: int, now: datetime) -> bool:
        """
        Set ``revoked_at = now`` only if it is currently unset.

        :returns: ``True`` when this call performed the revocation.
        """
        ...


def ensure_valid_window(issued_at: datetime, expires_at: datetime) -> None:
    """Reject records whose expiry is not strictly after issuance."""
    if expires_at <= issued_at:
        raise ValueError("expires_at must be strictly after issued_at.")


class InMemoryRefreshLedger(RefreshLedger):
    """
    In-memory ledger with the same atomicity contract as the SQL adapter.

    .. note::
       A single lock guards every read-modify-write, which makes the
       conditional revoke a true compare-and-set across threads.
    """

    def __init__(self) -> None:
        self._by_id: dict[int, RefreshRecordView] = {}
        self._by_hash: dict[str, int] = {}
        self._seq = 0
        self._lock = threading.Lock()

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
        ensure_valid_window(issued_at, expires_at)
        with self._lock:
            if token_hash in self._by_hash:
                raise ConflictError("RefreshToken", "token hash already recorded")
            self._seq += 1
            record = RefreshRecordView(
                id=self._seq,
                account_id=account_id,
                token_hash=token_hash,
                issued_at=issued_at,
                expires_at=expires_at,
                user_agent=user_agent,
                ip_address=ip_address,
            )
            self._by_id[record.id] = record
            self._by_hash[token_hash] = record.id
            return record

    def find_by_hash(self, token_hash: str) -> RefreshRecordView | None:
        with self._lock:
            record_id = self._by_hash.get(token_hash)
            return self._by_id.get(record_id) if record_id is not None else None

    def revoke_if_active(self, record_id: int, now: datetime) -> bool:
        with self._lock:
            record = self._by_id.get(record_id)
            if record is None or record.revoked_at is not None:
                return False
            self._by_id[record_id] = replace(record, revoked_at=now)
            return True

    def records_for(self, account_id: int) -> list[RefreshRecordView]:
        """Snapshot of every record owned by ``account_id`` (test helper)."""
        with self._lock:
            return [r for r in self._by_id.values() if r.account_id == account_id]
