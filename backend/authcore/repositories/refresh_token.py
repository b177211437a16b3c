"""Refresh-token repository: lookup by hash and conditional revocation."""

from __future__ import annotations

from datetime import datetime
from typing import cast

from sqlalchemy import select, update

from authcore.models.refresh_token import RefreshToken
from authcore.repositories.base import BaseRepository


class RefreshTokenRepository(BaseRepository[RefreshToken]):
    """Persistence-only repository for :class:`RefreshToken` rows."""

    model = RefreshToken

    def get_by_hash(self, token_hash: str) -> RefreshToken | None:
        """Return the row whose ``token_hash`` equals ``token_hash``.

        :param token_hash: 64-char hex digest of the raw token.
        :type token_hash: str
        :returns: Matching row or ``None``.
        :rtype: RefreshToken | None
        """
        stmt = select(RefreshToken).where(RefreshToken.token_hash == token_hash)
        result = self.session.execute(stmt).scalars().first()
        return cast(RefreshToken | None, result)

    def revoke_if_active(self, record_id: int, now: datetime) -> bool:
        """
        Set ``revoked_at`` only if the row is still active.

        Issued as a single ``UPDATE ... WHERE revoked_at IS NULL`` so that of
        any number of concurrent callers for one row, exactly one sees a
        non-zero row count.

        :param record_id: Primary key of the row to revoke.
        :type record_id: int
        :param now: Revocation instant.
        :type now: datetime
        :returns: ``True`` iff this call performed the revocation.
        :rtype: bool
        """
        stmt = (
            update(RefreshToken)
            .where(RefreshToken.id == record_id, RefreshToken.revoked_at.is_(None))
            .values(revoked_at=now)
            .execution_options(synchronize_session=False)
        )
        result = self.session.execute(stmt)
        return result.rowcount == 1
