"""Refresh-token ledger entry."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from authcore.core.extensions import db

from .base import PKMixin, ReprMixin

if TYPE_CHECKING:
    from .user import User


class RefreshToken(PKMixin, ReprMixin, db.Model):
    """
    One issued refresh token, identified by the SHA-256 hash of its raw value.

    The raw token is never stored. Rows are created once (login or rotation),
    updated once (``revoked_at``) and never deleted by the application.

    Fields
    ------
    user_id : int
        Owning account (reference only).
    token_hash : str
        64-char hex digest, unique across the table.
    issued_at : datetime
        Creation instant.
    expires_at : datetime
        Expiry copied from the verified token claims.
    revoked_at : datetime | None
        Set exactly once when the token is consumed; ``NULL`` while active.
    user_agent, ip_address : str | None
        Request metadata kept for audit only.
    """

    __tablename__ = "refresh_tokens"
    __repr_fields__ = ("user_id", "expires_at", "revoked_at")

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    token_hash: Mapped[str] = mapped_column(String(64), nullable=False)
    issued_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    revoked_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    user_agent: Mapped[str | None] = mapped_column(String(512))
    ip_address: Mapped[str | None] = mapped_column(String(45))

    __table_args__ = (
        UniqueConstraint("token_hash", name="uq_refresh_tokens_token_hash"),
        Index("ix_refresh_tokens_user_id", "user_id"),
        CheckConstraint("expires_at > issued_at", name="expires_after_issue"),
    )

    user: Mapped[User] = relationship("User")
