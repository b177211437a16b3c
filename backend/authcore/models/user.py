"""User model: the account identity that authenticates against the core."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import DateTime, Enum, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, validates
from werkzeug.security import generate_password_hash

from authcore.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin

# --- Domain Enums ---
UserRole = Enum("ADMIN", "EDITOR", "AUTHOR", name="user_role")

UserStatus = Enum("ACTIVE", "INACTIVE", "SUSPENDED", "DELETED", name="user_status")

ACTIVE = "ACTIVE"


class User(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Authentication identity.

    Fields
    ------
    email : str
        Login email and token subject. Stored normalized (lowercase, trimmed).
    password_hash : str
        Hashed password (write-only setter via ``password``).
    role : str
        Single account role; exposed to tokens as a one-element ``roles`` tuple.
    status : str
        Lifecycle state. Only ``ACTIVE`` accounts may log in or refresh.
    last_login_at : datetime | None
        Instant of the last successful login.
    """

    __tablename__ = "users"
    __repr_fields__ = ("email", "status")

    # Columns
    email: Mapped[str] = mapped_column(String(254), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(254), nullable=False)
    role: Mapped[str] = mapped_column(UserRole, nullable=False, default="AUTHOR")
    status: Mapped[str] = mapped_column(UserStatus, nullable=False, default=ACTIVE)
    last_login_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    # Constraints & indexes
    __table_args__ = (
        UniqueConstraint("email", name="uq_users_email"),
        Index("ix_users_email", "email"),
    )

    # -------------------- Derived --------------------
    @property
    def roles(self) -> tuple[str, ...]:
        """Ordered role names carried in access tokens."""
        return (self.role,) if self.role else ()

    @property
    def is_active(self) -> bool:
        return self.status == ACTIVE

    # -------------------- Password API --------------------
    @property
    def password(self) -> Any:  # pragma: no cover - explicit write-only contract
        """
        Disallow reading passwords.

        :raises AttributeError: Always, to ensure password is write-only.
        """
        raise AttributeError("Password is write-only.")

    @password.setter
    def password(self, raw: str) -> None:
        """
        Hash and set the password.

        :param raw: Plain text password to hash.
        :type raw: str
        """
        if not isinstance(raw, str) or not raw:
            raise ValueError("Password must be a non-empty string.")
        self.password_hash = generate_password_hash(raw)

    # -------------------- Validators --------------------
    @validates("email")
    def _normalize_email(self, key: str, value: str) -> str:
        """
        Normalize and validate email.

        :param key: Field name (``email``).
        :type key: str
        :param value: Email to normalize.
        :type value: str
        :returns: Normalized email (lowercased/trimmed).
        :rtype: str
        :raises ValueError: If email is missing or malformed.
        """
        if not value or not isinstance(value, str):
            raise ValueError("Email is required.")
        v = value.strip().lower()
        # Minimal sanity check; full validation happens at API layer.
        if "@" not in v or "." not in v.split("@")[-1]:
            raise ValueError("Email format looks invalid.")
        return v
