"""Column mixins shared by the ``users`` and ``refresh_tokens`` tables."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Integer, func
from sqlalchemy.orm import Mapped, mapped_column


class PKMixin:
    """Integer surrogate key ``id`` assigned by the database."""

    id: Mapped[int] = mapped_column(Integer, primary_key=True)


class TimestampMixin:
    """
    Row bookkeeping timestamps.

    Both are filled by the database clock; the authentication core never reads
    them for expiry decisions (those use the injected clock).
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )


class ReprMixin:
    """
    ``<ClassName id=... field=...>`` representation.

    Subclasses list extra attributes in ``__repr_fields__``. Secret-bearing
    columns (password or token hashes) must never be listed.
    """

    __repr_fields__ = ()

    def __repr__(self) -> str:
        parts = [f"id={getattr(self, 'id', None)}"]
        parts.extend(f"{name}={getattr(self, name, None)!r}" for name in self.__repr_fields__)
        return f"<{type(self).__name__} {' '.join(parts)}>"
