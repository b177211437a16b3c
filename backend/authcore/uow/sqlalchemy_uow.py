"""
SQLAlchemy Unit of Work over the ``users`` and ``refresh_tokens`` tables.
"""

from __future__ import annotations

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from authcore.core.extensions import db
from authcore.repositories import RefreshTokenRepository, UserRepository
from authcore.uow.base import UnitOfWork


class SQLAlchemyUnitOfWork(UnitOfWork):
    """
    One transaction shared by the user and refresh-token repositories.

    The block commits when it exits cleanly, so a ledger write is durable
    before control returns to the caller. Any exception, including a failed
    commit, rolls the session back.

    :param session: Explicit session; defaults to the Flask-scoped ``db.session``.
    """

    def __init__(self, session: Session | None = None) -> None:
        self.session: Session = session if session is not None else db.session
        self.users = UserRepository(session=self.session)
        self.refresh_tokens = RefreshTokenRepository(session=self.session)

    def __enter__(self) -> SQLAlchemyUnitOfWork:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None:
            self.rollback()
            return
        try:
            self.commit()
        except SQLAlchemyError:
            self.rollback()
            raise

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()
