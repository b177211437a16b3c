# comments in English; reST docstrings
from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

from authcore.models.user import User
from authcore.services._shared.ports import AccountDirectory, AccountView
from authcore.uow import SQLAlchemyUnitOfWork


def to_account_view(user: User) -> AccountView:
    return AccountView(
        id=user.id,
        email=user.email,
        password_hash=user.password_hash,
        roles=user.roles,
        active=user.is_active,
    )


class SQLAlchemyAccountDirectory(AccountDirectory):
    """
    Account lookups backed by the ``users`` table.

    :param uow_factory: Zero-argument callable returning a fresh UoW.
    """

    def __init__(self, uow_factory: Callable[[], SQLAlchemyUnitOfWork] = SQLAlchemyUnitOfWork) -> None:
        self._uow_factory = uow_factory

    def find_by_email(self, email: str) -> AccountView | None:
        with self._uow_factory() as uow:
            user = uow.users.get_by_email(email)
            return to_account_view(user) if user is not None else None

    def get(self, account_id: int) -> AccountView | None:
        with self._uow_factory() as uow:
            user = uow.users.get(account_id)
            return to_account_view(user) if user is not None else None

    def record_login(self, account_id: int, at: datetime) -> None:
        with self._uow_factory() as uow:
            uow.users.touch_last_login(account_id, at)
