from __future__ import annotations

import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol


@dataclass(frozen=True, slots=True)
class AccountView:
    """
    Read-model of an account as seen by the authentication core.

    :ivar id: Stable account identifier.
    :ivar email: Login email, also used as the token subject.
    :ivar password_hash: Stored password hash (opaque to this core).
    :ivar roles: Ordered role names.
    :ivar active: Whether the account may authenticate.
    """

    id: int
    email: str
    password_hash: str
    roles: tuple[str, ...]
    active: bool = True


class AccountDirectory(Protocol):
    """Port for the account lookups the authentication core needs."""

    def find_by_email(self, email: str) -> AccountView | None: ...

    def get(self, account_id: int) -> AccountView | None: ...

    def record_login(self, account_id: int, at: datetime) -> None: ...


class InMemoryAccountDirectory(AccountDirectory):
    """Simple in-memory directory for unit tests."""

    def __init__(self, accounts: list[AccountView] | None = None) -> None:
        self._by_id: dict[int, AccountView] = {a.id: a for a in accounts or []}
        self.last_logins: dict[int, datetime] = {}
        self._lock = threading.Lock()

    def add(self, account: AccountView) -> AccountView:
        with self._lock:
            self._by_id[account.id] = account
        return account

    def find_by_email(self, email: str) -> AccountView | None:
        needle = email.strip().lower()
        with self._lock:
            return next((a for a in self._by_id.values() if a.email == needle), None)

    def get(self, account_id: int) -> AccountView | None:
        with self._lock:
            return self._by_id.get(account_id)

    def record_login(self, account_id: int, at: datetime) -> None:
        with self._lock:
            self.last_logins[account_id] = at
