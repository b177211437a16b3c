"""
authcore.services._shared.ports
===============================

Collection of *ports* (hexagonal interfaces) that define the contracts for
token issuance and refresh rotation.

These ports decouple the service layer from concrete implementations of
signing, persistence, password hashing and time.

Modules
-------
- :mod:`clock`:
    Defines :class:`~.Clock` with :class:`~.SystemClock` and the test-friendly
    :class:`~.ManualClock`.

- :mod:`token_codec`:
    Defines :class:`~.TokenCodec` and the verified :class:`~.Claims` shape.

- :mod:`refresh_ledger`:
    Defines :class:`~.RefreshLedger`, :class:`~.RefreshRecordView` and the
    thread-safe :class:`~.InMemoryRefreshLedger`.

- :mod:`account_directory`:
    Defines :class:`~.AccountDirectory`, :class:`~.AccountView` and
    :class:`~.InMemoryAccountDirectory`.

- :mod:`password_verifier`:
    Defines :class:`~.PasswordVerifier` and :class:`~.WerkzeugPasswordVerifier`.

Design Notes
------------
Concrete adapters (PyJWT, SQLAlchemy) implement these interfaces under
``authcore.infra``.
"""

from __future__ import annotations

from .account_directory import AccountDirectory, AccountView, InMemoryAccountDirectory
from .clock import Clock, ManualClock, SystemClock
from .password_verifier import DUMMY_PASSWORD_HASH, PasswordVerifier, WerkzeugPasswordVerifier
from .refresh_ledger import InMemoryRefreshLedger, RefreshLedger, RefreshRecordView

# Re-export core interfaces for clean imports
from .token_codec import Claims, TokenCodec

__all__ = [
    "AccountDirectory",
    "AccountView",
    "InMemoryAccountDirectory",
    "Clock",
    "SystemClock",
    "ManualClock",
    "DUMMY_PASSWORD_HASH",
    "PasswordVerifier",
    "WerkzeugPasswordVerifier",
    "RefreshLedger",
    "RefreshRecordView",
    "InMemoryRefreshLedger",
    "TokenCodec",
    "Claims",
]
