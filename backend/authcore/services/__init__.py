"""Service layer public API.

Callers import from :mod:`authcore.services` without knowing the internal
structure.

Re-exports
----------
- Base primitives (from ``authcore.services._shared.base``)
    * :class:`BaseService`

- Auth service (from ``authcore.services.auth``)
    * :class:`AuthService` and :func:`hash_token`
    * DTOs: :class:`LoginIn`, :class:`RefreshIn`, :class:`RequestContext`,
      :class:`TokenPairOut`, :class:`AuthTokenConfig`
"""

from __future__ import annotations

from ._shared.base import BaseService
from .auth.dto import AuthTokenConfig, LoginIn, RefreshIn, RequestContext, TokenPairOut
from .auth.service import AuthService, hash_token

__all__ = [
    # Base
    "BaseService",
    # Auth
    "AuthService",
    "hash_token",
    "AuthTokenConfig",
    "LoginIn",
    "RefreshIn",
    "RequestContext",
    "TokenPairOut",
]
