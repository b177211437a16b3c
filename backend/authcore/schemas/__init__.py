"""Marshmallow schemas for request validation and response serialization."""

from __future__ import annotations

from .auth import LoginSchema, RefreshSchema, TokenPairSchema, WhoAmISchema

__all__ = [
    "LoginSchema",
    "RefreshSchema",
    "TokenPairSchema",
    "WhoAmISchema",
]
