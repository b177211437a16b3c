from __future__ import annotations

from typing import Protocol

from werkzeug.security import check_password_hash, generate_password_hash

# Checked when the email is unknown so both login failures pay for one hash.
DUMMY_PASSWORD_HASH = generate_password_hash("authcore-unknown-account")


class PasswordVerifier(Protocol):
    """Port for comparing a plaintext password with a stored hash."""

    def matches(self, plaintext: str, stored_hash: str) -> bool: ...


class WerkzeugPasswordVerifier(PasswordVerifier):
    """Verifier backed by :func:`werkzeug.security.check_password_hash`."""

    def matches(self, plaintext: str, stored_hash: str) -> bool:
        if not stored_hash:
            return False
        try:
            # ``check_password_hash`` is not typed and returns ``Any``; coerce to bool for mypy.
            return bool(check_password_hash(stored_hash, plaintext))
        except UnicodeEncodeError:
            # Lone surrogates cannot be encoded, so no stored hash can match.
            return False
