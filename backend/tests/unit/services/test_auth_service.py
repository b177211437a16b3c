# tests/unit/services/test_auth_service.py
from __future__ import annotations

import logging
from dataclasses import replace
from datetime import timedelta

import jwt
import pytest
from authcore.services._shared.errors import (
    AccountDisabledError,
    InvalidCredentialsError,
    InvalidRefreshTokenError,
)
from authcore.services._shared.ports import (
    DUMMY_PASSWORD_HASH,
    AccountView,
    InMemoryAccountDirectory,
    InMemoryRefreshLedger,
    WerkzeugPasswordVerifier,
)
from authcore.services.auth.dto import (
    AuthTokenConfig,
    LoginIn,
    RefreshIn,
    RequestContext,
)
from authcore.services.auth.service import AuthService, hash_token
from werkzeug.security import generate_password_hash

PASSWORD = "correct horse battery staple"
ALICE = AccountView(
    id=1,
    email="alice@example.com",
    password_hash=generate_password_hash(PASSWORD),
    roles=("ADMIN", "EDITOR"),
)
BOB = AccountView(
    id=2,
    email="bob@example.com",
    password_hash=generate_password_hash("bobs-password"),
    roles=("AUTHOR",),
)
SERVICE_LOGGER = "authcore.services.auth.service"


# ------------------------------ Fixtures ----------------------------------- #


@pytest.fixture()
def ledger() -> InMemoryRefreshLedger:
    return InMemoryRefreshLedger()


@pytest.fixture()
def accounts() -> InMemoryAccountDirectory:
    return InMemoryAccountDirectory([ALICE, BOB])


@pytest.fixture()
def token_cfg(token_settings) -> AuthTokenConfig:
    return AuthTokenConfig(
        access_expires=token_settings.access_ttl,
        refresh_expires=token_settings.refresh_ttl,
    )


@pytest.fixture()
def svc(codec, ledger, accounts, clock, token_cfg) -> AuthService:
    return AuthService(
        token_codec=codec,
        ledger=ledger,
        accounts=accounts,
        passwords=WerkzeugPasswordVerifier(),
        clock=clock,
        token_cfg=token_cfg,
    )


def _login(svc: AuthService, account: AccountView = ALICE, password: str = PASSWORD):
    return svc.login(LoginIn(email=account.email, password=password))


# ------------------------------- Login ------------------------------------- #


class TestLogin:
    def test_issues_pair_and_records_refresh_token(self, svc, codec, ledger):
        pair = _login(svc)

        assert pair.token_type == "Bearer"
        assert pair.expires_in == 900

        access = codec.verify(pair.access_token)
        assert access.subject == ALICE.email
        assert access.roles == ("ADMIN", "EDITOR")

        refresh = codec.verify(pair.refresh_token)
        assert refresh.subject == ALICE.email
        assert refresh.roles == ()
        assert refresh.expires_at - refresh.issued_at == timedelta(days=7)

        [record] = ledger.records_for(ALICE.id)
        assert record.token_hash == hash_token(pair.refresh_token)
        assert record.expires_at == refresh.expires_at
        assert record.revoked is False

    def test_ledger_stores_only_the_hash(self, svc, ledger):
        pair = _login(svc)

        assert ledger.find_by_hash(pair.refresh_token) is None
        record = ledger.find_by_hash(hash_token(pair.refresh_token))
        assert record is not None
        assert pair.refresh_token not in repr(record)

    def test_request_context_is_recorded(self, svc, ledger):
        ctx = RequestContext(user_agent="Mozilla/5.0 (X11)", ip_address="192.0.2.10")

        svc.login(LoginIn(email=ALICE.email, password=PASSWORD), ctx)

        [record] = ledger.records_for(ALICE.id)
        assert record.user_agent == "Mozilla/5.0 (X11)"
        assert record.ip_address == "192.0.2.10"

    def test_records_last_login(self, svc, accounts, clock):
        _login(svc)
        assert accounts.last_logins[ALICE.id] == clock.now()

    def test_unknown_email_and_wrong_password_are_indistinguishable(self, svc, ledger, caplog):
        caplog.set_level(logging.INFO, logger=SERVICE_LOGGER)

        with pytest.raises(InvalidCredentialsError) as unknown:
            svc.login(LoginIn(email="ghost@example.com", password=PASSWORD))
        with pytest.raises(InvalidCredentialsError) as wrong:
            svc.login(LoginIn(email=ALICE.email, password="nope"))

        assert type(unknown.value) is type(wrong.value)
        assert str(unknown.value) == str(wrong.value)
        assert ledger.records_for(ALICE.id) == []

        reasons = [getattr(r, "reason", None) for r in caplog.records]
        assert "unknown_account" in reasons
        assert "bad_password" in reasons

    def test_password_never_appears_in_logs(self, svc, caplog):
        caplog.set_level(logging.DEBUG)
        with pytest.raises(InvalidCredentialsError):
            svc.login(LoginIn(email=ALICE.email, password="leaky-secret-value"))

        assert "leaky-secret-value" not in caplog.text

    def test_unencodable_password_fails_like_a_wrong_one(self, svc):
        with pytest.raises(InvalidCredentialsError) as known:
            svc.login(LoginIn(email=ALICE.email, password="\ud800"))
        with pytest.raises(InvalidCredentialsError) as unknown:
            svc.login(LoginIn(email="ghost@example.com", password="\ud800"))

        assert str(known.value) == str(unknown.value)

    def test_unknown_email_still_checks_a_password(self, codec, ledger, accounts, clock, token_cfg):
        checked = []

        class RecordingVerifier(WerkzeugPasswordVerifier):
            def matches(self, plaintext, stored_hash):
                checked.append(stored_hash)
                return super().matches(plaintext, stored_hash)

        svc = AuthService(
            token_codec=codec,
            ledger=ledger,
            accounts=accounts,
            passwords=RecordingVerifier(),
            clock=clock,
            token_cfg=token_cfg,
        )

        with pytest.raises(InvalidCredentialsError):
            svc.login(LoginIn(email="ghost@example.com", password=PASSWORD))

        assert checked == [DUMMY_PASSWORD_HASH]

    def test_disabled_account_is_forbidden(self, svc, accounts, ledger):
        accounts.add(replace(ALICE, active=False))

        with pytest.raises(AccountDisabledError):
            _login(svc)
        assert ledger.records_for(ALICE.id) == []

    def test_disabled_account_with_wrong_password_reveals_nothing(self, svc, accounts):
        accounts.add(replace(ALICE, active=False))

        with pytest.raises(InvalidCredentialsError):
            _login(svc, password="wrong")

    def test_email_lookup_ignores_case(self, svc):
        pair = svc.login(LoginIn(email="ALICE@Example.com", password=PASSWORD))
        assert pair.access_token


# ------------------------------ Refresh ------------------------------------ #


class TestRefresh:
    def test_rotation_revokes_old_and_records_new(self, svc, ledger, codec, clock):
        first = _login(svc)
        clock.advance(timedelta(minutes=5))

        second = svc.refresh(RefreshIn(refresh_token=first.refresh_token))

        assert second.refresh_token != first.refresh_token
        assert second.access_token != first.access_token
        old = ledger.find_by_hash(hash_token(first.refresh_token))
        new = ledger.find_by_hash(hash_token(second.refresh_token))
        assert old.revoked_at == clock.now()
        assert new.revoked is False
        assert new.issued_at == clock.now()
        assert codec.verify(second.access_token).roles == ALICE.roles

    def test_replay_of_rotated_token_is_rejected(self, svc, caplog):
        first = _login(svc)
        svc.refresh(RefreshIn(refresh_token=first.refresh_token))
        caplog.set_level(logging.WARNING, logger=SERVICE_LOGGER)

        with pytest.raises(InvalidRefreshTokenError):
            svc.refresh(RefreshIn(refresh_token=first.refresh_token))

        assert any(getattr(r, "reason", None) == "revoked" for r in caplog.records)

    def test_chain_of_rotations(self, svc, ledger):
        pair = _login(svc)
        seen = {pair.refresh_token}
        for _ in range(3):
            pair = svc.refresh(RefreshIn(refresh_token=pair.refresh_token))
            seen.add(pair.refresh_token)

        assert len(seen) == 4
        records = ledger.records_for(ALICE.id)
        assert sum(1 for r in records if not r.revoked) == 1

    @pytest.mark.parametrize("raw", ["", "garbage", "a.b.c"])
    def test_unknown_tokens_are_rejected(self, svc, raw):
        with pytest.raises(InvalidRefreshTokenError):
            svc.refresh(RefreshIn(refresh_token=raw))

    @pytest.mark.parametrize("raw", ["\ud800", "tokén.a.b"])
    def test_non_ascii_tokens_are_rejected_as_malformed(self, svc, caplog, raw):
        caplog.set_level(logging.INFO, logger=SERVICE_LOGGER)

        with pytest.raises(InvalidRefreshTokenError):
            svc.refresh(RefreshIn(refresh_token=raw))

        assert any(getattr(r, "reason", None) == "malformed" for r in caplog.records)

    def test_all_refresh_rejections_share_one_message(self, svc, clock):
        pair = _login(svc)
        svc.refresh(RefreshIn(refresh_token=pair.refresh_token))

        with pytest.raises(InvalidRefreshTokenError) as replay:
            svc.refresh(RefreshIn(refresh_token=pair.refresh_token))
        with pytest.raises(InvalidRefreshTokenError) as unknown:
            svc.refresh(RefreshIn(refresh_token="never-issued"))

        assert str(replay.value) == str(unknown.value)

    def test_expiry_boundary(self, svc, clock):
        pair = _login(svc)

        clock.advance(timedelta(days=7) - timedelta(seconds=1))
        rotated = svc.refresh(RefreshIn(refresh_token=pair.refresh_token))

        clock.advance(timedelta(days=7))
        with pytest.raises(InvalidRefreshTokenError):
            svc.refresh(RefreshIn(refresh_token=rotated.refresh_token))

    def test_token_is_expired_exactly_at_expires_at(self, svc, clock, caplog):
        pair = _login(svc)
        clock.advance(timedelta(days=7))
        caplog.set_level(logging.INFO, logger=SERVICE_LOGGER)

        with pytest.raises(InvalidRefreshTokenError):
            svc.refresh(RefreshIn(refresh_token=pair.refresh_token))

        assert any(getattr(r, "reason", None) == "expired" for r in caplog.records)

    def test_token_signed_with_another_key_is_rejected(self, svc, ledger, clock):
        forged = jwt.encode(
            {"sub": ALICE.email, "jti": "x", "iat": 1704067200, "exp": 1704672000},
            "some-other-secret-that-is-long-enough-000",
            algorithm="HS256",
        )
        ledger.create(
            account_id=ALICE.id,
            token_hash=hash_token(forged),
            issued_at=clock.now(),
            expires_at=clock.now() + timedelta(days=7),
        )

        with pytest.raises(InvalidRefreshTokenError):
            svc.refresh(RefreshIn(refresh_token=forged))

    def test_subject_mismatch_is_rejected(self, svc, codec, ledger, clock, caplog):
        # A valid token for Bob recorded against Alice's account.
        token = codec.issue(BOB.email, (), timedelta(days=7))
        record = ledger.create(
            account_id=ALICE.id,
            token_hash=hash_token(token),
            issued_at=clock.now(),
            expires_at=codec.verify(token).expires_at,
        )
        caplog.set_level(logging.INFO, logger=SERVICE_LOGGER)

        with pytest.raises(InvalidRefreshTokenError):
            svc.refresh(RefreshIn(refresh_token=token))

        assert any(getattr(r, "reason", None) == "subject_mismatch" for r in caplog.records)
        assert ledger.find_by_hash(record.token_hash).revoked is False

    def test_account_gone_is_rejected(self, svc, codec, ledger, clock):
        token = codec.issue("carol@example.com", (), timedelta(days=7))
        ledger.create(
            account_id=99,
            token_hash=hash_token(token),
            issued_at=clock.now(),
            expires_at=codec.verify(token).expires_at,
        )

        with pytest.raises(InvalidRefreshTokenError):
            svc.refresh(RefreshIn(refresh_token=token))

    def test_disabled_account_cannot_refresh(self, svc, accounts, ledger):
        pair = _login(svc)
        accounts.add(replace(ALICE, active=False))

        with pytest.raises(AccountDisabledError):
            svc.refresh(RefreshIn(refresh_token=pair.refresh_token))
        assert ledger.find_by_hash(hash_token(pair.refresh_token)).revoked is False

    def test_request_context_is_recorded_on_rotation(self, svc, ledger):
        pair = _login(svc)
        ctx = RequestContext(user_agent="curl/8.4.0", ip_address="2001:db8::1")

        rotated = svc.refresh(RefreshIn(refresh_token=pair.refresh_token), ctx)

        record = ledger.find_by_hash(hash_token(rotated.refresh_token))
        assert record.user_agent == "curl/8.4.0"
        assert record.ip_address == "2001:db8::1"


# ----------------------------- Lost race ----------------------------------- #


class _InterleavingCodec:
    """
    Codec wrapper that runs a competing refresh the first time ``target`` is
    verified, after the outer call has passed its ledger checks.
    """

    def __init__(self, inner, target: str) -> None:
        self.inner = inner
        self.target = target
        self.competitor = None
        self.competitor_result = None
        self._fired = False

    def issue(self, subject, roles, ttl):
        return self.inner.issue(subject, roles, ttl)

    def verify(self, token):
        if token == self.target and not self._fired:
            self._fired = True
            self.competitor_result = self.competitor()
        return self.inner.verify(token)


def test_loser_of_interleaved_refresh_is_rejected(codec, ledger, accounts, clock, token_cfg):
    base = AuthService(
        token_codec=codec,
        ledger=ledger,
        accounts=accounts,
        passwords=WerkzeugPasswordVerifier(),
        clock=clock,
        token_cfg=token_cfg,
    )
    pair = _login(base)

    racer = _InterleavingCodec(codec, pair.refresh_token)
    svc = AuthService(
        token_codec=racer,
        ledger=ledger,
        accounts=accounts,
        passwords=WerkzeugPasswordVerifier(),
        clock=clock,
        token_cfg=token_cfg,
    )
    racer.competitor = lambda: svc.refresh(RefreshIn(refresh_token=pair.refresh_token))

    with pytest.raises(InvalidRefreshTokenError):
        svc.refresh(RefreshIn(refresh_token=pair.refresh_token))

    winner = racer.competitor_result
    assert winner is not None
    active = [r for r in ledger.records_for(ALICE.id) if not r.revoked]
    assert [r.token_hash for r in active] == [hash_token(winner.refresh_token)]
