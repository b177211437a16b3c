"""Unit tests for token settings loading and fail-fast startup."""

from __future__ import annotations

from datetime import timedelta

import pytest
from authcore.core import config as app_config
from authcore.core.config import (
    ConfigurationError,
    TokenSettings,
    env_bool,
    env_int,
    load_token_settings,
)
from authcore.factory import create_app

from tests.helpers.tokens import TEST_SECRET
from tests.helpers.utils import not_raises


def _config(**overrides):
    base = {
        "JWT_SECRET_KEY": TEST_SECRET,
        "JWT_ALGORITHM": "HS256",
        "JWT_ACCESS_TTL_SECONDS": 900,
        "JWT_REFRESH_TTL_SECONDS": 604800,
    }
    base.update(overrides)
    return base


def test_load_token_settings_happy_path():
    with not_raises(ConfigurationError):
        settings = load_token_settings(_config())

    assert settings.secret == TEST_SECRET
    assert settings.algorithm == "HS256"
    assert settings.access_ttl == timedelta(minutes=15)
    assert settings.refresh_ttl == timedelta(days=7)


@pytest.mark.parametrize("secret", [None, "", "    ", "short-secret"])
def test_unusable_secret_is_fatal(secret):
    with pytest.raises(ConfigurationError):
        load_token_settings(_config(JWT_SECRET_KEY=secret))


def test_missing_secret_key_is_fatal():
    cfg = _config()
    del cfg["JWT_SECRET_KEY"]
    with pytest.raises(ConfigurationError):
        load_token_settings(cfg)


@pytest.mark.parametrize("alg", ["none", "RS256", "HS512"])
def test_unsupported_algorithm_is_fatal(alg):
    with pytest.raises(ConfigurationError):
        load_token_settings(_config(JWT_ALGORITHM=alg))


@pytest.mark.parametrize("key", ["JWT_ACCESS_TTL_SECONDS", "JWT_REFRESH_TTL_SECONDS"])
def test_non_positive_ttl_is_fatal(key):
    with pytest.raises(ConfigurationError):
        load_token_settings(_config(**{key: 0}))


def test_repr_masks_secret():
    settings = TokenSettings(
        secret=TEST_SECRET,
        algorithm="HS256",
        access_ttl=timedelta(minutes=15),
        refresh_ttl=timedelta(days=7),
    )
    assert TEST_SECRET not in repr(settings)
    assert "***" in repr(settings)


def test_create_app_refuses_blank_secret():
    class BlankSecretConfig(app_config.TestingConfig):
        JWT_SECRET_KEY = "   "

    with pytest.raises(ConfigurationError):
        create_app(BlankSecretConfig)


def test_env_helpers(monkeypatch):
    monkeypatch.setenv("AUTHCORE_FLAG", "Yes")
    monkeypatch.setenv("AUTHCORE_NUM", "42")
    monkeypatch.setenv("AUTHCORE_BAD", "forty-two")

    assert env_bool("AUTHCORE_FLAG") is True
    assert env_bool("AUTHCORE_MISSING", default=True) is True
    assert env_int("AUTHCORE_NUM", 1) == 42
    assert env_int("AUTHCORE_MISSING", 7) == 7
    with pytest.raises(ConfigurationError):
        env_int("AUTHCORE_BAD", 1)
