"""Wire the token codec, ledger and :class:`AuthService` into the Flask app."""

from __future__ import annotations

from dataclasses import dataclass
from http import HTTPStatus

from flask import Flask

from authcore.core.config import TokenSettings, load_token_settings
from authcore.core.errors import as_problem, problem_response
from authcore.core.extensions import jwt
from authcore.infra.jwt.pyjwt_token_codec import JWTTokenCodec
from authcore.infra.sql.sqlalchemy_account_directory import SQLAlchemyAccountDirectory
from authcore.infra.sql.sqlalchemy_refresh_ledger import SQLAlchemyRefreshLedger
from authcore.services._shared.ports import (
    AccountDirectory,
    Clock,
    PasswordVerifier,
    RefreshLedger,
    SystemClock,
    WerkzeugPasswordVerifier,
)
from authcore.services.auth.dto import AuthTokenConfig
from authcore.services.auth.service import AuthService

EXTENSION_KEY = "authcore"


@dataclass(frozen=True, slots=True)
class AuthComponents:
    """Process-wide auth collaborators stored in ``app.extensions``."""

    settings: TokenSettings
    clock: Clock
    codec: JWTTokenCodec
    service: AuthService


def build_auth_service(
    settings: TokenSettings,
    *,
    clock: Clock | None = None,
    ledger: RefreshLedger | None = None,
    accounts: AccountDirectory | None = None,
    passwords: PasswordVerifier | None = None,
) -> AuthComponents:
    """
    Assemble an :class:`AuthService` from validated settings.

    Collaborators default to the production adapters (system clock,
    SQLAlchemy ledger and directory, Werkzeug password check).

    :raises ConfigurationError: Propagated from the codec for unusable keys.
    """
    clock = clock or SystemClock()
    codec = JWTTokenCodec.from_settings(settings, clock)
    service = AuthService(
        token_codec=codec,
        ledger=ledger or SQLAlchemyRefreshLedger(),
        accounts=accounts or SQLAlchemyAccountDirectory(),
        passwords=passwords or WerkzeugPasswordVerifier(),
        clock=clock,
        token_cfg=AuthTokenConfig(
            access_expires=settings.access_ttl,
            refresh_expires=settings.refresh_ttl,
        ),
    )
    return AuthComponents(settings=settings, clock=clock, codec=codec, service=service)


def _register_bearer_error_loaders() -> None:
    """Render flask-jwt-extended rejections on ``/me`` as problem+json 401s."""

    def _unauthorized(message: str):
        return problem_response(
            as_problem(status=HTTPStatus.UNAUTHORIZED, code="unauthorized", message=message)
        )

    @jwt.unauthorized_loader
    def _missing_token(reason: str):
        return _unauthorized("Missing bearer token")

    @jwt.invalid_token_loader
    def _invalid_token(reason: str):
        return _unauthorized("Invalid bearer token")

    @jwt.expired_token_loader
    def _expired_token(jwt_header, jwt_payload):
        return _unauthorized("Invalid bearer token")


def init_app(app: Flask, *, clock: Clock | None = None) -> AuthComponents:
    """
    Validate token settings and attach the auth components to ``app``.

    Fails fast: a missing, blank or short ``JWT_SECRET_KEY`` raises
    :class:`~authcore.core.config.ConfigurationError` before the app serves
    a single request.
    """
    settings = load_token_settings(app.config)
    components = build_auth_service(settings, clock=clock)
    app.extensions[EXTENSION_KEY] = components
    _register_bearer_error_loaders()
    return components


def get_auth_components(app: Flask) -> AuthComponents:
    return app.extensions[EXTENSION_KEY]
