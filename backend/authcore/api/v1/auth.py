"""Authentication endpoints: login, refresh rotation and bearer echo."""

from __future__ import annotations

from flask import Blueprint, current_app, request
from flask_jwt_extended import get_jwt, get_jwt_identity

from authcore.api.deps import (
    get_auth_service,
    json_response,
    no_store,
    request_context,
    require_auth,
    timing,
)
from authcore.core.extensions import limiter
from authcore.schemas import LoginSchema, RefreshSchema, TokenPairSchema, WhoAmISchema
from authcore.services import LoginIn, RefreshIn
from authcore.services._shared.errors import ServiceError

bp = Blueprint("auth", __name__, url_prefix="/auth")

login_schema = LoginSchema()
refresh_schema = RefreshSchema()
token_schema = TokenPairSchema()
whoami_schema = WhoAmISchema()


def _login_rate_limit() -> str:
    return str(current_app.config.get("AUTH_LOGIN_RATE_LIMIT", "5 per minute"))


def _refresh_rate_limit() -> str:
    return str(current_app.config.get("AUTH_REFRESH_RATE_LIMIT", "30 per minute"))


@bp.post("/login")
@limiter.limit(_login_rate_limit)
@timing
def login():
    """Authenticate credentials and issue an access/refresh token pair."""

    data = login_schema.load(request.get_json(silent=True) or {})
    service = get_auth_service()
    try:
        pair = service.login(
            LoginIn(email=data["email"], password=data["password"]),
            request_context(),
        )
    except ServiceError as exc:
        raise service.translate_exceptions(exc) from exc
    return no_store(json_response({"data": token_schema.dump(pair)}))


@bp.post("/refresh")
@limiter.limit(_refresh_rate_limit)
@timing
def refresh():
    """Rotate a refresh token; the presented token is unusable afterwards."""

    data = refresh_schema.load(request.get_json(silent=True) or {})
    service = get_auth_service()
    try:
        pair = service.refresh(RefreshIn(refresh_token=data["refresh_token"]), request_context())
    except ServiceError as exc:
        raise service.translate_exceptions(exc) from exc
    return no_store(json_response({"data": token_schema.dump(pair)}))


@bp.get("/me")
@require_auth
@timing
def whoami():
    """Echo the subject and roles of the accepted access token."""

    claims = get_jwt()
    body = {"subject": get_jwt_identity(), "roles": list(claims.get("roles", []))}
    return json_response({"data": whoami_schema.dump(body)})
