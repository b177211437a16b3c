"""Shared API helpers for request parsing and cross-cutting concerns."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from typing import Any, TypeVar

from flask import Response, current_app, jsonify, request
from flask_jwt_extended import verify_jwt_in_request

from authcore.core.auth import get_auth_components
from authcore.services import AuthService, RequestContext

F = TypeVar("F", bound=Callable[..., Any])

# Stored user agents are truncated to the column width
USER_AGENT_MAX_LENGTH = 512


def get_auth_service() -> AuthService:
    """Return the process-wide :class:`AuthService` built at startup."""

    return get_auth_components(current_app).service


def request_context() -> RequestContext:
    """Capture audit metadata (user agent, client address) from the request.

    ``remote_addr`` already reflects ``X-Forwarded-For`` when ``ProxyFix`` is
    enabled, so the header is not parsed here.
    """

    user_agent = request.headers.get("User-Agent") or None
    if user_agent is not None:
        user_agent = user_agent[:USER_AGENT_MAX_LENGTH]
    return RequestContext(user_agent=user_agent, ip_address=request.remote_addr or None)


def require_auth(func: F) -> F:
    """Ensure the request carries a valid JWT access token."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        verify_jwt_in_request(optional=False)
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def no_store(response: Response) -> Response:
    """Forbid caching of responses carrying credentials."""

    response.headers["Cache-Control"] = "no-store"
    response.headers["Pragma"] = "no-cache"
    return response


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            request_endpoint = getattr(request, "endpoint", None)
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request_endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]
