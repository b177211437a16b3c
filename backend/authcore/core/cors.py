"""CORS configuration helper for the auth API."""

from __future__ import annotations

from flask import Flask
from flask_cors import CORS

EXPOSED_HEADERS = ["X-Request-ID"]
ALLOWED_HEADERS = ["Authorization", "Content-Type", "X-Request-ID"]


def init_app(app: Flask) -> None:
    """Configure CORS for ``/api/*`` from ``CORS_ORIGINS`` / ``CORS_MAX_AGE``.

    A blank or ``"*"`` origin list allows any origin. Tokens travel in the
    ``Authorization`` header and JSON bodies, never in cookies, so credentials
    support stays off.
    """
    raw_origins = app.config.get("CORS_ORIGINS", "")
    origins = [o.strip() for o in raw_origins.split(",") if o.strip()]
    wildcard = len(origins) == 0 or origins == ["*"]

    CORS(
        app,
        resources={r"/api/*": {"origins": "*" if wildcard else origins}},
        allow_headers=ALLOWED_HEADERS,
        expose_headers=EXPOSED_HEADERS,
        supports_credentials=False,
        max_age=app.config.get("CORS_MAX_AGE", 600),
    )
