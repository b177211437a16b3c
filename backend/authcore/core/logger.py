"""JSON logging with per-request correlation ids.

Every record leaves the process as one JSON object on stdout. Records emitted
while a request is active carry its ``request_id``; the same id is echoed in
the ``X-Request-ID`` response header and in problem+json bodies.
"""

from __future__ import annotations

import json
import logging
import re
import sys
import time
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from flask import Flask, g, has_request_context, request

REQUEST_ID_HEADER = "X-Request-ID"
CORRELATION_HEADERS = ("X-Request-ID", "X-Correlation-ID")

# Inbound ids are echoed into logs and headers, so only short opaque tokens are trusted
_REQUEST_ID_RE = re.compile(r"^[A-Za-z0-9._:-]{1,128}$")

# ``extra=`` keys copied into the JSON payload when present on a record.
# Token strings and passwords are never passed as extras.
EXTRA_KEYS = (
    "endpoint",
    "method",
    "status",
    "elapsed_ms",
    "reason",
    "account_id",
    "record_id",
)

# Chatty third-party loggers capped at WARNING
QUIET_LOGGERS = ("werkzeug", "sqlalchemy.engine")

access_log = logging.getLogger("authcore.access")


class JSONFormatter(logging.Formatter):
    """Render a :class:`logging.LogRecord` as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        payload: dict[str, Any] = {
            "ts": created.isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", None),
        }
        payload.update({key: getattr(record, key) for key in EXTRA_KEYS if hasattr(record, key)})
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class RequestIdFilter(logging.Filter):
    """Stamp ``request_id`` on every record (``None`` outside requests)."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = ensure_request_id() if has_request_context() else None
        return True


def _inbound_request_id() -> str | None:
    for header in CORRELATION_HEADERS:
        value = (request.headers.get(header) or "").strip()
        if value and _REQUEST_ID_RE.match(value):
            return value
    return None


def ensure_request_id() -> str:
    """
    Return the id of the current request, assigning one on first use.

    A well-formed ``X-Request-ID`` / ``X-Correlation-ID`` header is adopted;
    anything else is replaced by a fresh UUID4. Outside a request a new UUID
    is returned on every call.
    """
    if not has_request_context():
        return str(uuid4())
    request_id = g.get("request_id")
    if request_id is None:
        request_id = _inbound_request_id() or str(uuid4())
        g.request_id = request_id
    return request_id


def configure_logging(level: str | int = "INFO") -> None:
    """Install the JSON stdout handler on the root logger at ``level``."""

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())
    handler.addFilter(RequestIdFilter())

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level.upper() if isinstance(level, str) else level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def init_app(app: Flask) -> None:
    """Assign request ids, echo them back and write one access line per request."""

    app.logger.addFilter(RequestIdFilter())

    @app.before_request
    def _start_request() -> None:
        ensure_request_id()
        g.request_started = time.perf_counter()

    @app.after_request
    def _finish_request(response):
        response.headers.setdefault(REQUEST_ID_HEADER, ensure_request_id())
        started = g.get("request_started")
        access_log.info(
            "request.completed",
            extra={
                "endpoint": request.endpoint,
                "method": request.method,
                "status": response.status_code,
                "elapsed_ms": round((time.perf_counter() - started) * 1000, 2) if started else None,
            },
        )
        return response


__all__ = ["configure_logging", "init_app", "ensure_request_id", "JSONFormatter", "RequestIdFilter"]
