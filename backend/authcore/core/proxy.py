"""Reverse-proxy header handling.

The client address recorded on refresh-token rows comes from
``request.remote_addr``; behind a proxy that is only correct once
:class:`~werkzeug.middleware.proxy_fix.ProxyFix` has rewritten it.
"""

from __future__ import annotations

from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix


def init_app(app: Flask) -> None:
    """Wrap the WSGI app in ``ProxyFix`` when ``USE_PROXYFIX`` is set.

    ``PROXY_TRUSTED_HOPS`` (default 1) is the number of proxies whose
    ``X-Forwarded-For``/``X-Forwarded-Proto`` values are trusted. Setting it to
    ``0`` disables the middleware as well.
    """
    hops = int(app.config.get("PROXY_TRUSTED_HOPS", 1))
    if not app.config.get("USE_PROXYFIX", True) or hops <= 0:
        return
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=hops, x_proto=hops)
