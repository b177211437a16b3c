"""authcore: short-lived credential issuance and refresh-token rotation.

``from authcore import create_app`` is the entry point used by gunicorn and
the test-suite.
"""

from __future__ import annotations

from .factory import create_app

__version__ = "0.1.0"

__all__ = ["create_app", "__version__"]
