# authcore/services/_shared/base.py
from __future__ import annotations

from authcore.core import errors as api_errors
from authcore.services._shared.errors import (
    AccountDisabledError,
    ConflictError,
    InvalidCredentialsError,
    InvalidRefreshTokenError,
    ServiceError,
)


class BaseService:
    """
    Base class for application services.

    Responsibilities
    ----------------
    * Centralize translation of service errors into API errors.
    * Keep services thin, orchestration-only, no web/ORM leakage.

    Notes
    -----
    - Services never touch the global session; persistence goes through ports
      whose SQL adapters open their own Unit of Work.
    """

    # -------------------------- Error handling ------------------------------

    def translate_exceptions(self, exc: Exception) -> Exception:
        """
        Map domain/service-level errors to API-level (HTTP) errors.

        :param exc: Exception raised within the service.
        :type exc: Exception
        :returns: Translated exception ready to be re-raised.
        :rtype: Exception
        """
        # --- Authentication outcomes -----------------------------------------
        if isinstance(exc, (InvalidCredentialsError, InvalidRefreshTokenError)):
            # → 401 Unauthorized, message is already uniform per operation
            return api_errors.Unauthorized(str(exc))

        if isinstance(exc, AccountDisabledError):
            # → 403 Forbidden
            return api_errors.Forbidden(str(exc))

        # --- Persistence -----------------------------------------------------
        if isinstance(exc, ConflictError):
            return api_errors.Conflict(str(exc))

        # Any other ServiceError subclass → 400 Bad Request
        if isinstance(exc, ServiceError):
            return api_errors.APIError(
                message=str(exc),
                status_code=400,
                code="bad_request",
            )

        # Fallback: return untouched (will bubble up to Flask handler)
        return exc
