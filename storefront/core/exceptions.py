"""
Service error taxonomy.

Every error a service raises on purpose derives from ``ServiceError``. The
exception handlers in ``storefront.api.errors`` turn them into the error
envelope using the class's status code and error code.
"""

from typing import Any, Dict, Optional

from fastapi import status


class ServiceError(Exception):
    """Base class for errors that map onto an HTTP error response."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "INTERNAL_ERROR"
    default_message: str = "An unexpected error occurred"

    def __init__(self, message: Optional[str] = None, details: Any = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    @property
    def headers(self) -> Optional[Dict[str, str]]:
        return None


class ValidationError(ServiceError):
    """Malformed or missing input."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "VALIDATION_ERROR"
    default_message = "Validation failed"


class ConflictError(ServiceError):
    """Duplicate email or slug."""

    status_code = status.HTTP_409_CONFLICT
    code = "CONFLICT"
    default_message = "Resource already exists"


class NotFoundError(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"
    default_message = "Resource not found"


class UnauthorizedError(ServiceError):
    """Bad credentials or token. Messages stay generic."""

    status_code = status.HTTP_401_UNAUTHORIZED
    code = "UNAUTHORIZED"
    default_message = "Unauthorized"

    @property
    def headers(self) -> Optional[Dict[str, str]]:
        return {"WWW-Authenticate": "Bearer"}


class UpstreamUnavailableError(ServiceError):
    """The gateway got no response at all from a backend service."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "SERVICE_UNAVAILABLE"
    default_message = "Service is unavailable"


class InternalError(ServiceError):
    pass
