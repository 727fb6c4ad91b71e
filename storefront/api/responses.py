"""
Standardized API response envelope.

Every endpoint answers with ``{success, message, data?, metadata}``; errors
replace ``data`` with ``error: {code, details?}``.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Generic, Optional, TypeVar

from fastapi import status
from pydantic import Field

from storefront.api.middleware import get_request_id
from storefront.core.config import settings
from storefront.schemas.base import CamelModel

# Type variable for generic response models
T = TypeVar("T")


class ResponseMetadata(CamelModel):
    """Metadata attached to every response."""

    timestamp: str = Field(..., description="ISO 8601 timestamp of the response")
    version: str = Field(..., description="API version")
    request_id: Optional[str] = Field(None, description="Correlation ID of the request")


class ErrorDetail(CamelModel):
    code: str = Field(..., description="Machine-readable error code")
    details: Optional[Any] = Field(None, description="Additional error details")


class ApiResponse(CamelModel, Generic[T]):
    """Successful response envelope."""

    success: bool = Field(True, description="Indicates if the request was successful")
    message: str = Field(..., description="Human-readable message describing the result")
    data: Optional[T] = Field(None, description="The actual data payload")
    metadata: ResponseMetadata


class ErrorResponseModel(CamelModel):
    """Error response envelope."""

    success: bool = Field(False, description="Always false for errors")
    message: str = Field(..., description="Human-readable error message")
    error: ErrorDetail
    metadata: ResponseMetadata


def build_metadata() -> ResponseMetadata:
    return ResponseMetadata(
        timestamp=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        version=settings.VERSION,
        request_id=get_request_id() or None,
    )


def success_response(message: str, data: Any = None) -> ApiResponse[Any]:
    return ApiResponse[Any](success=True, message=message, data=data, metadata=build_metadata())


def error_response(message: str, code: str, details: Any = None) -> Dict[str, Any]:
    """Serialized error envelope, ready for a ``JSONResponse``."""
    envelope = ErrorResponseModel(
        success=False,
        message=message,
        error=ErrorDetail(code=code, details=details),
        metadata=build_metadata(),
    )
    return envelope.model_dump(mode="json", by_alias=True, exclude_none=True)


# Export HTTP status codes for easier route definitions
HTTP_200_OK = status.HTTP_200_OK
HTTP_201_CREATED = status.HTTP_201_CREATED
HTTP_400_BAD_REQUEST = status.HTTP_400_BAD_REQUEST
HTTP_401_UNAUTHORIZED = status.HTTP_401_UNAUTHORIZED
HTTP_404_NOT_FOUND = status.HTTP_404_NOT_FOUND
HTTP_409_CONFLICT = status.HTTP_409_CONFLICT
HTTP_500_INTERNAL_SERVER_ERROR = status.HTTP_500_INTERNAL_SERVER_ERROR
HTTP_503_SERVICE_UNAVAILABLE = status.HTTP_503_SERVICE_UNAVAILABLE


class Tags:
    """API route tags for documentation grouping."""

    HEALTH = "Health"
    AUTH = "Authentication"
    CATEGORIES = "Categories"
    ITEMS = "Items"
    GATEWAY = "Gateway"


default_error_responses: Dict[int | str, Dict[str, Any]] = {
    HTTP_400_BAD_REQUEST: {
        "model": ErrorResponseModel,
        "description": "Bad Request – Invalid input",
    },
    HTTP_404_NOT_FOUND: {
        "model": ErrorResponseModel,
        "description": "Not Found – The resource does not exist",
    },
    HTTP_500_INTERNAL_SERVER_ERROR: {
        "model": ErrorResponseModel,
        "description": "Internal Error – Unexpected server failure",
    },
}

write_error_responses: Dict[int | str, Dict[str, Any]] = {
    **default_error_responses,
    HTTP_409_CONFLICT: {
        "model": ErrorResponseModel,
        "description": "Conflict – Slug or email already in use",
    },
}

auth_error_responses: Dict[int | str, Dict[str, Any]] = {
    **default_error_responses,
    HTTP_401_UNAUTHORIZED: {
        "model": ErrorResponseModel,
        "description": "Unauthorized – Invalid credentials or token",
    },
    HTTP_409_CONFLICT: {
        "model": ErrorResponseModel,
        "description": "Conflict – Email already registered",
    },
}

gateway_error_responses: Dict[int | str, Dict[str, Any]] = {
    **auth_error_responses,
    HTTP_503_SERVICE_UNAVAILABLE: {
        "model": ErrorResponseModel,
        "description": "Service Unavailable – Backend service did not respond",
    },
}
