"""Conversion of failures into the uniform error-result shape."""

from __future__ import annotations

from ..models.generation import ApiErrorResult
from ..providers.errors import (
    ConnectivityError,
    MalformedResponseError,
    ModelNotAvailableError,
    ProviderError,
    ProviderTimeoutError,
    RequestValidationError,
    UnsupportedProviderError,
    VendorApiError,
)


def to_api_error(error: object, fallback_message: str = "Unknown error occurred") -> ApiErrorResult:
    """Convert any error into an ``ApiErrorResult``, keeping its message and status."""
    if isinstance(error, ApiErrorResult):
        return error

    status = None
    message = fallback_message
    if isinstance(error, ProviderError):
        message = error.message or fallback_message
        status = error.status
    elif isinstance(error, str) and error:
        message = error
    elif isinstance(error, dict) and error.get("error"):
        message = str(error["error"])
        status = error.get("status")
    elif isinstance(error, BaseException) and str(error):
        message = str(error)

    return ApiErrorResult(error=message, status=status)


def http_status_for(error: BaseException) -> int:
    """HTTP status a proxy route answers with for ``error``."""
    if isinstance(error, (RequestValidationError, UnsupportedProviderError, ModelNotAvailableError)):
        return 400
    if isinstance(error, VendorApiError):
        return error.status or 502
    if isinstance(error, ConnectivityError):
        return 502
    if isinstance(error, ProviderTimeoutError):
        return 504
    if isinstance(error, MalformedResponseError):
        return 500
    if isinstance(error, ProviderError) and error.status:
        return error.status
    return 500
