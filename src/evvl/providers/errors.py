"""Errors raised by provider adapters.

Adapters raise these internally; the API layer converts them into
``ApiErrorResult`` before anything reaches a caller.
"""

from __future__ import annotations

from typing import Optional


class ProviderError(RuntimeError):
    """Base error for provider-layer failures."""

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        provider: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status = status
        self.provider = provider


class RequestValidationError(ProviderError):
    """A required request field is missing; nothing was sent."""


class UnsupportedProviderError(ProviderError):
    """The provider is unknown or cannot serve the requested capability."""


class ModelNotAvailableError(ProviderError):
    """The vendor reports that the requested model does not exist."""


class VendorApiError(ProviderError):
    """Any other non-2xx vendor response, message kept verbatim."""


class ConnectivityError(ProviderError):
    """A local provider could not be reached."""


class ProviderTimeoutError(ProviderError):
    """The call did not complete within its timeout."""


class MalformedResponseError(ProviderError):
    """A 2xx response lacked an expected field."""
