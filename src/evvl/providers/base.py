"""AI provider adapter abstraction.

Each adapter translates the unified ``GenerationRequest`` into one vendor's
wire format and normalises the vendor's success and error shapes. Adapters
raise ``ProviderError`` subclasses; they never return error sentinels.
"""

from __future__ import annotations

import logging
import re
import time
from typing import Any, Optional, Protocol, runtime_checkable

import httpx

from ..models.generation import GenerationRequest, ImageResult, TextResult
from ..utils.sanitize import sanitize_error
from .errors import (
    MalformedResponseError,
    ModelNotAvailableError,
    ProviderError,
    ProviderTimeoutError,
    UnsupportedProviderError,
    VendorApiError,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 60

_MODEL_MISSING_RE = re.compile(
    r"model\b.*\b(not found|does not exist|not exist|not supported|unknown|invalid)"
    r"|(unknown|invalid) model",
    re.IGNORECASE,
)


@runtime_checkable
class ProviderAdapter(Protocol):
    """Capability every provider adapter exposes."""

    name: str

    async def generate_text(self, request: GenerationRequest) -> TextResult: ...

    async def generate_image(self, request: GenerationRequest) -> ImageResult: ...

    async def generate_response(self, request: GenerationRequest) -> TextResult: ...


def elapsed_ms(start: float) -> int:
    return int(round((time.perf_counter() - start) * 1000))


def as_int(value: Any) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


def extract_error_message(body: Any) -> Optional[str]:
    """Pull the vendor's own error message out of an error body."""
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str) and error:
            return error
        if body.get("message"):
            return str(body["message"])
    if isinstance(body, list) and body:
        return extract_error_message(body[0])
    return None


def _json_or_none(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


class BaseProvider:
    """Base class with shared HTTP, timeout and error-shape handling."""

    name: str = "base"
    display_name: str = "Provider"

    def __init__(
        self,
        provider_config: Optional[dict] = None,
        common_config: Optional[dict] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = provider_config or {}
        self.common = common_config or {}
        self.timeout = self.config.get(
            "timeout_seconds", self.common.get("timeout_seconds", DEFAULT_TIMEOUT_SECONDS)
        )
        self._transport = transport

    async def generate_text(self, request: GenerationRequest) -> TextResult:
        raise NotImplementedError

    async def generate_image(self, request: GenerationRequest) -> ImageResult:
        raise UnsupportedProviderError(
            f"Unsupported provider for image generation: {self.name}",
            status=400,
            provider=self.name,
        )

    async def generate_response(self, request: GenerationRequest) -> TextResult:
        raise UnsupportedProviderError(
            "Responses API is only supported for OpenAI provider",
            status=400,
            provider=self.name,
        )

    def model_not_available_message(self, model: str) -> str:
        return (
            f"This model is not available through {self.display_name}'s direct API. "
            f"Try using the OpenRouter provider instead."
        )

    def is_model_not_available(self, status: int, body: Any) -> bool:
        if status == 404:
            return True
        if not isinstance(body, dict):
            return False
        error = body.get("error") if isinstance(body.get("error"), dict) else {}
        if "not_found_error" in (error.get("type"), body.get("type")):
            return True
        if error.get("code") == "model_not_found":
            return True
        message = extract_error_message(body) or ""
        return status == 400 and bool(_MODEL_MISSING_RE.search(message))

    def _client(self, timeout: Optional[float] = None) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout if timeout is None else timeout,
            transport=self._transport,
        )

    async def _send(
        self,
        method: str,
        url: str,
        *,
        model: str = "",
        json: Optional[dict] = None,
        headers: Optional[dict] = None,
        timeout: Optional[float] = None,
    ) -> httpx.Response:
        effective = self.timeout if timeout is None else timeout
        try:
            async with self._client(effective) as client:
                response = await client.request(method, url, json=json, headers=headers)
        except httpx.TimeoutException as e:
            raise ProviderTimeoutError(
                f"{self.display_name} request timed out after {effective}s",
                provider=self.name,
            ) from e
        except httpx.RequestError as e:
            raise ProviderError(
                f"{self.display_name} request failed: {e}", provider=self.name
            ) from e

        if response.is_error:
            raise self._error_from_response(response, model)
        return response

    async def _post_json(
        self,
        url: str,
        body: dict,
        headers: Optional[dict] = None,
        *,
        model: str = "",
        timeout: Optional[float] = None,
    ) -> dict:
        response = await self._send(
            "POST", url, model=model, json=body, headers=headers, timeout=timeout
        )
        data = _json_or_none(response)
        if not isinstance(data, dict):
            raise MalformedResponseError(
                f"Invalid JSON returned from {self.display_name}",
                status=response.status_code,
                provider=self.name,
            )
        return data

    def _error_from_response(self, response: httpx.Response, model: str) -> ProviderError:
        body = _json_or_none(response)
        status = response.status_code
        logger.warning(
            "%s API error status=%s model=%s body=%s",
            self.display_name,
            status,
            model,
            sanitize_error(response.text[:500]),
        )
        if self.is_model_not_available(status, body):
            return ModelNotAvailableError(
                self.model_not_available_message(model), status=status, provider=self.name
            )
        message = extract_error_message(body) or (
            f"{self.display_name} API error: {response.reason_phrase or status}"
        )
        return VendorApiError(message, status=status, provider=self.name)
