"""Proxy backend: forwards requests to the same-origin server routes (web).

The API key travels in the JSON body of the same-origin request, never as
an authorization header aimed at a third party.
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from ..models.generation import (
    ApiErrorResult,
    ApiResult,
    GenerationRequest,
    ImageResult,
    TextResult,
    validate_request,
)
from ..utils.sanitize import sanitize_error

logger = logging.getLogger(__name__)

TEXT_ROUTE = "/api/generate"
IMAGE_ROUTE = "/api/generate-image"
RESPONSE_ROUTE = "/api/generate-response"

DEFAULT_PROXY_TIMEOUT_SECONDS = 90


def request_body(request: GenerationRequest, include_image_options: bool = False) -> dict:
    body = {
        "prompt": request.prompt,
        "provider": request.provider,
        "model": request.model,
        "apiKey": request.api_key,
    }
    options = request.options
    if options and options.endpoint:
        body["endpoint"] = options.endpoint
    if include_image_options and options:
        body.update(
            {k: v for k, v in options.to_wire().items() if k in ("size", "quality", "style")}
        )
    return body


class ProxyBackend:
    name = "proxy"

    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_PROXY_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    async def _post(
        self,
        route: str,
        request: GenerationRequest,
        body: dict,
        result_type: type[TextResult] | type[ImageResult],
        fallback_message: str,
    ) -> ApiResult:
        message = validate_request(request)
        if message:
            return ApiErrorResult(error=message, status=400)

        try:
            async with httpx.AsyncClient(
                base_url=self.base_url, timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.post(route, json=body)
        except httpx.TimeoutException:
            return ApiErrorResult(error=f"Proxy request timed out after {self.timeout}s")
        except httpx.RequestError as e:
            logger.warning("Proxy request to %s failed: %s", route, sanitize_error(str(e)))
            return ApiErrorResult(error=f"Proxy request failed: {e}")

        try:
            data = response.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}

        if response.is_error:
            # the route reports the adapter's own status in the body
            status = data.get("status")
            if status is None:
                status = response.status_code
            return ApiErrorResult(error=data.get("error") or fallback_message, status=status)

        try:
            return result_type.model_validate(data)
        except ValidationError:
            return ApiErrorResult(error=f"Invalid response from proxy route {route}")

    async def generate_text(self, request: GenerationRequest) -> ApiResult:
        return await self._post(
            TEXT_ROUTE, request, request_body(request), TextResult, "Failed to generate response"
        )

    async def generate_image(self, request: GenerationRequest) -> ApiResult:
        return await self._post(
            IMAGE_ROUTE,
            request,
            request_body(request, include_image_options=True),
            ImageResult,
            "Failed to generate image",
        )

    async def generate_response(self, request: GenerationRequest) -> ApiResult:
        return await self._post(
            RESPONSE_ROUTE, request, request_body(request), TextResult, "Failed to generate response"
        )
