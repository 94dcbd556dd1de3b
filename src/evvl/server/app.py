"""Same-origin proxy routes.

Each route accepts the ``GenerationRequest`` JSON shape, runs the matching
provider adapter server-side and answers with the result or ``{error}``.
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from .. import __version__
from ..api.dispatch import Operation, dispatch
from ..api.errors import http_status_for, to_api_error
from ..core.cache import TTLCache
from ..core.config import DEFAULT_CONFIG
from ..models.generation import (
    LOCAL_PROVIDERS,
    MISSING_PARAMETERS,
    ApiErrorResult,
    GenerationRequest,
    parse_provider,
)
from ..providers.errors import ProviderError
from ..providers.registry import AdapterRegistry
from ..utils.sanitize import sanitize_error, sanitize_payload

logger = logging.getLogger(__name__)

_FALLBACK_MESSAGES = {
    Operation.TEXT: "Failed to generate response",
    Operation.IMAGE: "Failed to generate image",
    Operation.RESPONSE: "Failed to generate response",
}


def request_from_payload(payload: dict) -> GenerationRequest:
    """Build a request from a route body; image options may be flat fields."""
    data = dict(payload)
    options = dict(data.get("options") or {})
    for field in ("size", "quality", "style", "endpoint"):
        if data.get(field) is not None:
            options.setdefault(field, data.pop(field))
    data["options"] = options or None
    return GenerationRequest.model_validate(data)


def _error_response(error: ApiErrorResult, status_code: int) -> JSONResponse:
    return JSONResponse(error.to_wire(), status_code=status_code)


def create_app(
    config: Optional[dict] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    config = config or DEFAULT_CONFIG
    cache_ttl = config.get("local", {}).get("model_cache_ttl_seconds", 60)
    registry = AdapterRegistry(config, transport=transport, model_cache=TTLCache(cache_ttl))

    app = FastAPI(title="Evvl proxy", version=__version__)
    app.state.registry = registry

    async def handle(operation: Operation, http_request: Request) -> JSONResponse:
        try:
            payload = await http_request.json()
            if not isinstance(payload, dict):
                raise ValueError("body must be a JSON object")
            request = request_from_payload(payload)
            logger.debug("%s request %s", operation.value, sanitize_payload(payload))
        except (ValueError, ValidationError):
            return _error_response(ApiErrorResult(error=MISSING_PARAMETERS, status=400), 400)

        try:
            result = await dispatch(registry, operation, request)
        except Exception as e:
            if isinstance(e, ProviderError):
                logger.warning(
                    "%s failed provider=%s model=%s: %s",
                    operation.value,
                    request.provider,
                    request.model,
                    sanitize_error(e.message),
                )
            else:
                logger.exception(
                    "Unexpected %s error provider=%s", operation.value, request.provider
                )
            return _error_response(
                to_api_error(e, _FALLBACK_MESSAGES[operation]), http_status_for(e)
            )

        return JSONResponse(result.to_wire())

    @app.post("/api/generate")
    async def generate(request: Request) -> JSONResponse:
        return await handle(Operation.TEXT, request)

    @app.post("/api/generate-image")
    async def generate_image(request: Request) -> JSONResponse:
        return await handle(Operation.IMAGE, request)

    @app.post("/api/generate-response")
    async def generate_response(request: Request) -> JSONResponse:
        return await handle(Operation.RESPONSE, request)

    @app.get("/api/local/{provider}/health")
    async def local_health(provider: str, endpoint: Optional[str] = None) -> JSONResponse:
        if parse_provider(provider) not in LOCAL_PROVIDERS:
            return _error_response(
                ApiErrorResult(error=f"Not a local provider: {provider}", status=400), 400
            )
        status = await registry.get(provider).check_health(endpoint)
        return JSONResponse(status.model_dump())

    @app.get("/api/local/{provider}/models")
    async def local_models(provider: str, endpoint: Optional[str] = None) -> JSONResponse:
        if parse_provider(provider) not in LOCAL_PROVIDERS:
            return _error_response(
                ApiErrorResult(error=f"Not a local provider: {provider}", status=400), 400
            )
        try:
            models = await registry.get(provider).list_models(endpoint)
        except ProviderError as e:
            return _error_response(to_api_error(e), http_status_for(e))
        return JSONResponse({"models": [m.model_dump() for m in models]})

    return app
