"""Unified API client.

Resolves the runtime environment once at construction and routes every
call to the matching backend for its whole lifetime:

- web: same-origin proxy routes (``ProxyBackend``)
- desktop: in-process provider adapters (``DirectBackend``)

Every method returns a result or an ``ApiErrorResult``; nothing is raised.
"""

from __future__ import annotations

import logging
from typing import Mapping, Optional

import httpx

from ..core.cache import TTLCache
from ..core.environment import RuntimeEnvironment, detect_runtime_environment
from ..models.generation import ApiResult, GenerationRequest
from ..providers.registry import AdapterRegistry
from .backends import ApiBackend
from .direct import DirectBackend
from .errors import to_api_error
from .proxy import DEFAULT_PROXY_TIMEOUT_SECONDS, ProxyBackend

logger = logging.getLogger(__name__)


class ApiClient:
    def __init__(self, backend: ApiBackend, environment: RuntimeEnvironment):
        self._backend = backend
        self._environment = environment

    @property
    def environment(self) -> RuntimeEnvironment:
        return self._environment

    @property
    def backend_name(self) -> str:
        return self._backend.name

    async def generate_text(self, request: GenerationRequest) -> ApiResult:
        try:
            return await self._backend.generate_text(request)
        except Exception as e:
            return to_api_error(e, "Failed to generate text")

    async def generate_image(self, request: GenerationRequest) -> ApiResult:
        try:
            return await self._backend.generate_image(request)
        except Exception as e:
            return to_api_error(e, "Failed to generate image")

    async def generate_response(self, request: GenerationRequest) -> ApiResult:
        try:
            return await self._backend.generate_response(request)
        except Exception as e:
            return to_api_error(e, "Failed to generate response")


def create_api_client(
    config: Optional[dict] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> ApiClient:
    """Build the client for this process from the effective config."""
    config = config or {}
    environment = detect_runtime_environment(config.get("runtime"), environ)

    if environment == RuntimeEnvironment.DESKTOP:
        cache_ttl = config.get("local", {}).get("model_cache_ttl_seconds", 60)
        registry = AdapterRegistry(config, transport=transport, model_cache=TTLCache(cache_ttl))
        backend: ApiBackend = DirectBackend(registry)
    else:
        proxy_config = config.get("proxy", {})
        backend = ProxyBackend(
            proxy_config.get("base_url", "http://127.0.0.1:3000"),
            timeout=proxy_config.get("timeout_seconds", DEFAULT_PROXY_TIMEOUT_SECONDS),
            transport=transport,
        )

    logger.debug("API client environment=%s backend=%s", environment.value, backend.name)
    return ApiClient(backend, environment)
