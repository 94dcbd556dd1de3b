"""Local inference providers (Ollama and LM Studio).

Both serve an OpenAI-compatible ``/v1/chat/completions`` endpoint on a
loopback address. Calls carry short explicit timeouts and connection
failures are reported with a hint to start the service.
"""

from __future__ import annotations

import logging
import time
from typing import Optional

import httpx

from ..core.cache import TTLCache
from ..models.generation import GenerationRequest, TextResult
from ..models.provider import LocalHealthStatus, LocalModel
from .base import _json_or_none, elapsed_ms
from .errors import (
    ConnectivityError,
    MalformedResponseError,
    ProviderError,
    ProviderTimeoutError,
)
from .openai_compatible import OpenAICompatibleProvider, first_choice_content, usage_total

logger = logging.getLogger(__name__)

HEALTH_TIMEOUT_SECONDS = 3
GENERATION_TIMEOUT_SECONDS = 30


class LocalProvider(OpenAICompatibleProvider):
    """Base for OpenAI-compatible servers running on the user's machine."""

    DEFAULT_ENDPOINT = "http://localhost"
    HEALTH_PATH = "/"
    MODELS_PATH = "/v1/models"
    timeout_hint = "Is the local server running?"
    connect_hint = "Start the local server."

    def __init__(
        self,
        provider_config: Optional[dict] = None,
        common_config: Optional[dict] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        model_cache: Optional[TTLCache] = None,
    ):
        super().__init__(provider_config, common_config, transport)
        self.health_timeout = self.config.get("health_timeout_seconds", HEALTH_TIMEOUT_SECONDS)
        self.generation_timeout = self.config.get(
            "generation_timeout_seconds", GENERATION_TIMEOUT_SECONDS
        )
        self.model_cache = model_cache

    def resolve_endpoint(self, override: Optional[str] = None) -> str:
        endpoint = override or self.config.get("endpoint") or self.DEFAULT_ENDPOINT
        return endpoint.rstrip("/")

    def model_not_available_message(self, model: str) -> str:
        return f"Model {model} is not available in {self.display_name}."

    def _headers(self, api_key: str) -> dict:
        return {"Content-Type": "application/json"}

    def _chat_body(self, request: GenerationRequest) -> dict:
        body = super()._chat_body(request)
        body["stream"] = False
        return body

    async def _local_send(self, method: str, url: str, *, timeout: float, **kwargs) -> httpx.Response:
        try:
            return await self._send(method, url, timeout=timeout, **kwargs)
        except ProviderTimeoutError as e:
            raise ProviderTimeoutError(
                f"{self.display_name} request timed out after {timeout}s. {self.timeout_hint}",
                provider=self.name,
            ) from e
        except ProviderError as e:
            if isinstance(e.__cause__, httpx.ConnectError):
                raise ConnectivityError(
                    f"Cannot connect to {self.display_name}. {self.connect_hint}",
                    provider=self.name,
                ) from e
            raise

    async def generate_text(self, request: GenerationRequest) -> TextResult:
        options = request.options
        endpoint = self.resolve_endpoint(options.endpoint if options else None)

        start = time.perf_counter()
        response = await self._local_send(
            "POST",
            f"{endpoint}/v1/chat/completions",
            model=request.model,
            json=self._chat_body(request),
            headers=self._headers(request.api_key),
            timeout=self.generation_timeout,
        )
        data = _json_or_none(response)
        if not isinstance(data, dict):
            raise MalformedResponseError(
                f"Invalid JSON returned from {self.display_name}", provider=self.name
            )
        return TextResult(
            content=first_choice_content(data),
            tokens=usage_total(data.get("usage")),
            latency=elapsed_ms(start),
        )

    async def check_health(self, endpoint: Optional[str] = None) -> LocalHealthStatus:
        """Lightweight probe, independent of generation. Never raises."""
        url = self.resolve_endpoint(endpoint)
        try:
            await self._local_send("GET", f"{url}{self.HEALTH_PATH}", timeout=self.health_timeout)
        except ProviderTimeoutError:
            return LocalHealthStatus(running=False, endpoint=url, error="Connection timed out")
        except ConnectivityError:
            return LocalHealthStatus(
                running=False, endpoint=url, error=f"Cannot connect to {self.display_name}"
            )
        except ProviderError as e:
            status = e.status if e.status is not None else "unknown"
            return LocalHealthStatus(
                running=False, endpoint=url, error=f"Unexpected status: {status}"
            )
        return LocalHealthStatus(running=True, endpoint=url)

    def _parse_models(self, data: dict) -> list[LocalModel]:
        models = []
        for row in data.get("data") or []:
            if isinstance(row, dict) and row.get("id"):
                models.append(LocalModel(id=row["id"], label=row["id"]))
        return models

    async def list_models(self, endpoint: Optional[str] = None) -> list[LocalModel]:
        url = self.resolve_endpoint(endpoint)
        if self.model_cache is not None:
            cached = self.model_cache.get((self.name, url))
            if cached is not None:
                return cached

        response = await self._local_send(
            "GET", f"{url}{self.MODELS_PATH}", timeout=self.health_timeout
        )
        data = _json_or_none(response)
        models = self._parse_models(data if isinstance(data, dict) else {})
        models.sort(key=lambda m: m.id)
        logger.debug("%s listed %d models at %s", self.display_name, len(models), url)

        if self.model_cache is not None:
            self.model_cache.set((self.name, url), models)
        return models


class OllamaProvider(LocalProvider):
    name = "ollama"
    display_name = "Ollama"
    DEFAULT_ENDPOINT = "http://localhost:11434"
    HEALTH_PATH = "/"
    MODELS_PATH = "/api/tags"
    timeout_hint = "Is Ollama running?"
    connect_hint = "Start it with: ollama serve"

    def model_not_available_message(self, model: str) -> str:
        return (
            f"Model {model} is not available in Ollama. "
            f"Pull it first with: ollama pull {model}"
        )

    def _parse_models(self, data: dict) -> list[LocalModel]:
        models = []
        for row in data.get("models") or []:
            if not isinstance(row, dict):
                continue
            name = str(row.get("name") or "").strip()
            if not name:
                continue
            details = row.get("details") or {}
            models.append(
                LocalModel(id=name, label=name, size=row.get("size"), family=details.get("family"))
            )
        return models


class LMStudioProvider(LocalProvider):
    name = "lmstudio"
    display_name = "LM Studio"
    DEFAULT_ENDPOINT = "http://localhost:1234"
    HEALTH_PATH = "/v1/models"
    MODELS_PATH = "/v1/models"
    timeout_hint = "Is LM Studio running with the local server enabled?"
    connect_hint = "Open LM Studio and enable the local server."
