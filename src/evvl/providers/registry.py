"""Provider key -> adapter class mapping and adapter factory."""

from __future__ import annotations

from typing import Optional

import httpx

from ..core.cache import TTLCache
from ..models.generation import LOCAL_PROVIDERS, Provider, parse_provider
from .anthropic import AnthropicProvider
from .base import BaseProvider
from .errors import UnsupportedProviderError
from .gemini import GeminiProvider
from .ollama import LMStudioProvider, OllamaProvider
from .openai_provider import OpenAIProvider
from .openrouter import OpenRouterProvider

ADAPTER_CLASSES: dict[Provider, type[BaseProvider]] = {
    Provider.OPENAI: OpenAIProvider,
    Provider.ANTHROPIC: AnthropicProvider,
    Provider.GEMINI: GeminiProvider,
    Provider.OPENROUTER: OpenRouterProvider,
    Provider.OLLAMA: OllamaProvider,
    Provider.LMSTUDIO: LMStudioProvider,
}


def get_provider_adapter(
    provider_name: str,
    config: Optional[dict] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    model_cache: Optional[TTLCache] = None,
) -> BaseProvider:
    """Create the adapter for ``provider_name`` from the effective config."""
    provider = parse_provider(provider_name)
    if provider is None:
        raise UnsupportedProviderError(
            f"Unsupported provider: {provider_name}", status=400, provider=provider_name
        )

    config = config or {}
    ai_config = config.get("ai", {})
    common_config = {
        k: v for k, v in ai_config.items() if k not in {p.value for p in Provider}
    }

    adapter_cls = ADAPTER_CLASSES[provider]
    if provider in LOCAL_PROVIDERS:
        provider_config = dict(config.get("local", {}).get(provider.value, {}))
        return adapter_cls(provider_config, common_config, transport, model_cache=model_cache)

    provider_config = dict(ai_config.get(provider.value, {}))
    return adapter_cls(provider_config, common_config, transport)


class AdapterRegistry:
    """Lazily builds and holds one adapter per provider."""

    def __init__(
        self,
        config: Optional[dict] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        model_cache: Optional[TTLCache] = None,
    ):
        self.config = config or {}
        self.transport = transport
        self.model_cache = model_cache
        self._adapters: dict[str, BaseProvider] = {}

    def get(self, provider_name: str) -> BaseProvider:
        key = (provider_name or "").strip().lower()
        if key not in self._adapters:
            self._adapters[key] = get_provider_adapter(
                key, self.config, self.transport, self.model_cache
            )
        return self._adapters[key]
