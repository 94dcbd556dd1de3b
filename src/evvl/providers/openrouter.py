"""OpenRouter provider via its OpenAI-compatible endpoint."""

from __future__ import annotations

from .openai_compatible import OpenAICompatibleProvider


class OpenRouterProvider(OpenAICompatibleProvider):
    name = "openrouter"
    display_name = "OpenRouter"
    API_BASE = "https://openrouter.ai/api/v1"

    def model_not_available_message(self, model: str) -> str:
        return f"Model {model} is not available through OpenRouter's API."
