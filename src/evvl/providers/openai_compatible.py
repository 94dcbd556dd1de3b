"""Shared chat-completions adapter for OpenAI-compatible endpoints."""

from __future__ import annotations

import time
from typing import Optional

from ..models.generation import GenerationRequest, TextResult
from .base import BaseProvider, as_int, elapsed_ms


def usage_total(usage: Optional[dict]) -> int:
    """Token total from a usage block; falls back to summing the parts."""
    if not isinstance(usage, dict):
        return 0
    if usage.get("total_tokens") is not None:
        return as_int(usage["total_tokens"])
    if "input_tokens" in usage or "output_tokens" in usage:
        return as_int(usage.get("input_tokens")) + as_int(usage.get("output_tokens"))
    return as_int(usage.get("prompt_tokens")) + as_int(usage.get("completion_tokens"))


def first_choice_content(data: dict) -> str:
    choices = data.get("choices") or []
    if not choices or not isinstance(choices[0], dict):
        return ""
    message = choices[0].get("message") or {}
    return message.get("content") or ""


class OpenAICompatibleProvider(BaseProvider):
    """Chat completions against ``{API_BASE}/chat/completions``."""

    API_BASE = "https://api.openai.com/v1"

    @property
    def api_base(self) -> str:
        return (self.config.get("base_url") or self.API_BASE).rstrip("/")

    def _headers(self, api_key: str) -> dict:
        return {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }

    def _chat_body(self, request: GenerationRequest) -> dict:
        return {
            "model": request.model,
            "messages": [{"role": "user", "content": request.prompt}],
        }

    async def generate_text(self, request: GenerationRequest) -> TextResult:
        start = time.perf_counter()
        data = await self._post_json(
            f"{self.api_base}/chat/completions",
            self._chat_body(request),
            self._headers(request.api_key),
            model=request.model,
        )
        return TextResult(
            content=first_choice_content(data),
            tokens=usage_total(data.get("usage")),
            latency=elapsed_ms(start),
        )
