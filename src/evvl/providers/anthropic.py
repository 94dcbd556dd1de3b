"""Anthropic Claude Messages API provider."""

from __future__ import annotations

import time

from ..models.generation import GenerationRequest, TextResult
from .base import BaseProvider, as_int, elapsed_ms


class AnthropicProvider(BaseProvider):
    name = "anthropic"
    display_name = "Anthropic"
    API_URL = "https://api.anthropic.com/v1/messages"
    API_VERSION = "2023-06-01"
    MAX_TOKENS = 4096

    async def generate_text(self, request: GenerationRequest) -> TextResult:
        body = {
            "model": request.model,
            "max_tokens": self.config.get("max_tokens", self.MAX_TOKENS),
            "messages": [{"role": "user", "content": request.prompt}],
        }

        headers = {
            "x-api-key": request.api_key,
            "anthropic-version": self.API_VERSION,
            "content-type": "application/json",
        }

        start = time.perf_counter()
        data = await self._post_json(
            self.config.get("api_url", self.API_URL), body, headers, model=request.model
        )
        latency = elapsed_ms(start)

        content = ""
        for block in data.get("content") or []:
            if isinstance(block, dict) and block.get("type") == "text":
                content = block.get("text") or ""
                break

        usage = data.get("usage") or {}
        tokens = as_int(usage.get("input_tokens")) + as_int(usage.get("output_tokens"))

        return TextResult(content=content, tokens=tokens, latency=latency)
