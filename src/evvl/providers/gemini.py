"""Google Gemini provider using the generateContent REST API."""

from __future__ import annotations

import time
from typing import Any

from ..models.generation import GenerationRequest, ImageResult, TextResult
from .base import BaseProvider, as_int, elapsed_ms
from .errors import MalformedResponseError


def _candidate_parts(data: dict) -> list[dict]:
    candidates = data.get("candidates") or []
    if not candidates or not isinstance(candidates[0], dict):
        return []
    content = candidates[0].get("content") or {}
    return [p for p in content.get("parts") or [] if isinstance(p, dict)]


def _inline_data(part: dict) -> Any:
    return part.get("inlineData") or part.get("inline_data")


class GeminiProvider(BaseProvider):
    name = "gemini"
    display_name = "Gemini"
    API_BASE = "https://generativelanguage.googleapis.com/v1beta"

    def _url(self, model: str) -> str:
        base = (self.config.get("base_url") or self.API_BASE).rstrip("/")
        return f"{base}/models/{model}:generateContent"

    def _headers(self, api_key: str) -> dict:
        return {"x-goog-api-key": api_key, "Content-Type": "application/json"}

    async def generate_text(self, request: GenerationRequest) -> TextResult:
        body = {"contents": [{"parts": [{"text": request.prompt}]}]}

        start = time.perf_counter()
        data = await self._post_json(
            self._url(request.model), body, self._headers(request.api_key), model=request.model
        )
        latency = elapsed_ms(start)

        content = ""
        for part in _candidate_parts(data):
            if part.get("text"):
                content = part["text"]
                break

        usage = data.get("usageMetadata") or {}
        return TextResult(
            content=content,
            tokens=as_int(usage.get("totalTokenCount")),
            latency=latency,
        )

    async def generate_image(self, request: GenerationRequest) -> ImageResult:
        body = {
            "contents": [{"parts": [{"text": request.prompt}]}],
            "generationConfig": {"responseModalities": ["TEXT", "IMAGE"]},
        }

        start = time.perf_counter()
        data = await self._post_json(
            self._url(request.model), body, self._headers(request.api_key), model=request.model
        )
        latency = elapsed_ms(start)

        parts = _candidate_parts(data)
        image_part = None
        for part in parts:
            inline = _inline_data(part)
            if isinstance(inline, dict) and str(inline.get("mimeType") or "image/").startswith("image/"):
                image_part = inline
                break

        if image_part is None:
            raise MalformedResponseError(
                "No image data returned from Gemini", provider=self.name
            )
        if not image_part.get("data"):
            raise MalformedResponseError(
                "No image URL returned from Gemini", provider=self.name
            )

        mime_type = image_part.get("mimeType") or "image/png"
        revised_prompt = next((p["text"] for p in parts if p.get("text")), request.prompt)

        return ImageResult(
            image_url=f"data:{mime_type};base64,{image_part['data']}",
            revised_prompt=revised_prompt,
            latency=latency,
        )
