"""OpenAI API provider: chat, image generation and the Responses API."""

from __future__ import annotations

import time

from ..models.generation import GenerationRequest, ImageResult, TextResult
from .base import elapsed_ms
from .errors import MalformedResponseError
from .openai_compatible import OpenAICompatibleProvider, usage_total

DEFAULT_IMAGE_SIZE = "1024x1024"
DEFAULT_IMAGE_QUALITY = "standard"
DEFAULT_IMAGE_STYLE = "vivid"


def response_output_text(data: dict) -> str:
    """Text content of a Responses API payload."""
    if isinstance(data.get("output_text"), str):
        return data["output_text"]
    parts = []
    for item in data.get("output") or []:
        if not isinstance(item, dict):
            continue
        for block in item.get("content") or []:
            if isinstance(block, dict) and block.get("type") == "output_text":
                parts.append(block.get("text") or "")
    return "".join(parts)


class OpenAIProvider(OpenAICompatibleProvider):
    name = "openai"
    display_name = "OpenAI"

    async def generate_image(self, request: GenerationRequest) -> ImageResult:
        options = request.options
        body = {
            "model": request.model,
            "prompt": request.prompt,
            "n": 1,
            "size": (options and options.size) or DEFAULT_IMAGE_SIZE,
            "quality": (options and options.quality) or DEFAULT_IMAGE_QUALITY,
            "style": (options and options.style) or DEFAULT_IMAGE_STYLE,
            "response_format": "url",
        }

        start = time.perf_counter()
        data = await self._post_json(
            f"{self.api_base}/images/generations",
            body,
            self._headers(request.api_key),
            model=request.model,
        )
        latency = elapsed_ms(start)

        images = data.get("data")
        if not images:
            raise MalformedResponseError(
                "No image data returned from OpenAI", provider=self.name
            )
        first = images[0] if isinstance(images[0], dict) else {}
        image_url = first.get("url")
        if not image_url:
            raise MalformedResponseError(
                "No image URL returned from OpenAI", provider=self.name
            )

        return ImageResult(
            image_url=image_url,
            revised_prompt=first.get("revised_prompt") or request.prompt,
            latency=latency,
        )

    async def generate_response(self, request: GenerationRequest) -> TextResult:
        start = time.perf_counter()
        data = await self._post_json(
            f"{self.api_base}/responses",
            {"model": request.model, "input": request.prompt},
            self._headers(request.api_key),
            model=request.model,
        )
        return TextResult(
            content=response_output_text(data),
            tokens=usage_total(data.get("usage")),
            latency=elapsed_ms(start),
        )
