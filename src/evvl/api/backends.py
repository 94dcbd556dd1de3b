"""Backend interface shared by the proxy and direct implementations."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from ..models.generation import ApiResult, GenerationRequest


@runtime_checkable
class ApiBackend(Protocol):
    name: str

    async def generate_text(self, request: GenerationRequest) -> ApiResult: ...

    async def generate_image(self, request: GenerationRequest) -> ApiResult: ...

    async def generate_response(self, request: GenerationRequest) -> ApiResult: ...
