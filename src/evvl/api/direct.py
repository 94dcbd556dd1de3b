"""Direct backend: runs provider adapters in-process (desktop)."""

from __future__ import annotations

import logging

from ..models.generation import ApiResult, GenerationRequest
from ..providers.errors import ProviderError
from ..providers.registry import AdapterRegistry
from ..utils.sanitize import sanitize_error
from .dispatch import Operation, dispatch
from .errors import to_api_error

logger = logging.getLogger(__name__)

_FALLBACK_MESSAGES = {
    Operation.TEXT: "Failed to generate text",
    Operation.IMAGE: "Failed to generate image",
    Operation.RESPONSE: "Failed to generate response",
}


class DirectBackend:
    name = "direct"

    def __init__(self, registry: AdapterRegistry):
        self.registry = registry

    async def _call(self, operation: Operation, request: GenerationRequest) -> ApiResult:
        try:
            return await dispatch(self.registry, operation, request)
        except ProviderError as e:
            return to_api_error(e, _FALLBACK_MESSAGES[operation])
        except Exception as e:
            logger.exception(
                "Unexpected %s failure provider=%s: %s",
                operation.value,
                request.provider,
                sanitize_error(str(e)),
            )
            return to_api_error(e, _FALLBACK_MESSAGES[operation])

    async def generate_text(self, request: GenerationRequest) -> ApiResult:
        return await self._call(Operation.TEXT, request)

    async def generate_image(self, request: GenerationRequest) -> ApiResult:
        return await self._call(Operation.IMAGE, request)

    async def generate_response(self, request: GenerationRequest) -> ApiResult:
        return await self._call(Operation.RESPONSE, request)
