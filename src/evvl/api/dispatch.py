"""Validate, transform and route one request to its provider adapter.

Shared by the direct backend and by the proxy server routes so both paths
run exactly the same adapter code. Failures are raised, not returned.
"""

from __future__ import annotations

import logging
from enum import Enum

from ..core.model_transformer import transform_model_slug
from ..models.generation import (
    GenerationRequest,
    GenerationResult,
    Provider,
    validate_request,
)
from ..providers.errors import RequestValidationError
from ..providers.registry import AdapterRegistry

logger = logging.getLogger(__name__)


class Operation(str, Enum):
    TEXT = "text"
    IMAGE = "image"
    RESPONSE = "response"


def native_model(request: GenerationRequest, operation: Operation) -> str:
    # OpenAI image model ids are already native (dall-e-3, gpt-image-1)
    if operation == Operation.IMAGE and request.provider == Provider.OPENAI.value:
        return request.model
    return transform_model_slug(request.provider, request.model)


async def dispatch(
    registry: AdapterRegistry,
    operation: Operation,
    request: GenerationRequest,
) -> GenerationResult:
    message = validate_request(request)
    if message:
        raise RequestValidationError(message, status=400)

    adapter = registry.get(request.provider)
    model = native_model(request, operation)
    if model != request.model:
        logger.info("Model transformation %s: %s -> %s", request.provider, request.model, model)

    logger.info("Dispatch %s provider=%s model=%s", operation.value, request.provider, model)
    native = request.model_copy(update={"model": model})

    if operation == Operation.IMAGE:
        return await adapter.generate_image(native)
    if operation == Operation.RESPONSE:
        return await adapter.generate_response(native)
    return await adapter.generate_text(native)
