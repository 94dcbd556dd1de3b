"""Generation request/result data models.

These shapes are the contract between callers and the API layer and are
identical whether a call goes through the proxy server or directly to a
provider adapter.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Provider(str, Enum):
    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    GEMINI = "gemini"
    OPENROUTER = "openrouter"
    OLLAMA = "ollama"
    LMSTUDIO = "lmstudio"


LOCAL_PROVIDERS = frozenset({Provider.OLLAMA, Provider.LMSTUDIO})

MISSING_PARAMETERS = "Missing required parameters"


class WireModel(BaseModel):
    """Base for models serialised with camelCase wire names."""

    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class ImageOptions(WireModel):
    size: Optional[str] = None
    quality: Optional[str] = None
    style: Optional[str] = None
    endpoint: Optional[str] = None


class GenerationRequest(WireModel):
    provider: Optional[str] = None
    model: Optional[str] = None
    prompt: Optional[str] = None
    api_key: Optional[str] = Field(default=None, alias="apiKey")
    options: Optional[ImageOptions] = None

    @field_validator("provider", mode="before")
    @classmethod
    def _provider_value(cls, value):
        if isinstance(value, Enum):
            return value.value
        return value.strip().lower() if isinstance(value, str) else value


class TextResult(WireModel):
    content: str = ""
    tokens: int = 0
    latency: int = 0


class ImageResult(WireModel):
    image_url: str = Field(alias="imageUrl")
    revised_prompt: str = Field(alias="revisedPrompt")
    latency: int = 0


class ApiErrorResult(WireModel):
    error: str
    status: Optional[int] = None


GenerationResult = Union[TextResult, ImageResult]
ApiResult = Union[TextResult, ImageResult, ApiErrorResult]


def is_api_error(result: object) -> bool:
    return isinstance(result, ApiErrorResult)


def validate_request(request: GenerationRequest) -> Optional[str]:
    """Return an error message when a required field is empty, else None."""
    for value in (request.provider, request.model, request.prompt, request.api_key):
        if not isinstance(value, str) or not value.strip():
            return MISSING_PARAMETERS
    return None


def parse_provider(value: str) -> Optional[Provider]:
    try:
        return Provider((value or "").strip().lower())
    except ValueError:
        return None
