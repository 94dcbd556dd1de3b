"""Maps provider-prefixed model slugs to the ids vendor APIs expect.

The UI lists models by their OpenRouter-style slug (``google/gemini-2.5-pro``,
``anthropic/claude-sonnet-4.5``); direct vendor calls need the native id.
Unrecognised slugs pass through unchanged and transforming a native id is
a no-op.
"""

from __future__ import annotations

import re

GEMINI_MODEL_MAP: dict[str, str] = {
    # 2.0
    "google/gemini-2.0-flash-exp": "gemini-2.0-flash-exp",
    "google/gemini-flash-2.0-exp": "gemini-2.0-flash-exp",
    "google/gemini-2.0-flash": "gemini-2.0-flash",
    "google/gemini-2.0-flash-lite": "gemini-2.0-flash-lite",
    # 2.5
    "google/gemini-2.5-pro": "gemini-2.5-pro",
    "google/gemini-2.5-flash": "gemini-2.5-flash",
    "google/gemini-2.5-flash-lite": "gemini-2.5-flash-lite",
    "google/gemini-2.5-flash-image": "gemini-2.5-flash-image",
    # 3.x
    "google/gemini-3-pro": "gemini-3-pro",
    "google/gemini-3-flash": "gemini-3-flash",
    "google/gemini-3-pro-image": "gemini-3-pro-image-preview",
    "google/gemini-3-pro-image-preview": "gemini-3-pro-image-preview",
    "google/gemini-3.0-pro": "gemini-3-pro",
    "google/gemini-3.0-flash": "gemini-3-flash",
    "google/gemini-pro": "gemini-pro",
}

ANTHROPIC_MODEL_MAP: dict[str, str] = {
    # 4.5, dashed and dotted spellings
    "anthropic/claude-opus-4-5": "claude-opus-4-5-20251101",
    "anthropic/claude-sonnet-4-5": "claude-sonnet-4-5-20250929",
    "anthropic/claude-haiku-4-5": "claude-haiku-4-5-20251001",
    "anthropic/claude-opus-4.5": "claude-opus-4-5-20251101",
    "anthropic/claude-sonnet-4.5": "claude-sonnet-4-5-20250929",
    "anthropic/claude-haiku-4.5": "claude-haiku-4-5-20251001",
    # 4.x
    "anthropic/claude-opus-4": "claude-opus-4-20250514",
    "anthropic/claude-opus-4-1": "claude-opus-4-1-20250805",
    "anthropic/claude-opus-4.1": "claude-opus-4-1-20250805",
    "anthropic/claude-sonnet-4": "claude-sonnet-4-20250514",
    # 3.x
    "anthropic/claude-3-haiku": "claude-3-haiku-20240307",
    "anthropic/claude-3-opus": "claude-3-opus-20240229",
    "anthropic/claude-3.5-haiku": "claude-3-5-haiku-20241022",
    "anthropic/claude-3.7-sonnet": "claude-3-7-sonnet-20250219",
    "anthropic/claude-3.7-sonnet-20250219": "claude-3-7-sonnet-20250219",
}

_DATE_SUFFIX_RE = re.compile(r"\d{8}$")


def _transform_anthropic(slug: str) -> str:
    mapped = ANTHROPIC_MODEL_MAP.get(slug)
    if mapped:
        return mapped
    without_prefix = slug[len("anthropic/"):] if slug.startswith("anthropic/") else slug
    if _DATE_SUFFIX_RE.search(without_prefix):
        return without_prefix
    return slug


def _strip_prefix(prefix: str):
    def transform(slug: str) -> str:
        return slug[len(prefix):] if slug.startswith(prefix) else slug

    return transform


_TRANSFORMS = {
    "gemini": lambda slug: GEMINI_MODEL_MAP.get(slug, slug),
    "openai": _strip_prefix("openai/"),
    "anthropic": _transform_anthropic,
}


def transform_model_slug(provider: str, model_slug: str) -> str:
    """Return the vendor-native id for ``model_slug`` under ``provider``."""
    transform = _TRANSFORMS.get(str(provider or "").lower())
    if transform is None or not model_slug:
        return model_slug
    return transform(model_slug)
