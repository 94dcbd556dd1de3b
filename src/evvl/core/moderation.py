"""OpenAI moderation check for content about to be shared.

A failed or unavailable check never blocks the caller: it is logged and
treated as passed.
"""

from __future__ import annotations

import logging
import os
from typing import Optional

import httpx
from pydantic import BaseModel, Field

from ..utils.sanitize import sanitize_error

logger = logging.getLogger(__name__)

MODERATION_URL = "https://api.openai.com/v1/moderations"
MODERATION_MODEL = "omni-moderation-latest"


class ModerationCheckResult(BaseModel):
    passed: bool
    flagged_categories: list[str] = Field(default_factory=list)
    error: Optional[str] = None


async def check_moderation(
    content: str,
    api_key: Optional[str] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    timeout: float = 10,
) -> ModerationCheckResult:
    if not content or not content.strip():
        return ModerationCheckResult(passed=True)

    api_key = api_key or os.environ.get("OPENAI_API_KEY")
    headers = {"Content-Type": "application/json"}
    if api_key:
        headers["Authorization"] = f"Bearer {api_key}"

    try:
        async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
            response = await client.post(
                MODERATION_URL,
                json={"input": content, "model": MODERATION_MODEL},
                headers=headers,
            )
    except httpx.HTTPError as e:
        logger.warning("Moderation check failed: %s", sanitize_error(str(e)))
        return ModerationCheckResult(passed=True, error="Moderation check failed")

    if response.is_error:
        logger.warning(
            "Moderation API error: %s %s", response.status_code, sanitize_error(response.text[:300])
        )
        return ModerationCheckResult(passed=True, error="Moderation check unavailable")

    try:
        result = response.json()["results"][0]
    except (ValueError, KeyError, IndexError, TypeError):
        logger.warning("Moderation API returned an unexpected payload")
        return ModerationCheckResult(passed=True, error="Moderation check failed")

    if not result.get("flagged"):
        return ModerationCheckResult(passed=True)

    flagged = [name for name, hit in (result.get("categories") or {}).items() if hit]
    return ModerationCheckResult(passed=False, flagged_categories=flagged)


async def check_content_for_sharing(
    prompt: str,
    system_prompt: Optional[str] = None,
    responses: Optional[list[str]] = None,
    **kwargs,
) -> ModerationCheckResult:
    """Check prompt, system prompt and responses in a single call."""
    parts = [prompt]
    if system_prompt:
        parts.append(system_prompt)
    if responses:
        parts.extend(responses)
    return await check_moderation("\n\n---\n\n".join(parts), **kwargs)
