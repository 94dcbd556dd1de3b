"""Standard prompts used for validation runs.

Kept short to minimise token usage.
"""

from __future__ import annotations

TEXT_TEST_PROMPT = "Say 'Hello, I am working correctly!' in one sentence."

IMAGE_TEST_PROMPTS: dict[str, str] = {
    "openai": "A simple red apple on a white background",
    "gemini": "A simple red apple on a white background",
}


def get_test_prompt(provider: str, is_image: bool) -> str:
    if is_image:
        return IMAGE_TEST_PROMPTS.get(provider, "")
    return TEXT_TEST_PROMPT
