"""Shared fixtures for Evvl tests."""

from __future__ import annotations

import json
from typing import Callable

import httpx
import pytest

from evvl.core.config import DEFAULT_CONFIG


class VendorStub:
    """httpx.MockTransport wrapper that records every request it answers."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]):
        self.handler = handler
        self.requests: list[httpx.Request] = []
        self.transport = httpx.MockTransport(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self) -> dict:
        return json.loads(self.last.content)


@pytest.fixture
def vendor_stub() -> Callable[..., VendorStub]:
    """Factory: ``vendor_stub(handler)`` or ``vendor_stub(status=, json=)``."""

    def make(handler=None, *, status: int = 200, json: object = None) -> VendorStub:
        if handler is None:
            def handler(request: httpx.Request) -> httpx.Response:
                return httpx.Response(status, json=json)
        return VendorStub(handler)

    return make


@pytest.fixture
def config() -> dict:
    return json.loads(json.dumps(DEFAULT_CONFIG))


@pytest.fixture
def openai_chat_payload() -> dict:
    return {
        "id": "chatcmpl-1",
        "choices": [{"index": 0, "message": {"role": "assistant", "content": "Hello, I am working correctly!"}}],
        "usage": {"prompt_tokens": 12, "completion_tokens": 9, "total_tokens": 21},
    }


@pytest.fixture
def anthropic_payload() -> dict:
    return {
        "id": "msg_1",
        "type": "message",
        "content": [{"type": "text", "text": "Hello from Claude"}],
        "usage": {"input_tokens": 10, "output_tokens": 7},
    }
