"""Tests for server/app.py."""

from __future__ import annotations

import httpx
import pytest
from fastapi.testclient import TestClient

from evvl.server.app import create_app, request_from_payload


def _body(**overrides) -> dict:
    body = {"provider": "openai", "model": "gpt-4o", "prompt": "Hello", "apiKey": "test-key"}
    body.update(overrides)
    return body


@pytest.fixture
def make_client(config):
    def make(stub) -> TestClient:
        return TestClient(create_app(config, transport=stub.transport))

    return make


class TestRequestFromPayload:
    def test_flat_image_fields_become_options(self):
        request = request_from_payload(_body(size="512x512", quality="hd"))
        assert request.options.size == "512x512"
        assert request.options.quality == "hd"

    def test_no_options(self):
        assert request_from_payload(_body()).options is None


class TestGenerateRoute:
    def test_success(self, make_client, vendor_stub, openai_chat_payload):
        response = make_client(vendor_stub(json=openai_chat_payload)).post("/api/generate", json=_body())
        assert response.status_code == 200
        data = response.json()
        assert data["content"] == "Hello, I am working correctly!"
        assert data["tokens"] == 21

    def test_missing_parameters(self, make_client, vendor_stub):
        stub = vendor_stub(json={})
        response = make_client(stub).post("/api/generate", json=_body(prompt=""))
        assert response.status_code == 400
        assert response.json() == {"error": "Missing required parameters", "status": 400}
        assert stub.requests == []

    def test_invalid_json(self, make_client, vendor_stub):
        response = make_client(vendor_stub(json={})).post(
            "/api/generate", content=b"not json", headers={"content-type": "application/json"}
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Missing required parameters"

    def test_unsupported_provider(self, make_client, vendor_stub):
        response = make_client(vendor_stub(json={})).post("/api/generate", json=_body(provider="cohere"))
        assert response.status_code == 400
        assert response.json()["error"] == "Unsupported provider: cohere"

    def test_vendor_status_propagates(self, make_client, vendor_stub):
        stub = vendor_stub(status=429, json={"error": {"message": "Rate limit reached"}})
        response = make_client(stub).post("/api/generate", json=_body())
        assert response.status_code == 429
        assert response.json() == {"error": "Rate limit reached", "status": 429}

    def test_model_not_available_is_400(self, make_client, vendor_stub):
        stub = vendor_stub(status=404, json={"error": {"type": "not_found_error", "message": "model: x"}})
        response = make_client(stub).post("/api/generate", json=_body(provider="anthropic", model="x"))
        assert response.status_code == 400
        assert "not available through Anthropic's direct API" in response.json()["error"]

    def test_local_connectivity_is_502(self, make_client, vendor_stub):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        response = make_client(vendor_stub(handler)).post(
            "/api/generate", json=_body(provider="ollama", model="llama3.1:8b", apiKey="local")
        )
        assert response.status_code == 502
        assert response.json()["error"].startswith("Cannot connect to Ollama")

    def test_timeout_is_504(self, make_client, vendor_stub):
        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)

        response = make_client(vendor_stub(handler)).post("/api/generate", json=_body())
        assert response.status_code == 504


class TestImageAndResponseRoutes:
    def test_image(self, make_client, vendor_stub):
        stub = vendor_stub(json={"data": [{"url": "https://img", "revised_prompt": "apple"}]})
        response = make_client(stub).post("/api/generate-image", json=_body(model="dall-e-3", size="1792x1024"))
        assert response.status_code == 200
        assert response.json()["imageUrl"] == "https://img"
        assert stub.last_json()["size"] == "1792x1024"

    def test_response_rejects_non_openai(self, make_client, vendor_stub):
        response = make_client(vendor_stub(json={})).post(
            "/api/generate-response", json=_body(provider="gemini", model="gemini-2.5-flash")
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Responses API is only supported for OpenAI provider"


class TestLocalRoutes:
    def test_health(self, make_client, vendor_stub):
        response = make_client(vendor_stub(lambda request: httpx.Response(200, text="ok"))).get(
            "/api/local/ollama/health"
        )
        assert response.json() == {"running": True, "endpoint": "http://localhost:11434", "error": None}

    def test_health_rejects_remote_provider(self, make_client, vendor_stub):
        response = make_client(vendor_stub(json={})).get("/api/local/openai/health")
        assert response.status_code == 400

    def test_models(self, make_client, vendor_stub):
        stub = vendor_stub(json={"data": [{"id": "qwen2.5-7b"}]})
        response = make_client(stub).get("/api/local/lmstudio/models", params={"endpoint": "http://10.0.0.5:1234"})
        assert response.status_code == 200
        assert response.json()["models"][0]["id"] == "qwen2.5-7b"
        assert stub.last.url.host == "10.0.0.5"
