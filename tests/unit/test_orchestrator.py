"""Tests for core/orchestrator.py."""

from __future__ import annotations

from pathlib import Path

import pytest

from evvl.api.client import ApiClient
from evvl.core.environment import RuntimeEnvironment
from evvl.core.orchestrator import (
    EXIT_FAILURES,
    EXIT_NO_MODELS,
    EXIT_OK,
    build_catalog,
    parse_model_spec,
    run_validation_session,
)
from evvl.models.generation import ApiErrorResult, TextResult
from evvl.models.validation import ModelType


class StubBackend:
    name = "stub"

    def __init__(self, failing: set[str] = frozenset()):
        self.failing = failing
        self.seen: list[str] = []

    async def generate_text(self, request):
        self.seen.append(request.model)
        if request.model in self.failing:
            return ApiErrorResult(error="Rate limit reached", status=429)
        return TextResult(content="ok", tokens=3, latency=15)

    async def generate_image(self, request):
        return await self.generate_text(request)

    async def generate_response(self, request):
        return await self.generate_text(request)


class TestParseModelSpec:
    def test_basic(self):
        model = parse_model_spec("OpenAI:gpt-4o")
        assert (model.provider, model.model, model.type) == ("openai", "gpt-4o", ModelType.TEXT)

    def test_model_id_with_colon(self):
        assert parse_model_spec("ollama:llama3.1:8b").model == "llama3.1:8b"

    def test_explicit_type(self):
        model = parse_model_spec("gemini:gemini-3-pro-image:image")
        assert model.model == "gemini-3-pro-image"
        assert model.type == ModelType.IMAGE

    def test_inferred_image(self):
        assert parse_model_spec("openai:dall-e-3").type == ModelType.IMAGE

    def test_invalid(self):
        with pytest.raises(ValueError, match="Invalid model spec"):
            parse_model_spec("gpt-4o")


class TestBuildCatalog:
    def test_dedupes_by_key(self, config):
        extra = [parse_model_spec("openai:gpt-4o-mini"), parse_model_spec("ollama:mistral")]
        keys = [m.key for m in build_catalog(config, extra)]
        assert keys.count("openai:gpt-4o-mini") == 1
        assert "ollama:mistral" in keys


class TestRunValidationSession:
    @pytest.mark.asyncio
    async def test_quick_mode_passes(self, config):
        backend = StubBackend()
        client = ApiClient(backend, RuntimeEnvironment.DESKTOP)
        keys = {p: "k" for p in ("openai", "anthropic", "gemini", "openrouter")}

        code = await run_validation_session(config, client=client, api_keys=keys)

        assert code == EXIT_OK
        assert len(backend.seen) == 4

    @pytest.mark.asyncio
    async def test_failures_and_reports(self, config, tmp_path: Path):
        client = ApiClient(StubBackend(failing={"gpt-4o-mini"}), RuntimeEnvironment.WEB)
        junit = tmp_path / "out" / "junit.xml"
        report = tmp_path / "out" / "results.json"

        code = await run_validation_session(
            config,
            mode="individual",
            model_specs=["openai:gpt-4o-mini", "anthropic:claude-3-haiku-20240307"],
            junit_path=junit,
            json_path=report,
            client=client,
            api_keys={"openai": "k", "anthropic": "k"},
        )

        assert code == EXIT_FAILURES
        assert junit.exists()
        assert report.exists()

    @pytest.mark.asyncio
    async def test_max_failures_skips_rest(self, config):
        backend = StubBackend(failing={"gpt-4o-mini"})
        client = ApiClient(backend, RuntimeEnvironment.DESKTOP)

        await run_validation_session(
            config,
            mode="all",
            max_failures=1,
            client=client,
            api_keys={p: "k" for p in ("openai", "anthropic", "gemini", "openrouter")},
        )

        assert backend.seen == ["gpt-4o-mini"]

    @pytest.mark.asyncio
    async def test_no_models(self, config):
        config["validation"]["test_models"] = {}
        code = await run_validation_session(config, client=ApiClient(StubBackend(), RuntimeEnvironment.WEB))
        assert code == EXIT_NO_MODELS
