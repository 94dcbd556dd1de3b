"""Tests for models/."""

from __future__ import annotations

from evvl.models.generation import (
    MISSING_PARAMETERS,
    ApiErrorResult,
    GenerationRequest,
    ImageOptions,
    ImageResult,
    Provider,
    TextResult,
    is_api_error,
    parse_provider,
    validate_request,
)
from evvl.models.validation import ModelUnderTest, TestResult, TestStatus, summarize


def _request(**overrides) -> GenerationRequest:
    fields = {"provider": "openai", "model": "gpt-4o", "prompt": "hi", "apiKey": "sk-test"}
    fields.update(overrides)
    return GenerationRequest.model_validate(fields)


class TestValidateRequest:
    def test_complete_request_is_valid(self):
        assert validate_request(_request()) is None

    def test_each_required_field(self):
        for field in ("provider", "model", "prompt", "apiKey"):
            assert validate_request(_request(**{field: ""})) == MISSING_PARAMETERS
            assert validate_request(_request(**{field: None})) == MISSING_PARAMETERS

    def test_whitespace_only_is_missing(self):
        assert validate_request(_request(prompt="   ")) == MISSING_PARAMETERS


class TestGenerationRequest:
    def test_accepts_wire_and_python_names(self):
        assert _request().api_key == "sk-test"
        assert GenerationRequest(api_key="k").api_key == "k"

    def test_provider_enum_and_case_normalised(self):
        assert GenerationRequest(provider=Provider.GEMINI).provider == "gemini"
        assert GenerationRequest(provider=" OpenAI ").provider == "openai"

    def test_to_wire_uses_camel_case(self):
        wire = _request(options=ImageOptions(size="512x512")).to_wire()
        assert wire["apiKey"] == "sk-test"
        assert wire["options"] == {"size": "512x512"}


class TestResults:
    def test_image_result_wire_names(self):
        result = ImageResult(image_url="https://img", revised_prompt="apple", latency=5)
        assert result.to_wire() == {"imageUrl": "https://img", "revisedPrompt": "apple", "latency": 5}

    def test_is_api_error(self):
        assert is_api_error(ApiErrorResult(error="x"))
        assert not is_api_error(TextResult(content="ok"))

    def test_error_without_status_omits_it(self):
        assert ApiErrorResult(error="boom").to_wire() == {"error": "boom"}


class TestParseProvider:
    def test_known(self):
        assert parse_provider("LMStudio") == Provider.LMSTUDIO

    def test_unknown(self):
        assert parse_provider("cohere") is None
        assert parse_provider("") is None


class TestSummarize:
    def test_counts_and_averages(self):
        model = ModelUnderTest(provider="openai", model="a")
        results = [
            TestResult.for_model(model, TestStatus.SUCCESS, latency=100, tokens=10),
            TestResult.for_model(
                ModelUnderTest(provider="openai", model="b"), TestStatus.SUCCESS, latency=300, tokens=5
            ),
            TestResult.for_model(ModelUnderTest(provider="gemini", model="c"), TestStatus.FAILED, error="x"),
            TestResult.for_model(ModelUnderTest(provider="gemini", model="d"), TestStatus.SKIPPED),
        ]
        summary = summarize(results)
        assert summary.total == 4
        assert summary.passed == 2
        assert summary.failed == 1
        assert summary.skipped == 1
        assert summary.tested == 3
        assert summary.avg_latency == 200
        assert summary.total_tokens == 15

    def test_empty(self):
        summary = summarize([])
        assert summary.total == 0
        assert summary.avg_latency == 0

    def test_result_key_and_label(self):
        result = TestResult.for_model(ModelUnderTest(provider="ollama", model="llama3:8b"), TestStatus.PENDING)
        assert result.key == "ollama:llama3:8b"
        assert result.model_label == "llama3:8b"
