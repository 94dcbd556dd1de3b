"""Validation runner: bulk-tests model configurations through the API client.

Models run strictly one after another so that many models sharing one key
do not exhaust a provider's rate limit together, and so progress arrives
in worklist order. Cancellation is cooperative and checked before each
dispatch; a call already in flight is allowed to finish.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable, Iterable, Mapping, Optional

from ..api.client import ApiClient
from ..models.generation import ApiErrorResult, GenerationRequest, ImageResult
from ..models.validation import ModelType, ModelUnderTest, TestMode, TestResult, TestStatus
from .prompts import get_test_prompt

logger = logging.getLogger(__name__)

ResultCallback = Callable[[TestResult], None]
StopPredicate = Callable[[], bool]


def is_image_model(provider: str, model_id: str) -> bool:
    """Whether a model id names an image-generation model."""
    model_id = model_id.lower()
    if provider == "openai":
        return "dall-e" in model_id or "gpt-image" in model_id
    if provider == "gemini":
        return any(marker in model_id for marker in ("imagen", "image-preview", "image-generation", "flash-image"))
    return False


def get_models_for_mode(
    mode: TestMode | str,
    all_models: Iterable[ModelUnderTest],
    selected: Optional[set[str]] = None,
    test_models: Optional[Mapping[str, str]] = None,
) -> list[ModelUnderTest]:
    """Build a worklist for a run mode.

    quick: one configured test model per provider; all: every model;
    individual: models whose ``provider:model`` key is in ``selected``.
    """
    models = list(all_models)
    mode = TestMode(mode)

    if mode == TestMode.QUICK:
        quick = []
        for provider, model_id in (test_models or {}).items():
            match = next(
                (m for m in models if m.provider == provider and m.model == model_id), None
            )
            if match is not None:
                quick.append(match)
        return quick

    if mode == TestMode.ALL:
        return models

    selected = selected or set()
    return [m for m in models if m.key in selected]


class ValidationRunner:
    """Runs a worklist against an ``ApiClient``, one model at a time."""

    def __init__(self, client: ApiClient, timeout_seconds: Optional[float] = None):
        self.client = client
        self.timeout_seconds = timeout_seconds
        self._results: dict[int, TestResult] = {}
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def results(self) -> list[TestResult]:
        """Copies of the latest result per model, in worklist order."""
        return [r.model_copy() for r in self._results.values()]

    def _emit(self, index: int, result: TestResult, on_result: ResultCallback) -> None:
        # keyed by worklist position; one provider:model may appear twice
        self._results[index] = result
        on_result(result.model_copy())

    async def run(
        self,
        models: list[ModelUnderTest],
        api_keys: Mapping[str, str],
        on_result: ResultCallback,
        should_stop: Optional[StopPredicate] = None,
    ) -> None:
        if self._running:
            raise RuntimeError("A validation run is already in progress")
        self._running = True
        self._results = {}
        should_stop = should_stop or (lambda: False)

        try:
            for index, model in enumerate(models):
                self._emit(index, TestResult.for_model(model, TestStatus.PENDING), on_result)

            for index, model in enumerate(models):
                if should_stop():
                    logger.info("Validation run stopped, skipping %d models", len(models) - index)
                    for position in range(index, len(models)):
                        self._emit(
                            position,
                            TestResult.for_model(models[position], TestStatus.SKIPPED),
                            on_result,
                        )
                    return

                self._emit(index, TestResult.for_model(model, TestStatus.RUNNING), on_result)

                api_key = api_keys.get(model.provider)
                if not api_key:
                    self._emit(
                        index,
                        TestResult.for_model(
                            model,
                            TestStatus.FAILED,
                            error=f"Missing API key for provider '{model.provider}'",
                        ),
                        on_result,
                    )
                    continue

                self._emit(index, await self._test_model(model, api_key), on_result)
        finally:
            self._running = False

    async def _test_model(self, model: ModelUnderTest, api_key: str) -> TestResult:
        is_image = model.type == ModelType.IMAGE
        request = GenerationRequest(
            provider=model.provider,
            model=model.model,
            prompt=get_test_prompt(model.provider, is_image),
            api_key=api_key,
        )
        call = self.client.generate_image if is_image else self.client.generate_text

        start = time.perf_counter()
        try:
            if self.timeout_seconds:
                result = await asyncio.wait_for(call(request), self.timeout_seconds)
            else:
                result = await call(request)
        except asyncio.TimeoutError:
            return TestResult.for_model(
                model,
                TestStatus.FAILED,
                error=f"Request timeout ({self.timeout_seconds}s)",
            )
        except Exception as e:
            return TestResult.for_model(
                model, TestStatus.FAILED, error=str(e) or e.__class__.__name__
            )

        if isinstance(result, ApiErrorResult):
            logger.info("%s failed: %s", model.key, result.error)
            return TestResult.for_model(
                model, TestStatus.FAILED, error=result.error, status_code=result.status
            )

        latency = result.latency or int(round((time.perf_counter() - start) * 1000))
        if isinstance(result, ImageResult):
            return TestResult.for_model(
                model, TestStatus.SUCCESS, latency=latency, image_url=result.image_url
            )
        return TestResult.for_model(
            model,
            TestStatus.SUCCESS,
            latency=latency,
            tokens=result.tokens,
            content=result.content,
        )
