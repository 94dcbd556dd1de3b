"""Validation run data models."""

from __future__ import annotations

import time
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ModelType(str, Enum):
    TEXT = "text"
    IMAGE = "image"


class TestStatus(str, Enum):
    __test__ = False

    PENDING = "pending"
    RUNNING = "running"
    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"


class TestMode(str, Enum):
    __test__ = False

    QUICK = "quick"
    ALL = "all"
    INDIVIDUAL = "individual"


TERMINAL_STATUSES = frozenset({TestStatus.SUCCESS, TestStatus.FAILED, TestStatus.SKIPPED})


class ModelUnderTest(BaseModel):
    model_config = ConfigDict(frozen=True, use_enum_values=True)

    provider: str
    model: str
    label: str = ""
    type: ModelType = ModelType.TEXT

    @field_validator("provider", mode="before")
    @classmethod
    def _provider_value(cls, value):
        return value.value if isinstance(value, Enum) else value

    @property
    def key(self) -> str:
        return f"{self.provider}:{self.model}"


def _now_ms() -> int:
    return int(time.time() * 1000)


class TestResult(BaseModel):
    __test__ = False

    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)

    provider: str
    model: str
    model_label: str = Field(default="", alias="modelLabel")
    status: TestStatus = TestStatus.PENDING
    type: ModelType = ModelType.TEXT
    latency: Optional[int] = None
    tokens: Optional[int] = None
    content: Optional[str] = None
    image_url: Optional[str] = Field(default=None, alias="imageUrl")
    error: Optional[str] = None
    status_code: Optional[int] = Field(default=None, alias="statusCode")
    timestamp: int = Field(default_factory=_now_ms)

    @property
    def key(self) -> str:
        return f"{self.provider}:{self.model}"

    @classmethod
    def for_model(cls, model: ModelUnderTest, status: TestStatus, **fields) -> "TestResult":
        return cls(
            provider=model.provider,
            model=model.model,
            model_label=model.label or model.model,
            status=status,
            type=model.type,
            **fields,
        )


class TestSummary(BaseModel):
    __test__ = False

    model_config = ConfigDict(populate_by_name=True)

    total: int = 0
    tested: int = 0
    running: int = 0
    passed: int = 0
    failed: int = 0
    skipped: int = 0
    avg_latency: int = Field(default=0, alias="avgLatency")
    total_tokens: int = Field(default=0, alias="totalTokens")


def summarize(results: list[TestResult]) -> TestSummary:
    """Aggregate a run's latest results into counts and averages."""
    passed = [r for r in results if r.status == TestStatus.SUCCESS]
    failed = sum(1 for r in results if r.status == TestStatus.FAILED)
    skipped = sum(1 for r in results if r.status == TestStatus.SKIPPED)
    running = sum(1 for r in results if r.status == TestStatus.RUNNING)
    latencies = [r.latency for r in passed if r.latency is not None]

    return TestSummary(
        total=len(results),
        tested=len(passed) + failed,
        running=running,
        passed=len(passed),
        failed=failed,
        skipped=skipped,
        avg_latency=round(sum(latencies) / len(latencies)) if latencies else 0,
        total_tokens=sum(r.tokens or 0 for r in passed),
    )
