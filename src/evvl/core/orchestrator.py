"""Validation session orchestrator used by the CLI.

Builds the worklist, runs it through ``ValidationRunner`` while printing
progress, then writes optional JUnit/JSON reports.
"""

from __future__ import annotations

import time
from pathlib import Path
from typing import Iterable, Optional

from rich.console import Console
from rich.table import Table

from ..api.client import ApiClient, create_api_client
from ..formatters.junit import export_junit_results, export_results_json
from ..models.validation import (
    TERMINAL_STATUSES,
    ModelType,
    ModelUnderTest,
    TestMode,
    TestResult,
    TestStatus,
    summarize,
)
from .config import resolve_api_keys
from .runner import ValidationRunner, get_models_for_mode, is_image_model

console = Console()

EXIT_OK = 0
EXIT_FAILURES = 1
EXIT_NO_MODELS = 2

_STATUS_STYLE = {
    TestStatus.SUCCESS: "[green]OK[/green]",
    TestStatus.FAILED: "[red]FAILED[/red]",
    TestStatus.SKIPPED: "[yellow]SKIPPED[/yellow]",
}


def parse_model_spec(spec: str) -> ModelUnderTest:
    """Parse ``provider:model[:image|text]`` into a ModelUnderTest.

    Model ids may themselves contain colons (``llama3.1:8b``); only a trailing
    ``:image``/``:text`` is read as the type.
    """
    provider, sep, rest = spec.partition(":")
    if not sep or not provider or not rest:
        raise ValueError(f"Invalid model spec '{spec}', expected provider:model")

    model_id, model_type = rest, None
    head, _, tail = rest.rpartition(":")
    if head and tail in ("image", "text"):
        model_id, model_type = head, ModelType(tail)

    provider = provider.strip().lower()
    if model_type is None:
        model_type = ModelType.IMAGE if is_image_model(provider, model_id) else ModelType.TEXT
    return ModelUnderTest(provider=provider, model=model_id, label=model_id, type=model_type)


def build_catalog(config: dict, extra: Iterable[ModelUnderTest] = ()) -> list[ModelUnderTest]:
    """All known models: configured list, test models, then CLI additions."""
    validation = config.get("validation", {})
    catalog: dict[str, ModelUnderTest] = {}

    for entry in validation.get("models") or []:
        model = ModelUnderTest.model_validate(entry)
        catalog.setdefault(model.key, model)
    for provider, model_id in (validation.get("test_models") or {}).items():
        model = parse_model_spec(f"{provider}:{model_id}")
        catalog.setdefault(model.key, model)
    for model in extra:
        catalog.setdefault(model.key, model)

    return list(catalog.values())


def _print_summary(results: list[TestResult]) -> None:
    table = Table(show_header=True, header_style="bold")
    table.add_column("Provider")
    table.add_column("Model")
    table.add_column("Status")
    table.add_column("Latency", justify="right")
    table.add_column("Tokens", justify="right")
    for r in results:
        table.add_row(
            r.provider,
            r.model,
            r.status,
            f"{r.latency} ms" if r.latency is not None else "-",
            str(r.tokens) if r.tokens is not None else "-",
        )
    console.print(table)

    s = summarize(results)
    console.print(
        f"  {s.passed} passed, {s.failed} failed, {s.skipped} skipped "
        f"of {s.total} (avg {s.avg_latency} ms, {s.total_tokens} tokens)"
    )


async def run_validation_session(
    config: dict,
    mode: TestMode | str = TestMode.QUICK,
    model_specs: Optional[list[str]] = None,
    junit_path: Optional[Path] = None,
    json_path: Optional[Path] = None,
    max_failures: Optional[int] = None,
    client: Optional[ApiClient] = None,
    api_keys: Optional[dict[str, str]] = None,
) -> int:
    """Run one validation session. Returns exit code."""
    start_time = time.time()
    mode = TestMode(mode)

    cli_models = [parse_model_spec(spec) for spec in model_specs or []]
    catalog = build_catalog(config, cli_models)
    worklist = get_models_for_mode(
        mode,
        catalog,
        selected={m.key for m in cli_models},
        test_models=config.get("validation", {}).get("test_models"),
    )
    if not worklist:
        console.print("  [red]ERROR[/red] No models to test")
        return EXIT_NO_MODELS

    client = client or create_api_client(config)
    api_keys = api_keys if api_keys is not None else resolve_api_keys(config)

    console.print()
    console.print("  [bold cyan]EVVL API VALIDATION[/bold cyan]")
    console.print(f"  Mode:    [white]{mode.value}[/white]")
    console.print(f"  Models:  [white]{len(worklist)}[/white]")
    console.print(f"  Backend: [white]{client.backend_name} ({client.environment.value})[/white]")
    console.print()

    failures = 0

    def on_result(result: TestResult) -> None:
        nonlocal failures
        if result.status == TestStatus.RUNNING:
            console.print(f"  [cyan]Testing {result.provider}:{result.model}...[/cyan]")
            return
        if result.status not in TERMINAL_STATUSES:
            return
        if result.status == TestStatus.FAILED:
            failures += 1
        label = _STATUS_STYLE[result.status]
        detail = f"{result.latency} ms" if result.status == TestStatus.SUCCESS else (result.error or "")
        console.print(f"  {label} {result.provider}:{result.model} {detail}")

    def should_stop() -> bool:
        return max_failures is not None and failures >= max_failures

    runner = ValidationRunner(client, config.get("validation", {}).get("timeout_seconds"))
    await runner.run(worklist, api_keys, on_result, should_stop)
    results = runner.results

    console.print()
    _print_summary(results)

    duration = time.time() - start_time
    if junit_path:
        junit = export_junit_results(results, junit_path, duration=duration)
        console.print(
            f"  [green]OK[/green] JUnit XML: {junit['total_tests']} tests, "
            f"{junit['failures']} failures"
        )
    if json_path:
        export_results_json(results, json_path)
        console.print(f"  [green]OK[/green] JSON: {json_path}")

    return EXIT_FAILURES if summarize(results).failed else EXIT_OK
