"""Evvl command line: validate models, run one prompt, probe local servers."""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path

import click

PROVIDER_CHOICES = ["openai", "anthropic", "gemini", "openrouter", "ollama", "lmstudio"]


def _setup_logging(verbose: bool) -> None:
    from rich.logging import RichHandler

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )


def _load_config(config_path: str | None, runtime: str | None) -> dict:
    from ..core.config import get_effective_config

    overrides = {"runtime": runtime} if runtime else None
    return get_effective_config(
        Path(config_path) if config_path else None, cli_overrides=overrides
    )


@click.group()
@click.option("--config", "-c", "config_path", type=click.Path(exists=True, dir_okay=False), help="Config file (evvl.yaml)")
@click.option("--runtime", type=click.Choice(["auto", "web", "desktop"]), help="Force the runtime environment")
@click.option("--verbose", "-v", is_flag=True, help="Debug logging")
@click.pass_context
def evvl_cli(ctx: click.Context, config_path: str | None, runtime: str | None, verbose: bool) -> None:
    """Evvl - compare and validate AI model providers."""
    _setup_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["runtime"] = runtime


@evvl_cli.command()
@click.option("--mode", "-m", type=click.Choice(["quick", "all", "individual"]), default="quick")
@click.option("--model", "models", multiple=True, help="provider:model[:image|text], repeatable")
@click.option("--junit", "junit_path", type=click.Path(dir_okay=False), help="Write JUnit XML results")
@click.option("--json", "json_path", type=click.Path(dir_okay=False), help="Write JSON results")
@click.option("--max-failures", type=int, help="Skip remaining models after N failures")
@click.option("--ci", is_flag=True, help="CI mode: exit non-zero on failures")
@click.pass_context
def validate(
    ctx: click.Context,
    mode: str,
    models: tuple[str, ...],
    junit_path: str | None,
    json_path: str | None,
    max_failures: int | None,
    ci: bool,
) -> None:
    """Run an API validation pass across model configurations."""
    from ..core.orchestrator import run_validation_session

    config = _load_config(ctx.obj["config_path"], ctx.obj["runtime"])
    try:
        exit_code = asyncio.run(
            run_validation_session(
                config,
                mode=mode,
                model_specs=list(models),
                junit_path=Path(junit_path) if junit_path else None,
                json_path=Path(json_path) if json_path else None,
                max_failures=max_failures,
            )
        )
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--model")
    if ci or exit_code == 2:
        sys.exit(exit_code)


@evvl_cli.command()
@click.argument("prompt")
@click.option("--provider", "-p", type=click.Choice(PROVIDER_CHOICES), required=True)
@click.option("--model", "-m", required=True, help="Model slug")
@click.option("--kind", type=click.Choice(["text", "image", "response"]), default="text")
@click.option("--size", help="Image size, e.g. 1024x1024")
@click.option("--quality", type=click.Choice(["standard", "hd"]))
@click.option("--style", type=click.Choice(["vivid", "natural"]))
@click.option("--endpoint", help="Local provider endpoint override")
@click.pass_context
def generate(
    ctx: click.Context,
    prompt: str,
    provider: str,
    model: str,
    kind: str,
    size: str | None,
    quality: str | None,
    style: str | None,
    endpoint: str | None,
) -> None:
    """Send one prompt to one provider/model and print the result."""
    from ..api.client import create_api_client
    from ..core.config import resolve_api_keys
    from ..models.generation import ApiErrorResult, GenerationRequest, ImageOptions

    config = _load_config(ctx.obj["config_path"], ctx.obj["runtime"])
    client = create_api_client(config)
    options = None
    if any((size, quality, style, endpoint)):
        options = ImageOptions(size=size, quality=quality, style=style, endpoint=endpoint)
    request = GenerationRequest(
        provider=provider,
        model=model,
        prompt=prompt,
        api_key=resolve_api_keys(config).get(provider, ""),
        options=options,
    )

    call = {
        "text": client.generate_text,
        "image": client.generate_image,
        "response": client.generate_response,
    }[kind]
    result = asyncio.run(call(request))

    if isinstance(result, ApiErrorResult):
        status = f" (HTTP {result.status})" if result.status else ""
        click.echo(f"Error{status}: {result.error}", err=True)
        sys.exit(1)

    if kind == "image":
        click.echo(result.image_url)
        click.echo(f"Revised prompt: {result.revised_prompt}")
    else:
        click.echo(result.content)
        click.echo(f"[{result.tokens} tokens, {result.latency} ms]", err=True)


@evvl_cli.command()
@click.argument("provider", type=click.Choice(["ollama", "lmstudio"]))
@click.option("--endpoint", help="Endpoint override")
@click.option("--list-models", is_flag=True, help="Also list installed models")
@click.pass_context
def health(ctx: click.Context, provider: str, endpoint: str | None, list_models: bool) -> None:
    """Probe a local provider and optionally list its models."""
    from ..providers.errors import ProviderError
    from ..providers.registry import get_provider_adapter

    config = _load_config(ctx.obj["config_path"], ctx.obj["runtime"])
    adapter = get_provider_adapter(provider, config)

    status = asyncio.run(adapter.check_health(endpoint))
    if not status.running:
        click.echo(f"{adapter.display_name} at {status.endpoint}: {status.error}", err=True)
        sys.exit(1)
    click.echo(f"{adapter.display_name} is running at {status.endpoint}")

    if list_models:
        try:
            models = asyncio.run(adapter.list_models(endpoint))
        except ProviderError as e:
            click.echo(f"Error: {e.message}", err=True)
            sys.exit(1)
        for m in models:
            click.echo(f"  {m.id}")


@evvl_cli.command()
@click.option("--host", help="Bind host")
@click.option("--port", type=int, help="Bind port")
@click.pass_context
def serve(ctx: click.Context, host: str | None, port: int | None) -> None:
    """Run the same-origin proxy server."""
    import uvicorn

    from ..server.app import create_app

    config = _load_config(ctx.obj["config_path"], ctx.obj["runtime"])
    server_config = config.get("server", {})
    uvicorn.run(
        create_app(config),
        host=host or server_config.get("host", "127.0.0.1"),
        port=port or server_config.get("port", 3000),
    )


def main() -> None:
    evvl_cli()


if __name__ == "__main__":
    main()
