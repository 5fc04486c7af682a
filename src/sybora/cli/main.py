"""Sybora command line: run the API server or AI tasks on local files."""

from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.markup import escape

from ..core.config import get_effective_config, resolve_api_keys

console = Console()
err_console = Console(stderr=True)


def _load_config(config_path: Optional[str], overrides: Optional[dict] = None) -> dict:
    return get_effective_config(Path(config_path) if config_path else None, overrides)


def _openrouter(config: dict):
    from ..providers.base import get_ai_provider

    key = resolve_api_keys(config).get("openrouter")
    if not key:
        err_console.print("  [red]ERROR[/red] OPENROUTER_API_KEY is not set")
        sys.exit(1)
    return get_ai_provider(config, "openrouter", key)


def _finish(outcome, output: Optional[str]) -> None:
    if not outcome.success:
        err_console.print(f"  [red]FAILED[/red] {escape(outcome.error or 'unknown error')}")
        sys.exit(1)
    if output:
        Path(output).write_text(outcome.text, encoding="utf-8")
        err_console.print(f"  [green]OK[/green] Wrote {output}")
    else:
        click.echo(outcome.text)


config_option = click.option(
    "--config", "-c", "config_path", type=click.Path(exists=True, dir_okay=False),
    help="Path to sybora.yaml",
)


@click.group()
def cli() -> None:
    """Sybora - AI-assisted Sybase to Oracle conversion."""


@cli.command()
@config_option
@click.option("--host", type=str, help="Bind address")
@click.option("--port", type=int, help="Bind port")
def serve(config_path: Optional[str], host: Optional[str], port: Optional[int]) -> None:
    """Run the HTTP API."""
    import uvicorn

    from ..api.app import create_app

    config = _load_config(config_path, {"server": {"host": host, "port": port}})

    console.print(f"  [bold cyan]SYBORA[/bold cyan] http://{config['server']['host']}:{config['server']['port']}")
    uvicorn.run(
        create_app(config),
        host=config["server"]["host"],
        port=config["server"]["port"],
    )


@cli.command()
@config_option
@click.argument("source", type=click.Path(exists=True, dir_okay=False))
@click.option("--instruction", "-i", required=True, help="How to rewrite the code")
@click.option("--language", "-l", type=str, help="Source language, e.g. sql")
@click.option("--output", "-o", type=click.Path(dir_okay=False), help="Write result here")
def rewrite(
    config_path: Optional[str],
    source: str,
    instruction: str,
    language: Optional[str],
    output: Optional[str],
) -> None:
    """Rewrite SOURCE following an instruction."""
    from ..core.assistant import rewrite_code

    config = _load_config(config_path)
    code = Path(source).read_text(encoding="utf-8")
    outcome = asyncio.run(rewrite_code(_openrouter(config), code, instruction, language, config))
    _finish(outcome, output)


@cli.command()
@config_option
@click.argument("source", type=click.Path(exists=True, dir_okay=False))
@click.option("--language", "-l", type=str, help="Source language, e.g. sql")
def explain(config_path: Optional[str], source: str, language: Optional[str]) -> None:
    """Explain the code in SOURCE."""
    from ..core.assistant import explain_code

    config = _load_config(config_path)
    code = Path(source).read_text(encoding="utf-8")
    outcome = asyncio.run(explain_code(_openrouter(config), code, language, config))
    _finish(outcome, None)


@cli.command()
@config_option
@click.argument("source", type=click.Path(exists=True, dir_okay=False))
@click.option("--output", "-o", type=click.Path(dir_okay=False), help="Write result here")
def convert(config_path: Optional[str], source: str, output: Optional[str]) -> None:
    """Convert Sybase T-SQL in SOURCE to Oracle PL/SQL."""
    from ..core.assistant import convert_code

    config = _load_config(config_path)
    path = Path(source)
    code = path.read_text(encoding="utf-8")
    outcome = asyncio.run(convert_code(_openrouter(config), code, config, path.stem))
    _finish(outcome, output)


@cli.command()
@config_option
@click.argument("message")
def chat(config_path: Optional[str], message: str) -> None:
    """Ask the migration assistant a question."""
    from ..core.chat import respond
    from ..providers.base import get_ai_provider

    config = _load_config(config_path)
    providers = {
        name: get_ai_provider(config, name, key)
        for name, key in resolve_api_keys(config).items()
        if key
    }
    if not providers:
        err_console.print("  [red]ERROR[/red] No API keys configured")
        sys.exit(1)

    outcome, reply = asyncio.run(respond(message, [], providers, config))
    if reply is None:
        err_console.print(f"  [red]FAILED[/red] {escape(outcome.error or 'unknown error')}")
        sys.exit(1)
    click.echo(reply.message)
    if reply.suggestions:
        console.print("\n  [cyan]Suggestions:[/cyan]")
        for suggestion in reply.suggestions:
            console.print(f"  - {escape(suggestion)}")


@cli.command()
@config_option
@click.option("--json", "as_json", is_flag=True, help="Print the raw report")
def check(config_path: Optional[str], as_json: bool) -> None:
    """Check provider keys and connectivity."""
    from ..core.diagnostics import check_providers

    config = _load_config(config_path)
    report = asyncio.run(check_providers(config, resolve_api_keys(config)))
    if as_json:
        click.echo(json.dumps(report, indent=2))
        return

    for name, result in report["tests"].items():
        if result["success"]:
            console.print(f"  [green]OK[/green] {name}: {result['model']} ({result['responseLength']} chars)")
        else:
            console.print(f"  [red]FAILED[/red] {name}: {escape(result['error'] or '')}")


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
