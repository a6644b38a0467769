"""
CLI entry point for toolbridge.

Commands:
    toolbridge chat [TARGET]      - Chat with the model using one provider
    toolbridge chat --multi       - Chat using every provider in the config
    toolbridge tools [TARGET]     - List the tool catalog
    toolbridge config             - Manage configuration
    toolbridge version            - Show version information
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from toolbridge.config.settings import (
    DEFAULT_CONFIG,
    ClientSettings,
    ConfigError,
    get_config_file,
    load_settings,
)
from toolbridge.engine.loop import LoopConfig
from toolbridge.errors import ProviderConnectionError

if TYPE_CHECKING:
    from toolbridge.client import ToolbridgeClient

app = typer.Typer(
    name="toolbridge",
    help="Tool-use client - let a language model call tools from one or more providers",
    no_args_is_help=True,
)
console = Console()


def _load(config_path: Path | None) -> ClientSettings:
    try:
        return load_settings(config_path)
    except ConfigError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        sys.exit(1)


async def _connect(
    client: ToolbridgeClient, target: str | None, multi: bool, settings: ClientSettings
) -> None:
    if multi:
        if not settings.providers:
            raise ProviderConnectionError("--multi", "no providers configured")
        console.print("Multi-provider mode")
        await client.connect_multi(settings.providers)
    else:
        if not target:
            raise ProviderConnectionError("", "a provider target is required without --multi")
        await client.connect_single(target)


async def _chat(target: str | None, multi: bool, settings: ClientSettings) -> int:
    from toolbridge.cli.session import ChatSession
    from toolbridge.client import ToolbridgeClient

    async with ToolbridgeClient(settings=settings) as client:
        try:
            await _connect(client, target, multi, settings)
        except ProviderConnectionError as e:
            console.print(f"[red]Fatal error:[/red] {e}")
            return 1
        await ChatSession(client, console=console).run()
    return 0


async def _list_tools(target: str | None, multi: bool, settings: ClientSettings) -> int:
    from toolbridge.client import ToolbridgeClient

    async with ToolbridgeClient(settings=settings) as client:
        try:
            await _connect(client, target, multi, settings)
        except ProviderConnectionError as e:
            console.print(f"[red]Fatal error:[/red] {e}")
            return 1

        table = Table(title=f"Tool Catalog ({client.mode.value if client.mode else '-'})")
        table.add_column("#", justify="right")
        table.add_column("Tool", style="cyan")
        table.add_column("Description")
        for index, tool in enumerate(client.tools(), start=1):
            table.add_row(str(index), tool.name, tool.description or "-")
        console.print(table)
    return 0


@app.command()
def chat(
    target: str | None = typer.Argument(
        None, help="Provider to connect: registered name or module:attribute"
    ),
    multi: bool = typer.Option(
        False, "--multi", help="Connect every provider listed in the config file"
    ),
    config_path: Path | None = typer.Option(None, "--config", "-c", help="Config file path"),
    model: str | None = typer.Option(None, "--model", "-m", help="Model identifier"),
    max_iterations: int | None = typer.Option(
        None, "--max-iterations", help="Model rounds allowed per query"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """Start an interactive chat session."""
    from toolbridge.logging import configure_logging

    configure_logging(verbose)
    settings = _load(config_path)
    if model:
        settings = settings.model_copy(update={"model": model})
    if max_iterations is not None:
        try:
            loop = LoopConfig.model_validate(
                {**settings.loop.model_dump(), "max_iterations": max_iterations}
            )
        except ValidationError as e:
            console.print(f"[red]Error:[/red] invalid --max-iterations: {e.errors()[0]['msg']}")
            sys.exit(1)
        settings = settings.model_copy(update={"loop": loop})

    exit_code = asyncio.run(_chat(target, multi, settings))
    if exit_code:
        sys.exit(exit_code)


@app.command()
def tools(
    target: str | None = typer.Argument(
        None, help="Provider to connect: registered name or module:attribute"
    ),
    multi: bool = typer.Option(
        False, "--multi", help="Connect every provider listed in the config file"
    ),
    config_path: Path | None = typer.Option(None, "--config", "-c", help="Config file path"),
) -> None:
    """List the tools the model would see."""
    settings = _load(config_path)
    exit_code = asyncio.run(_list_tools(target, multi, settings))
    if exit_code:
        sys.exit(exit_code)


@app.command()
def config(
    show: bool = typer.Option(False, "--show", help="Show current configuration"),
    init: bool = typer.Option(False, "--init", help="Initialize default configuration"),
) -> None:
    """Manage toolbridge configuration."""
    config_file = get_config_file()

    if show:
        if config_file.exists():
            console.print(config_file.read_text(), markup=False)
        else:
            console.print("[yellow]No configuration file found.[/yellow]")
            console.print(f"Run 'toolbridge config --init' to create one at {config_file}")
        return

    if init:
        config_file.parent.mkdir(parents=True, exist_ok=True)
        config_file.write_text(DEFAULT_CONFIG)
        console.print(f"[green]Created configuration at {config_file}[/green]")
        return

    console.print("Usage: toolbridge config [--show | --init]")


@app.command()
def version() -> None:
    """Show version information."""
    from toolbridge import __version__

    console.print(f"toolbridge v{__version__}")


if __name__ == "__main__":
    app()
