# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""
Config command for shandy-sqlfmt.

Provides configuration validation, formatter checking and settings display.
"""

import asyncio
import logging

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from shandy_sqlfmt.commands.common import build_formatter
from shandy_sqlfmt.errors import FormatterError
from shandy_sqlfmt.registry import list_tools
from shandy_sqlfmt.validation import validate_config

app = typer.Typer(help="Manage and validate configuration")
console = Console()
logger = logging.getLogger(__name__)


@app.command()
def validate(ctx: typer.Context):
    """
    Validate configuration structure and formatter availability.

    Performs full validation:
    - YAML structure and value types
    - Formatter executable exists, is executable and answers --version
    """
    config = ctx.obj.get("config", {})

    typer.echo("Validating configuration...")
    typer.echo()

    structure_issues = validate_config(config)
    if structure_issues:
        typer.echo("Structure Issues:")
        for issue in structure_issues:
            typer.echo(f"  ⚠️  {issue}")
        typer.echo()
    else:
        typer.echo("✓ Configuration structure is valid")
        typer.echo()

    resolved = asyncio.run(build_formatter(ctx).resolve_command())
    typer.echo("Formatter:")
    if resolved.is_available:
        typer.echo(f"  ✓ {resolved.path}")
    else:
        typer.echo(f"  ✗ {resolved.path} not found or not executable")
        raise typer.Exit(1)

    typer.echo()
    typer.echo("Configuration validation complete!")


@app.command()
def check(ctx: typer.Context):
    """
    Check that the configured formatter can be run.

    Resolves the path the same way a format request does, including the
    interpreter environment and the --version liveness probe.
    """
    formatter = build_formatter(ctx)
    resolved = asyncio.run(formatter.resolve_command())

    if resolved.is_available:
        typer.echo(f"✓ {resolved.path}")
        return

    typer.echo(f"✗ {resolved.path} is not available")
    typer.echo(f"  {formatter.tool.install_hint}")
    raise typer.Exit(1)


@app.command()
def show(ctx: typer.Context):
    """
    Show the effective settings and the resolved command line.
    """
    formatter = build_formatter(ctx)
    settings = formatter.settings

    table = Table(show_header=False)
    table.add_column("Setting", style="bold")
    table.add_column("Value")
    table.add_row("path", settings.path or "-")
    table.add_row("args", " ".join(settings.args) or "-")
    table.add_row("workspace", str(formatter.workspace.root) if formatter.workspace.root else "-")
    for name, folder in formatter.workspace.folders.items():
        table.add_row(f"workspace_folders.{name}", str(folder))
    table.add_row("timeout", f"{settings.timeout:g}s" if settings.timeout else "-")
    table.add_row(
        "probe_timeout", f"{settings.probe_timeout:g}s" if settings.probe_timeout else "-"
    )
    table.add_row("strict_variables", str(settings.strict_variables).lower())
    console.print(table)

    try:
        invocation = asyncio.run(formatter.prepare())
    except FormatterError as e:
        logger.debug(f"Could not resolve command: {e}")
        console.print(f"\n[red]✗[/red] {escape(str(e))}")
        raise typer.Exit(1)

    args = escape(" ".join(invocation.args))
    console.print(f"\nCommand: [bold]{escape(invocation.command)}[/bold] {args}")


@app.command()
def tools(ctx: typer.Context):
    """
    List the registered formatter tools with installation status and hints.

    Each tool is located the way a format request would find it.
    """
    typer.echo("Registered Tools:")
    typer.echo()

    for tool in list_tools():
        resolved = asyncio.run(build_formatter(ctx, tool).resolve_command())
        status = "✓ Installed" if resolved.is_available else "✗ Not installed"

        typer.echo(f"{tool.name} - {status}")
        typer.echo(f"  Description: {tool.description}")
        typer.echo(f"  Path: {resolved.path}")
        if not resolved.is_available:
            typer.echo(f"  Install: {tool.install_hint}")
        typer.echo()
