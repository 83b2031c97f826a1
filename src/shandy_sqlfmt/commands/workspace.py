"""
Workspace command for shandy-sqlfmt.

Runs sqlfmt in place over a whole workspace folder.

Copyright 2025 Ben Mensi
Licensed under the Apache License, Version 2.0
"""

import asyncio
from typing import Optional

import typer

from shandy_sqlfmt.commands.common import build_formatter, report_error
from shandy_sqlfmt.errors import FormatterError

app = typer.Typer(help="Format every SQL file in a workspace", invoke_without_command=True)


@app.callback(invoke_without_command=True)
def workspace_command(
    ctx: typer.Context,
    root: Optional[str] = typer.Argument(
        None, help="Workspace root (default: configured workspace)"
    ),
):
    """Format a whole workspace in place.

    sqlfmt receives the workspace root and rewrites the files itself.

    Examples:
        shandy-sqlfmt workspace
        shandy-sqlfmt workspace ~/projects/analytics
    """
    formatter = build_formatter(ctx)

    try:
        asyncio.run(formatter.format_workspace(root))
    except FormatterError as e:
        report_error(e)
        raise typer.Exit(1)

    typer.echo("✓ Workspace formatted")
