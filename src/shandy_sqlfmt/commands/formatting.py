"""
Format command for shandy-sqlfmt.

Formats files (or stdin) by piping them through sqlfmt, or lets sqlfmt
rewrite them in place.

Copyright 2025 Ben Mensi
Licensed under the Apache License, Version 2.0
"""

import asyncio
import sys
from typing import List, Optional

import typer

from shandy_sqlfmt.commands.common import build_formatter, report_error
from shandy_sqlfmt.errors import FormatterError, NotInstalled

app = typer.Typer(help="Format SQL files with sqlfmt", invoke_without_command=True)


@app.callback(invoke_without_command=True)
def format_command(
    ctx: typer.Context,
    files: Optional[List[str]] = typer.Argument(None, help="Files to format, or - for stdin"),
    check: bool = typer.Option(
        False,
        "--check",
        help="Report files that would change without writing them",
    ),
    in_place: bool = typer.Option(
        False,
        "--in-place",
        help="Pass the paths to sqlfmt and let it rewrite the files",
    ),
    stdin_filename: Optional[str] = typer.Option(
        None,
        "--stdin-filename",
        help="Path used to pick the workspace folder when reading stdin",
    ),
):
    """Format SQL files.

    By default each file is read, piped through sqlfmt and written back if
    the result differs.

    Examples:
        shandy-sqlfmt format models/orders.sql
        cat query.sql | shandy-sqlfmt format -
        shandy-sqlfmt format --check models/*.sql
    """
    if not files:
        typer.echo(ctx.get_help())
        raise typer.Exit(0)

    formatter = build_formatter(ctx)

    if "-" in files:
        if len(files) > 1:
            typer.echo("Error: '-' cannot be combined with other paths", err=True)
            raise typer.Exit(1)
        if check:
            typer.echo("Error: --check cannot be combined with stdin", err=True)
            raise typer.Exit(1)
        _format_stdin(formatter, stdin_filename)
        return

    if in_place:
        if check:
            typer.echo("Error: --check cannot be combined with --in-place", err=True)
            raise typer.Exit(1)
        try:
            asyncio.run(formatter.format_in_place(files))
        except FormatterError as e:
            report_error(e)
            raise typer.Exit(1)
        typer.echo(f"✓ Formatted {len(files)} path(s)")
        return

    results = asyncio.run(formatter.format_files(files, write=not check))

    failed = [r for r in results if not r.ok]
    changed = [r for r in results if r.ok and r.changed]

    # A missing formatter fails every file the same way; say it once
    not_installed = [r for r in failed if isinstance(r.error, NotInstalled)]
    if not_installed and len(not_installed) == len(results):
        report_error(not_installed[0].error)
        raise typer.Exit(1)

    for result in results:
        if not result.ok:
            typer.echo(f"✗ {result.path}", err=True)
            report_error(result.error)
        elif result.changed:
            typer.echo(f"{'Would reformat' if check else '✓ Reformatted'} {result.path}")

    unchanged = len(results) - len(changed) - len(failed)
    typer.echo(
        f"{len(changed)} file(s) {'would be reformatted' if check else 'reformatted'}, "
        f"{unchanged} unchanged, {len(failed)} failed"
    )

    if failed or (check and changed):
        raise typer.Exit(1)


def _format_stdin(formatter, stdin_filename: Optional[str]) -> None:
    """Read a document from stdin and write the formatted text to stdout."""
    text = sys.stdin.read()
    try:
        formatted = asyncio.run(formatter.format_text(text, stdin_filename))
    except FormatterError as e:
        report_error(e)
        raise typer.Exit(1)
    typer.echo(formatted, nl=False)
