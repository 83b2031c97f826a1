# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""
Helpers shared by the CLI subcommands.

Builds a formatter from the CLI context and turns formatter errors into
user-facing messages.
"""

import logging
from typing import Optional

import typer

from shandy_sqlfmt.config import Settings
from shandy_sqlfmt.errors import (
    ConfigurationError,
    ExecutionFailed,
    FormatterError,
    InvalidOutput,
    NotInstalled,
)
from shandy_sqlfmt.formatter import SqlfmtFormatter
from shandy_sqlfmt.interpreter import discover_interpreter, fixed_interpreter
from shandy_sqlfmt.registry import ToolInfo

logger = logging.getLogger(__name__)


def build_formatter(ctx: typer.Context, tool: Optional[ToolInfo] = None) -> SqlfmtFormatter:
    """Create a formatter from the settings stored by the main callback."""
    state = ctx.obj or {}
    settings = state.get("settings") or Settings()
    interpreter = state.get("interpreter")
    lookup = fixed_interpreter(interpreter) if interpreter else discover_interpreter
    return SqlfmtFormatter(settings, interpreter_lookup=lookup, tool=tool)


def describe_error(error: Exception) -> str:
    """
    Message shown to the user for a formatter or file failure.

    Args:
        error: The failure raised by the formatter, or a file error

    Returns:
        One message; detail beyond it is in the log
    """
    if not isinstance(error, FormatterError) or isinstance(error, NotInstalled):
        return f"Error: {error}"
    if isinstance(error, ExecutionFailed):
        return error.stderr.strip() or f"Error: sqlfmt exited with code {error.returncode}"
    if isinstance(error, (ConfigurationError, InvalidOutput)):
        return f"Error: {error}"
    return "Error: formatting failed. Run with --verbose and see the log for details."


def report_error(error: Exception) -> None:
    """Log a failure and show it to the user."""
    logger.error(f"{type(error).__name__}: {error}")
    typer.echo(describe_error(error), err=True)
