"""
Main CLI entry point for shandy-sqlfmt.

Copyright 2025 Ben Mensi
Licensed under the Apache License, Version 2.0
"""

import logging
from typing import Optional

import typer
import yaml

from shandy_sqlfmt import __version__
from shandy_sqlfmt.commands import config, formatting, workspace
from shandy_sqlfmt.config import Settings, load_config

# Initialize main app
app = typer.Typer(
    name="shandy-sqlfmt",
    help="Locate, validate and run the sqlfmt SQL formatter",
    no_args_is_help=True,
)

# Add subcommands
app.add_typer(formatting.app, name="format")
app.add_typer(workspace.app, name="workspace")
app.add_typer(config.app, name="config")


def setup_logging(verbose: bool = False):
    """Configure logging for the CLI."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


@app.callback()
def main_callback(
    ctx: typer.Context,
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to config file (default: ~/shandy.yml or ./shandy.yml)",
    ),
    interpreter: Optional[str] = typer.Option(
        None,
        "--interpreter",
        help="Python interpreter whose environment provides sqlfmt",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose logging",
    ),
):
    """
    shandy-sqlfmt: run sqlfmt over files, stdin or a whole workspace.

    The sqlfmt executable and its arguments come from a YAML config file and
    may use ${workspaceFolder}, ${userHome}, ${cwd}, ${env:NAME} and
    ${interpreter} placeholders.
    """
    state = {"config": {}, "settings": Settings(), "interpreter": interpreter, "verbose": verbose}

    setup_logging(verbose)

    commands_without_config = ["version"]
    if ctx.invoked_subcommand and ctx.invoked_subcommand not in commands_without_config:
        try:
            config_data = load_config(config_path)
            state["config"] = config_data
            state["settings"] = Settings.from_config(config_data)
            logging.debug(f"Loaded config from: {config_path or 'default location'}")
        except FileNotFoundError as e:
            # Defaults are fine unless a specific file was asked for
            if config_path:
                typer.echo(f"Error: {e}", err=True)
                raise typer.Exit(1)
            logging.debug("No config file found, using defaults")
        except yaml.YAMLError as e:
            typer.echo(f"Error: {e}", err=True)
            raise typer.Exit(1)

    ctx.obj = state


@app.command()
def version():
    """Show version information."""
    typer.echo(f"shandy-sqlfmt version {__version__}")


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
