# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""
Interpreter discovery for shandy-sqlfmt.

Finds the Python interpreter associated with a workspace folder. The result
is a list of zero or one paths; the locator looks for the formatter next to
it and ${interpreter} expands to it.
"""

import logging
import os
from pathlib import Path
from typing import Callable, List, Mapping, Optional

logger = logging.getLogger(__name__)

InterpreterLookup = Callable[[Optional[Path], Mapping[str, str]], List[str]]

VENV_DIRS = (".venv", "venv")


def venv_python(venv: Path) -> Path:
    """Path of the python executable inside a virtual environment."""
    if os.name == "nt":
        return venv / "Scripts" / "python.exe"
    return venv / "bin" / "python"


def discover_interpreter(
    folder: Optional[Path], environ: Optional[Mapping[str, str]] = None
) -> List[str]:
    """
    Find the interpreter for a workspace folder.

    Looks at the active virtual environment (VIRTUAL_ENV) first, then a
    .venv or venv directory inside the folder.

    Args:
        folder: Workspace folder the document belongs to, if any
        environ: Environment to read (defaults to os.environ)

    Returns:
        List with the interpreter path, or an empty list
    """
    environ = os.environ if environ is None else environ

    active = environ.get("VIRTUAL_ENV")
    if active:
        python = venv_python(Path(active))
        if python.exists():
            logger.debug(f"Using active virtual environment interpreter: {python}")
            return [str(python)]

    if folder is not None:
        for name in VENV_DIRS:
            python = venv_python(folder / name)
            if python.exists():
                logger.debug(f"Using workspace interpreter: {python}")
                return [str(python)]

    return []


def fixed_interpreter(path: str) -> InterpreterLookup:
    """Lookup that always returns the given interpreter path."""

    def lookup(folder: Optional[Path], environ: Mapping[str, str]) -> List[str]:
        return [path]

    return lookup
