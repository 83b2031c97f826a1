# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""
Error types raised while locating and running the formatter.

Each class maps to a different remedy for the user: install the tool,
fix the input or configuration, or look at the environment.
"""

from typing import Optional

INSTALL_URL = "https://github.com/tconbeer/sqlfmt"


class FormatterError(Exception):
    """Base class for formatter failures."""

    pass


class ConfigurationError(FormatterError, ValueError):
    """Raised when configuration cannot be used as given."""

    pass


class NotInstalled(FormatterError):
    """Raised when the formatter executable cannot be located or run."""

    def __init__(self, command: str, install_hint: Optional[str] = None):
        self.command = command
        self.install_hint = install_hint or f"Please install shandy-sqlfmt ({INSTALL_URL}) first."
        super().__init__(f'"{command}" is not found. {self.install_hint}')


class ExecutionFailed(FormatterError):
    """Raised when the formatter ran and exited with a nonzero code."""

    def __init__(self, command: str, returncode: int, stderr: str):
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        detail = stderr.strip() or f"exit code {returncode}"
        super().__init__(detail)


class SpawnError(FormatterError):
    """Raised when the operating system could not start the formatter."""

    def __init__(self, command: str, error: OSError):
        self.command = command
        self.error = error
        super().__init__(f'Could not start "{command}": {error}')


class Cancelled(FormatterError):
    """Raised when a running formatter was terminated on request."""

    def __init__(self, command: str):
        self.command = command
        super().__init__(f'Formatting with "{command}" was cancelled')


class FormatterTimeout(FormatterError):
    """Raised when the formatter exceeded its time limit and was killed."""

    def __init__(self, command: str, timeout: float):
        self.command = command
        self.timeout = timeout
        super().__init__(f'"{command}" did not finish within {timeout:g}s')


class InvalidOutput(FormatterError):
    """Raised when the formatter printed output that is not valid text."""

    def __init__(self, command: str, error: UnicodeDecodeError):
        self.command = command
        self.error = error
        super().__init__(
            f'"{command}" produced output that is not valid {error.encoding}: {error.reason}'
        )
