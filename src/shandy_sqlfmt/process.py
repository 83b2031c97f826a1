# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""
Process runner for shandy-sqlfmt.

Spawns the validated formatter in one of two shapes:

- filter mode: document text on stdin, formatted text read back from stdout
- in-place mode: target paths as arguments, the formatter rewrites the files

The exit code is the only success signal. Output is buffered in full and
only interpreted once the process has exited.
"""

import asyncio
import logging
import shlex
from contextlib import suppress
from dataclasses import dataclass
from typing import Optional, Sequence

from shandy_sqlfmt.errors import (
    Cancelled,
    ExecutionFailed,
    FormatterTimeout,
    InvalidOutput,
    SpawnError,
)

logger = logging.getLogger(__name__)

STDIN_ARG = "-"
ENCODING = "utf-8"


@dataclass(frozen=True)
class ProcessOutput:
    """Captured result of a finished formatter process."""

    returncode: int
    stdout: str
    stderr: str


def format_command_line(argv: Sequence[str]) -> str:
    """Render an argv list as a shell-quoted command line for logs."""
    return shlex.join(argv)


async def terminate(proc: asyncio.subprocess.Process) -> None:
    """Kill a child process and wait for it to be reaped."""
    if proc.returncode is None:
        with suppress(ProcessLookupError):
            proc.kill()
    await proc.wait()


async def execute(
    argv: Sequence[str],
    input_text: Optional[str] = None,
    cwd: Optional[str] = None,
    timeout: Optional[float] = None,
    cancel_event: Optional[asyncio.Event] = None,
    strict_output: bool = False,
) -> ProcessOutput:
    """
    Run a command to completion and capture its output.

    Args:
        argv: Command and arguments
        input_text: Text written to stdin (stdin is closed when None)
        cwd: Working directory for the process
        timeout: Seconds before the process is killed
        cancel_event: Event that kills the process when set
        strict_output: Reject undecodable stdout from a successful run
            instead of replacing the bad bytes

    Returns:
        ProcessOutput with exit code and decoded streams

    Raises:
        SpawnError: If the process could not be started
        Cancelled: If cancel_event was set before the process finished
        FormatterTimeout: If the timeout expired
        InvalidOutput: If strict_output and stdout is not valid UTF-8
    """
    command = argv[0]
    logger.info(f'Execute: "{format_command_line(argv)}"')

    try:
        proc = await asyncio.create_subprocess_exec(
            *argv,
            stdin=asyncio.subprocess.PIPE if input_text is not None else asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=cwd,
        )
    except OSError as e:
        logger.error(f'Failed to start "{command}": {e}')
        raise SpawnError(command, e) from e

    stdin_bytes = input_text.encode(ENCODING) if input_text is not None else None
    communicate = asyncio.ensure_future(proc.communicate(stdin_bytes))
    waiters = {communicate}
    cancel_wait = None
    if cancel_event is not None:
        cancel_wait = asyncio.ensure_future(cancel_event.wait())
        waiters.add(cancel_wait)

    try:
        done, _ = await asyncio.wait(
            waiters, timeout=timeout, return_when=asyncio.FIRST_COMPLETED
        )
    except asyncio.CancelledError:
        await _abandon(proc, communicate)
        raise
    finally:
        if cancel_wait is not None:
            cancel_wait.cancel()

    if communicate not in done:
        await _abandon(proc, communicate)
        if cancel_event is not None and cancel_event.is_set():
            logger.warning(f'Cancelled "{command}" (pid {proc.pid})')
            raise Cancelled(command)
        logger.error(f'"{command}" timed out after {timeout}s (pid {proc.pid})')
        raise FormatterTimeout(command, timeout)

    stdout, stderr = communicate.result()
    if strict_output and proc.returncode == 0:
        try:
            stdout_text = stdout.decode(ENCODING)
        except UnicodeDecodeError as e:
            logger.error(f'"{command}" wrote undecodable output: {e}')
            raise InvalidOutput(command, e) from e
    else:
        stdout_text = stdout.decode(ENCODING, errors="replace")

    return ProcessOutput(
        returncode=proc.returncode,
        stdout=stdout_text,
        stderr=stderr.decode(ENCODING, errors="replace"),
    )


async def _abandon(proc: asyncio.subprocess.Process, communicate: asyncio.Future) -> None:
    """Kill the process and discard whatever output it produced."""
    await terminate(proc)
    communicate.cancel()
    with suppress(asyncio.CancelledError):
        await communicate


def _log_streams(result: ProcessOutput) -> None:
    if result.stdout:
        logger.info(f"STDOUT:\n{result.stdout}")
    if result.stderr:
        logger.info(f"STDERR:\n{result.stderr}")


async def run_in_place(
    command: str,
    args: Sequence[str],
    targets: Sequence[str],
    cwd: Optional[str] = None,
    timeout: Optional[float] = None,
    cancel_event: Optional[asyncio.Event] = None,
) -> ProcessOutput:
    """
    Run the formatter against paths it rewrites on disk.

    Output is captured for the log only.

    Args:
        command: Resolved executable path
        args: Resolved arguments
        targets: File or directory paths to format
        cwd: Working directory (the containing workspace, when known)
        timeout: Seconds before the process is killed
        cancel_event: Event that kills the process when set

    Returns:
        ProcessOutput of the finished run

    Raises:
        ExecutionFailed: If the formatter exited nonzero
        SpawnError: If the process could not be started
    """
    result = await execute(
        [command, *args, *targets], cwd=cwd, timeout=timeout, cancel_event=cancel_event
    )
    _log_streams(result)

    if result.returncode != 0:
        logger.error(f'"{command}" failed with exit code {result.returncode}')
        raise ExecutionFailed(command, result.returncode, result.stderr)
    return result


async def run_as_filter(
    command: str,
    args: Sequence[str],
    text: str,
    cwd: Optional[str] = None,
    timeout: Optional[float] = None,
    cancel_event: Optional[asyncio.Event] = None,
) -> str:
    """
    Pipe text through the formatter and return what it writes to stdout.

    A trailing "-" tells the formatter to read stdin. Exit code 0 is success
    even when stderr has content (warnings).

    Args:
        command: Resolved executable path
        args: Resolved arguments
        text: Document contents
        cwd: Working directory (the containing workspace, when known)
        timeout: Seconds before the process is killed
        cancel_event: Event that kills the process when set

    Returns:
        Formatted text exactly as the formatter printed it

    Raises:
        ExecutionFailed: If the formatter exited nonzero (carries stderr)
        InvalidOutput: If the formatted text is not valid UTF-8
        SpawnError: If the process could not be started
    """
    result = await execute(
        [command, *args, STDIN_ARG],
        input_text=text,
        cwd=cwd,
        timeout=timeout,
        cancel_event=cancel_event,
        strict_output=True,
    )

    if result.returncode != 0:
        logger.error(f'"{command}" failed with exit code {result.returncode}')
        if result.stderr:
            logger.error(f"STDERR:\n{result.stderr}")
        raise ExecutionFailed(command, result.returncode, result.stderr)

    if result.stdout:
        logger.debug(f"STDOUT:\n{result.stdout}")
    if result.stderr:
        logger.info(f"STDERR:\n{result.stderr}")
    return result.stdout
