# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""
Executable locator for shandy-sqlfmt.

Turns a configured or default command into an absolute, validated path and
reports whether it can actually run. "Not installed" is an expected outcome,
so nothing here raises for it.
"""

import asyncio
import logging
import os
import shutil
import stat
from dataclasses import dataclass
from typing import Dict, Hashable, Optional, Sequence, Tuple

from shandy_sqlfmt.process import terminate
from shandy_sqlfmt.registry import DEFAULT_TOOL, ToolInfo, get_tool_info
from shandy_sqlfmt.variables import SubstitutionContext, resolve_variables

logger = logging.getLogger(__name__)

DEFAULT_PROBE_TIMEOUT = 10.0

_EXECUTE_BITS = stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH


@dataclass(frozen=True)
class ResolvedCommand:
    """Outcome of locating the formatter for one invocation."""

    path: str
    is_available: bool


def has_path_separator(command: str) -> bool:
    """Return True if command is a path rather than a bare command name."""
    return os.sep in command or bool(os.altsep and os.altsep in command)


def find_sibling_executable(
    interpreter: Optional[Sequence[str]], binary: str = DEFAULT_TOOL
) -> Optional[str]:
    """
    Find the formatter installed next to an interpreter.

    Args:
        interpreter: Interpreter candidate paths, in priority order
        binary: Executable name to look for

    Returns:
        First existing sibling path, or None
    """
    names = [binary]
    if os.name == "nt" and not binary.lower().endswith(".exe"):
        names.append(f"{binary}.exe")

    for python_path in interpreter or []:
        bin_dir = os.path.dirname(python_path)
        for name in names:
            candidate = os.path.join(bin_dir, name)
            if os.path.exists(candidate):
                return candidate
    return None


def candidate_command(
    configured_path: Optional[str],
    context: SubstitutionContext,
    interpreter: Optional[Sequence[str]] = None,
    tool: Optional[ToolInfo] = None,
    strict: bool = False,
) -> str:
    """
    Pick the command to validate: configured path, interpreter sibling, default name.

    Args:
        configured_path: Path option from configuration (may contain placeholders)
        context: Substitution context for placeholder expansion
        interpreter: Interpreter candidate paths
        tool: Tool metadata (defaults to the registered sqlfmt)
        strict: Raise ConfigurationError for unresolved placeholders in the path

    Returns:
        Candidate command string (name or path)

    Raises:
        ConfigurationError: If strict and the configured path keeps a ${...} token
    """
    tool = tool or get_tool_info()
    if configured_path:
        # ${interpreter} is a list token; a single path only ever takes its first element
        resolved = resolve_variables([configured_path], context, interpreter, strict=strict)
        if resolved:
            return resolved[0]

    sibling = find_sibling_executable(interpreter, tool.binary)
    if sibling:
        logger.debug(f"Found {tool.binary} next to interpreter: {sibling}")
        return sibling

    return tool.binary


def check_executable_file(candidate: str) -> Tuple[str, bool]:
    """
    Run the filesystem checks on a candidate command.

    Args:
        candidate: Command name or path

    Returns:
        Tuple of (resolved path, passes static checks)
    """
    if not has_path_separator(candidate):
        found = shutil.which(candidate)
        if found is None:
            logger.debug(f'"{candidate}" not found on PATH')
            return candidate, False
        candidate = found

    path = os.path.abspath(candidate)

    if not os.path.exists(path):
        logger.debug(f"{path} does not exist")
        return path, False
    if not os.path.isfile(path):
        logger.debug(f"{path} is not a regular file")
        return path, False
    if os.name != "nt" and not os.stat(path).st_mode & _EXECUTE_BITS:
        logger.debug(f"{path} is not executable")
        return path, False

    return path, True


async def probe_liveness(
    path: str,
    args: Sequence[str] = ("--version",),
    timeout: Optional[float] = DEFAULT_PROBE_TIMEOUT,
) -> bool:
    """
    Run the executable with a harmless argument and check it exits cleanly.

    Args:
        path: Absolute path to the executable
        args: Probe arguments (a version query)
        timeout: Seconds to wait before killing the probe

    Returns:
        True if the probe exited with code 0
    """
    try:
        proc = await asyncio.create_subprocess_exec(
            path,
            *args,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.DEVNULL,
        )
    except OSError as e:
        logger.debug(f"Liveness probe could not start {path}: {e}")
        return False

    try:
        returncode = await asyncio.wait_for(proc.wait(), timeout)
    except asyncio.TimeoutError:
        logger.warning(f"Liveness probe for {path} timed out after {timeout}s")
        await terminate(proc)
        return False
    except asyncio.CancelledError:
        await terminate(proc)
        raise

    if returncode != 0:
        logger.debug(f"Liveness probe for {path} exited with code {returncode}")
    return returncode == 0


async def locate_executable(
    configured_path: Optional[str],
    context: SubstitutionContext,
    interpreter: Optional[Sequence[str]] = None,
    tool: Optional[ToolInfo] = None,
    probe_timeout: Optional[float] = DEFAULT_PROBE_TIMEOUT,
    strict: bool = False,
) -> ResolvedCommand:
    """
    Locate and validate the formatter executable.

    Args:
        configured_path: Path option from configuration, if any
        context: Substitution context for placeholder expansion
        interpreter: Interpreter candidate paths (0 or more)
        tool: Tool metadata (defaults to the registered sqlfmt)
        probe_timeout: Seconds allowed for the liveness probe
        strict: Raise instead of warning on unresolved placeholders in the path

    Returns:
        ResolvedCommand with the resolved path and availability flag

    Raises:
        ConfigurationError: If strict and the configured path keeps a ${...} token
    """
    tool = tool or get_tool_info()
    candidate = candidate_command(configured_path, context, interpreter, tool, strict=strict)

    path, ok = check_executable_file(candidate)
    if ok:
        ok = await probe_liveness(path, tool.version_args, probe_timeout)

    if ok:
        logger.debug(f"Using {tool.name} at {path}")
    else:
        logger.info(f'"{path}" is not available')
    return ResolvedCommand(path=path, is_available=ok)


class LocatorCache:
    """
    Memo of locate results for one batch run.

    Create one per batch and drop it afterwards; installs can change between
    requests, so results must not outlive the batch.
    """

    def __init__(self, probe_timeout: Optional[float] = DEFAULT_PROBE_TIMEOUT):
        self.probe_timeout = probe_timeout
        self._tasks: Dict[Hashable, "asyncio.Task[ResolvedCommand]"] = {}

    async def locate(
        self,
        configured_path: Optional[str],
        context: SubstitutionContext,
        interpreter: Optional[Sequence[str]] = None,
        tool: Optional[ToolInfo] = None,
        strict: bool = False,
    ) -> ResolvedCommand:
        """Locate once per distinct (path, workspace, interpreter, tool, strict) key."""
        key = (
            configured_path,
            context.workspace_root,
            tuple(interpreter) if interpreter is not None else None,
            tool.name if tool else DEFAULT_TOOL,
            strict,
        )
        task = self._tasks.get(key)
        if task is None:
            task = asyncio.ensure_future(
                locate_executable(
                    configured_path, context, interpreter, tool, self.probe_timeout, strict=strict
                )
            )
            self._tasks[key] = task
        return await asyncio.shield(task)

    def __len__(self) -> int:
        return len(self._tasks)
