# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""
Formatting requests for shandy-sqlfmt.

Ties settings, workspace, interpreter discovery, the locator and the process
runner together. Every request resolves its command from scratch; only an
explicit batch shares a LocatorCache.
"""

import asyncio
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Mapping, Optional, Sequence, Union

from shandy_sqlfmt.config import Settings
from shandy_sqlfmt.errors import ConfigurationError, FormatterError, NotInstalled
from shandy_sqlfmt.interpreter import InterpreterLookup, discover_interpreter
from shandy_sqlfmt.locator import LocatorCache, ResolvedCommand, locate_executable
from shandy_sqlfmt.process import ProcessOutput, run_as_filter, run_in_place
from shandy_sqlfmt.registry import ToolInfo, get_tool_info
from shandy_sqlfmt.variables import SubstitutionContext, resolve_variables
from shandy_sqlfmt.workspace import Workspace, WorkspaceFolder

ENCODING = "utf-8"


@dataclass(frozen=True)
class Invocation:
    """Fully resolved description of what to run."""

    command: str
    args: List[str] = field(default_factory=list)
    cwd: Optional[str] = None


@dataclass
class FileResult:
    """Outcome of formatting one file in a batch."""

    path: Path
    changed: bool = False
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class SqlfmtFormatter:
    """Runs sqlfmt for documents, files and whole workspaces."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        workspace: Optional[Workspace] = None,
        interpreter_lookup: InterpreterLookup = discover_interpreter,
        environ: Optional[Mapping[str, str]] = None,
        tool: Optional[ToolInfo] = None,
    ):
        """
        Initialize the formatter.

        Args:
            settings: Formatter settings (defaults when None)
            workspace: Workspace folders (built from settings when None)
            interpreter_lookup: Callable returning interpreter candidates
            environ: Environment to read (os.environ at request time when None)
            tool: Tool metadata (defaults to the registered sqlfmt)
        """
        self.settings = settings or Settings()
        self.workspace = workspace or Workspace.from_settings(
            self.settings.workspace, self.settings.workspace_folders
        )
        self.interpreter_lookup = interpreter_lookup
        self.environ = environ
        self.tool = tool or get_tool_info()
        self.logger = logging.getLogger(__name__)

    def _environment(self) -> dict:
        return dict(os.environ if self.environ is None else self.environ)

    async def resolve_command(
        self,
        folder: Optional[WorkspaceFolder] = None,
        cache: Optional[LocatorCache] = None,
    ) -> ResolvedCommand:
        """Locate the formatter for a workspace folder without raising."""
        context, interpreter = self._context(folder)
        return await self._locate(context, interpreter, cache)

    def _context(self, folder: Optional[WorkspaceFolder]):
        environ = self._environment()
        candidates = self.interpreter_lookup(folder.path if folder else None, environ)
        context = SubstitutionContext.from_environment(
            workspace_root=str(folder.path) if folder else None,
            workspace_folders=self.workspace.folder_strings(),
            environ=environ,
        )
        # An empty lookup result means "no interpreter", not an empty list to splice
        return context, (list(candidates) or None)

    async def _locate(self, context, interpreter, cache, strict=False):
        if cache is not None:
            return await cache.locate(
                self.settings.path, context, interpreter, self.tool, strict=strict
            )
        return await locate_executable(
            self.settings.path,
            context,
            interpreter,
            self.tool,
            self.settings.probe_timeout,
            strict=strict,
        )

    async def prepare(
        self,
        folder: Optional[WorkspaceFolder] = None,
        cache: Optional[LocatorCache] = None,
    ) -> Invocation:
        """
        Resolve the command, arguments and working directory for a request.

        Args:
            folder: Workspace folder the target belongs to, if any
            cache: Batch-scoped locator cache

        Returns:
            Invocation ready to run

        Raises:
            NotInstalled: If the formatter is missing or cannot run
            ConfigurationError: If strict_variables is set and a token in the path
                or args is unresolved
        """
        strict = self.settings.strict_variables
        context, interpreter = self._context(folder)
        args = resolve_variables(self.settings.args, context, interpreter, strict=strict)

        resolved = await self._locate(context, interpreter, cache, strict=strict)
        if not resolved.is_available:
            self.logger.error(f'"{resolved.path}" is not installed or cannot be executed')
            raise NotInstalled(resolved.path, self.tool.install_hint)

        return Invocation(
            command=resolved.path,
            args=args,
            cwd=str(folder.path) if folder else None,
        )

    async def format_text(
        self,
        text: str,
        document: Optional[Union[str, Path]] = None,
        cancel_event: Optional[asyncio.Event] = None,
        cache: Optional[LocatorCache] = None,
    ) -> str:
        """
        Format document text through the formatter's stdin.

        Args:
            text: Document contents
            document: Path of the document, used to find its workspace folder
            cancel_event: Event that kills the formatter when set
            cache: Batch-scoped locator cache

        Returns:
            Formatted text
        """
        name = str(document) if document is not None else "<stdin>"
        self.logger.info(f'Formatting "{name}" file')

        folder = self.workspace.folder_for(Path(document) if document is not None else None)
        invocation = await self.prepare(folder, cache)
        return await run_as_filter(
            invocation.command,
            invocation.args,
            text,
            cwd=invocation.cwd,
            timeout=self.settings.timeout,
            cancel_event=cancel_event,
        )

    async def format_file(
        self,
        path: Union[str, Path],
        write: bool = True,
        cancel_event: Optional[asyncio.Event] = None,
        cache: Optional[LocatorCache] = None,
    ) -> bool:
        """
        Format a file by piping its contents through the formatter.

        The file is read in-process; nothing is staged on disk. It is only
        rewritten when the formatted text differs.

        Args:
            path: File to format
            write: Write the result back (False for check mode)
            cancel_event: Event that kills the formatter when set
            cache: Batch-scoped locator cache

        Returns:
            True if formatting changes the file
        """
        path = Path(path)
        original = path.read_bytes().decode(ENCODING)
        formatted = await self.format_text(original, path, cancel_event, cache)

        changed = formatted != original
        if changed and write:
            path.write_bytes(formatted.encode(ENCODING))
            self.logger.info(f"Reformatted {path}")
        elif changed:
            self.logger.info(f"Would reformat {path}")
        return changed

    async def format_files(
        self,
        paths: Sequence[Union[str, Path]],
        write: bool = True,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> List[FileResult]:
        """
        Format several files concurrently.

        The formatter is located once per workspace folder for this batch.
        Formatter failures and files that cannot be read or written are
        collected per file, so one bad file never stops the rest.

        Args:
            paths: Files to format
            write: Write results back (False for check mode)
            cancel_event: Event that kills every running formatter when set

        Returns:
            One FileResult per path, in input order
        """
        cache = LocatorCache(self.settings.probe_timeout)

        async def one(path: Path) -> FileResult:
            try:
                changed = await self.format_file(path, write, cancel_event, cache)
            except (FormatterError, OSError, UnicodeDecodeError) as e:
                self.logger.debug(f"{path}: {type(e).__name__}: {e}")
                return FileResult(path=path, error=e)
            return FileResult(path=path, changed=changed)

        return list(await asyncio.gather(*(one(Path(p)) for p in paths)))

    async def format_in_place(
        self,
        paths: Sequence[Union[str, Path]],
        cancel_event: Optional[asyncio.Event] = None,
    ) -> ProcessOutput:
        """
        Let the formatter rewrite files on disk.

        Args:
            paths: Files or directories passed to the formatter
            cancel_event: Event that kills the formatter when set

        Returns:
            ProcessOutput of the run
        """
        if not paths:
            raise ConfigurationError("No paths given to format")
        targets = [Path(p) for p in paths]
        for target in targets:
            self.logger.info(f'Formatting "{target}" file')

        folder = self.workspace.folder_for(targets[0])
        invocation = await self.prepare(folder)
        return await run_in_place(
            invocation.command,
            invocation.args,
            [str(t) for t in targets],
            cwd=invocation.cwd,
            timeout=self.settings.timeout,
            cancel_event=cancel_event,
        )

    async def format_workspace(
        self,
        root: Optional[Union[str, Path]] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> ProcessOutput:
        """
        Run the formatter in place over a whole workspace root.

        Args:
            root: Workspace root (defaults to the configured workspace)
            cancel_event: Event that kills the formatter when set

        Returns:
            ProcessOutput of the run

        Raises:
            ConfigurationError: If no workspace root is known
        """
        if root is not None:
            root_path = Path(root).expanduser().resolve()
        elif self.workspace.root is not None:
            root_path = self.workspace.root
        else:
            raise ConfigurationError("No workspace folder to format")

        folder = self.workspace.folder_for(root_path)
        if folder is None or folder.path != root_path:
            folder = WorkspaceFolder(name=root_path.name, path=root_path)
        self.logger.info(f'Formatting "{folder.name}" workspace')

        invocation = await self.prepare(folder)
        return await run_in_place(
            invocation.command,
            invocation.args,
            [str(folder.path)],
            cwd=invocation.cwd,
            timeout=self.settings.timeout,
            cancel_event=cancel_event,
        )
