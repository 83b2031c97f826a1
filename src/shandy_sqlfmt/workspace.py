"""
Workspace folders for shandy-sqlfmt.

Maps documents to the workspace folder that contains them.

Copyright 2025 Ben Mensi
Licensed under the Apache License, Version 2.0
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional


@dataclass(frozen=True)
class WorkspaceFolder:
    """A named folder open in the workspace."""

    name: str
    path: Path


@dataclass
class Workspace:
    """The active workspace root plus any named folders."""

    root: Optional[Path] = None
    folders: Dict[str, Path] = field(default_factory=dict)

    @classmethod
    def from_settings(
        cls, root: Optional[str], folders: Optional[Dict[str, str]] = None
    ) -> "Workspace":
        """Build a workspace from configured path strings."""
        return cls(
            root=expand_path(root) if root else None,
            folders={name: expand_path(path) for name, path in (folders or {}).items()},
        )

    def all_folders(self) -> Dict[str, Path]:
        """Named folders, with the root included under its directory name."""
        folders = dict(self.folders)
        if self.root is not None and self.root not in folders.values():
            folders.setdefault(self.root.name or str(self.root), self.root)
        return folders

    def folder_for(self, document: Optional[Path]) -> Optional[WorkspaceFolder]:
        """
        Find the workspace folder containing a document.

        Args:
            document: Path to the document, or None for unsaved input

        Returns:
            The deepest containing folder, or None if outside the workspace
        """
        if document is None:
            return None
        target = expand_path(str(document))

        best: Optional[WorkspaceFolder] = None
        for name, folder in self.all_folders().items():
            if target == folder or folder in target.parents:
                if best is None or len(folder.parts) > len(best.path.parts):
                    best = WorkspaceFolder(name=name, path=folder)
        return best

    def folder_strings(self) -> Dict[str, str]:
        """Named folders as strings, for placeholder substitution."""
        return {name: str(path) for name, path in self.all_folders().items()}


def expand_path(path: str) -> Path:
    """
    Expand user home directory and resolve a path.

    Args:
        path: Path string potentially containing ~

    Returns:
        Expanded absolute Path object

    Example:
        >>> expand_path("~/data/file.sql")
        Path("/home/user/data/file.sql")
    """
    return Path(path).expanduser().resolve()
