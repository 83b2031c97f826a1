# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""
Tool registry for shandy-sqlfmt.

Holds the known formatter executables with their default command name,
liveness probe arguments and installation hints.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from shandy_sqlfmt.errors import INSTALL_URL

DEFAULT_TOOL = "sqlfmt"


@dataclass(frozen=True)
class ToolInfo:
    """Metadata for a registered formatter executable."""

    name: str
    binary: str
    description: str
    install_hint: str
    version_args: Tuple[str, ...] = field(default=("--version",))


# Built-in tool registry
TOOL_REGISTRY: Dict[str, ToolInfo] = {
    "sqlfmt": ToolInfo(
        name="sqlfmt",
        binary="sqlfmt",
        description="Opinionated SQL formatter (shandy-sqlfmt)",
        install_hint=f"Install with: pip install shandy-sqlfmt (see {INSTALL_URL})",
    ),
}


def get_tool_info(tool_name: str = DEFAULT_TOOL) -> Optional[ToolInfo]:
    """
    Get metadata for a registered tool.

    Args:
        tool_name: Name of the tool

    Returns:
        ToolInfo if tool is registered, None otherwise
    """
    return TOOL_REGISTRY.get(tool_name)


def list_tools() -> List[ToolInfo]:
    """List all registered tools."""
    return list(TOOL_REGISTRY.values())
