"""
Placeholder substitution for configured paths and arguments.

Expands ${userHome}, ${workspaceFolder}, ${workspaceFolder:<name>}, ${cwd},
${env:<NAME>} and the ${interpreter} list token inside configured strings.

Copyright 2025 Ben Mensi
Licensed under the Apache License, Version 2.0
"""

import logging
import os
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence

from shandy_sqlfmt.errors import ConfigurationError

logger = logging.getLogger(__name__)

INTERPRETER_TOKEN = "${interpreter}"

# Regex to find ${placeholder} patterns left after substitution
_PLACEHOLDER_RE = re.compile(r"\$\{([^}]+)\}")


@dataclass(frozen=True)
class SubstitutionContext:
    """Read-only runtime values the placeholders expand to."""

    environment: Mapping[str, str]
    cwd: str
    workspace_root: Optional[str] = None
    workspace_folders: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def from_environment(
        cls,
        workspace_root: Optional[str] = None,
        workspace_folders: Optional[Mapping[str, str]] = None,
        environ: Optional[Mapping[str, str]] = None,
        cwd: Optional[str] = None,
    ) -> "SubstitutionContext":
        """Snapshot the process environment and working directory."""
        return cls(
            environment=dict(os.environ if environ is None else environ),
            cwd=cwd or os.getcwd(),
            workspace_root=workspace_root,
            workspace_folders=dict(workspace_folders or {}),
        )

    @property
    def home(self) -> Optional[str]:
        """Home directory: HOME first, then USERPROFILE."""
        return self.environment.get("HOME") or self.environment.get("USERPROFILE") or None


def build_substitutions(context: SubstitutionContext) -> Dict[str, str]:
    """
    Build the token -> replacement table for one invocation.

    Args:
        context: Runtime values to expand into

    Returns:
        Ordered mapping of literal tokens to replacement strings
    """
    substitutions: Dict[str, str] = {}

    home = context.home
    if home:
        substitutions["${userHome}"] = home
    if context.workspace_root:
        substitutions["${workspaceFolder}"] = str(context.workspace_root)
    substitutions["${cwd}"] = context.cwd

    for name, folder in context.workspace_folders.items():
        substitutions[f"${{workspaceFolder:{name}}}"] = str(folder)

    for key, value in context.environment.items():
        # Empty variables produce no usable substitution
        if value:
            substitutions[f"${{env:{key}}}"] = value

    return substitutions


def resolve_variables(
    values: Sequence[str],
    context: SubstitutionContext,
    interpreter: Optional[Sequence[str]] = None,
    strict: bool = False,
) -> List[str]:
    """
    Expand placeholder tokens in a list of configured strings.

    An element that is exactly ${interpreter} is replaced by every
    interpreter candidate, so one element may become several. Every other
    token is a literal find-and-replace of its first occurrence; unknown
    tokens are left as they are.

    Args:
        values: Strings to expand
        context: Runtime values for the substitution table
        interpreter: Interpreter candidate paths, if known
        strict: Raise instead of warning when tokens remain unexpanded

    Returns:
        Expanded strings

    Raises:
        ConfigurationError: If strict and a ${...} token was not expanded

    Example:
        >>> ctx = SubstitutionContext(environment={}, cwd="/work")
        >>> resolve_variables(["${interpreter}", "-m", "sqlfmt"], ctx, ["/venv/bin/python"])
        ['/venv/bin/python', '-m', 'sqlfmt']
    """
    substitutions = build_substitutions(context)

    spliced: List[str] = []
    for value in values:
        if interpreter is not None and value == INTERPRETER_TOKEN:
            spliced.extend(interpreter)
        else:
            spliced.append(value)

    resolved = []
    for value in spliced:
        for key, replacement in substitutions.items():
            value = value.replace(key, replacement, 1)
        resolved.append(value)

    remaining = sorted({m.group(0) for v in resolved for m in _PLACEHOLDER_RE.finditer(v)})
    if remaining:
        if strict:
            raise ConfigurationError(f"Unresolved variables: {', '.join(remaining)}")
        logger.warning(f"Unresolved variables left as-is: {remaining}")

    return resolved


def coerce_args(raw: Any) -> List[str]:
    """
    Coerce a configured args value into a list of strings.

    Malformed values degrade gracefully instead of failing.

    Args:
        raw: Value read from configuration

    Returns:
        List of argument strings
    """
    if raw is None:
        return []
    if isinstance(raw, (list, tuple)):
        args = []
        for item in raw:
            if item is None:
                logger.warning("Ignoring empty entry in 'args'")
                continue
            if not isinstance(item, str):
                logger.warning(f"Converting non-string argument {item!r} to string")
            args.append(str(item))
        return args

    logger.warning(f"'args' should be a list, got {type(raw).__name__}; using it as one argument")
    return [str(raw)]
