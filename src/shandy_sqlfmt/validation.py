# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""
Configuration validation for shandy-sqlfmt.

Validates YAML configuration structure and provides helpful messages.
Problems are reported, not raised: Settings.from_config coerces what it can.
"""

import logging
from typing import Any, Dict, List, Set

logger = logging.getLogger(__name__)

# Valid top-level keys in config
VALID_TOP_LEVEL_KEYS = {
    "path",
    "args",
    "workspace",
    "workspace_folders",
    "timeout",
    "probe_timeout",
    "strict_variables",
}

_NUMBER_KEYS = ("timeout", "probe_timeout")


def validate_config(config: Dict[str, Any]) -> List[str]:
    """
    Validate configuration structure and return list of warnings.

    Args:
        config: Configuration dictionary loaded from YAML

    Returns:
        List of warning messages (empty if valid)
    """
    issues = []

    for key in sorted(set(config.keys()) - VALID_TOP_LEVEL_KEYS):
        suggestion = suggest_fix(str(key), VALID_TOP_LEVEL_KEYS)
        hint = f" Did you mean '{suggestion}'?" if suggestion else ""
        issues.append(f"Unknown config key '{key}'.{hint}")

    path = config.get("path")
    if path is not None and not isinstance(path, str):
        issues.append(f"'path' must be a string, got {type(path).__name__}")

    args = config.get("args")
    if args is not None:
        if not isinstance(args, list):
            issues.append(f"'args' must be a list, got {type(args).__name__}")
        else:
            bad = [a for a in args if not isinstance(a, str)]
            if bad:
                issues.append(f"'args' entries should be strings; will convert {bad!r}")

    folders = config.get("workspace_folders")
    if folders is not None and not isinstance(folders, dict):
        issues.append(
            f"'workspace_folders' must be a mapping of name to path, got {type(folders).__name__}"
        )

    for key in _NUMBER_KEYS:
        value = config.get(key)
        if value is None:
            continue
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            issues.append(f"'{key}' must be a number of seconds, got {type(value).__name__}")
        elif value <= 0:
            issues.append(f"'{key}' must be positive, got {value}")

    strict = config.get("strict_variables")
    if strict is not None and not isinstance(strict, bool):
        issues.append(f"'strict_variables' must be true or false, got {strict!r}")

    return issues


def suggest_fix(typo: str, valid_options: Set[str]) -> str:
    """
    Suggest a correction for a typo based on edit distance.

    Args:
        typo: The incorrect string
        valid_options: Set of valid options

    Returns:
        Suggested correction or empty string if no close match
    """
    def distance(s1: str, s2: str) -> int:
        if len(s1) > len(s2):
            s1, s2 = s2, s1
        distances = range(len(s1) + 1)
        for i2, c2 in enumerate(s2):
            distances_ = [i2 + 1]
            for i1, c1 in enumerate(s1):
                if c1 == c2:
                    distances_.append(distances[i1])
                else:
                    distances_.append(1 + min((distances[i1], distances[i1 + 1], distances_[-1])))
            distances = distances_
        return distances[-1]

    best_match = None
    best_distance = float("inf")

    for option in sorted(valid_options):
        dist = distance(typo.lower(), option.lower())
        if dist < best_distance and dist <= 2:  # Max distance of 2 for suggestions
            best_distance = dist
            best_match = option

    return best_match or ""
