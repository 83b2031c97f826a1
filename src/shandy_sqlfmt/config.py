"""
Configuration loader for shandy-sqlfmt.

Loads YAML configuration files and coerces them into Settings.

Copyright 2025 Ben Mensi
Licensed under the Apache License, Version 2.0
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from shandy_sqlfmt.locator import DEFAULT_PROBE_TIMEOUT
from shandy_sqlfmt.variables import coerce_args

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "shandy.yml"


@dataclass
class Settings:
    """Formatter settings for one run."""

    path: Optional[str] = None
    args: List[str] = field(default_factory=list)
    workspace: Optional[str] = None
    workspace_folders: Dict[str, str] = field(default_factory=dict)
    timeout: Optional[float] = None
    probe_timeout: Optional[float] = DEFAULT_PROBE_TIMEOUT
    strict_variables: bool = False

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "Settings":
        """
        Build settings from a loaded config dictionary.

        Values of the wrong type are coerced or dropped with a warning
        rather than rejected.

        Args:
            config: Configuration dictionary

        Returns:
            Settings instance
        """
        path = config.get("path")
        if path is not None and not isinstance(path, str):
            logger.warning(f"Converting non-string 'path' {path!r} to string")
            path = str(path)

        folders = config.get("workspace_folders") or {}
        if not isinstance(folders, dict):
            logger.warning("'workspace_folders' must be a mapping; ignoring it")
            folders = {}

        workspace = config.get("workspace")
        return cls(
            path=path or None,
            args=coerce_args(config.get("args")),
            workspace=str(workspace) if workspace else None,
            workspace_folders={str(k): str(v) for k, v in folders.items()},
            timeout=_coerce_seconds(config, "timeout", None),
            probe_timeout=_coerce_seconds(config, "probe_timeout", DEFAULT_PROBE_TIMEOUT),
            strict_variables=bool(config.get("strict_variables", False)),
        )


def _coerce_seconds(config: Dict[str, Any], key: str, default: Optional[float]) -> Optional[float]:
    value = config.get(key, default)
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        logger.warning(f"'{key}' must be a number of seconds, got {value!r}; using {default}")
        return default


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load configuration from YAML file.

    Args:
        config_path: Path to config file. If None, tries ~/shandy.yml then ./shandy.yml

    Returns:
        Dictionary containing configuration

    Raises:
        FileNotFoundError: If config file not found
        yaml.YAMLError: If config file is invalid YAML
    """
    if config_path:
        path = Path(config_path).expanduser()
    else:
        home_config = Path.home() / CONFIG_FILENAME
        local_config = Path.cwd() / CONFIG_FILENAME

        if home_config.exists():
            path = home_config
        elif local_config.exists():
            path = local_config
        else:
            raise FileNotFoundError(
                "No config file found. Tried:\n"
                f"  - {home_config}\n"
                f"  - {local_config}\n"
                "Use --config to specify a custom location."
            )

    try:
        with open(path, "r") as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise yaml.YAMLError(f"Error parsing config file {path}: {e}")

    if config is None:
        config = {}
    if not isinstance(config, dict):
        raise yaml.YAMLError(f"Error parsing config file {path}: top level must be a mapping")

    if "workspace" in config and config["workspace"]:
        config["workspace"] = str(Path(str(config["workspace"])).expanduser())

    from shandy_sqlfmt.validation import validate_config
    issues = validate_config(config)
    if issues:
        logger.warning("Configuration validation warnings:")
        for issue in issues:
            logger.warning(f"  - {issue}")

    return config
