# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Config loader: reads YAML from disk and produces a validated, frozen ReleaseConfig.

The loading pipeline is linear:
  1. Read raw text from the file
  2. Parse as YAML into a plain dict
  3. Hand the dict to pydantic for schema validation
  4. Return the frozen, immutable config object

Anything that goes wrong fails immediately with a clear error. A broken
config stops the release before it builds anything.
"""

from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import ValidationError

from releasekit.config.exceptions import ConfigLoadError, ConfigValidationError
from releasekit.config.schema import ReleaseConfig

DEFAULT_CONFIG_FILENAME = "release.yaml"


def _read_yaml_file(config_path: Path) -> dict[str, Any]:
    """
    Read a YAML file and return the parsed dict.

    An empty file is treated as an empty mapping, which means "all defaults".

    Raises:
        ConfigLoadError: If the file doesn't exist, isn't readable, or isn't valid YAML.
    """
    if not config_path.exists():
        raise ConfigLoadError(f"Config file not found: {config_path}")

    if not config_path.is_file():
        raise ConfigLoadError(f"Config path is not a file: {config_path}")

    try:
        raw_text = config_path.read_text(encoding="utf-8")
    except OSError as err:
        raise ConfigLoadError(f"Cannot read config file {config_path}: {err}") from err

    try:
        parsed = yaml.safe_load(raw_text)
    except yaml.YAMLError as err:
        raise ConfigLoadError(f"Invalid YAML in {config_path}: {err}") from err

    if parsed is None:
        return {}

    if not isinstance(parsed, dict):
        raise ConfigLoadError(
            f"Config file must contain a YAML mapping (dict), got {type(parsed).__name__}"
        )

    return parsed


def load_config(config_path: Path) -> ReleaseConfig:
    """
    Load, validate, and freeze a config file into a ReleaseConfig object.

    Raises:
        ConfigLoadError: File I/O or YAML parse failures.
        ConfigValidationError: Schema violations (wrong types, unknown keys).
    """
    raw_data = _read_yaml_file(config_path)

    try:
        config = ReleaseConfig.model_validate(raw_data)
    except ValidationError as err:
        raise ConfigValidationError(
            f"Config validation failed for {config_path}:\n{err}"
        ) from err

    return config


def load_project_config(project_root: Path, config_path: Optional[Path] = None) -> ReleaseConfig:
    """
    Resolve the configuration for a project.

    An explicit path must exist. Without one, `release.yaml` in the project
    root is used when present, otherwise the built-in defaults apply.
    """
    if config_path is not None:
        return load_config(config_path)

    candidate = project_root / DEFAULT_CONFIG_FILENAME
    if candidate.is_file():
        return load_config(candidate)

    return ReleaseConfig()
