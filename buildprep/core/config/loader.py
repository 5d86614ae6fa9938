"""
Configuration loader — reads buildprep.yml into domain models.

Reads YAML, validates against the pydantic schema, and returns a typed
``BuildConfig``.  Relative paths in the file resolve against the file's
own directory.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from buildprep.core.data.toolchain import DEFAULT_REQUIREMENTS
from buildprep.core.models.build import BuildConfig
from buildprep.core.models.requirement import RequirementSpec

logger = logging.getLogger(__name__)

# Default config filename
BUILD_CONFIG_FILE = "buildprep.yml"


class ConfigError(Exception):
    """Raised when build configuration is invalid or missing."""


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Search for buildprep.yml starting from the given directory, walking up.

    Args:
        start_dir: Directory to start searching from (default: cwd).

    Returns:
        Path to buildprep.yml, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / BUILD_CONFIG_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break  # filesystem root
        current = parent

    return None


def load_config(path: Path | None = None) -> BuildConfig:
    """Load and validate the build configuration.

    Args:
        path: Explicit path to buildprep.yml. If None, searches upward.

    Returns:
        Validated BuildConfig.

    Raises:
        ConfigError: If the file is missing or invalid.
    """
    if path is None:
        path = find_config_file()

    if path is None:
        raise ConfigError(
            f"No {BUILD_CONFIG_FILE} found. Create one, or specify --config."
        )

    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading build config from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    data["base_dir"] = path.parent.resolve()

    try:
        config = BuildConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid build configuration: {e}") from e

    logger.info(
        "Loaded build config '%s' with %d dependencies",
        config.name,
        len(config.dependencies),
    )
    return config


def effective_requirements(config: BuildConfig | None) -> list[RequirementSpec]:
    """Requirements declared in the config, or the built-in defaults."""
    if config is None or config.requirements is None:
        return list(DEFAULT_REQUIREMENTS)
    return list(config.requirements)
