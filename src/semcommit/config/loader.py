"""Configuration loading.

Lookup order:

1. An explicitly given file (``.toml``, ``.yaml``/``.yml`` or ``.json``).
2. ``.versionrc`` in the project directory (YAML or JSON).
3. ``[tool.semcommit]`` in the nearest ``pyproject.toml``.
4. Built-in defaults.
"""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from semcommit.config.models import SemcommitConfig
from semcommit.exceptions import ConfigNotFoundError, ConfigValidationError

logger = logging.getLogger(__name__)

VERSIONRC = ".versionrc"
TOOL_KEY = "semcommit"


def find_pyproject_toml(start: Path | None = None) -> Path:
    """Find pyproject.toml by walking up from ``start``.

    Args:
        start: Directory to start from (defaults to the current directory)

    Returns:
        Path to pyproject.toml

    Raises:
        ConfigNotFoundError: If no pyproject.toml is found
    """
    current = (start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        candidate = directory / "pyproject.toml"
        if candidate.is_file():
            return candidate
    raise ConfigNotFoundError(f"No pyproject.toml found in {current} or its parents")


def load_pyproject_toml(path: Path) -> dict[str, Any]:
    """Read and parse a pyproject.toml file.

    Raises:
        ConfigNotFoundError: If the file does not exist
        ConfigValidationError: If the file is not valid TOML
    """
    if not path.is_file():
        raise ConfigNotFoundError(f"Config file not found: {path}")
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigValidationError(f"Invalid TOML in {path}: {e}") from e


def load_versionrc(path: Path) -> dict[str, Any]:
    """Read a ``.versionrc`` style file (YAML, which also covers JSON).

    Raises:
        ConfigNotFoundError: If the file does not exist
        ConfigValidationError: If the content is not a mapping
    """
    if not path.is_file():
        raise ConfigNotFoundError(f"Config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigValidationError(f"Invalid YAML in {path}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigValidationError(f"Expected a mapping at the top of {path}")
    return data


def extract_semcommit_config(pyproject: dict[str, Any]) -> dict[str, Any]:
    """Return the ``[tool.semcommit]`` table, or an empty dict."""
    return pyproject.get("tool", {}).get(TOOL_KEY, {})


def parse_config(data: dict[str, Any], source: Path | str = "<config>") -> SemcommitConfig:
    """Validate raw configuration data.

    Raises:
        ConfigValidationError: If validation fails
    """
    try:
        return SemcommitConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigValidationError(f"Invalid configuration in {source}:\n{e}") from e


def load_config(path: Path | None = None, config_file: Path | None = None) -> SemcommitConfig:
    """Load configuration for the project at ``path``.

    Args:
        path: Project directory (defaults to the current directory)
        config_file: Explicit configuration file, overrides the lookup

    Returns:
        Validated configuration

    Raises:
        ConfigNotFoundError: If ``config_file`` is given but missing
        ConfigValidationError: If the configuration is invalid
    """
    project_path = path or Path.cwd()

    if config_file is not None:
        if config_file.suffix == ".toml":
            data = load_pyproject_toml(config_file)
            if config_file.name == "pyproject.toml":
                data = extract_semcommit_config(data)
        else:
            data = load_versionrc(config_file)
        logger.debug("Loaded configuration from %s", config_file)
        return parse_config(data, config_file)

    versionrc = project_path / VERSIONRC
    if versionrc.is_file():
        logger.debug("Loaded configuration from %s", versionrc)
        return parse_config(load_versionrc(versionrc), versionrc)

    try:
        pyproject_path = find_pyproject_toml(project_path)
    except ConfigNotFoundError:
        logger.debug("No configuration file found, using defaults")
        return SemcommitConfig()

    data = extract_semcommit_config(load_pyproject_toml(pyproject_path))
    logger.debug("Loaded configuration from %s", pyproject_path)
    return parse_config(data, pyproject_path)
