"""Configuration management for the linksindex CLI.

Handles configuration loading from multiple sources with precedence:
CLI args > environment variables > .linksindexrc > pyproject.toml > defaults
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

# tomllib is only available in Python 3.11+
if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib  # type: ignore[import-not-found]

RC_FILENAME = ".linksindexrc"


@dataclass
class LinksIndexConfig:
    """Configuration for the linksindex CLI.

    Attributes:
        db_path: Path to the SQLite store (default: "links.db")
        report_dir: Directory receiving report dumps (default: ".linksindex")
        report_name: Base name of the report dump (default: "check")
    """

    db_path: str = "links.db"
    report_dir: str = ".linksindex"
    report_name: str = "check"

    def __post_init__(self) -> None:
        self._validate()

    def _validate(self) -> None:
        """Validate configuration values.

        Raises:
            ValueError: If any configuration value is invalid.
        """
        if not self.db_path or not isinstance(self.db_path, str):
            raise ValueError("db_path must be a non-empty string")
        if not self.db_path.endswith(".db"):
            raise ValueError("db_path must end with .db")

        if not self.report_dir or not isinstance(self.report_dir, str):
            raise ValueError("report_dir must be a non-empty string")

        if not self.report_name or not isinstance(self.report_name, str):
            raise ValueError("report_name must be a non-empty string")
        if "/" in self.report_name or "\\" in self.report_name:
            raise ValueError("report_name must not contain path separators")

    def get_db_path(self, base_path: Path | None = None) -> Path:
        """Get the full path to the store.

        Args:
            base_path: Base path to resolve from. Defaults to current directory.
        """
        base = base_path or Path.cwd()
        return base / self.db_path

    def get_report_dir(self, base_path: Path | None = None) -> Path:
        """Get the full path to the report directory.

        Args:
            base_path: Base path to resolve from. Defaults to current directory.
        """
        base = base_path or Path.cwd()
        return base / self.report_dir


def _get_config_field_names() -> set[str]:
    return {f.name for f in fields(LinksIndexConfig)}


def find_config_file(filename: str = RC_FILENAME, start_dir: Path | None = None) -> Path | None:
    """Find a configuration file by traversing up the directory tree.

    Args:
        filename: Name of the config file to find.
        start_dir: Directory to start searching from. Defaults to current directory.

    Returns:
        Path to the config file if found, None otherwise.
    """
    current = (start_dir or Path.cwd()).resolve()

    while True:
        config_path = current / filename
        if config_path.is_file():
            return config_path

        parent = current.parent
        if parent == current:
            return None
        current = parent


def _load_toml_file(path: Path) -> dict[str, Any]:
    """Load a TOML file and return its contents.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        tomllib.TOMLDecodeError: If the file is not valid TOML.
    """
    with open(path, "rb") as f:
        result: dict[str, Any] = tomllib.load(f)
        return result


def _load_from_rc(start_dir: Path | None = None) -> dict[str, Any]:
    """Load configuration from the .linksindexrc file, if any."""
    config_path = find_config_file(RC_FILENAME, start_dir)
    if config_path is None:
        return {}

    try:
        data = _load_toml_file(config_path)
    except (tomllib.TOMLDecodeError, OSError):
        return {}
    valid_fields = _get_config_field_names()
    return {k: v for k, v in data.items() if k in valid_fields}


def _load_from_pyproject(start_dir: Path | None = None) -> dict[str, Any]:
    """Load configuration from the pyproject.toml [tool.linksindex] section."""
    config_path = find_config_file("pyproject.toml", start_dir)
    if config_path is None:
        return {}

    try:
        data = _load_toml_file(config_path)
    except (tomllib.TOMLDecodeError, OSError):
        return {}
    section = data.get("tool", {}).get("linksindex", {})
    valid_fields = _get_config_field_names()
    return {k: v for k, v in section.items() if k in valid_fields}


def _load_from_env() -> dict[str, Any]:
    """Load configuration from LINKSINDEX_* environment variables."""
    env_mapping = {
        "LINKSINDEX_DB_PATH": "db_path",
        "LINKSINDEX_REPORT_DIR": "report_dir",
        "LINKSINDEX_REPORT_NAME": "report_name",
    }

    result: dict[str, Any] = {}
    for env_var, config_key in env_mapping.items():
        value = os.environ.get(env_var)
        if value is not None:
            result[config_key] = value
    return result


def _merge_configs(*configs: dict[str, Any]) -> dict[str, Any]:
    """Merge configuration dictionaries; later ones take precedence."""
    result: dict[str, Any] = {}
    for config in configs:
        for key, value in config.items():
            if value is not None:
                result[key] = value
    return result


def load_config(
    cli_overrides: dict[str, Any] | None = None,
    start_dir: Path | None = None,
) -> LinksIndexConfig:
    """Load configuration with full precedence chain.

    Precedence (highest to lowest):
    1. CLI arguments (cli_overrides)
    2. Environment variables (LINKSINDEX_*)
    3. .linksindexrc file
    4. pyproject.toml [tool.linksindex] section
    5. Default values

    Args:
        cli_overrides: Configuration overrides from CLI arguments.
        start_dir: Directory to start searching for config files.

    Raises:
        ValueError: If the resulting configuration is invalid.
    """
    valid_fields = _get_config_field_names()
    cli_config = {
        k: v for k, v in (cli_overrides or {}).items() if k in valid_fields and v is not None
    }

    merged = _merge_configs(
        _load_from_pyproject(start_dir),
        _load_from_rc(start_dir),
        _load_from_env(),
        cli_config,
    )
    return LinksIndexConfig(**merged)
