# File: gencode/config.py
"""
gencode - Configuration Loading
================================
Reads the run configuration from JSON or YAML and validates it into a
``Config`` model.

A missing configuration file is not an error: a default configuration is
written to the requested path (always as JSON) and returned, so a first
run leaves behind a file the user can edit.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List

import yaml
from pydantic import ValidationError

from gencode.errors import ConfigError
from gencode.models import Config, DBConfig, GenConfig, PackageConfig

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("gencode.config")

DEFAULT_CONFIG_PATH: str = "config.json"
_YAML_SUFFIXES = (".yaml", ".yml")


def default_config() -> Config:
    """The configuration written out when none exists yet."""
    return Config(
        project_name="demo",
        db_config=DBConfig(
            driver_name="mysql",
            host="localhost",
            port=3306,
            username="root",
            password="password",
            database_name="test_db",
            table_prefix="t_",
        ),
        gen_config=GenConfig(
            output_path="./output",
            enable_lombok=True,
            enable_swagger=True,
            author="admin",
        ),
        package_config=PackageConfig(),
    )


# ---------------------------------------------------------------------------
# File loaders
# ---------------------------------------------------------------------------


def _load_json_file(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Invalid JSON in {path}: {exc}") from exc


def _load_yaml_file(path: Path) -> Any:
    try:
        return yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc


def parse_config(data: Any, *, source: str = "<memory>") -> Config:
    """Validate an already-parsed mapping into a ``Config``."""
    if not isinstance(data, dict):
        raise ConfigError(
            f"Expected a mapping at top level of {source}, got {type(data).__name__}."
        )
    try:
        return Config.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration in {source}: {exc}") from exc


def save_config(config: Config, path: Path) -> None:
    """Write *config* to *path* as indented JSON."""
    payload: Dict[str, Any] = config.model_dump(mode="json")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot write configuration to {path}: {exc}") from exc
    logger.info("Wrote configuration to %s.", path)


def load_config(path: Path = Path(DEFAULT_CONFIG_PATH)) -> Config:
    """
    Load the configuration at *path*.

    ``.yaml`` / ``.yml`` files are parsed as YAML, everything else as JSON.
    When *path* does not exist, the default configuration is saved there
    and returned.

    Raises:
        ConfigError: unreadable, unparsable or invalid configuration.
    """
    path = Path(path)
    if not path.exists():
        logger.warning("Configuration %s not found; writing defaults.", path)
        config: Config = default_config()
        save_config(config, path)
        return config

    if not path.is_file():
        raise ConfigError(f"Configuration path is not a file: {path}")

    try:
        if path.suffix.lower() in _YAML_SUFFIXES:
            data: Any = _load_yaml_file(path)
        else:
            data = _load_json_file(path)
    except OSError as exc:
        raise ConfigError(f"Cannot read configuration {path}: {exc}") from exc

    config = parse_config(data, source=str(path))
    logger.info("Loaded configuration for project '%s' from %s.", config.project_name, path)
    return config


__all__: List[str] = [
    "DEFAULT_CONFIG_PATH",
    "default_config",
    "load_config",
    "parse_config",
    "save_config",
]
