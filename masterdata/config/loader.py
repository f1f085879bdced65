from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.config_models import MasterDataConfig

"""Config loader: config/masterdata.yml -> MasterDataConfig.

Resolution order of the config file: explicit path (--config), then the
MASTERDATA_CONFIG environment variable (a .env file is honoured by the CLI),
then config/masterdata.yml. Command line overrides are merged on top of the
file values before validation, so a run can be driven by flags alone when no
config file exists.
"""

__all__ = [
    "ConfigError",
    "CONFIG_ENV_VAR",
    "DEFAULT_CONFIG_PATH",
    "SCHEMA_PATH",
    "resolve_config_path",
    "load_config",
    "build_config",
]

CONFIG_ENV_VAR = "MASTERDATA_CONFIG"
DEFAULT_CONFIG_PATH = Path("config/masterdata.yml")
SCHEMA_PATH = Path(__file__).with_name("config_schema.json")


class ConfigError(Exception):
    pass


def resolve_config_path(explicit: Path | str | None = None) -> Path:
    if explicit:
        return Path(explicit)
    env = os.getenv(CONFIG_ENV_VAR)
    if env:
        return Path(env)
    return DEFAULT_CONFIG_PATH


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate raw config data against config_schema.json.

    Raises:
        ConfigError: schema file missing / broken, or the data violates it
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")
    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping: {path}")
    return data


def _to_config(data: dict[str, Any]) -> MasterDataConfig:
    _validate_config_schema(data)
    return MasterDataConfig(
        source_directory=data["source_directory"],
        code_destination=data["code_destination"],
        asset_destination=data["asset_destination"],
        project_code=data.get("project_code") or None,
        log_dir=data.get("log_dir", "./logs"),
    )


def load_config(path: Path) -> MasterDataConfig:
    """Load and validate a config file.

    Raises:
        ConfigError: file missing, invalid YAML or schema violation
    """
    path = Path(path)
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    return _to_config(_read_yaml(path))


def build_config(path: Path | None, overrides: dict[str, Any] | None = None, *, required: bool = False) -> MasterDataConfig:
    """Merge file values (when the file exists) with non-None overrides.

    Args:
        path: config file path; a missing file is an error only when required
        overrides: values from the command line; None entries are ignored
        required: the file was named explicitly and must exist

    Raises:
        ConfigError: see load_config; also when a required key is missing
            from both the file and the overrides
    """
    data: dict[str, Any] = {}
    if path is not None and Path(path).exists():
        data = _read_yaml(Path(path))
    elif required:
        raise ConfigError(f"config file not found: {path}")
    for key, value in (overrides or {}).items():
        if value is not None:
            data[key] = value
    return _to_config(data)
