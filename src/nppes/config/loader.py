"""
Configuration loading utilities.

Supports environment variable interpolation, config inheritance from a
sibling base.yaml, and NPPES_* environment overrides.
"""

import os
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from nppes.config.settings import NppesConfig
from nppes.errors import ConfigurationError

# Environment variable -> (section, key) of the merged config data.
ENV_OVERRIDES: dict[str, tuple[str, str]] = {
    "NPPES_DATA_ROOT": ("data", "root"),
    "NPPES_BATCH_SIZE": ("ingestion", "batch_size"),
    "NPPES_MAX_WORKERS": ("ingestion", "max_workers"),
    "NPPES_SKIP_INVALID": ("ingestion", "skip_invalid"),
    "NPPES_VALIDATE_HEADER": ("ingestion", "validate_header"),
    "NPPES_LOG_LEVEL": ("logging", "level"),
}

_DATA_FILE_KEYS = ("providers", "taxonomy", "other_names", "practice_locations", "endpoints")


def _interpolate_env_vars(value: str) -> str:
    """
    Interpolate environment variables in string values.

    Supports ${VAR} and ${VAR:default} syntax.
    """
    pattern = r"\$\{([^}:]+)(?::([^}]*))?\}"

    def replacer(match: re.Match[str]) -> str:
        var_name = match.group(1)
        default = match.group(2)
        return os.environ.get(var_name, default if default is not None else "")

    return re.sub(pattern, replacer, value)


def _process_config_values(obj: Any) -> Any:
    """Recursively process config values for env var interpolation."""
    if isinstance(obj, str):
        return _interpolate_env_vars(obj)
    if isinstance(obj, dict):
        return {k: _process_config_values(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_process_config_values(item) for item in obj]
    return obj


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries, with override taking precedence."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_yaml(path: Path) -> dict[str, Any]:
    """Load a YAML file and process environment variables."""
    with path.open(encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if data is not None and not isinstance(data, dict):
        msg = f"Config file {path} must contain a mapping, got {type(data).__name__}"
        raise ConfigurationError(msg)
    return _process_config_values(data) if data else {}


def _apply_env_overrides(
    data: dict[str, Any], environ: Mapping[str, str]
) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    for var, (section, key) in ENV_OVERRIDES.items():
        value = environ.get(var)
        if value is not None and value != "":
            overrides.setdefault(section, {})[key] = value
    return _deep_merge(data, overrides)


def build_config(data: Mapping[str, Any]) -> NppesConfig:
    """
    Build a validated NppesConfig from merged config data.

    Args:
        data: Mapping with optional ``data``, ``ingestion``, ``query`` and
            ``logging`` sections.

    Returns:
        Validated configuration.

    Raises:
        ConfigurationError: If a value is invalid.
    """
    data_section = data.get("data") or {}
    paths: dict[str, Any] = {"data_root": Path(data_section.get("root", "./data"))}
    for key in _DATA_FILE_KEYS:
        if data_section.get(key):
            paths[key] = Path(data_section[key])

    try:
        return NppesConfig.model_validate(
            {
                "data_paths": paths,
                "ingestion": data.get("ingestion") or {},
                "query": data.get("query") or {},
                "logging": data.get("logging") or {},
            }
        )
    except ValidationError as e:
        msg = f"Invalid configuration: {e}"
        raise ConfigurationError(msg) from e


def load_config(
    config_path: Path,
    base_path: Path | None = None,
    *,
    environ: Mapping[str, str] | None = None,
) -> NppesConfig:
    """
    Load configuration from YAML file(s).

    Values are layered: base.yaml, then the config file, then NPPES_*
    environment variables.

    Args:
        config_path: Path to the main configuration file.
        base_path: Optional path to base configuration for inheritance.
        environ: Environment used for overrides (defaults to os.environ).

    Returns:
        Fully validated NppesConfig instance.

    Raises:
        ConfigurationError: If the file is missing or a value is invalid.
    """
    if not config_path.exists():
        msg = f"Config file not found: {config_path}"
        raise ConfigurationError(msg)

    if base_path is not None:
        base_data = load_yaml(base_path)
    else:
        potential_base = config_path.parent / "base.yaml"
        is_self = potential_base.resolve() == config_path.resolve()
        base_data = (
            load_yaml(potential_base) if potential_base.exists() and not is_self else {}
        )

    merged = _deep_merge(base_data, load_yaml(config_path))
    merged = _apply_env_overrides(merged, os.environ if environ is None else environ)
    return build_config(merged)


def config_from_env(environ: Mapping[str, str] | None = None) -> NppesConfig:
    """
    Build configuration from defaults and NPPES_* environment variables.

    Args:
        environ: Environment to read (defaults to os.environ).

    Returns:
        Validated configuration.
    """
    return build_config(_apply_env_overrides({}, os.environ if environ is None else environ))
