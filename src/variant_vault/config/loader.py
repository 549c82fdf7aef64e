"""Configuration loading with YAML parsing and validation."""

from pathlib import Path
from typing import Any

import pydantic_yaml

from .schema import VaultConfig


def load_config(config_path: Path | str) -> VaultConfig:
    """
    Load and validate vault configuration from YAML file.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Validated VaultConfig instance

    Raises:
        FileNotFoundError: If config file doesn't exist
        pydantic.ValidationError: If config is invalid
    """
    config_path = Path(config_path)
    if not config_path.is_file():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    return pydantic_yaml.parse_yaml_raw_as(VaultConfig, config_path.read_text())


def _apply_override(config_dict: dict[str, Any], key: str, value: Any) -> None:
    *sections, field_name = key.split(".")
    target = config_dict
    for section in sections:
        target = target.get(section)
        if not isinstance(target, dict):
            raise KeyError(f"Unknown config section in override: {key}")
    if field_name not in target:
        raise KeyError(f"Unknown config field in override: {key}")
    target[field_name] = value


def load_config_with_overrides(
    config_path: Path | str,
    overrides: dict[str, Any],
) -> VaultConfig:
    """
    Load config from YAML, then apply command-line overrides.

    Keys name a top-level field ("reference_db_path") or a section field
    with a dotted path ("match.chunk_size"). Overrides whose value is None
    are skipped, so options the user did not pass keep the file's value.

    Raises:
        FileNotFoundError: If config file doesn't exist
        KeyError: If an override names a field the config does not have
        pydantic.ValidationError: If the overridden config is invalid
    """
    config_dict = load_config(config_path).model_dump()

    for key, value in overrides.items():
        if value is not None:
            _apply_override(config_dict, key, value)

    return VaultConfig.model_validate(config_dict)
