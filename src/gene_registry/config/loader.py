"""Configuration loading with YAML parsing and validation."""

from pathlib import Path
from typing import Any

import pydantic_yaml

from .schema import RegistryConfig


def load_config(config_path: Path | str) -> RegistryConfig:
    """
    Load and validate registry configuration from YAML file.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Validated RegistryConfig instance

    Raises:
        FileNotFoundError: If config file doesn't exist
        pydantic.ValidationError: If config is invalid
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r") as f:
        yaml_content = f.read()

    return pydantic_yaml.parse_yaml_raw_as(RegistryConfig, yaml_content)


def load_config_with_overrides(
    config_path: Path | str,
    overrides: dict[str, Any],
) -> RegistryConfig:
    """
    Load config from YAML and apply dictionary overrides.

    Used by CLI flags that override config file values. Keys may be
    dotted to reach nested settings, e.g. "importer.taxonomy_id".
    Overrides with a None value are ignored.

    Args:
        config_path: Path to YAML configuration file
        overrides: Dictionary of values to override

    Returns:
        Validated RegistryConfig with overrides applied

    Raises:
        FileNotFoundError: If config file doesn't exist
        pydantic.ValidationError: If final config is invalid
    """
    config = load_config(config_path)
    config_dict = config.model_dump()

    for key, value in overrides.items():
        if value is None:
            continue
        parts = key.split(".")
        target = config_dict
        for part in parts[:-1]:
            target = target[part]
        target[parts[-1]] = value

    # Re-validate with overrides applied
    return RegistryConfig.model_validate(config_dict)
