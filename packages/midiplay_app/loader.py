"""
Mapping configuration loader.

Loads MIDI -> player mappings from YAML or JSON files with validation.
"""

from pathlib import Path
from typing import Any
import json

import yaml

from .mapping_models import MappingConfig


def load_mapping(config_data: dict[str, Any]) -> MappingConfig:
    """
    Load and validate a mapping from a configuration dictionary.

    Args:
        config_data: Dictionary with a "bindings" list and optional
            "channel" and "flags"

    Returns:
        Validated MappingConfig

    Raises:
        ValueError: If configuration is invalid
        pydantic.ValidationError: If validation fails

    Example:
        >>> mapping = load_mapping({
        ...     "channel": 0,
        ...     "bindings": [
        ...         {"type": "note", "key": "C4", "action": "play", "file": "a.mp4"}
        ...     ]
        ... })
        >>> assert mapping.bindings[0].resolved_key == 60
    """
    if "bindings" not in config_data:
        raise ValueError("Configuration must have 'bindings' key")

    if not isinstance(config_data["bindings"], list):
        raise ValueError("'bindings' must be a list")

    return MappingConfig(**config_data)


def load_mapping_from_file(file_path: Path | str) -> MappingConfig:
    """
    Load a mapping from a YAML or JSON file.

    Args:
        file_path: Path to YAML or JSON mapping file

    Returns:
        Validated MappingConfig

    Raises:
        FileNotFoundError: If file doesn't exist
        ValueError: If file format is invalid or configuration is invalid
    """
    path = Path(file_path)

    if not path.exists():
        raise FileNotFoundError(f"Mapping file not found: {path}")

    content = path.read_text(encoding="utf-8")

    suffix = path.suffix.lower()
    if suffix in (".yaml", ".yml"):
        try:
            config_data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {path}: {e}") from e
    elif suffix == ".json":
        try:
            config_data = json.loads(content)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in {path}: {e}") from e
    else:
        raise ValueError(
            f"Unsupported file format: {suffix}. Use .yaml, .yml, or .json"
        )

    if not isinstance(config_data, dict):
        raise ValueError(f"Configuration must be a dictionary, got {type(config_data)}")

    return load_mapping(config_data)
