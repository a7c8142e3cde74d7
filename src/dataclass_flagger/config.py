"""
Loading flag values from YAML or JSON configuration files.
"""

import json
import os
from typing import Any, Mapping

import yaml

from .errors import FlagParseError


def load_config_file(config_path: str) -> dict[str, Any]:
    """
    Load a mapping of flag names to values from a YAML or JSON file.

    Args:
        config_path (str): Path to the configuration file.

    Returns:
        dict[str, Any]: The flag values found in the file. An empty YAML
        document yields an empty dict.

    Raises:
        FlagParseError: If the file doesn't exist, has an unsupported extension,
            cannot be decoded, or does not hold a mapping.
    """
    if not os.path.exists(config_path):
        raise FlagParseError(f"Configuration file not found: {config_path}")

    file_ext = os.path.splitext(config_path)[1].lower()

    with open(config_path, "r") as f:
        if file_ext in (".yaml", ".yml"):
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise FlagParseError(f"Invalid YAML file: {e}") from e
        elif file_ext == ".json":
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise FlagParseError(f"Invalid JSON file: {e}") from e
        else:
            raise FlagParseError(
                f"Unsupported file format: {file_ext}. "
                "Supported formats are: .yaml, .yml, .json"
            )

    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise FlagParseError(
            f"Configuration file {config_path} must contain a mapping of flag names "
            f"to values, got {type(data).__name__}"
        )
    return dict(data)


def config_value_text(name: str, value: Any) -> str:
    """Convert a scalar read from a configuration file to flag text."""
    if value is None or isinstance(value, (dict, list, tuple)):
        raise FlagParseError(
            f"Configuration value for {name!r} must be a scalar, "
            f"got {type(value).__name__}: {value!r}"
        )
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
