"""Loaders for declarative configuration."""

from .json_loader import (
    dump_config_dict,
    load_config_from_json,
    parse_config_dict,
    validate_config_dict,
    validate_config_file,
)
from .manager import CONFIG_FILENAME, ConfigManager

__all__ = [
    "CONFIG_FILENAME",
    "ConfigManager",
    "dump_config_dict",
    "load_config_from_json",
    "parse_config_dict",
    "validate_config_dict",
    "validate_config_file",
]
