"""Configuration management for pyenvs."""

from .parser import (
    CONFIG_FILE_NAME,
    ResolverConfig,
    find_config_file,
    load_config,
    load_environment,
)

__all__ = [
    "CONFIG_FILE_NAME",
    "ResolverConfig",
    "find_config_file",
    "load_config",
    "load_environment",
]
