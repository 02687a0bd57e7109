"""Configuration management for storeqa."""

from storeqa.config.loader import (
    ConfigLoader,
    current_environment,
    load_config,
    resolve_env_vars,
    validate_config_credentials,
)
from storeqa.config.settings import StoreConfig
from storeqa.errors import ConfigLoadError

__all__ = [
    "StoreConfig",
    "ConfigLoader",
    "ConfigLoadError",
    "current_environment",
    "load_config",
    "resolve_env_vars",
    "validate_config_credentials",
]
