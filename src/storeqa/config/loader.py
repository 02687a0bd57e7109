"""Per-environment configuration loader.

Each environment lives in ``config/<env>.yaml``. String values may use
``${VAR:default}`` interpolation, and a fixed set of environment variables
override whatever the file says.

Priority: environment variable overrides > interpolated file values > defaults
"""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from storeqa.config.settings import StoreConfig
from storeqa.credentials import (
    BASE_URL_ENV,
    CONSUMER_KEY_ENV,
    CONSUMER_SECRET_ENV,
    validate_credentials,
)
from storeqa.errors import ConfigLoadError

logger = logging.getLogger(__name__)

DEFAULT_ENVIRONMENT = "dev"
ENVIRONMENT_ENV = "STOREQA_ENV"
CONFIG_DIR_ENV = "STOREQA_CONFIG_DIR"

ENV_VAR_PATTERN = re.compile(r"\$\{([^}:]+)(?::-?([^}]*))?\}")


def _to_bool(value: str) -> bool:
    return value.strip().lower() in ("true", "1", "yes", "on")


ENV_OVERRIDES: dict[str, tuple[str, Any]] = {
    BASE_URL_ENV: ("api_base_url", str),
    CONSUMER_KEY_ENV: ("consumer_key", str),
    CONSUMER_SECRET_ENV: ("consumer_secret", str),
    "STOREQA_BASE_URL": ("base_url", str),
    "STOREQA_BROWSER": ("browser", str),
    "STOREQA_HEADLESS": ("headless", _to_bool),
    "STOREQA_TIMEOUT": ("timeout", float),
    "STOREQA_REPORT_DIR": ("report_dir", str),
}


def resolve_env_vars(value: str) -> str:
    """Resolve ``${VAR}`` and ``${VAR:default}`` references in a string."""

    def replace(match: re.Match[str]) -> str:
        var_name = match.group(1)
        default = match.group(2) or ""
        return os.environ.get(var_name, default)

    return ENV_VAR_PATTERN.sub(replace, value)


def default_config_dir() -> Path:
    """Directory holding the ``<env>.yaml`` files."""
    return Path(os.environ.get(CONFIG_DIR_ENV, "config"))


def current_environment(env: str | None = None) -> str:
    """Pick the environment: explicit argument, then STOREQA_ENV, then dev."""
    return (env or os.environ.get(ENVIRONMENT_ENV) or DEFAULT_ENVIRONMENT).strip().lower()


class ConfigLoader:
    """Loads a StoreConfig for one environment."""

    def __init__(self, env: str | None = None, config_dir: str | Path | None = None) -> None:
        self.env = current_environment(env)
        self.config_dir = Path(config_dir) if config_dir else default_config_dir()

    @property
    def config_path(self) -> Path:
        return self.config_dir / f"{self.env}.yaml"

    def load(self) -> StoreConfig:
        data = self._flatten(self._interpolate(self._load_file()))
        data["environment"] = self.env
        data.update(self._env_overrides())

        try:
            config = StoreConfig(**data)
        except ValidationError as e:
            raise ConfigLoadError(
                f"Invalid configuration in {self.config_path}: {e}",
                cause=e,
                path=str(self.config_path),
            ) from e

        logger.info("Loaded configuration for environment: %s", self.env)
        return config

    def _load_file(self) -> dict[str, Any]:
        path = self.config_path
        if not path.exists():
            available = sorted(p.stem for p in self.config_dir.glob("*.yaml"))
            raise ConfigLoadError(
                f"Configuration file not found: {path}",
                path=str(path),
                available_environments=available,
            )

        try:
            with open(path, encoding="utf-8") as f:
                content = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigLoadError(
                f"Failed to parse YAML configuration {path}: {e}", cause=e, path=str(path)
            ) from e

        if content is None:
            return {}
        if not isinstance(content, dict):
            raise ConfigLoadError(
                f"Configuration must be a YAML mapping, got {type(content).__name__}",
                path=str(path),
            )
        return content

    def _interpolate(self, config: dict[str, Any]) -> dict[str, Any]:
        result: dict[str, Any] = {}
        for key, value in config.items():
            if isinstance(value, dict):
                result[key] = self._interpolate(value)
            elif isinstance(value, str):
                result[key] = resolve_env_vars(value)
            else:
                result[key] = value
        return result

    @staticmethod
    def _flatten(config: dict[str, Any]) -> dict[str, Any]:
        """Lift the ``api:`` section into the flat settings fields."""
        flat = {k: v for k, v in config.items() if k != "api"}
        api = config.get("api") or {}
        if "base_url" in api:
            flat["api_base_url"] = api["base_url"]
        for key in ("consumer_key", "consumer_secret"):
            if key in api:
                flat[key] = api[key]
        return flat

    @staticmethod
    def _env_overrides() -> dict[str, Any]:
        overrides: dict[str, Any] = {}
        for env_key, (config_key, converter) in ENV_OVERRIDES.items():
            value = os.environ.get(env_key)
            if value is None:
                continue
            try:
                overrides[config_key] = converter(value)
            except (ValueError, TypeError) as e:
                raise ConfigLoadError(
                    f"Invalid value for {env_key}: {value}", cause=e, env_var=env_key
                ) from e
        return overrides


def load_config(env: str | None = None, config_dir: str | Path | None = None) -> StoreConfig:
    """Load the configuration for ``env`` (default: STOREQA_ENV or dev).

    Raises:
        ConfigLoadError: If the environment file is missing or invalid.
    """
    return ConfigLoader(env=env, config_dir=config_dir).load()


def validate_config_credentials(config: StoreConfig) -> None:
    """Reject a config whose consumer key or secret is unusable.

    Raises:
        InvalidCredentialError: naming the environment variable to set.
    """
    validate_credentials(config.get_consumer_key(), config.get_consumer_secret())
