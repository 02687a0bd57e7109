"""Validation of WooCommerce API credentials.

Credentials come from the environment config files or from the
``API_CONSUMER_KEY`` / ``API_CONSUMER_SECRET`` environment variables. A
value that is missing, blank or still the shipped placeholder is rejected
before any request is signed, with instructions for fixing the setup.
"""

from __future__ import annotations

import logging

from storeqa.errors import InvalidCredentialError

logger = logging.getLogger(__name__)

CONSUMER_KEY_ENV = "API_CONSUMER_KEY"
CONSUMER_SECRET_ENV = "API_CONSUMER_SECRET"
BASE_URL_ENV = "API_BASE_URL"

PLACEHOLDERS = {
    CONSUMER_KEY_ENV: "your_consumer_key_here",
    CONSUMER_SECRET_ENV: "your_consumer_secret_here",
}

EXAMPLE_VALUES = {
    CONSUMER_KEY_ENV: "ck_your_actual_key_here",
    CONSUMER_SECRET_ENV: "cs_your_actual_secret_here",
}

CONFIG_FILES = (
    "config/dev.yaml",
    "config/staging.yaml",
    "config/prod.yaml",
)


def missing_credential_message(env_var: str) -> str:
    """Build the setup instructions shown when a credential is unusable."""
    example = EXAMPLE_VALUES.get(env_var, "<value>")
    config_files = "\n".join(f"   - {path}" for path in CONFIG_FILES)
    return (
        f"{env_var} environment variable is not set!\n"
        "\n"
        "Setup Instructions:\n"
        "1. Set the environment variable:\n"
        f'   export {env_var}="{example}"\n'
        "\n"
        "2. Or add it to your shell profile (~/.bashrc, ~/.zshrc, etc.):\n"
        f"   echo 'export {env_var}=\"{example}\"' >> ~/.bashrc\n"
        "\n"
        "3. Or set it for a single run:\n"
        f'   {env_var}="{example}" storeqa run api\n'
        "\n"
        "4. Check your environment configuration files:\n"
        f"{config_files}"
    )


def is_usable(env_var: str, value: str | None) -> bool:
    """Return True when ``value`` is neither empty nor the placeholder."""
    if value is None or not str(value).strip():
        return False
    return value != PLACEHOLDERS.get(env_var)


def check_credential(env_var: str, value: str | None) -> str:
    """Return ``value`` unchanged, or raise InvalidCredentialError."""
    if not is_usable(env_var, value):
        message = missing_credential_message(env_var)
        logger.error("Credential %s is missing or still a placeholder", env_var)
        raise InvalidCredentialError(
            message,
            env_var=env_var,
            suggestions=[
                f'export {env_var}="{EXAMPLE_VALUES.get(env_var, "<value>")}"',
                f"Or set it in one of: {', '.join(CONFIG_FILES)}",
            ],
        )
    return value  # type: ignore[return-value]


def validate_credentials(consumer_key: str | None, consumer_secret: str | None) -> None:
    """Validate both halves of the consumer credential."""
    logger.info("Validating API credentials...")
    check_credential(CONSUMER_KEY_ENV, consumer_key)
    check_credential(CONSUMER_SECRET_ENV, consumer_secret)
    logger.info("API credentials validation passed")
