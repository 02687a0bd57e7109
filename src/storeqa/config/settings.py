"""Typed settings for one storefront environment."""

from __future__ import annotations

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from storeqa.credentials import PLACEHOLDERS, CONSUMER_KEY_ENV, CONSUMER_SECRET_ENV

BROWSER_ALIASES = {
    "chrome": "chromium",
    "chromium": "chromium",
    "edge": "chromium",
    "firefox": "firefox",
    "safari": "webkit",
    "webkit": "webkit",
}


class StoreConfig(BaseSettings):
    """Configuration for a storefront environment (dev, staging, prod).

    Instances are immutable; load a second one to target another
    environment in the same process.
    """

    model_config = SettingsConfigDict(extra="ignore", frozen=True)

    environment: str = "dev"
    base_url: str = "http://demostore.supersqa.com"
    api_base_url: str = "http://demostore.supersqa.com/wp-json/wc/v3"
    consumer_key: str = PLACEHOLDERS[CONSUMER_KEY_ENV]
    consumer_secret: SecretStr = SecretStr(PLACEHOLDERS[CONSUMER_SECRET_ENV])
    browser: str = "chromium"
    headless: bool = False
    timeout: float = Field(default=30.0, gt=0)
    screenshot_dir: str = "reports/screenshots"
    report_dir: str = "reports"

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Only constructor values count; ConfigLoader owns every override.
        return (init_settings,)

    @field_validator("base_url", "api_base_url", mode="before")
    @classmethod
    def validate_url(cls, v: str) -> str:
        v = str(v).strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"URL must start with http:// or https://, got {v!r}")
        return v.rstrip("/")

    @field_validator("browser", mode="before")
    @classmethod
    def validate_browser(cls, v: str) -> str:
        name = str(v).strip().lower()
        if name not in BROWSER_ALIASES:
            raise ValueError(f"Unsupported browser: {v}. Valid: {sorted(BROWSER_ALIASES)}")
        return BROWSER_ALIASES[name]

    @property
    def timeout_ms(self) -> int:
        """Timeout in milliseconds, as the browser driver expects it."""
        return int(self.timeout * 1000)

    def get_base_url(self) -> str:
        """Storefront URL used by the UI scenarios."""
        return self.base_url

    def get_api_base_url(self) -> str:
        """WooCommerce REST base URL used by the API scenarios."""
        return self.api_base_url

    def get_consumer_key(self) -> str:
        return self.consumer_key

    def get_consumer_secret(self) -> str:
        return self.consumer_secret.get_secret_value()
