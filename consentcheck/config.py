"""
Runtime configuration for the audit service.

Uses ``pydantic_settings.BaseSettings`` for automatic environment
variable binding, type coercion, and validation.  Timeouts are in
milliseconds to match the browser driver's API.
"""

from __future__ import annotations

import functools

import pydantic
import pydantic_settings


class Settings(pydantic_settings.BaseSettings):
    """Audit timeouts, browser options and server binding.

    Attributes:
        navigation_timeout_ms: Bound for the initial page load to reach
            network quiescence; exceeding it aborts the audit.
        pre_consent_settle_ms: Fixed wait after load so asynchronously
            fired trackers register before the pre-consent check.
        post_consent_timeout_ms: Bound for network quiescence after the
            accept click; exceeding it is tolerated.
        browser_headless: Run Chromium without a window.
        host: Interface uvicorn binds to.
        port: Port uvicorn listens on.
        environment: ``"production"`` disables auto-reload.
    """

    model_config = pydantic_settings.SettingsConfigDict(extra="ignore", populate_by_name=True)

    navigation_timeout_ms: int = pydantic.Field(
        default=30000, ge=0, validation_alias="NAVIGATION_TIMEOUT_MS"
    )
    pre_consent_settle_ms: int = pydantic.Field(
        default=5000, ge=0, validation_alias="PRE_CONSENT_SETTLE_MS"
    )
    post_consent_timeout_ms: int = pydantic.Field(
        default=10000, ge=0, validation_alias="POST_CONSENT_TIMEOUT_MS"
    )
    browser_headless: bool = pydantic.Field(
        default=True, validation_alias="BROWSER_HEADLESS"
    )
    host: str = pydantic.Field(
        default="0.0.0.0", validation_alias="UVICORN_HOST"
    )
    port: int = pydantic.Field(
        default=3001, validation_alias="UVICORN_PORT"
    )
    environment: str = pydantic.Field(
        default="development", validation_alias="ENVIRONMENT"
    )

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


@functools.lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings (cached)."""
    return Settings()
