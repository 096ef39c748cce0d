"""Engine configuration loaded from environment variables."""

from __future__ import annotations

import logging

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

DEFAULT_REGION = "ap-northeast-1"
DEFAULT_POLL_INTERVAL = 5.0
DEFAULT_PAGE_SIZE = 100
MAX_PAGE_SIZE = 1000


class Settings(BaseSettings):
    """Application settings loaded from environment variables with ATHENA_ prefix."""

    model_config = SettingsConfigDict(
        env_prefix="ATHENA_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    debug: bool = False

    # Service
    region: str = DEFAULT_REGION
    output_location: str | None = None
    workgroup: str | None = None
    database: str | None = None

    # Polling
    poll_interval: float = Field(default=DEFAULT_POLL_INTERVAL, gt=0.0)
    poll_timeout: float | None = Field(default=None, gt=0.0)

    # Pagination
    page_size: int = Field(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE)

    def is_output_location_configured(self) -> bool:
        return bool(self.output_location)


def load_settings(**overrides: object) -> Settings:
    """Load settings from environment, with optional overrides for testing."""
    settings = Settings(**overrides)  # type: ignore[arg-type]

    if settings.debug:
        logger.info("Loaded settings for region: %s", settings.region)

    return settings
