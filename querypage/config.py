"""Library settings loaded from environment variables and .env file."""

import logging
from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

PAGE_SIZE_DEFAULT = 12


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="QUERYPAGE_", env_file=".env", extra="ignore", frozen=True)

    default_page_size: int = Field(PAGE_SIZE_DEFAULT, ge=1)
    max_page_size: int = Field(100, ge=1)

    @model_validator(mode="after")
    def _check_bounds(self):
        if self.default_page_size > self.max_page_size:
            msg = f"default_page_size ({self.default_page_size}) exceeds max_page_size ({self.max_page_size})"
            raise ValueError(msg)
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings, loaded once."""
    settings = Settings()
    if settings.default_page_size != PAGE_SIZE_DEFAULT:
        logger.info("Default page size overridden to %d", settings.default_page_size)
    return settings
