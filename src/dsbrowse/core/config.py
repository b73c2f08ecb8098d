"""Configuration management.

Uses pydantic-settings for type-safe configuration from environment variables.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings.

    All settings can be overridden via environment variables.
    Prefix: DSBROWSE_
    """

    model_config = SettingsConfigDict(
        env_prefix="DSBROWSE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Remote API
    api_base_url: str = Field(
        default="http://localhost:8000",
        description="Base URL of the dataset API (enumerate_datasets, upload_data, ...)",
    )
    access_token: str | None = Field(
        default=None,
        description="Bearer token sent with every request",
    )
    request_timeout_seconds: float = Field(
        default=30.0,
        description="Transport timeout for a single request",
    )

    # Inference polling
    poll_interval_seconds: float = Field(
        default=5.0,
        description="Period between inference status polls",
    )

    # Grid
    default_page_size: int = Field(default=1000)

    # Upload schema defaults
    default_max_categories: int = Field(
        default=100,
        description="Max distinct values for a column to be treated as a category",
    )
    upload_na_values: list[str] = Field(
        default_factory=lambda: ["NA", "N/A", "null", "None", "Not Available"],
        description="Values treated as missing when a new dataset is uploaded",
    )

    # Logging
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="console")  # 'json' or 'console'


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
