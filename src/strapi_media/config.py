# ABOUTME: Application configuration using Pydantic Settings for environment variables
# ABOUTME: Provides type-safe access to the Strapi API location, media cache, and logging settings

from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Config(BaseSettings):
    """Application configuration with environment variable support."""

    model_config = SettingsConfigDict(
        env_prefix="STRAPI_MEDIA_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore unknown environment variables
    )

    # Strapi API Configuration
    api_url: str = Field(default="http://localhost:1337", description="Base URL of the Strapi instance")
    api_token: str = Field(default="", description="Strapi API token used for file metadata queries")
    remote_file_headers: dict[str, str] = Field(
        default_factory=dict,
        description="Extra HTTP headers sent with every media download (JSON object)",
    )
    request_timeout: float = Field(default=30.0, description="HTTP timeout in seconds for API calls and downloads")

    # Media Storage Configuration
    database_url: str = Field(
        default="sqlite+aiosqlite:///./data/strapi_media.db",
        description="Database URL holding the media cache and local file nodes",
    )
    download_dir: Path = Field(default=Path("data/media"), description="Directory where downloaded files are stored")
    max_concurrent_downloads: int = Field(default=8, ge=1, description="Upper bound on simultaneous file downloads")

    # Logging Configuration
    log_mode: str | None = Field(
        default=None, description="Logging output mode (interactive/production), detected from the terminal when unset"
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", description="Logging verbosity level"
    )

    log_file: Path | None = Field(default=None, description="Custom log file path (overrides default)")

    @field_validator("api_url")
    @classmethod
    def _require_http_url(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            raise ValueError("api_url must be an http(s) URL")
        return value

    @field_validator("log_mode")
    @classmethod
    def _normalize_log_mode(cls, value: str | None) -> str | None:
        return value.lower() if value else None

    @property
    def api_base(self) -> str:
        """API URL without a trailing slash, ready for path concatenation."""
        return self.api_url.rstrip("/")


# Global config instance - lazy loaded when first accessed
_config_instance: Config | None = None


def get_config() -> Config:
    """Shared configuration, read from the environment on first access."""
    global _config_instance
    if _config_instance is None:
        _config_instance = Config()
    return _config_instance


def reload_config() -> Config:
    """Re-read the environment and replace the shared configuration."""
    global _config_instance
    _config_instance = Config()
    return _config_instance
