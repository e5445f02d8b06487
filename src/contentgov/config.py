"""Application configuration from environment variables."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from contentgov.domain.value_objects import CopyMode


class Settings(BaseSettings):
    """Application settings loaded from environment (prefix ``CONTENTGOV_``)."""

    model_config = SettingsConfigDict(
        env_prefix="CONTENTGOV_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Content platform
    platform_url: str = Field(
        default="http://localhost:8080",
        description="Content platform server URL",
    )
    platform_api_version: str = Field(default="3.21", description="REST API version")
    platform_site_content_url: str = Field(
        default="",
        description="Site content URL; empty selects the default site",
    )
    platform_pat_name: str = Field(default="", description="Personal access token name")
    platform_pat_secret: str = Field(default="", description="Personal access token secret")
    platform_timeout_seconds: float = Field(
        default=30.0, gt=0, description="HTTP timeout for platform calls"
    )

    # Permission operations
    default_copy_mode: CopyMode = Field(
        default=CopyMode.REPLACE,
        description="Copy mode used when a request does not name one",
    )
    bulk_medium_impact_threshold: int = Field(
        default=20, ge=0, description="Bulk size above which impact is Medium"
    )
    bulk_high_impact_threshold: int = Field(
        default=50, ge=0, description="Bulk size above which impact is High"
    )
    bulk_max_items: int = Field(default=1000, gt=0, description="Maximum items per bulk request")

    # API
    api_token: str = Field(
        default="",
        description="Bearer token required by the HTTP API; empty disables the check",
    )
    host: str = Field(default="0.0.0.0", description="HTTP bind address")
    port: int = Field(default=8000, description="HTTP port")

    # Application
    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Environment name",
    )
    log_level: str = Field(default="INFO", description="Logging level")
    log_json: bool = Field(default=False, description="Emit JSON log lines")
    debug: bool = Field(default=False, description="Debug mode")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
