"""
ForumLite Composer Configuration.

Environment-based configuration using Pydantic Settings.
Values can be overridden via environment variables or a local .env file.
"""

from functools import lru_cache
from typing import Any

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "ForumLite Composer"
    app_version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"

    # API
    api_v1_prefix: str = "/api/v1"

    # Composer
    composer_max_paste_bytes: int = 2 * 1024 * 1024
    composer_fallback_on_empty: bool = True
    composer_user_profile_path: str = "/users"
    composer_allowed_image_schemes: list[str] = ["http", "https", "data"]

    # CORS
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://localhost:9002",
    ]

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: Any) -> Any:
        """Normalize log level names."""
        if isinstance(v, str):
            return v.strip().upper()
        return v

    @field_validator("composer_user_profile_path", mode="before")
    @classmethod
    def validate_profile_path(cls, v: Any) -> Any:
        """Strip trailing slash from the profile path."""
        if isinstance(v, str) and len(v) > 1:
            return v.rstrip("/")
        return v


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
