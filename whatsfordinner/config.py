"""Configuration using pydantic-settings."""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings, read from WFD_* environment variables or .env."""

    model_config = SettingsConfigDict(env_prefix="WFD_", env_file=".env", extra="ignore")

    host: str = "127.0.0.1"
    port: int = 8000
    log_level: str = "INFO"
    log_file: Optional[str] = None

    database_url: str = "sqlite:///./data/whatsfordinner.db"

    # Spoonacular
    spoonacular_api_key: Optional[str] = None
    spoonacular_base_url: str = "https://api.spoonacular.com"
    request_timeout: float = 10.0
    search_page_size: int = 10

    # Custom recipe photos are stored inline in the database
    max_image_bytes: int = 5 * 1024 * 1024


settings = Settings()


def get_settings() -> Settings:
    """Get settings instance (for dependency injection)."""
    return settings
