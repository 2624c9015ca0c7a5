"""Application configuration.

Loads settings from environment variables with sensible defaults.
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API
    api_version: str = "0.1.0"
    debug: bool = False

    # Database
    database_url: str = "postgresql+asyncpg://gardenshare:gardenshare_dev_password@db:5432/gardenshare"

    # Authentication
    gardenshare_api_key: str = "dev-api-key-change-in-production"

    # Land request sweep
    sweep_enabled: bool = True
    sweep_interval_seconds: float = 86400.0

    # Notifications
    notification_list_limit: int = 50

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    class Config:
        """Pydantic configuration."""

        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
