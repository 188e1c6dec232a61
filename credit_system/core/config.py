"""Core application configuration and settings.

Handles environment variables, storage backend selection, and the
business limits applied to credit requests.
"""
from pathlib import Path
from typing import Optional
from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings


# Load environment variables
ROOT = Path(__file__).resolve().parents[2]
load_dotenv(dotenv_path=ROOT / ".env", override=False)

STORAGE_BACKENDS = ("memory", "redis")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Persistence
    storage_backend: str = Field(default="memory", alias="STORAGE_BACKEND")

    # Redis Configuration
    redis_host: str = Field(default="localhost", alias="REDIS_HOST")
    redis_port: int = Field(default=6379, alias="REDIS_PORT")
    redis_password: Optional[str] = Field(default=None, alias="REDIS_PASSWORD")
    redis_db: int = Field(default=0, alias="REDIS_DB")
    redis_key_prefix: str = Field(default="credit:", alias="REDIS_KEY_PREFIX")

    # Credit rules
    installment_window_months: int = Field(default=3, alias="INSTALLMENT_WINDOW_MONTHS")
    max_installments: int = Field(default=48, alias="MAX_INSTALLMENTS")

    # Application Settings
    environment: str = Field(default="development", alias="ENVIRONMENT")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # API Settings
    api_prefix: str = Field(default="/api", alias="API_PREFIX")
    cors_origins: list[str] = Field(
        default_factory=lambda: [
            "http://localhost:3000",
            "http://127.0.0.1:3000"
        ],
        alias="CORS_ORIGINS"
    )

    class Config:
        case_sensitive = False
        env_file = ".env"
        populate_by_name = True
        extra = "ignore"

    def validate_required_settings(self):
        """Validate that required settings are consistent."""
        if self.storage_backend not in STORAGE_BACKENDS:
            raise ValueError(
                f"STORAGE_BACKEND must be one of {', '.join(STORAGE_BACKENDS)} "
                f"(got '{self.storage_backend}')."
            )
        if self.installment_window_months <= 0:
            raise ValueError(
                "INSTALLMENT_WINDOW_MONTHS must be a positive number of months."
            )
        if self.max_installments <= 0:
            raise ValueError(
                "MAX_INSTALLMENTS must be a positive number of installments."
            )


# Global settings instance
settings = Settings()


# Validate settings on module import (only in non-test environments)
if settings.environment != "test":
    try:
        settings.validate_required_settings()
    except ValueError as e:
        print(f"Configuration Error: {e}")
        # Don't raise in development to allow partial setup
        if settings.environment == "production":
            raise
