"""
Application configuration using Pydantic Settings.
Loads environment variables and provides type-safe configuration.
"""

from typing import List
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator


DEFAULT_CORS_ORIGINS = ["http://localhost:3000", "http://localhost:5173"]
DEFAULT_JWT_SECRET = "development-secret-key-change-in-production"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Environment
    environment: str = Field(default="development", description="Current environment")
    debug: bool = Field(default=False, description="Debug mode")

    # API Configuration
    api_title: str = Field(default="Timeclock Attendance Service")
    api_version: str = Field(default="1.0.0")
    api_prefix: str = Field(default="/api/v1")
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)

    # Database
    database_url: str = Field(
        default="sqlite+aiosqlite:///./timeclock.db",
        description="SQLAlchemy database URL"
    )
    database_echo: bool = Field(default=False, description="Log emitted SQL")
    create_tables_on_startup: bool = Field(default=True)

    # JWT Configuration
    jwt_secret_key: str = Field(default=DEFAULT_JWT_SECRET, description="JWT secret key")
    jwt_algorithm: str = Field(default="HS256")
    jwt_access_token_expire_minutes: int = Field(default=30)

    # CORS
    cors_origins: str | List[str] = Field(
        default="http://localhost:3000,http://localhost:5173"
    )
    cors_allow_credentials: bool = Field(default=True)
    cors_allow_methods: List[str] = Field(default=["*"])
    cors_allow_headers: List[str] = Field(default=["*"])

    # Localization
    timezone: str = Field(default="UTC", description="Reference timezone for calendar days")

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        """Parse CORS origins from comma-separated string or list."""
        if v is None or (isinstance(v, str) and not v.strip()):
            return list(DEFAULT_CORS_ORIGINS)
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",")]
        return v

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment.lower() == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment.lower() == "production"

    @property
    def is_testing(self) -> bool:
        """Check if running in testing environment."""
        return self.environment.lower() == "testing"

    @property
    def database_url_async(self) -> str:
        """Get async database URL for SQLAlchemy."""
        if self.database_url.startswith("postgresql://"):
            return self.database_url.replace("postgresql://", "postgresql+asyncpg://", 1)
        if self.database_url.startswith("sqlite:///"):
            return self.database_url.replace("sqlite:///", "sqlite+aiosqlite:///", 1)
        return self.database_url

    def validate_environment(self) -> None:
        """Validate settings that must not keep their development defaults."""
        if not self.jwt_secret_key or self.jwt_secret_key == DEFAULT_JWT_SECRET:
            raise ValueError("Missing required environment variables: JWT_SECRET_KEY")


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    Use this function to get settings throughout the application.
    """
    settings = Settings()

    # Validate environment in production
    if settings.is_production:
        settings.validate_environment()

    return settings


# Create a global settings instance
settings = get_settings()
