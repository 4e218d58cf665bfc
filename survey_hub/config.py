"""Application configuration management using Pydantic Settings.

This module loads and validates environment variables using Pydantic Settings.
All configuration is loaded from environment variables or a .env file.
"""

import re
from functools import lru_cache
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


HEX_COLOR_PATTERN = re.compile(r"^#[0-9a-fA-F]{6}$")


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Attributes:
        database_url: Database connection string (PostgreSQL or SQLite)
        database_pool_size: Number of connections to maintain in pool
        database_max_overflow: Maximum overflow connections beyond pool_size
        environment: Application environment (development, staging, production)
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        public_base_url: Origin used in respondent links (request origin if unset)
        qr_code_size: Default QR code width/height in pixels
        qr_code_margin: Quiet-zone width in modules around the QR code
        qr_code_dark_color: Foreground colour of QR code modules
        qr_code_light_color: Background colour of the QR code
        default_surveys_dir: Directory holding the default survey YAML files
        git_commit_sha: Git commit SHA reported at startup
        allowed_origins: List of allowed CORS origins
    """

    # Database Configuration
    database_url: str = Field(
        description="Database connection string"
    )
    database_pool_size: int = Field(
        default=5,
        description="Number of database connections in pool"
    )
    database_max_overflow: int = Field(
        default=10,
        description="Maximum overflow connections beyond pool size"
    )

    # Application Configuration
    environment: str = Field(
        default="development",
        description="Application environment"
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level"
    )
    git_commit_sha: str = Field(
        default="local",
        description="Git commit SHA for versioning"
    )
    default_surveys_dir: str = Field(
        default="./surveys",
        description="Path to default surveys directory"
    )

    # Access Link Configuration
    public_base_url: Optional[str] = Field(
        default=None,
        description="Public origin for respondent links (e.g. https://surveys.example.org)"
    )
    qr_code_size: int = Field(
        default=300,
        ge=50,
        le=2000,
        description="Default QR code size in pixels"
    )
    qr_code_margin: int = Field(
        default=2,
        ge=0,
        description="QR code quiet-zone margin in modules"
    )
    qr_code_dark_color: str = Field(
        default="#1f2937",
        description="QR code foreground colour"
    )
    qr_code_light_color: str = Field(
        default="#ffffff",
        description="QR code background colour"
    )

    # Security Configuration
    allowed_origins: str = Field(
        default="http://localhost:3000,http://localhost:8000",
        description="Comma-separated list of allowed CORS origins"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment is one of the allowed values."""
        allowed = {"development", "staging", "production"}
        if v.lower() not in allowed:
            raise ValueError(f"Environment must be one of {allowed}")
        return v.lower()

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is one of the allowed values."""
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in allowed:
            raise ValueError(f"Log level must be one of {allowed}")
        return v_upper

    @field_validator("qr_code_dark_color", "qr_code_light_color")
    @classmethod
    def validate_color(cls, v: str) -> str:
        """Validate colours are #rrggbb hex strings."""
        if not HEX_COLOR_PATTERN.match(v):
            raise ValueError("Colour must be a hex string like #1f2937")
        return v.lower()

    @field_validator("public_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: Optional[str]) -> Optional[str]:
        """Normalize the public origin so links never contain '//?form='."""
        if v is None or not v.strip():
            return None
        return v.strip().rstrip("/")

    def get_allowed_origins_list(self) -> List[str]:
        """Parse allowed_origins string into a list."""
        return [origin.strip() for origin in self.allowed_origins.split(",")]

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Settings: Application settings singleton

    Note:
        Uses lru_cache to ensure settings are only loaded once
        and shared across the application.
    """
    return Settings()
