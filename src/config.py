"""Configuration management for the application."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_TAXONOMY_PATH = Path(__file__).parent / "data" / "taxonomy.json"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database (taxonomy reference tables)
    database_url: str = Field(default="sqlite:///./pantry_match.db")

    # Taxonomy
    taxonomy_source: Literal["file", "database"] = Field(default="file")
    taxonomy_path: Path = Field(default=DEFAULT_TAXONOMY_PATH)
    taxonomy_refresh_seconds: int = Field(default=300, ge=0)  # 0 = load once

    # Match service client
    match_service_url: str = Field(default="http://localhost:8000")
    match_service_timeout: float = Field(default=5.0)

    # API
    environment: str = Field(default="development")
    log_level: str = Field(default="INFO")

    @model_validator(mode="after")
    def validate_production_settings(self) -> "Settings":
        """Validate that production has secure settings."""
        if self.is_production and self.taxonomy_source == "database":
            if "localhost" in self.database_url or self.database_url.startswith("sqlite"):
                raise ValueError("DATABASE_URL should point at the shared database in production")
        return self

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
    """Get cached settings instance."""
    return Settings()
