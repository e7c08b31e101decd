"""Store settings using Pydantic BaseSettings."""

import os
from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

STORAGE_BACKENDS = ("memory", "file", "sqlite", "sql", "redis")


def _get_default_storage_path() -> str:
    """Get absolute path to the default blob directory."""
    # dashstore/config/ -> dashstore/
    config_dir = os.path.dirname(os.path.abspath(__file__))
    package_dir = os.path.dirname(config_dir)
    return os.path.join(package_dir, "data")


def _get_default_db_url() -> str:
    """Get the default SQLite URL next to the blob directory."""
    return f"sqlite+aiosqlite:///{os.path.join(_get_default_storage_path(), 'dashstore.db')}"


class Settings(BaseSettings):
    """Store configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="DASHSTORE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    environment: str = Field(default="development")

    # Persistence
    # "memory" = per-process dict (tests, throwaway sessions)
    # "file" = one JSON file per collection under storage_path
    # "sqlite"/"sql" = one row per collection through async SQLAlchemy
    # "redis" = one string key per collection
    storage_backend: str = Field(default="file")
    storage_path: str = Field(default_factory=_get_default_storage_path)
    database_url: str = Field(default_factory=_get_default_db_url)
    redis_url: str = Field(default="")
    key_prefix: str = Field(default="dc_")

    # Seeding
    seed: int = Field(default=42)

    # Queries
    default_page_size: int = Field(default=10)
    max_page_size: int = Field(default=100)

    # Logging
    log_level: str = Field(default="INFO")
    log_json: bool = Field(default=False)
    log_file: Optional[str] = Field(default=None)

    @field_validator("storage_backend")
    @classmethod
    def validate_storage_backend(cls, v: str) -> str:
        vv = (v or "").strip().lower()
        if vv not in STORAGE_BACKENDS:
            raise ValueError(f"STORAGE_BACKEND must be one of: {', '.join(STORAGE_BACKENDS)}")
        return vv

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return upper

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        vv = (v or "").strip().lower()
        if vv not in {"development", "test", "production"}:
            raise ValueError("ENVIRONMENT must be one of: development, test, production")
        return vv

    @model_validator(mode="after")
    def validate_cross_field_constraints(self) -> "Settings":
        if self.default_page_size < 1:
            raise ValueError("DEFAULT_PAGE_SIZE must be at least 1")
        if self.max_page_size < self.default_page_size:
            raise ValueError("MAX_PAGE_SIZE must be >= DEFAULT_PAGE_SIZE")
        if self.storage_backend == "redis" and not self.redis_url:
            raise ValueError("REDIS_URL is required when STORAGE_BACKEND=redis")
        return self

    @property
    def is_test(self) -> bool:
        """Check if running in test mode."""
        return self.environment == "test"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
