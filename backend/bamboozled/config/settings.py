"""
Settings for the API server, the chat and the management CLI.

Values come from the environment or a ``.env`` file. ``APP_ENV`` selects the
environment class, which only changes defaults.
"""

import os
from functools import lru_cache
from typing import Dict, List, Optional, Type

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from bamboozled.database.providers.base import DatabaseConfig

ENVIRONMENTS = ("development", "staging", "production", "test")
LOG_FORMATS = ("json", "standard")


class Settings(BaseSettings):
    """Base settings shared by every environment."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    app_env: str = "development"
    debug: bool = False
    log_level: str = "INFO"
    log_format: str = "json"

    # Server
    api_host: str = "0.0.0.0"
    api_port: int = 3001
    allowed_origins: str = "http://localhost:3000"

    # Database (DATABASE_PROVIDER=sqlite|postgres|dynamodb)
    database_provider: str = "sqlite"
    database_path: str = "./data/bamboozled.db"
    database_host: Optional[str] = None
    database_port: Optional[int] = None
    database_name: Optional[str] = None
    database_user: Optional[str] = None
    database_password: Optional[str] = None
    database_region: Optional[str] = None
    database_table_prefix: Optional[str] = None
    database_enable_logging: bool = False

    # Puzzles scraped from the source site, and JSON exports
    puzzle_data_path: str = "./puzzles/puzzle-data.json"
    puzzle_images_path: str = "./puzzles/images"
    export_dir: str = "./data/exports"

    @field_validator("app_env", mode="before")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        env = str(v).strip().lower()
        if env not in ENVIRONMENTS:
            raise ValueError(f"Invalid environment: {v}. Must be one of {list(ENVIRONMENTS)}")
        return env

    @field_validator("allowed_origins")
    @classmethod
    def split_origins(cls, v: str) -> List[str]:
        """``ALLOWED_ORIGINS`` is a comma-separated list."""
        return [origin.strip() for origin in v.split(",") if origin.strip()]

    @field_validator("database_provider")
    @classmethod
    def normalize_provider(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        if v not in LOG_FORMATS:
            raise ValueError(f"Invalid log format: {v}. Must be 'json' or 'standard'")
        return v

    def database_config(self) -> DatabaseConfig:
        """Provider configuration built from the ``DATABASE_*`` values."""
        return DatabaseConfig(
            provider=self.database_provider,
            path=self.database_path,
            host=self.database_host,
            port=self.database_port,
            database=self.database_name,
            user=self.database_user,
            password=self.database_password,
            region=self.database_region,
            table_prefix=self.database_table_prefix,
            enable_logging=self.database_enable_logging
        )


class DevelopmentSettings(Settings):
    debug: bool = True
    log_level: str = "DEBUG"
    log_format: str = "standard"


class StagingSettings(Settings):
    app_env: str = "staging"
    log_level: str = "DEBUG"


class ProductionSettings(Settings):
    """Production refuses local CORS origins."""

    app_env: str = "production"

    @field_validator("allowed_origins")
    @classmethod
    def reject_local_origins(cls, v: List[str]) -> List[str]:
        local = [origin for origin in v if "localhost" in origin or "127.0.0.1" in origin]
        if local:
            raise ValueError(f"Local origins not allowed in production: {', '.join(local)}")
        return v


class TestSettings(Settings):
    app_env: str = "test"
    log_level: str = "WARNING"
    log_format: str = "standard"
    database_path: str = "./data/bamboozled-test.db"


SETTINGS_BY_ENV: Dict[str, Type[Settings]] = {
    "development": DevelopmentSettings,
    "staging": StagingSettings,
    "production": ProductionSettings,
    "test": TestSettings,
}


@lru_cache()
def get_settings() -> Settings:
    """
    Settings for the environment named by ``APP_ENV`` (development by default).
    An unknown environment fails validation.
    Cached; call ``get_settings.cache_clear()`` after changing the environment.
    """
    env = os.getenv("APP_ENV", "development").strip().lower()
    return SETTINGS_BY_ENV.get(env, Settings)()
