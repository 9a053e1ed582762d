"""
Application configuration using Pydantic Settings.

Values come from environment variables prefixed with ERRORCODE_VIEWER_
(or a local .env file).
"""
from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

PACKAGE_DATA_DIR = Path(__file__).resolve().parent / "data"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="ERRORCODE_VIEWER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # REST API
    API_BASE_URL: str = "http://localhost:3000/api"
    REQUEST_TIMEOUT: float = 10.0

    # Where the lookup tab gets its records from
    DATA_SOURCE: Literal["api", "local"] = "api"

    # Bundled sample data
    DATA_DIR: Path = PACKAGE_DATA_DIR
    DATABASE_FILE: str = "error_database.json"
    CATALOG_FILE: str = "folders.json"

    # Per brand/model datasets: DATABASES_DIR/<brand>/<model>/DATASET_FILENAME
    DATABASES_DIR: Optional[Path] = None
    DATASET_FILENAME: str = "errores.json"

    # Viewer
    PAGE_SIZE: int = 10
    LOAD_WORKERS: int = 4

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    @property
    def database_path(self) -> Path:
        return self.DATA_DIR / self.DATABASE_FILE

    @property
    def catalog_path(self) -> Path:
        return self.DATA_DIR / self.CATALOG_FILE


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are loaded only once.
    """
    return Settings()


def configure_logging(settings: Optional[Settings] = None) -> None:
    """Configure root logging from settings."""
    settings = settings or get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format=settings.LOG_FORMAT,
    )
