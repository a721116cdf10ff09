"""
Configuration management for FTMS.

This module centralizes environment-driven configuration using Pydantic's
`BaseSettings`. Components accept an explicit `Settings` instance and fall
back to the shared `settings` object when none is given.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field, PositiveInt, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application configuration sourced from `FTMS_*` environment variables."""

    # Storage layout
    STORAGE_DIR: Path = Field(default_factory=lambda: Path("~/.ftms/files"))
    WORKSPACE_DIR: Path = Field(default_factory=lambda: Path("~/.ftms"))

    # Content derivation
    MAX_TEXT_BYTES: PositiveInt = 100_000
    ENABLE_PDF_EXTRACTION: bool = True

    # Pagination
    DEFAULT_LIST_LIMIT: PositiveInt = 50
    DEFAULT_SEARCH_LIMIT: PositiveInt = 20
    MAX_PAGE_SIZE: PositiveInt = 500

    # Remove stored bytes when the index insert of an upload fails
    CLEANUP_ON_INDEX_FAILURE: bool = True

    LOG_LEVEL: str = "INFO"

    class Config:
        env_prefix = "FTMS_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False

    @field_validator("STORAGE_DIR", "WORKSPACE_DIR", mode="after")
    def _expand_user(cls, value: Path) -> Path:
        return value.expanduser()

    @field_validator("LOG_LEVEL", mode="after")
    def _check_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level: {value}")
        return level

    @property
    def index_path(self) -> Path:
        return self.WORKSPACE_DIR / "ftms" / "ftms.db"


@lru_cache()
def get_settings() -> Settings:
    """Return a cached `Settings` instance."""

    return Settings()


# Singleton-style settings instance for modules that prefer direct access.
settings = get_settings()
