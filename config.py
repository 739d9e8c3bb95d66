"""
Configuration settings for the MedStudy CLI.

Uses Pydantic Settings for environment variable management with .env file support.
Variables are prefixed with MEDSTUDY_ (e.g. MEDSTUDY_DATA_DIR).
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="MEDSTUDY_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Storage
    # ========================================
    data_dir: Path = Field(
        default=Path.home() / ".medstudy",
        description="Directory holding the key-value store files",
    )
    storage_key: str = Field(
        default="medstudy-data",
        description="Key the study state is stored under",
    )
    seed_file: Path | None = Field(
        default=None,
        description="JSON file with built-in disciplines (None for no built-ins)",
    )
    rollback_on_save_failure: bool = Field(
        default=True,
        description="Undo in-memory changes when saving fails",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING",
        description="Logging verbosity level",
    )
    log_file: str | None = Field(
        default=None,
        description="Log file path (None for stderr only)",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_level(cls, v):
        return v.upper() if isinstance(v, str) else v

    @field_validator("data_dir", "seed_file", mode="after")
    @classmethod
    def _expand_user(cls, v):
        return v.expanduser() if v is not None else v


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
