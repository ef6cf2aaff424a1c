"""Configuration management for pgprof."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="PGPROF_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Logging level"
    )

    # Partitioning
    scratch_dir: str = Field(
        default="",
        description="Parent directory for bucket files (empty = system temp dir)",
    )

    # Report defaults
    report_format: Literal["text", "json"] = Field(
        default="text",
        description="Default report format (text, json)",
    )
    report_limit: int = Field(
        default=0,
        ge=0,
        description="Maximum entries per report section (0 = all)",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value):
        """Accept level names in any case."""
        return value.upper() if isinstance(value, str) else value

    @property
    def scratch_path(self) -> Path | None:
        """Get resolved scratch parent directory, if configured."""
        if not self.scratch_dir.strip():
            return None
        return Path(self.scratch_dir).expanduser()


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
