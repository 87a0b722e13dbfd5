"""
Pydantic models for bsdata configuration.

Uses pydantic-settings for environment variable validation and type coercion.
Every setting can be given as ``BSDATA_<NAME>`` in the environment or in a
``.env`` file.
"""

from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from bsdata.adapters.catalogue.loader import CATALOGUE_MARKER
from bsdata.adapters.repository.manager import DEFAULT_BASE_URL


class BsdataSettings(BaseSettings):
    """
    Settings for catalogue retrieval.

    Usage:
        settings = BsdataSettings()
        print(settings.base_url)
        print(settings.git_timeout)
    """

    model_config = SettingsConfigDict(env_prefix="BSDATA_", env_file=".env", extra="ignore")

    # Source
    base_url: str = Field(default=DEFAULT_BASE_URL, min_length=1, description="URL prefix of data repositories")
    clone_depth: int = Field(default=1, ge=1, description="Depth of shallow clones")
    git_timeout: float | None = Field(default=None, gt=0, description="Seconds each git call may take")

    # Workspace
    workspace_dir: str | None = Field(default=None, description="Parent of scratch workspaces (default: system temp dir)")

    # Loader
    catalogue_marker: str = Field(default=CATALOGUE_MARKER, min_length=1, description="File name substring of catalogue files")

    # Logging
    log_level: str = Field(default="INFO", description="Logging level for the CLI")
    log_dir: str | None = Field(default=None, description="Directory for JSONL run logs (disabled if unset)")

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {value}")
        return level
