"""Compiler settings using Pydantic Settings for typed configuration.

This module centralizes all configuration and provides type-safe access to settings.
Settings are loaded from environment variables with sensible defaults.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict

from mailsmith.core.constants import COMPILED_DIR_NAME, DEFAULT_TEMPLATES_DIR


class Settings(BaseSettings):
    """Compiler-wide settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Sources
    templates_dir: Path = Field(
        default=DEFAULT_TEMPLATES_DIR, alias="EMAIL_TEMPLATES_DIR"
    )
    source_glob: str = Field(default="*.html", alias="EMAIL_SOURCE_GLOB")

    # Output
    output_dir: Path | None = Field(default=None, alias="EMAIL_OUTPUT_DIR")
    remove_comments: bool = Field(default=False, alias="EMAIL_REMOVE_COMMENTS")

    # Extra <meta name=... content=...> entries injected into every output
    extra_meta: dict[str, str] = Field(default_factory=dict, alias="EMAIL_EXTRA_META")

    @computed_field
    @property
    def compiled_dir(self) -> Path:
        """Directory compiled templates are written to."""
        if self.output_dir is not None:
            return self.output_dir
        return self.templates_dir / COMPILED_DIR_NAME


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()
