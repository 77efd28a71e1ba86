# src/config/settings.py — v1
"""Typed configuration loaded from .env via pydantic-settings.

Only the host-facing wrappers read Settings; CompileCache itself takes an
explicit cache root so the core never depends on the environment.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Cache and logging settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Cache ===
    cache_enabled: bool = True
    cache_root: Path = Path("~/.compilecache/cache")

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "json"
    log_file: Path | None = None

    # --- Validators ---

    @field_validator("cache_root")
    @classmethod
    def expand_cache_root(cls, v: Path) -> Path:  # noqa: N805
        return v.expanduser()

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Reject an enabled cache without a usable root directory."""
        if self.cache_enabled and str(self.cache_root) in ("", "."):
            raise ConfigurationError(
                "CACHE_ROOT must be set when CACHE_ENABLED is true"
            )
        return self

    # --- Helpers ---

    @property
    def effective_cache_root(self) -> Path | None:
        """Cache root, or None when caching is disabled."""
        return self.cache_root if self.cache_enabled else None


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing or per-host config).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
