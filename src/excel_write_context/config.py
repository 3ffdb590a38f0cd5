"""Configuration management for the workbook write context.

This module provides centralized configuration using pydantic-settings.
All configuration options can be set via environment variables with the
EWC_ prefix, or via a .env file in the project root.

Environment Variables:
    EWC_NEED_HEAD: Write header rows when a scope declares a head (default: true)
    EWC_RELATIVE_HEAD_ROW_INDEX: Rows to skip before a header block (default: 0)
    EWC_AUTO_CLOSE_STREAM: Close output/template streams on finish (default: true)
    EWC_LOG_LEVEL: Logging level (default: INFO)
    EWC_DEBUG: Enable debug mode (default: false)
    EWC_STRUCTURED_LOGGING: Use the context-aware log formatter (default: true)
"""

import logging
from typing import Any

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables.

    These values are the workbook-level defaults. A workbook descriptor that
    sets an option explicitly wins over the value configured here.

    Example .env file:
        EWC_NEED_HEAD=false
        EWC_LOG_LEVEL=DEBUG
    """

    model_config = SettingsConfigDict(
        env_prefix="EWC_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # =========================================================================
    # Write Defaults
    # =========================================================================

    need_head: bool = True
    """Whether header rows are written for scopes that declare a head."""

    relative_head_row_index: int = 0
    """Number of rows left empty between the last written row and a header."""

    auto_close_stream: bool = True
    """Close the output sink and template source when the write finishes."""

    # =========================================================================
    # Logging Settings
    # =========================================================================

    log_level: str = "INFO"
    """Logging level: DEBUG, INFO, WARNING, ERROR, or CRITICAL."""

    debug: bool = False
    """Enable debug mode with additional logging."""

    structured_logging: bool = True
    """Prefix log records with the write id and extra context."""

    # =========================================================================
    # Validators
    # =========================================================================

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a valid Python logging level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_v = v.upper()
        if upper_v not in valid_levels:
            raise ValueError(
                f"Invalid log level: {v}. Must be one of: {', '.join(valid_levels)}"
            )
        return upper_v

    @field_validator("relative_head_row_index")
    @classmethod
    def validate_relative_head_row_index(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"relative_head_row_index must be at least 0, got {v}")
        return v

    # =========================================================================
    # Computed Properties
    # =========================================================================

    @property
    def log_level_int(self) -> int:
        """Get log level as integer for logging module."""
        level: int = getattr(logging, self.log_level)
        return level

    def to_safe_dict(self) -> dict[str, Any]:
        """Convert settings to a plain dictionary for logging."""
        return {
            "need_head": self.need_head,
            "relative_head_row_index": self.relative_head_row_index,
            "auto_close_stream": self.auto_close_stream,
            "log_level": self.log_level,
            "debug": self.debug,
            "structured_logging": self.structured_logging,
        }


# Create the global settings instance
settings = Settings()
