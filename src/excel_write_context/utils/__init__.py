"""Utilities package for the write context.

This package provides:
- Centralized exception classes (exceptions.py)
- Structured logging utilities (logging.py)
"""

from excel_write_context.utils.exceptions import (
    DocumentCreationError,
    ErrorCode,
    FinalizationError,
    HookExecutionError,
    InvalidArgumentError,
    InvalidStateError,
    WriteContextError,
)
from excel_write_context.utils.logging import (
    LogContext,
    StructuredLogger,
    configure_logging_from_settings,
    get_logger,
    get_write_id,
    set_write_id,
)

__all__ = [
    # Exceptions
    "DocumentCreationError",
    "ErrorCode",
    "FinalizationError",
    "HookExecutionError",
    "InvalidArgumentError",
    "InvalidStateError",
    "WriteContextError",
    # Logging
    "LogContext",
    "StructuredLogger",
    "configure_logging_from_settings",
    "get_logger",
    "get_write_id",
    "set_write_id",
]
