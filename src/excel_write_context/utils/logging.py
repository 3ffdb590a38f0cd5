"""Structured logging utilities for the workbook write context.

This module provides:
- Write ID tracking using contextvars for correlation across one write
- Structured logging with consistent format and metadata
- Creation metrics for the structural units a write produces

Usage:
    from excel_write_context.utils.logging import (
        get_logger,
        set_write_id,
        LogContext,
    )

    logger = get_logger(__name__)

    # Set write ID for correlation
    set_write_id("abc-123")

    # Log with context
    with LogContext(sheet_no=0, operation="enter_sheet"):
        logger.info("Creating sheet")

    # Time an operation and log its counters
    with timed_operation(logger, "finish") as metrics:
        metrics.rows_created = 10
"""

import logging
from collections.abc import Generator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from excel_write_context.config import Settings

PACKAGE_LOGGER = "excel_write_context"

# Context variables for write tracking
_write_id_var: ContextVar[str | None] = ContextVar("write_id", default=None)
_extra_context_var: ContextVar[dict[str, Any] | None] = ContextVar(
    "extra_context", default=None
)


def get_write_id() -> str | None:
    """Get the current write ID from context.

    Returns:
        The current write ID or None if not set.
    """
    return _write_id_var.get()


def set_write_id(write_id: str | None) -> None:
    """Set the write ID in context.

    Args:
        write_id: The write ID to set, or None to clear.
    """
    _write_id_var.set(write_id)


def get_extra_context() -> dict[str, Any]:
    """Get additional context from context vars.

    Returns:
        Dictionary of extra context values.
    """
    ctx = _extra_context_var.get()
    return ctx if ctx is not None else {}


def set_extra_context(context: dict[str, Any]) -> None:
    """Set additional context in context vars.

    Args:
        context: Dictionary of extra context values.
    """
    _extra_context_var.set(context)


def clear_context() -> None:
    """Clear all context variables."""
    _write_id_var.set(None)
    _extra_context_var.set(None)


@dataclass
class PerformanceMetrics:
    """Counters and timing for one write context.

    Attributes:
        operation: Name of the operation being measured.
        start_time: When the operation started.
        end_time: When the operation ended.
        duration_seconds: Duration in seconds.
        sheets_created: Sheets materialized in the document.
        tables_created: Table scopes initialized.
        rows_created: Rows created (header and data).
        cells_created: Cells created (header and data).
        merged_regions: Merged regions applied.
    """

    operation: str
    start_time: datetime = field(default_factory=lambda: datetime.now(UTC))
    end_time: datetime | None = None
    duration_seconds: float = 0.0
    sheets_created: int = 0
    tables_created: int = 0
    rows_created: int = 0
    cells_created: int = 0
    merged_regions: int = 0

    def finish(self) -> None:
        """Mark the operation as complete and calculate duration."""
        self.end_time = datetime.now(UTC)
        self.duration_seconds = (self.end_time - self.start_time).total_seconds()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging, omitting zero counters."""
        result: dict[str, Any] = {
            "operation": self.operation,
            "duration_seconds": f"{self.duration_seconds:.3f}",
        }
        for name in (
            "sheets_created",
            "tables_created",
            "rows_created",
            "cells_created",
            "merged_regions",
        ):
            value = getattr(self, name)
            if value > 0:
                result[name] = value
        return result


class StructuredLogFormatter(logging.Formatter):
    """Log formatter that includes context variables.

    This formatter adds write_id and any extra context to log records when
    available, creating a consistent structured format for all log messages.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record with context information.

        Args:
            record: The log record to format.

        Returns:
            Formatted log message string.
        """
        prefix_parts = []
        write_id = get_write_id()
        if write_id:
            prefix_parts.append(f"write_id={write_id}")

        for key, value in get_extra_context().items():
            prefix_parts.append(f"{key}={value}")

        prefix = f"[{' '.join(prefix_parts)}] " if prefix_parts else ""

        original_msg = record.msg
        record.msg = f"{prefix}{original_msg}"
        result = super().format(record)
        record.msg = original_msg

        return result


class StructuredLogger:
    """Logger wrapper that renders keyword arguments as ``key=value`` pairs."""

    def __init__(self, name: str) -> None:
        self._logger = logging.getLogger(name)
        self._name = name

    @property
    def logger(self) -> logging.Logger:
        """Access the underlying Python logger."""
        return self._logger

    def is_enabled_for(self, level: int) -> bool:
        return self._logger.isEnabledFor(level)

    def _build_message(self, message: str, **kwargs: Any) -> str:
        if not kwargs:
            return message

        parts = [f"{k}={v}" for k, v in kwargs.items()]
        return f"{message} | {', '.join(parts)}"

    def debug(self, message: str, **kwargs: Any) -> None:
        if self._logger.isEnabledFor(logging.DEBUG):
            self._logger.debug(self._build_message(message, **kwargs))

    def info(self, message: str, **kwargs: Any) -> None:
        self._logger.info(self._build_message(message, **kwargs))

    def warning(self, message: str, **kwargs: Any) -> None:
        self._logger.warning(self._build_message(message, **kwargs))

    def error(self, message: str, exc_info: bool = False, **kwargs: Any) -> None:
        """Log an error message.

        Args:
            message: Log message.
            exc_info: Whether to include exception info.
            **kwargs: Additional structured data.
        """
        self._logger.error(self._build_message(message, **kwargs), exc_info=exc_info)

    def exception(self, message: str, **kwargs: Any) -> None:
        """Log an exception with traceback."""
        self._logger.exception(self._build_message(message, **kwargs))

    def log_performance(self, metrics: PerformanceMetrics) -> None:
        """Log performance metrics.

        Args:
            metrics: Performance metrics to log.
        """
        self.info(f"Performance: {metrics.operation}", **metrics.to_dict())


class LogContext:
    """Context manager for adding temporary context to logs.

    Usage:
        with LogContext(write_id="123", sheet_no=0):
            logger.info("Writing...")  # Will include write_id and sheet_no
    """

    def __init__(self, **kwargs: Any) -> None:
        """Initialize with context values.

        Args:
            **kwargs: Key-value pairs to add to log context.
        """
        self._new_context = kwargs
        self._old_context: dict[str, Any] = {}
        self._old_write_id: str | None = None

    def __enter__(self) -> "LogContext":
        """Enter the context, saving old values and setting new ones."""
        self._old_context = get_extra_context().copy()
        self._old_write_id = get_write_id()

        new_context = dict(self._new_context)
        write_id = new_context.pop("write_id", None)
        if write_id is not None:
            set_write_id(write_id)

        merged = self._old_context.copy()
        merged.update(new_context)
        set_extra_context(merged)

        return self

    def __exit__(self, *args: Any) -> None:
        """Exit the context, restoring old values."""
        set_extra_context(self._old_context)
        set_write_id(self._old_write_id)


@contextmanager
def timed_operation(
    logger: StructuredLogger,
    operation: str,
    metrics: PerformanceMetrics | None = None,
) -> Generator[PerformanceMetrics, None, None]:
    """Context manager for timing operations.

    Usage:
        with timed_operation(logger, "finish") as metrics:
            metrics.rows_created += 1

        # Automatically logs: "Performance: finish | duration_seconds=..."

    Args:
        logger: Logger to use for output.
        operation: Name of the operation.
        metrics: Existing metrics to finish and log instead of fresh ones.

    Yields:
        PerformanceMetrics instance for tracking.
    """
    metrics = metrics or PerformanceMetrics(operation=operation)
    try:
        yield metrics
    finally:
        metrics.finish()
        logger.log_performance(metrics)


def configure_logging(
    level: int | str = logging.INFO,
    format_string: str | None = None,
    use_structured_formatter: bool = True,
    logger_name: str | None = None,
) -> None:
    """Configure logging for the application.

    Args:
        level: Log level (int or string like "INFO").
        format_string: Custom format string (uses default if None).
        use_structured_formatter: Whether to use the structured formatter.
        logger_name: Logger to configure; the root logger if None. A named
            logger stops propagating so its records are emitted once.
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper())

    if format_string is None:
        format_string = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    target = logging.getLogger(logger_name)
    target.setLevel(level)
    if logger_name is not None:
        target.propagate = False

    for handler in target.handlers[:]:
        target.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setLevel(level)

    formatter: logging.Formatter
    if use_structured_formatter:
        formatter = StructuredLogFormatter(format_string)
    else:
        formatter = logging.Formatter(format_string)

    handler.setFormatter(formatter)
    target.addHandler(handler)


def configure_logging_from_settings(config: "Settings") -> None:
    """Apply the logging options of ``config`` to the package logger.

    ``debug`` forces DEBUG whatever ``log_level`` says.
    """
    level = logging.DEBUG if config.debug else config.log_level_int
    configure_logging(
        level=level,
        use_structured_formatter=config.structured_logging,
        logger_name=PACKAGE_LOGGER,
    )


def get_logger(name: str) -> StructuredLogger:
    """Get a structured logger for a module.

    Args:
        name: Logger name (typically __name__).

    Returns:
        StructuredLogger instance.

    Example:
        logger = get_logger(__name__)
        logger.info("Sheet created", sheet_no=0, sheet_name="Report")
    """
    return StructuredLogger(name)
