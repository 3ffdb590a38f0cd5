"""Centralized exception classes for the workbook write context.

This module provides a hierarchy of custom exceptions with error codes and
structured error details for consistent error handling throughout the
write pipeline.

Exception Hierarchy:
    WriteContextError (base)
    ├── InvalidArgumentError
    ├── InvalidStateError
    ├── DocumentError
    │   ├── DocumentCreationError
    │   ├── FinalizationError
    │   └── SheetNotFoundError
    └── HookExecutionError

Error Codes:
    All errors have a unique error code (e.g., "E1001") that can be used
    for programmatic error handling and documentation.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Enumeration of all error codes used by the write context.

    Error codes are grouped by category:
    - E1xxx: Caller usage errors
    - E2xxx: Document backend errors
    - E3xxx: Hook errors
    """

    # Usage errors (E1xxx)
    INVALID_ARGUMENT = "E1001"
    INVALID_STATE = "E1002"

    # Document backend errors (E2xxx)
    DOCUMENT_CREATION_FAILED = "E2001"
    FINALIZATION_FAILED = "E2002"
    SHEET_NOT_FOUND = "E2003"

    # Hook errors (E3xxx)
    HOOK_EXECUTION_FAILED = "E3001"


class WriteContextError(Exception):
    """Base exception for all write context errors.

    Attributes:
        message: Human-readable error message.
        error_code: Unique error code from ErrorCode enum.
        details: Optional dictionary with additional error details.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Error code from ErrorCode enum.
            details: Optional additional details about the error.
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert the exception to a dictionary for structured logging.

        Returns:
            Dictionary with error information.
        """
        result: dict[str, Any] = {
            "error_code": self.error_code.value,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        """Return string representation with error code."""
        return f"[{self.error_code.value}] {self.message}"


# =============================================================================
# Usage Errors (E1xxx)
# =============================================================================


class InvalidArgumentError(WriteContextError, ValueError):
    """Raised when a required descriptor or argument is missing or malformed."""

    def __init__(
        self,
        message: str,
        argument: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with the offending argument name.

        Args:
            message: Error message.
            argument: Name of the argument that was rejected.
            details: Additional details.
        """
        details = details or {}
        if argument:
            details["argument"] = argument
        super().__init__(message, ErrorCode.INVALID_ARGUMENT, details)
        self.argument = argument


class InvalidStateError(WriteContextError):
    """Raised when an operation is not valid in the context's current state."""

    def __init__(
        self,
        message: str,
        state: str | None = None,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with state information.

        Args:
            message: Error message.
            state: Name of the state the context was in.
            operation: The operation that was attempted.
            details: Additional details.
        """
        details = details or {}
        if state:
            details["state"] = state
        if operation:
            details["operation"] = operation
        super().__init__(message, ErrorCode.INVALID_STATE, details)
        self.state = state
        self.operation = operation


# =============================================================================
# Document Backend Errors (E2xxx)
# =============================================================================


class DocumentError(WriteContextError):
    """Base class for errors reported by the document backend."""


class DocumentCreationError(DocumentError):
    """Raised when the backing document could not be opened or created."""

    def __init__(
        self,
        message: str = "Create workbook failure",
        template: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with template information.

        Args:
            message: Error message.
            template: Description of the template source, if any.
            details: Additional details.
        """
        details = details or {}
        if template:
            details["template"] = template
        super().__init__(message, ErrorCode.DOCUMENT_CREATION_FAILED, details)


class FinalizationError(DocumentError):
    """Raised when flushing or closing the document and its streams fails."""

    def __init__(
        self,
        message: str = "Can not close IO",
        step: str | None = None,
        failed_steps: list[str] | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with the cleanup steps that failed.

        Args:
            message: Error message.
            step: The first step that failed.
            failed_steps: Every step that failed, in execution order.
            details: Additional details.
        """
        details = details or {}
        if step:
            details["step"] = step
        if failed_steps:
            details["failed_steps"] = failed_steps
        super().__init__(message, ErrorCode.FINALIZATION_FAILED, details)
        self.step = step
        self.failed_steps = failed_steps or []


class SheetNotFoundError(DocumentError):
    """Raised by a backend when no sheet exists at the requested index."""

    def __init__(
        self,
        sheet_no: int,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        details["sheet_no"] = sheet_no
        message = message or f"Sheet not found at index {sheet_no}"
        super().__init__(message, ErrorCode.SHEET_NOT_FOUND, details)
        self.sheet_no = sheet_no


# =============================================================================
# Hook Errors (E3xxx)
# =============================================================================


class HookExecutionError(WriteContextError):
    """Raised when a caller-supplied write handler fails."""

    def __init__(
        self,
        message: str,
        handler: str | None = None,
        kind: str | None = None,
        phase: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with handler information.

        Args:
            message: Error message.
            handler: Qualified name of the failing handler.
            kind: Hook kind being dispatched (workbook, sheet, row, cell).
            phase: Dispatch phase ("before" or "after").
            details: Additional details.
        """
        details = details or {}
        if handler:
            details["handler"] = handler
        if kind:
            details["kind"] = kind
        if phase:
            details["phase"] = phase
        super().__init__(message, ErrorCode.HOOK_EXECUTION_FAILED, details)
        self.handler = handler
        self.kind = kind
        self.phase = phase
