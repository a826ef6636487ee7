"""Error taxonomy and user-facing error classification."""

from enum import Enum
from typing import Literal

from pydantic import BaseModel


class TaskNotFoundError(KeyError):
    """Raised when an operation targets a task id that is not in the collection."""


class InvalidFlowStateError(ValueError):
    """Raised when the reflection flow receives an action its current state cannot accept."""


class ErrorCategory(Enum):
    """Categories of errors surfaced to the user."""

    VALIDATION_FAILED = "validation_failed"
    TASK_NOT_FOUND = "task_not_found"
    AUTHENTICATION_FAILED = "authentication_failed"
    NETWORK_ERROR = "network_error"
    PERSISTENCE_FAILED = "persistence_failed"
    INVALID_STATE_TRANSITION = "invalid_state_transition"
    UNKNOWN = "unknown"


class ErrorSeverity(Enum):
    """Severity levels for errors."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCode:
    """Error codes for specific error conditions."""

    ERR_VALIDATION_FAILED = "ERR_VALIDATION_FAILED"
    ERR_TASK_NOT_FOUND = "ERR_TASK_NOT_FOUND"
    ERR_INVALID_STATE_TRANSITION = "ERR_INVALID_STATE_TRANSITION"

    ERR_AUTHENTICATION_FAILED = "ERR_AUTHENTICATION_FAILED"
    ERR_NETWORK_ERROR = "ERR_NETWORK_ERROR"
    ERR_PERSISTENCE_FAILED = "ERR_PERSISTENCE_FAILED"

    ERR_UNKNOWN = "ERR_UNKNOWN"


class ErrorResponse(BaseModel):
    """Structured error response with user-friendly messaging."""

    code: str
    message: str
    suggestion: str
    severity: ErrorSeverity


_ERROR_PATTERNS: dict[
    Literal["auth", "network", "persistence"],
    dict[str, list[str] | set[str]],
] = {
    "auth": {
        "phrases": [
            "authentication failed",
            "unauthorized",
            "invalid token",
            "forbidden",
            "401",
            "403",
        ],
        "exception_types": {"AuthenticationError", "PermissionError"},
    },
    "network": {
        "phrases": [
            "connection",
            "timeout",
            "network",
            "503",
            "502",
            "504",
            "unreachable",
        ],
        "exception_types": {"ConnectionError", "TimeoutError", "ConnectError", "ReadTimeout"},
    },
    "persistence": {
        "phrases": [
            "failed to create record",
            "failed to update record",
            "failed to delete record",
            "failed to list records",
            "failed to write",
        ],
        "exception_types": {"DatabaseError"},
    },
}


def _match_error_pattern(
    *,
    error_str: str,
    exception_type: str,
    pattern_type: Literal["auth", "network", "persistence"],
) -> bool:
    """Return True if the error matches the configured pattern type."""
    patterns = _ERROR_PATTERNS[pattern_type]
    return any(phrase in error_str for phrase in patterns["phrases"]) or exception_type in patterns["exception_types"]


def classify_error_with_response(exception: Exception) -> ErrorResponse:  # noqa: PLR0911
    """Classify an error and return a structured response with recovery suggestions.

    Args:
        exception: The exception raised during a store operation

    Returns:
        ErrorResponse with code, message, suggestion, and severity
    """
    error_str = str(exception).lower()
    exception_type = type(exception).__name__

    if exception_type == "ValidationError" or "title cannot be empty" in error_str:
        return ErrorResponse(
            code=ErrorCode.ERR_VALIDATION_FAILED,
            message="A task needs a title.",
            suggestion="Enter a title and try again.",
            severity=ErrorSeverity.LOW,
        )

    if isinstance(exception, TaskNotFoundError) or exception_type == "RecordNotFoundError" or "not found" in error_str:
        return ErrorResponse(
            code=ErrorCode.ERR_TASK_NOT_FOUND,
            message="That task no longer exists.",
            suggestion="Refresh the list to see current tasks.",
            severity=ErrorSeverity.LOW,
        )

    if isinstance(exception, InvalidFlowStateError):
        return ErrorResponse(
            code=ErrorCode.ERR_INVALID_STATE_TRANSITION,
            message="There is no task waiting for a reflection.",
            suggestion="Mark a task complete first.",
            severity=ErrorSeverity.LOW,
        )

    if _match_error_pattern(error_str=error_str, exception_type=exception_type, pattern_type="auth"):
        return ErrorResponse(
            code=ErrorCode.ERR_AUTHENTICATION_FAILED,
            message="The task backend rejected our credentials.",
            suggestion="Check the PocketBase credentials in your configuration.",
            severity=ErrorSeverity.CRITICAL,
        )

    if _match_error_pattern(error_str=error_str, exception_type=exception_type, pattern_type="network"):
        return ErrorResponse(
            code=ErrorCode.ERR_NETWORK_ERROR,
            message="Network error occurred.",
            suggestion="Please check your connection and try again.",
            severity=ErrorSeverity.MEDIUM,
        )

    if _match_error_pattern(error_str=error_str, exception_type=exception_type, pattern_type="persistence"):
        return ErrorResponse(
            code=ErrorCode.ERR_PERSISTENCE_FAILED,
            message=f"Your change could not be saved: {exception}",
            suggestion="Nothing was changed. Try again in a moment.",
            severity=ErrorSeverity.MEDIUM,
        )

    return ErrorResponse(
        code=ErrorCode.ERR_UNKNOWN,
        message="An unexpected error occurred.",
        suggestion="Please try again later.",
        severity=ErrorSeverity.MEDIUM,
    )
