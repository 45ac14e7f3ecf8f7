"""Error taxonomy and classification utilities for engine operations."""

from enum import Enum

from pydantic import BaseModel


class StuffError(Exception):
    """Base class for errors raised by the task engine."""


class NotFoundError(StuffError, LookupError):
    """An operation referenced an id absent from the relevant collection."""

    def __init__(self, collection: str, record_id: str) -> None:
        self.collection = collection
        self.record_id = record_id
        super().__init__(f"Record {record_id} not found in {collection}")


class ValidationFailedError(StuffError, ValueError):
    """An operation was rejected because its input failed validation."""


class PersistenceError(StuffError):
    """The persistence adapter could not read or write a snapshot."""


class ErrorCategory(Enum):
    """Categories of errors that can occur during engine operations."""

    NOT_FOUND = "not_found"
    VALIDATION_FAILED = "validation_failed"
    PERSISTENCE_FAILED = "persistence_failed"
    UNKNOWN = "unknown"


class ErrorSeverity(Enum):
    """Severity levels for errors."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCode:
    """Error codes for specific error conditions."""

    ERR_NOT_FOUND = "ERR_NOT_FOUND"
    ERR_VALIDATION_FAILED = "ERR_VALIDATION_FAILED"
    ERR_PERSISTENCE_FAILED = "ERR_PERSISTENCE_FAILED"
    ERR_UNKNOWN = "ERR_UNKNOWN"


class ErrorResponse(BaseModel):
    """Structured error response with user-friendly messaging."""

    code: str
    category: ErrorCategory
    message: str
    suggestion: str
    severity: ErrorSeverity


_COLLECTION_LABELS = {
    "tasks": "task",
    "projects": "project",
    "tags": "tag",
}


def classify_error(exception: Exception) -> ErrorCategory:
    """Return the taxonomy category for an exception."""
    if isinstance(exception, NotFoundError):
        return ErrorCategory.NOT_FOUND
    if isinstance(exception, ValidationFailedError):
        return ErrorCategory.VALIDATION_FAILED
    if isinstance(exception, PersistenceError):
        return ErrorCategory.PERSISTENCE_FAILED
    return ErrorCategory.UNKNOWN


def classify_error_with_response(exception: Exception) -> ErrorResponse:
    """Classify an error and return a structured response with recovery suggestions.

    Every engine error is locally recoverable: the collaborator decides how to
    present the response (inline message, blocked action) and prior state is
    left untouched by the failed operation.

    Args:
        exception: The exception raised by an engine operation

    Returns:
        ErrorResponse with code, category, message, suggestion, and severity
    """
    category = classify_error(exception)

    if category is ErrorCategory.NOT_FOUND and isinstance(exception, NotFoundError):
        label = _COLLECTION_LABELS.get(exception.collection, "record")
        return ErrorResponse(
            code=ErrorCode.ERR_NOT_FOUND,
            category=category,
            message=f"That {label} no longer exists.",
            suggestion="Refresh the list and try again.",
            severity=ErrorSeverity.LOW,
        )

    if category is ErrorCategory.VALIDATION_FAILED:
        return ErrorResponse(
            code=ErrorCode.ERR_VALIDATION_FAILED,
            category=category,
            message=str(exception),
            suggestion="Check the highlighted fields and try again.",
            severity=ErrorSeverity.LOW,
        )

    if category is ErrorCategory.PERSISTENCE_FAILED:
        return ErrorResponse(
            code=ErrorCode.ERR_PERSISTENCE_FAILED,
            category=category,
            message="Your changes could not be saved.",
            suggestion="Check that the storage location is writable.",
            severity=ErrorSeverity.HIGH,
        )

    return ErrorResponse(
        code=ErrorCode.ERR_UNKNOWN,
        category=category,
        message="An unexpected error occurred.",
        suggestion="Please try again. If the problem persists, export your data and restart.",
        severity=ErrorSeverity.MEDIUM,
    )
