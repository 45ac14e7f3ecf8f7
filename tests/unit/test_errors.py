"""Unit tests for the error taxonomy and classification utilities."""

import pytest

from src.core.errors import (
    ErrorCategory,
    ErrorCode,
    ErrorSeverity,
    NotFoundError,
    PersistenceError,
    ValidationFailedError,
    classify_error,
    classify_error_with_response,
)


@pytest.mark.unit
class TestErrorTypes:
    """Tests for the exception hierarchy."""

    def test_not_found_is_lookup_error(self):
        """Test that NotFoundError carries its collection and id."""
        error = NotFoundError("tasks", "42")

        assert isinstance(error, LookupError)
        assert error.collection == "tasks"
        assert error.record_id == "42"
        assert str(error) == "Record 42 not found in tasks"

    def test_validation_failed_is_value_error(self):
        """Test that ValidationFailedError can be caught as ValueError."""
        assert isinstance(ValidationFailedError("bad"), ValueError)


@pytest.mark.unit
class TestClassifyError:
    """Tests for classify_error."""

    @pytest.mark.parametrize(
        ("exception", "category"),
        [
            (NotFoundError("tags", "1"), ErrorCategory.NOT_FOUND),
            (ValidationFailedError("Task title must not be blank"), ErrorCategory.VALIDATION_FAILED),
            (PersistenceError("disk full"), ErrorCategory.PERSISTENCE_FAILED),
            (RuntimeError("boom"), ErrorCategory.UNKNOWN),
        ],
    )
    def test_categories(self, exception, category):
        """Test mapping of exceptions to categories."""
        assert classify_error(exception) == category


@pytest.mark.unit
class TestClassifyErrorWithResponse:
    """Tests for classify_error_with_response."""

    def test_not_found_names_the_record_kind(self):
        """Test the not-found message for a project."""
        response = classify_error_with_response(NotFoundError("projects", "7"))

        assert response.code == ErrorCode.ERR_NOT_FOUND
        assert response.message == "That project no longer exists."
        assert response.severity == ErrorSeverity.LOW

    def test_validation_message_passes_through(self):
        """Test that validation messages reach the user unchanged."""
        response = classify_error_with_response(ValidationFailedError("Focus is limited to 3 tasks"))

        assert response.code == ErrorCode.ERR_VALIDATION_FAILED
        assert response.message == "Focus is limited to 3 tasks"

    def test_persistence_is_high_severity(self):
        """Test that failed saves are flagged as high severity."""
        response = classify_error_with_response(PersistenceError("read-only file system"))

        assert response.code == ErrorCode.ERR_PERSISTENCE_FAILED
        assert response.severity == ErrorSeverity.HIGH
        assert "read-only" not in response.message

    def test_unknown(self):
        """Test the generic fallback."""
        response = classify_error_with_response(KeyError("x"))

        assert response.code == ErrorCode.ERR_UNKNOWN
        assert response.category == ErrorCategory.UNKNOWN
