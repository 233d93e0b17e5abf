"""
Unit tests for the error model.

Tests error codes, the serialized error contract, factory helpers and
message sanitization.
"""

import pytest
from models.errors import (
    ErrorCode,
    ToolError,
    sanitize_path,
    sanitize_sql_error,
    sanitize_stack_trace,
    create_validation_error,
    create_not_found_error,
    create_policy_denied_error,
    create_duplicate_application_error,
    create_db_not_found_error,
    create_db_error,
    create_internal_error,
)


class TestErrorCode:
    """Tests for ErrorCode enum."""

    def test_workflow_error_codes_exist(self):
        """Test that the workflow-specific codes are defined."""
        assert ErrorCode.NOT_FOUND == "NOT_FOUND"
        assert ErrorCode.POLICY_DENIED == "POLICY_DENIED"
        assert ErrorCode.DUPLICATE_APPLICATION == "DUPLICATE_APPLICATION"

    def test_error_codes_are_strings(self):
        for code in ErrorCode:
            assert isinstance(code.value, str)


class TestToolError:
    """Tests for ToolError exception class."""

    def test_to_dict_contract(self):
        """Test the serialized error shape returned by every tool."""
        error = ToolError(code=ErrorCode.DB_ERROR, message="database is locked", retryable=True)

        assert error.to_dict() == {
            "error": {"code": "DB_ERROR", "message": "database is locked", "retryable": True}
        }

    def test_tool_error_is_exception(self):
        with pytest.raises(ToolError) as exc_info:
            raise create_policy_denied_error("nope")

        assert exc_info.value.code == ErrorCode.POLICY_DENIED
        assert str(exc_info.value) == "nope"


class TestWorkflowErrorFactories:
    """Tests for workflow-specific error factories."""

    def test_not_found_error(self):
        error = create_not_found_error("Application", 42)

        assert error.code == ErrorCode.NOT_FOUND
        assert error.message == "Application not found: 42"
        assert error.retryable is False

    def test_policy_denied_error_carries_reason(self):
        reason = "Non-technical roles must be handled manually by an admin"
        error = create_policy_denied_error(reason)

        assert error.code == ErrorCode.POLICY_DENIED
        assert error.message == reason
        assert error.retryable is False

    def test_duplicate_application_error(self):
        error = create_duplicate_application_error("alice", 7)

        assert error.code == ErrorCode.DUPLICATE_APPLICATION
        assert "alice" in error.message
        assert "7" in error.message


class TestSanitization:
    """Tests for message sanitization helpers."""

    def test_sanitize_absolute_path_keeps_basename(self):
        assert sanitize_path("/var/data/ats.db") == "ats.db"

    def test_sanitize_relative_path_unchanged(self):
        assert sanitize_path("data/ats.db") == "data/ats.db"

    def test_sql_statements_removed(self):
        result = sanitize_sql_error("Error executing: UPDATE applications SET status = 'x'")
        assert "UPDATE" not in result
        assert "[SQL query]" in result

    def test_stack_trace_keeps_first_line(self):
        result = sanitize_stack_trace("ValueError: bad\n  at line 1\n  at line 2")
        assert result == "ValueError: bad"


class TestInfrastructureErrorFactories:
    """Tests for database and internal error factories."""

    def test_db_not_found_sanitizes_path(self):
        error = create_db_not_found_error("/home/user/secret/ats.db")

        assert error.code == ErrorCode.DB_NOT_FOUND
        assert "ats.db" in error.message
        assert "/home/user/secret/" not in error.message

    def test_db_error_sanitizes_sql(self):
        error = create_db_error("Query failed: SELECT * FROM applications", retryable=True)

        assert error.code == ErrorCode.DB_ERROR
        assert "SELECT" not in error.message
        assert error.retryable is True

    def test_internal_error_is_retryable_and_single_line(self):
        error = create_internal_error("RuntimeError: boom\n  at line 42")

        assert error.code == ErrorCode.INTERNAL_ERROR
        assert error.retryable is True
        assert "at line" not in error.message

    def test_all_factories_produce_valid_dict(self):
        errors = [
            create_validation_error("Test"),
            create_not_found_error("Job", 1),
            create_policy_denied_error("Test"),
            create_duplicate_application_error("a", 1),
            create_db_not_found_error("test.db"),
            create_db_error("Test"),
            create_internal_error("Test"),
        ]

        for error in errors:
            result = error.to_dict()["error"]
            assert isinstance(result["code"], str)
            assert isinstance(result["message"], str)
            assert isinstance(result["retryable"], bool)
