"""
Error model shared by the workflow services and the MCP tool handlers.

Services raise ``ToolError``; tool handlers serialize it as
``{"error": {"code", "message", "retryable"}}``. Messages coming from SQLite
or unexpected exceptions are sanitized first so file system layout and SQL
text never reach a client.
"""

import os
import re
from enum import Enum
from typing import Optional


class ErrorCode(str, Enum):
    """Top-level error codes returned by the tools."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    POLICY_DENIED = "POLICY_DENIED"
    DUPLICATE_APPLICATION = "DUPLICATE_APPLICATION"
    DB_NOT_FOUND = "DB_NOT_FOUND"
    DB_ERROR = "DB_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ToolError(Exception):
    """
    A failure with a code, a client-safe message and a retry hint.

    ``original_error`` keeps the wrapped exception for logs only; it is
    never serialized.
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        retryable: bool = False,
        original_error: Optional[Exception] = None,
    ):
        self.code = code
        self.message = message
        self.retryable = retryable
        self.original_error = original_error
        super().__init__(message)

    def to_dict(self) -> dict:
        return {
            "error": {
                "code": self.code.value,
                "message": self.message,
                "retryable": self.retryable,
            }
        }

    def __repr__(self) -> str:
        return f"ToolError({self.code.value}, {self.message!r}, retryable={self.retryable})"


_SQL_STATEMENT = re.compile(r"\b(SELECT|INSERT|UPDATE|DELETE)\b.*", re.IGNORECASE)
_QUOTED_SQL = re.compile(r"([\"'])[^\"']*\bSELECT\b[^\"']*\1", re.IGNORECASE)
_SQL_SUFFIX = re.compile(r"SQL:.*", re.IGNORECASE)
_DIRECTORY = re.compile(r"/[^\s]+/")


def sanitize_path(path: str) -> str:
    """Reduce an absolute path to its basename; relative paths pass through."""
    return os.path.basename(path) if os.path.isabs(path) else path


def sanitize_sql_error(error_msg: str) -> str:
    """Replace SQL text and directory prefixes in a database error message."""
    sanitized = _SQL_SUFFIX.sub("", error_msg)
    sanitized = _QUOTED_SQL.sub("[SQL query]", sanitized)
    sanitized = _SQL_STATEMENT.sub("[SQL query]", sanitized)
    sanitized = _DIRECTORY.sub("[path]/", sanitized)
    return sanitized.strip()


def sanitize_stack_trace(error_msg: str) -> str:
    """Keep only the first line of a multi-line message."""
    return error_msg.split("\n", 1)[0].strip()


# ----------------------------------------------------------------------
# Workflow errors
# ----------------------------------------------------------------------


def create_validation_error(message: str) -> ToolError:
    return ToolError(code=ErrorCode.VALIDATION_ERROR, message=message)


def create_not_found_error(resource_type: str, resource_id) -> ToolError:
    """``resource_type`` is the display name, e.g. "Application" or "Job"."""
    return ToolError(
        code=ErrorCode.NOT_FOUND,
        message=f"{resource_type} not found: {resource_id}",
    )


def create_policy_denied_error(reason: str) -> ToolError:
    """The status policy's reason becomes the message verbatim."""
    return ToolError(code=ErrorCode.POLICY_DENIED, message=reason)


def create_duplicate_application_error(applicant_id: str, job_id: int) -> ToolError:
    return ToolError(
        code=ErrorCode.DUPLICATE_APPLICATION,
        message=f"Applicant {applicant_id} has already applied for job {job_id}",
    )


# ----------------------------------------------------------------------
# Infrastructure errors
# ----------------------------------------------------------------------


def create_db_not_found_error(db_path: str) -> ToolError:
    return ToolError(
        code=ErrorCode.DB_NOT_FOUND,
        message=f"Database not found: {sanitize_path(db_path)}",
    )


def create_db_error(
    message: str, retryable: bool = False, original_error: Optional[Exception] = None
) -> ToolError:
    """
    Wrap a SQLite failure.

    Args:
        message: Raw error text; SQL and paths are stripped
        retryable: True for transient failures such as a locked database
        original_error: The sqlite3 exception, kept for logging
    """
    return ToolError(
        code=ErrorCode.DB_ERROR,
        message=f"Database error: {sanitize_stack_trace(sanitize_sql_error(message))}",
        retryable=retryable,
        original_error=original_error,
    )


def create_internal_error(message: str, original_error: Optional[Exception] = None) -> ToolError:
    """Wrap an unexpected exception caught at a tool boundary."""
    return ToolError(
        code=ErrorCode.INTERNAL_ERROR,
        message=f"Internal error: {sanitize_stack_trace(message)}",
        retryable=True,
        original_error=original_error,
    )
