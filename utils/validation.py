"""
Input validation utilities for the application workflow MCP tools.

Validates identifiers, status values, note text and batch parameters.
"""

from datetime import datetime, timezone
from typing import List, Optional

from models.errors import create_validation_error
from models.status import ActorRole, ApplicationStatus, RoleCategory

# Constants for validation
MAX_BATCH_SIZE = 100
MIN_NOTE_LENGTH = 3


def validate_positive_id(value, field_name: str) -> int:
    """
    Validate an integer primary key (application or job).

    Args:
        value: The identifier value to validate
        field_name: Name used in error messages

    Returns:
        Validated identifier as integer

    Raises:
        ToolError: If value is invalid
    """
    if value is None:
        raise create_validation_error(f"Invalid {field_name}: cannot be null")

    # bool is a subclass of int in Python, reject explicitly
    if isinstance(value, bool) or not isinstance(value, int):
        raise create_validation_error(
            f"Invalid {field_name} type: expected integer, got {type(value).__name__}"
        )

    if value < 1:
        raise create_validation_error(
            f"Invalid {field_name}: {value} must be a positive integer (>= 1)"
        )

    return value


def validate_application_status(status) -> ApplicationStatus:
    """
    Validate a requested application status.

    Args:
        status: The status value to validate

    Returns:
        ApplicationStatus member

    Raises:
        ToolError: If status is invalid
    """
    if status is None:
        raise create_validation_error("Invalid status: cannot be null")

    if not isinstance(status, str):
        raise create_validation_error(
            f"Invalid status type: expected string, got {type(status).__name__}"
        )

    if not status:
        raise create_validation_error("Invalid status: cannot be empty")

    if status != status.strip():
        raise create_validation_error(
            f"Invalid status: '{status}' contains leading or trailing whitespace"
        )

    # Case-sensitive
    try:
        return ApplicationStatus(status)
    except ValueError:
        allowed = ", ".join(sorted(s.value for s in ApplicationStatus))
        raise create_validation_error(
            f"Invalid status value: '{status}'. Allowed values are: {allowed}"
        )


def validate_actor_role(role) -> ActorRole:
    """Validate an actor role string and return the enum member."""
    try:
        return ActorRole(role)
    except ValueError:
        allowed = ", ".join(sorted(r.value for r in ActorRole))
        raise create_validation_error(
            f"Invalid actor_role value: '{role}'. Allowed values are: {allowed}"
        )


def validate_role_category(category) -> RoleCategory:
    """Validate a job role category string and return the enum member."""
    try:
        return RoleCategory(category)
    except ValueError:
        allowed = ", ".join(sorted(c.value for c in RoleCategory))
        raise create_validation_error(
            f"Invalid role_category value: '{category}'. Allowed values are: {allowed}"
        )


def validate_note_text(text: Optional[str]) -> str:
    """
    Validate free-text note content.

    Notes must contain at least three non-whitespace-padded characters.

    Raises:
        ToolError: If text is missing or too short
    """
    if text is None or not text.strip():
        raise create_validation_error("Invalid note: cannot be empty")

    stripped = text.strip()
    if len(stripped) < MIN_NOTE_LENGTH:
        raise create_validation_error(
            f"Invalid note: must be at least {MIN_NOTE_LENGTH} characters long"
        )

    return stripped


def validate_application_ids(application_ids: List[int]) -> List[int]:
    """
    Validate a batch of application IDs for bot processing.

    Batches must contain 1-100 unique positive integers.

    Raises:
        ToolError: If the batch is empty, too large, or has duplicates
    """
    if not application_ids:
        raise create_validation_error("Application IDs array is required")

    if len(application_ids) > MAX_BATCH_SIZE:
        raise create_validation_error(
            f"Batch size too large: {len(application_ids)} applications exceeds maximum of {MAX_BATCH_SIZE}"
        )

    seen = set()
    duplicates = set()
    for application_id in application_ids:
        validate_positive_id(application_id, "application ID")
        if application_id in seen:
            duplicates.add(application_id)
        else:
            seen.add(application_id)

    if duplicates:
        duplicate_list = ", ".join(str(dup_id) for dup_id in sorted(duplicates))
        raise create_validation_error(
            f"Duplicate application IDs found in batch: {duplicate_list}"
        )

    return list(application_ids)


def get_current_utc_timestamp() -> str:
    """
    Generate a UTC timestamp in ISO 8601 format with millisecond precision.

    Returns a timestamp string in the format: YYYY-MM-DDTHH:MM:SS.mmmZ
    Example: 2026-02-04T03:47:36.966Z

    Returns:
        ISO 8601 UTC timestamp string with millisecond precision and Z suffix
    """
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")
