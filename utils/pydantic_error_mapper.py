"""Map pydantic request validation failures onto VALIDATION_ERROR tool errors."""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from models.errors import ToolError, create_validation_error

# Strict-mode type errors that surface as "must be <kind>"
_TYPE_ERROR_KINDS = {
    "int_type": "an integer",
    "string_type": "a string",
    "list_type": "a list",
    "bool_type": "a boolean",
}


def _field_path(loc: tuple[Any, ...]) -> str:
    # List positions render as application_ids[3]
    path = ""
    for part in loc:
        if part == "__root__":
            continue
        if isinstance(part, int):
            path += f"[{part}]"
        else:
            path = f"{path}.{part}" if path else str(part)
    return path


def _issue_message(issue: dict[str, Any]) -> str:
    message = issue.get("msg", "Invalid input")
    if message.startswith("Value error, "):
        return message[len("Value error, ") :]
    return message


def map_pydantic_validation_error(error: ValidationError) -> ToolError:
    """
    Build a ToolError from the first issue of a request ValidationError.

    Missing fields read "<field> is required", strict type mismatches read
    "Invalid <field>: must be <kind>", and messages raised by field
    validators pass through unchanged.
    """
    issues = error.errors()
    if not issues:
        return create_validation_error("Invalid input")

    first = issues[0]
    field = _field_path(first.get("loc", ()))
    issue_type = first.get("type", "")

    if issue_type == "missing" and field:
        return create_validation_error(f"{field} is required")

    if issue_type in _TYPE_ERROR_KINDS and field:
        return create_validation_error(
            f"Invalid {field}: must be {_TYPE_ERROR_KINDS[issue_type]}"
        )

    message = _issue_message(first)
    if issue_type == "value_error" and message.startswith("Invalid "):
        # Field validators already name the field
        return create_validation_error(message)
    if field:
        return create_validation_error(f"Invalid {field}: {message}")
    return create_validation_error(message)
