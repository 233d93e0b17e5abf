"""
Main MCP tool handler for update_application_status.

Orchestrates validation, the status policy and the status update service to
move one application to a new status on behalf of an admin or bot actor.
"""

from typing import Any, Dict, Optional

from pydantic import ValidationError

from models.errors import ErrorCode, ToolError, create_internal_error
from schemas.application_status import (
    UpdateApplicationStatusRequest,
    UpdateApplicationStatusResponse,
)
from utils.pydantic_error_mapper import map_pydantic_validation_error
from utils.validation import (
    validate_actor_role,
    validate_application_status,
    validate_positive_id,
)


def _build_response(
    application_id: int,
    previous_status: str,
    target_status: str,
    action: str,
    success: bool,
    error_message: Optional[str] = None,
    application: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Build structured success/blocked response payload."""
    return UpdateApplicationStatusResponse(
        application_id=application_id,
        previous_status=previous_status,
        target_status=target_status,
        action=action,
        success=success,
        error=error_message,
        application=application,
    ).model_dump(exclude_none=True)


def build_blocked_response(
    application_id: int, previous_status: str, target_status: str, error_message: str
) -> Dict[str, Any]:
    """Build a blocked response for policy denials."""
    return _build_response(
        application_id=application_id,
        previous_status=previous_status,
        target_status=target_status,
        action="blocked",
        success=False,
        error_message=error_message,
    )


def update_application_status(args: Dict[str, Any], runtime) -> Dict[str, Any]:
    """
    Update one application's status through the status policy.

    Args:
        args: Dictionary containing parameters:
            - application_id (int): Application to update
            - actor_role (str): "admin" or "bot" ("applicant" is always denied)
            - status (str): Requested status
            - comment (str, optional): Free text carried into the note and audit event
            - actor_id (str, optional): Identity recorded as note author and audit actor
        runtime: WorkflowRuntime owning the status update service

    Returns:
        Dictionary with structure:
        {
            "application_id": int,
            "previous_status": str,
            "target_status": str,
            "action": "updated" | "noop" | "blocked",
            "success": bool,
            "error": str,            # blocked only
            "application": {...}     # updated/noop only
        }

        On top-level fatal error, returns:
        {
            "error": {
                "code": str,    # VALIDATION_ERROR, NOT_FOUND, DB_NOT_FOUND, DB_ERROR, INTERNAL_ERROR
                "message": str,
                "retryable": bool
            }
        }

    Behavior:
        - Policy denials (wrong role for the job category, admin outside the
          shortlist window, terminal statuses) return a blocked response
        - requested == current returns action "noop" and writes nothing
        - Allowed updates append one note and emit one audit event
    """
    try:
        request = UpdateApplicationStatusRequest.model_validate(args)

        application_id = validate_positive_id(request.application_id, "application_id")
        actor_role = validate_actor_role(request.actor_role)
        target_status = validate_application_status(request.status)

        try:
            outcome = runtime.status_updates.update_status(
                application_id,
                actor_role,
                target_status,
                comment=request.comment,
                actor_id=request.actor_id,
            )
        except ToolError as e:
            if e.code != ErrorCode.POLICY_DENIED:
                raise
            current = runtime.store.get_application(application_id)
            previous_status = current.status.value if current is not None else target_status.value
            return build_blocked_response(
                application_id=application_id,
                previous_status=previous_status,
                target_status=target_status.value,
                error_message=e.message,
            )

        return _build_response(
            application_id=application_id,
            previous_status=outcome.old_status.value,
            target_status=target_status.value,
            action=outcome.action,
            success=True,
            application=outcome.application.to_response(),
        )

    except ValidationError as e:
        return map_pydantic_validation_error(e).to_dict()

    except ToolError as e:
        return e.to_dict()

    except Exception as e:
        internal_error = create_internal_error(message=str(e), original_error=e)
        return internal_error.to_dict()
