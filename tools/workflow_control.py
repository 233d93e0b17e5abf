"""
MCP tool handlers for the bot schedulers.

- trigger_manual_workflow: run one processing pass synchronously
- get_workflow_stats: stage distribution of technical applications
- control_scheduler: start or stop one scheduler
"""

from typing import Any, Dict

from pydantic import ValidationError

from models.errors import ToolError, create_internal_error, create_validation_error
from schemas.workflow import (
    ControlSchedulerRequest,
    ControlSchedulerResponse,
    GetWorkflowStatsResponse,
    TriggerManualWorkflowRequest,
    TriggerManualWorkflowResponse,
)
from utils.pydantic_error_mapper import map_pydantic_validation_error
from utils.workflow_runtime import SchedulerKind

SCHEDULER_ACTIONS = ("start", "stop")


def validate_scheduler_kind(kind: str) -> SchedulerKind:
    """Validate a scheduler kind string and return the enum member."""
    try:
        return SchedulerKind(kind)
    except ValueError:
        allowed = ", ".join(k.value for k in SchedulerKind)
        raise create_validation_error(
            f"Invalid kind value: '{kind}'. Allowed values are: {allowed}"
        )


def trigger_manual_workflow(args: Dict[str, Any], runtime) -> Dict[str, Any]:
    """
    Run one processing pass synchronously, outside the timer.

    Args:
        args: Dictionary containing parameters:
            - kind (str, optional): "mimic" (default) or "automation"
        runtime: WorkflowRuntime owning the schedulers

    Returns:
        {
            "message": "Workflow processing completed",
            "kind": str,
            "processed_count": int,
            "result": {kind, eligible_count, processed_count, skipped_count, failed_count}
        }

    Per-application failures are counted in the result, never surfaced as errors.
    """
    try:
        request = TriggerManualWorkflowRequest.model_validate(args)
        kind = validate_scheduler_kind(request.kind)

        result = runtime.trigger(kind)
        return TriggerManualWorkflowResponse(
            message="Workflow processing completed",
            kind=kind.value,
            processed_count=result.processed_count,
            result=result.to_dict(),
        ).model_dump()

    except ValidationError as e:
        return map_pydantic_validation_error(e).to_dict()

    except ToolError as e:
        return e.to_dict()

    except Exception as e:
        internal_error = create_internal_error(message=str(e), original_error=e)
        return internal_error.to_dict()


def get_workflow_stats(args: Dict[str, Any], runtime) -> Dict[str, Any]:
    """
    Report technical application counts per workflow position.

    Returns:
        {
            "total_technical_applications": int,
            "stage_distribution": {stage: count},
            "is_running": bool,      # Bot Mimic scheduler
            "schedulers": {kind: {is_running, interval_seconds, last_result}}
        }
    """
    try:
        stats = runtime.workflow_stats()
        return GetWorkflowStatsResponse.model_validate(stats).model_dump()

    except ValidationError as e:
        return map_pydantic_validation_error(e).to_dict()

    except ToolError as e:
        return e.to_dict()

    except Exception as e:
        internal_error = create_internal_error(message=str(e), original_error=e)
        return internal_error.to_dict()


def control_scheduler(args: Dict[str, Any], runtime) -> Dict[str, Any]:
    """
    Start or stop one scheduler. Both actions are idempotent.

    Args:
        args: Dictionary containing parameters:
            - kind (str): "automation" or "mimic"
            - action (str): "start" or "stop"
        runtime: WorkflowRuntime owning the schedulers

    Returns:
        {
            "kind": str,
            "action": str,
            "changed": bool,     # False when already in the requested state
            "is_running": bool
        }
    """
    try:
        request = ControlSchedulerRequest.model_validate(args)
        kind = validate_scheduler_kind(request.kind)
        if request.action not in SCHEDULER_ACTIONS:
            raise create_validation_error(
                f"Invalid action value: '{request.action}'. "
                f"Allowed values are: {', '.join(SCHEDULER_ACTIONS)}"
            )

        if request.action == "start":
            changed = runtime.start(kind)
        else:
            changed = runtime.stop(kind)

        return ControlSchedulerResponse(
            kind=kind.value,
            action=request.action,
            changed=changed,
            is_running=runtime.scheduler(kind).is_running,
        ).model_dump()

    except ValidationError as e:
        return map_pydantic_validation_error(e).to_dict()

    except ToolError as e:
        return e.to_dict()

    except Exception as e:
        internal_error = create_internal_error(message=str(e), original_error=e)
        return internal_error.to_dict()
