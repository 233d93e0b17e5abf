"""
MCP tool handler for process_bot_applications.

Lets the bot actor push a batch of technical applications one step along
pending -> reviewing -> shortlisted -> accepted, with per-item isolation.
"""

from typing import Any, Dict

from pydantic import ValidationError

from models.errors import ToolError, create_internal_error
from schemas.application_status import (
    ProcessBotApplicationsRequest,
    ProcessBotApplicationsResponse,
)
from utils.pydantic_error_mapper import map_pydantic_validation_error
from utils.validation import validate_application_ids


def process_bot_applications(args: Dict[str, Any], runtime) -> Dict[str, Any]:
    """
    Process a batch of applications as the bot.

    Args:
        args: Dictionary containing parameters:
            - application_ids (list[int]): 1-100 unique application ids
            - actor_id (str, optional): Bot identity recorded in notes and audit
        runtime: WorkflowRuntime owning the status update service

    Returns:
        {
            "processed": int,
            "errors": [{"application_id": int, "error": str}],
            "applications": [{...}]
        }

    Behavior:
        - Items are processed in input order
        - Missing applications, non-technical jobs and policy denials are
          reported per item and never abort the batch
    """
    try:
        request = ProcessBotApplicationsRequest.model_validate(args)
        application_ids = validate_application_ids(request.application_ids)

        result = runtime.status_updates.process_bot_batch(
            application_ids, actor_id=request.actor_id
        )
        return ProcessBotApplicationsResponse.model_validate(result.to_dict()).model_dump()

    except ValidationError as e:
        return map_pydantic_validation_error(e).to_dict()

    except ToolError as e:
        return e.to_dict()

    except Exception as e:
        internal_error = create_internal_error(message=str(e), original_error=e)
        return internal_error.to_dict()
