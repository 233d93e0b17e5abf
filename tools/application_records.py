"""
MCP tool handlers for the records the workflow acts on.

- submit_application: applicant creates a pending application
- create_job: admin creates a job posting
- add_application_note: admin appends a note without changing status
- get_application_progress: submission plus note timeline, newest first
"""

from typing import Any, Dict

from pydantic import ValidationError

from models.errors import ToolError, create_internal_error
from schemas.applications import (
    AddApplicationNoteRequest,
    AddApplicationNoteResponse,
    CreateJobRequest,
    CreateJobResponse,
    GetApplicationProgressRequest,
    GetApplicationProgressResponse,
    SubmitApplicationRequest,
    SubmitApplicationResponse,
)
from utils.pydantic_error_mapper import map_pydantic_validation_error
from utils.validation import (
    validate_actor_role,
    validate_positive_id,
    validate_role_category,
)


def submit_application(args: Dict[str, Any], runtime) -> Dict[str, Any]:
    """
    Submit a new application (status pending) for an active job.

    Args:
        args: Dictionary containing parameters:
            - job_id (int): Job to apply for
            - applicant_id (str): Applicant identity
            - cover_letter (str, optional)

    Returns:
        {"message": str, "application": {...}}, or an error payload:
        NOT_FOUND for missing/inactive jobs, DUPLICATE_APPLICATION when the
        applicant already applied for the job
    """
    try:
        request = SubmitApplicationRequest.model_validate(args)
        job_id = validate_positive_id(request.job_id, "job_id")

        application = runtime.status_updates.submit_application(
            job_id, request.applicant_id, request.cover_letter
        )
        return SubmitApplicationResponse(
            message="Application submitted successfully",
            application=application.to_response(),
        ).model_dump()

    except ValidationError as e:
        return map_pydantic_validation_error(e).to_dict()

    except ToolError as e:
        return e.to_dict()

    except Exception as e:
        internal_error = create_internal_error(message=str(e), original_error=e)
        return internal_error.to_dict()


def create_job(args: Dict[str, Any], runtime) -> Dict[str, Any]:
    """
    Create an active job posting.

    Args:
        args: Dictionary containing parameters:
            - title (str)
            - department (str, optional)
            - role_category (str, optional): defaults to "non-technical"
            - actor_id (str, optional): admin identity for the audit event

    Returns:
        {"message": str, "job": {...}}
    """
    try:
        request = CreateJobRequest.model_validate(args)
        role_category = validate_role_category(request.role_category)

        job = runtime.status_updates.create_job(
            title=request.title,
            role_category=role_category,
            department=request.department,
            actor_id=request.actor_id,
        )
        return CreateJobResponse(
            message="Job role created successfully",
            job=job.model_dump(mode="json"),
        ).model_dump()

    except ValidationError as e:
        return map_pydantic_validation_error(e).to_dict()

    except ToolError as e:
        return e.to_dict()

    except Exception as e:
        internal_error = create_internal_error(message=str(e), original_error=e)
        return internal_error.to_dict()


def add_application_note(args: Dict[str, Any], runtime) -> Dict[str, Any]:
    """
    Append an admin note to an application.

    Args:
        args: Dictionary containing parameters:
            - application_id (int)
            - note (str): at least 3 characters after trimming
            - actor_role (str, optional): must be "admin" (default)
            - actor_id (str, optional)

    Returns:
        {"message": str, "application": {...}}
    """
    try:
        request = AddApplicationNoteRequest.model_validate(args)
        application_id = validate_positive_id(request.application_id, "application_id")
        actor_role = validate_actor_role(request.actor_role)

        application = runtime.status_updates.add_note(
            application_id, actor_role, request.note, actor_id=request.actor_id
        )
        return AddApplicationNoteResponse(
            message="Note added successfully",
            application=application.to_response(),
        ).model_dump()

    except ValidationError as e:
        return map_pydantic_validation_error(e).to_dict()

    except ToolError as e:
        return e.to_dict()

    except Exception as e:
        internal_error = create_internal_error(message=str(e), original_error=e)
        return internal_error.to_dict()


def get_application_progress(args: Dict[str, Any], runtime) -> Dict[str, Any]:
    """
    Return an application with its progress timeline.

    Returns:
        {
            "application": {...},
            "progress_timeline": [{type, timestamp, title, description, source}],
            "total_events": int
        }
    """
    try:
        request = GetApplicationProgressRequest.model_validate(args)
        application_id = validate_positive_id(request.application_id, "application_id")

        progress = runtime.status_updates.application_progress(application_id)
        return GetApplicationProgressResponse.model_validate(progress).model_dump()

    except ValidationError as e:
        return map_pydantic_validation_error(e).to_dict()

    except ToolError as e:
        return e.to_dict()

    except Exception as e:
        internal_error = create_internal_error(message=str(e), original_error=e)
        return internal_error.to_dict()
