"""Pydantic schemas for submission, job creation, note and progress tools."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import field_validator

from schemas.common import (
    ActorIdMixin,
    StrictIgnoreRequest,
    StrictResponse,
    validate_non_empty_str,
    validate_optional_non_empty_str,
)


class SubmitApplicationRequest(StrictIgnoreRequest):
    """Request schema for submit_application."""

    job_id: int
    applicant_id: str
    cover_letter: Optional[str] = None

    @field_validator("applicant_id")
    @classmethod
    def validate_applicant_id(cls, value: str) -> str:
        return validate_non_empty_str(value, "applicant_id")


class SubmitApplicationResponse(StrictResponse):
    """Response schema for submit_application."""

    message: str
    application: dict[str, Any]


class CreateJobRequest(ActorIdMixin, StrictIgnoreRequest):
    """Request schema for create_job."""

    title: str
    department: Optional[str] = None
    role_category: str = "non-technical"

    @field_validator("title")
    @classmethod
    def validate_title(cls, value: str) -> str:
        return validate_non_empty_str(value, "title")

    @field_validator("department")
    @classmethod
    def validate_department(cls, value: Optional[str]) -> Optional[str]:
        return validate_optional_non_empty_str(value, "department")


class CreateJobResponse(StrictResponse):
    """Response schema for create_job."""

    message: str
    job: dict[str, Any]


class AddApplicationNoteRequest(ActorIdMixin, StrictIgnoreRequest):
    """Request schema for add_application_note."""

    application_id: int
    note: str
    actor_role: str = "admin"


class AddApplicationNoteResponse(StrictResponse):
    """Response schema for add_application_note."""

    message: str
    application: dict[str, Any]


class GetApplicationProgressRequest(StrictIgnoreRequest):
    """Request schema for get_application_progress."""

    application_id: int


class TimelineEntry(StrictResponse):
    """One event in an application's progress timeline."""

    type: str
    timestamp: str
    title: str
    description: str
    source: str


class GetApplicationProgressResponse(StrictResponse):
    """Response schema for get_application_progress."""

    application: dict[str, Any]
    progress_timeline: list[TimelineEntry]
    total_events: int
