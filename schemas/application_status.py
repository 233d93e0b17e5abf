"""Pydantic schemas for update_application_status and process_bot_applications tools."""

from __future__ import annotations

from typing import Any, Optional

from schemas.common import ActorIdMixin, StrictIgnoreRequest, StrictResponse


class UpdateApplicationStatusRequest(ActorIdMixin, StrictIgnoreRequest):
    """Request schema for update_application_status."""

    application_id: int
    actor_role: str
    status: str
    comment: Optional[str] = None


class UpdateApplicationStatusResponse(StrictResponse):
    """Success/blocked response schema for update_application_status."""

    application_id: int
    previous_status: str
    target_status: str
    action: str
    success: bool
    error: Optional[str] = None
    application: Optional[dict[str, Any]] = None


class ProcessBotApplicationsRequest(ActorIdMixin, StrictIgnoreRequest):
    """Request schema for process_bot_applications."""

    application_ids: list[Any]


class ProcessBotApplicationsErrorItem(StrictResponse):
    """Per-item failure schema for process_bot_applications."""

    application_id: int
    error: str


class ProcessBotApplicationsResponse(StrictResponse):
    """Response schema for process_bot_applications."""

    processed: int
    errors: list[ProcessBotApplicationsErrorItem]
    applications: list[dict[str, Any]]
