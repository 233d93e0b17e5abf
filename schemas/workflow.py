"""Pydantic schemas for the scheduler-facing tools."""

from __future__ import annotations

from typing import Optional

from schemas.common import StrictIgnoreRequest, StrictResponse


class PassSummary(StrictResponse):
    """Counts from one processing pass."""

    kind: str
    eligible_count: int
    processed_count: int
    skipped_count: int
    failed_count: int


class TriggerManualWorkflowRequest(StrictIgnoreRequest):
    """Request schema for trigger_manual_workflow."""

    kind: str = "mimic"


class TriggerManualWorkflowResponse(StrictResponse):
    """Response schema for trigger_manual_workflow."""

    message: str
    kind: str
    processed_count: int
    result: PassSummary


class SchedulerState(StrictResponse):
    """Runtime state of one scheduler."""

    is_running: bool
    interval_seconds: float
    last_result: Optional[PassSummary] = None


class GetWorkflowStatsResponse(StrictResponse):
    """Response schema for get_workflow_stats."""

    total_technical_applications: int
    stage_distribution: dict[str, int]
    is_running: bool
    schedulers: dict[str, SchedulerState]


class ControlSchedulerRequest(StrictIgnoreRequest):
    """Request schema for control_scheduler."""

    kind: str
    action: str


class ControlSchedulerResponse(StrictResponse):
    """Response schema for control_scheduler."""

    kind: str
    action: str
    changed: bool
    is_running: bool
