"""
Audit event shaping for workflow transitions.

Builds the structured payload handed to the audit emitter:

    {
        "actor": str,
        "action": str,              # AuditAction value
        "resource_type": str,       # "application" or "job"
        "resource_id": int,
        "description": str,
        "details": {...}
    }
"""

from typing import Any, Dict, Optional

from models.application import Application, Job
from models.status import (
    ApplicationStatus,
    AuditAction,
    PROCESSED_BY_BOT_MIMIC,
    WorkflowStage,
)

_PROCESSOR_LABELS = {
    "admin": "Admin",
    "bot": "Bot",
    "applicant": "Applicant",
}


def build_audit_event(
    actor: str,
    action: AuditAction,
    resource_id: int,
    description: str,
    details: Optional[Dict[str, Any]] = None,
    resource_type: str = "application",
) -> Dict[str, Any]:
    """Assemble the common audit event envelope."""
    return {
        "actor": actor,
        "action": action.value,
        "resource_type": resource_type,
        "resource_id": resource_id,
        "description": description,
        "details": details or {},
    }


def build_status_change_event(
    application: Application,
    old_status: ApplicationStatus,
    new_status: ApplicationStatus,
    processed_by: str,
    actor: str,
    timestamp: str,
    comment: Optional[str] = None,
) -> Dict[str, Any]:
    """Event for an APPLICATION_STATUS_CHANGE by an admin or bot."""
    label = _PROCESSOR_LABELS.get(processed_by, processed_by)
    details = {
        "old_status": ApplicationStatus(old_status).value,
        "new_status": ApplicationStatus(new_status).value,
        "processed_by": processed_by,
        "role_category": application.role_category.value,
        "timestamp": timestamp,
        "job_title": application.job_title,
    }
    if comment:
        details["comment"] = comment

    return build_audit_event(
        actor=actor,
        action=AuditAction.APPLICATION_STATUS_CHANGE,
        resource_id=application.id,
        description=(
            f"{label} updated application status: "
            f"{details['old_status']} -> {details['new_status']}"
        ),
        details=details,
    )


def build_workflow_progression_event(
    application: Application,
    old_stage: WorkflowStage,
    new_stage: WorkflowStage,
    comment: str,
    timestamp: str,
) -> Dict[str, Any]:
    """Event for a BOT_MIMIC_WORKFLOW stage progression."""
    old_value = WorkflowStage(old_stage).value
    new_value = WorkflowStage(new_stage).value
    return build_audit_event(
        actor=PROCESSED_BY_BOT_MIMIC,
        action=AuditAction.BOT_MIMIC_WORKFLOW,
        resource_id=application.id,
        description=f"Bot Mimic progressed application: {old_value} -> {new_value}",
        details={
            "old_stage": old_value,
            "new_stage": new_value,
            "processed_by": PROCESSED_BY_BOT_MIMIC,
            "role_category": application.role_category.value,
            "timestamp": timestamp,
            "comment": comment,
            "job_title": application.job_title,
        },
    )


def build_note_added_event(
    application: Application, note_text: str, actor: str, timestamp: str
) -> Dict[str, Any]:
    """Event for an admin note appended outside a status change."""
    return build_audit_event(
        actor=actor,
        action=AuditAction.APPLICATION_NOTE_ADDED,
        resource_id=application.id,
        description="Admin added note to application",
        details={
            "note_text": note_text,
            "job_title": application.job_title,
            "timestamp": timestamp,
        },
    )


def build_submission_event(application: Application) -> Dict[str, Any]:
    """Event for a newly submitted application."""
    return build_audit_event(
        actor=application.applicant_id,
        action=AuditAction.APPLICATION_SUBMIT,
        resource_id=application.id,
        description=f"Application submitted for job: {application.job_title}",
        details={
            "job_id": application.job_id,
            "role_category": application.role_category.value,
            "timestamp": application.submitted_at,
        },
    )


def build_job_created_event(job: Job, actor: str) -> Dict[str, Any]:
    """Event for a job role created by an admin."""
    return build_audit_event(
        actor=actor,
        action=AuditAction.JOB_CREATE,
        resource_id=job.id,
        resource_type="job",
        description=f"Admin created new job role: {job.title}",
        details={
            "job_title": job.title,
            "department": job.department,
            "role_category": job.role_category.value,
            "timestamp": job.created_at,
        },
    )
