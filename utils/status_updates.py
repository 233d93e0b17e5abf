"""
Manual status updates and the other actor-driven application operations.

Every read-modify-write of an application goes through the application's
lock and the status policy, the same way the bot processors do, so manual
calls and scheduler passes never act on one another's stale snapshot.
"""

import logging
from typing import Any, Dict, List, Optional

from db.application_store import ApplicationStore
from db.audit_writer import AuditEmitter, emit_audit_event
from models.application import Application, Job
from models.errors import (
    ErrorCode,
    ToolError,
    create_not_found_error,
    create_policy_denied_error,
)
from models.status import (
    ActorRole,
    ApplicationStatus,
    NoteActionType,
    PROCESSED_BY_ADMIN,
    PROCESSED_BY_BOT,
    RoleCategory,
    WorkflowStage,
)
from utils.application_locks import ApplicationLocks
from utils.audit_events import (
    build_job_created_event,
    build_note_added_event,
    build_status_change_event,
    build_submission_event,
)
from utils.status_policy import check_transition_or_raise
from utils.validation import get_current_utc_timestamp, validate_note_text

logger = logging.getLogger(__name__)

# Deterministic ladder used by the bot's manual batch processing
BOT_BATCH_NEXT_STATUS = {
    ApplicationStatus.PENDING: ApplicationStatus.REVIEWING,
    ApplicationStatus.REVIEWING: ApplicationStatus.SHORTLISTED,
    ApplicationStatus.SHORTLISTED: ApplicationStatus.ACCEPTED,
}

NOT_A_TECHNICAL_ROLE = "Not a technical role - bot cannot process"
JOB_UNAVAILABLE = "Job not found or is no longer active"
ADMIN_ONLY_NOTES = "Only admins can add application notes"

_ACTOR_LABELS = {
    ActorRole.ADMIN: "Admin",
    ActorRole.BOT: "Bot",
    ActorRole.APPLICANT: "Applicant",
}

_STAGE_VALUES = {stage.value for stage in WorkflowStage}

_STATUS_NOTE_TYPES = {
    NoteActionType.STATUS_CHANGE,
    NoteActionType.STATUS_CHANGE_WITH_COMMENT,
    NoteActionType.AUTO_PROCESSING,
    NoteActionType.WORKFLOW_PROGRESSION,
    NoteActionType.BOT_PROCESSING,
}


class StatusUpdateOutcome:
    """Result of a manual status update that passed the policy."""

    def __init__(
        self,
        application: Application,
        action: str,
        old_status: ApplicationStatus,
        new_status: ApplicationStatus,
    ):
        """
        Args:
            application: The application after the update
            action: "updated" or "noop"
            old_status: Status before the request
            new_status: Status after the request
        """
        self.application = application
        self.action = action
        self.old_status = old_status
        self.new_status = new_status

    @property
    def is_noop(self) -> bool:
        return self.action == "noop"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "action": self.action,
            "old_status": self.old_status.value,
            "new_status": self.new_status.value,
            "application": self.application.to_response(),
        }


class BotBatchResult:
    """Per-item results of a bot batch processing request."""

    def __init__(self):
        self.applications: List[Application] = []
        self.errors: List[Dict[str, Any]] = []

    def add_error(self, application_id: int, message: str) -> None:
        self.errors.append({"application_id": application_id, "error": message})

    def to_dict(self) -> Dict[str, Any]:
        return {
            "processed": len(self.applications),
            "errors": list(self.errors),
            "applications": [app.to_response() for app in self.applications],
        }


class StatusUpdateService:
    """
    Actor-driven operations on applications and jobs.

    Usage:
        service = StatusUpdateService(store, audit, locks)
        outcome = service.update_status(42, "admin", "accepted", comment="Great fit")
    """

    def __init__(self, store: ApplicationStore, audit: AuditEmitter, locks: ApplicationLocks):
        self.store = store
        self.audit = audit
        self.locks = locks

    # ------------------------------------------------------------------
    # Status changes
    # ------------------------------------------------------------------

    def update_status(
        self,
        application_id: int,
        actor_role: ActorRole,
        requested_status: ApplicationStatus,
        comment: Optional[str] = None,
        actor_id: Optional[str] = None,
    ) -> StatusUpdateOutcome:
        """
        Move an application to ``requested_status`` on behalf of an actor.

        Allowed moves append exactly one note, save the record and emit an
        APPLICATION_STATUS_CHANGE audit event. A noop writes nothing.

        Args:
            application_id: Application to update
            actor_role: Role of the requesting actor
            requested_status: Desired status
            comment: Optional free-text comment carried into the note
            actor_id: Optional identity of the actor for notes and audit

        Returns:
            StatusUpdateOutcome describing the change

        Raises:
            ToolError: NOT_FOUND if the application does not exist,
                POLICY_DENIED if the actor may not make this move
        """
        actor = ActorRole(actor_role)
        requested = ApplicationStatus(requested_status)
        comment = comment.strip() if comment and comment.strip() else None

        with self.locks.hold(application_id):
            application = self._require_application(application_id)
            old_status = application.status

            decision = check_transition_or_raise(
                actor, application.role_category, old_status, requested
            )
            if decision.is_noop:
                return StatusUpdateOutcome(application, "noop", old_status, old_status)

            timestamp = get_current_utc_timestamp()
            label = _ACTOR_LABELS[actor]
            note_text = f"{label} Update: {old_status.value} -> {requested.value}"
            if comment:
                note_text = f"{note_text} - {comment}"

            application.status = requested
            self._sync_workflow_stage(application, requested)
            application.append_note(
                text=note_text,
                added_by=actor_id or actor.value,
                added_at=timestamp,
                processed_by=actor.value,
                action_type=(
                    NoteActionType.STATUS_CHANGE_WITH_COMMENT
                    if comment
                    else NoteActionType.STATUS_CHANGE
                ),
            )
            self.store.save(application, timestamp=timestamp)

            emit_audit_event(
                self.audit,
                build_status_change_event(
                    application,
                    old_status,
                    requested,
                    processed_by=actor.value,
                    actor=actor_id or actor.value,
                    timestamp=timestamp,
                    comment=comment,
                )
            )

        logger.info(
            f"{label} updated application {application_id}: "
            f"{old_status.value} -> {requested.value}"
        )
        return StatusUpdateOutcome(application, "updated", old_status, requested)

    def process_bot_batch(
        self, application_ids: List[int], actor_id: Optional[str] = None
    ) -> BotBatchResult:
        """
        Advance a batch of technical applications one rung up the bot ladder.

        pending -> reviewing -> shortlisted -> accepted. Failures are
        collected per item and never abort the batch.
        """
        result = BotBatchResult()
        for application_id in application_ids:
            try:
                application = self._advance_for_bot(application_id, actor_id)
            except ToolError as e:
                result.add_error(application_id, e.message)
                continue
            result.applications.append(application)

        logger.info(
            f"Bot batch processed {len(result.applications)} of {len(application_ids)} applications"
        )
        return result

    def _advance_for_bot(self, application_id: int, actor_id: Optional[str]) -> Application:
        with self.locks.hold(application_id):
            application = self.store.get_application(application_id)
            if application is None:
                raise create_not_found_error("Application", application_id)
            if application.role_category != RoleCategory.TECHNICAL:
                raise create_policy_denied_error(NOT_A_TECHNICAL_ROLE)

            old_status = application.status
            next_status = BOT_BATCH_NEXT_STATUS.get(old_status)
            if next_status is None:
                if application.is_terminal:
                    # Surfaces the terminal-status reason
                    check_transition_or_raise(
                        ActorRole.BOT, application.role_category, old_status, old_status
                    )
                raise create_policy_denied_error(
                    f"No automated next status from '{old_status.value}'"
                )

            check_transition_or_raise(
                ActorRole.BOT, application.role_category, old_status, next_status
            )

            timestamp = get_current_utc_timestamp()
            application.status = next_status
            application.append_note(
                text=f"Automated processing: Status updated to {next_status.value} by bot system",
                added_by=actor_id or PROCESSED_BY_BOT,
                added_at=timestamp,
                processed_by=PROCESSED_BY_BOT,
                action_type=NoteActionType.BOT_PROCESSING,
            )
            self.store.save(application, timestamp=timestamp)

            emit_audit_event(
                self.audit,
                build_status_change_event(
                    application,
                    old_status,
                    next_status,
                    processed_by=PROCESSED_BY_BOT,
                    actor=actor_id or PROCESSED_BY_BOT,
                    timestamp=timestamp,
                )
            )
        return application

    # ------------------------------------------------------------------
    # Notes, submissions and jobs
    # ------------------------------------------------------------------

    def add_note(
        self,
        application_id: int,
        actor_role: ActorRole,
        text: str,
        actor_id: Optional[str] = None,
    ) -> Application:
        """
        Append an admin note without changing status.

        Raises:
            ToolError: VALIDATION_ERROR for short notes, POLICY_DENIED for
                non-admin actors, NOT_FOUND for unknown applications
        """
        actor = ActorRole(actor_role)
        note = validate_note_text(text)
        if actor != ActorRole.ADMIN:
            raise create_policy_denied_error(ADMIN_ONLY_NOTES)

        with self.locks.hold(application_id):
            application = self._require_application(application_id)
            timestamp = get_current_utc_timestamp()
            application.append_note(
                text=f"Admin Note: {note}",
                added_by=actor_id or actor.value,
                added_at=timestamp,
                processed_by=PROCESSED_BY_ADMIN,
                action_type=NoteActionType.ADMIN_NOTE,
            )
            self.store.save(application, timestamp=timestamp)
            emit_audit_event(
                self.audit,
                build_note_added_event(application, note, actor_id or actor.value, timestamp)
            )

        return application

    def submit_application(
        self, job_id: int, applicant_id: str, cover_letter: Optional[str] = None
    ) -> Application:
        """
        Create a pending application for an active job.

        Raises:
            ToolError: NOT_FOUND if the job is missing or inactive,
                DUPLICATE_APPLICATION if the applicant already applied
        """
        job = self.store.get_job(job_id)
        if job is None or not job.is_active:
            raise ToolError(code=ErrorCode.NOT_FOUND, message=JOB_UNAVAILABLE, retryable=False)

        application = self.store.create_application(job_id, applicant_id, cover_letter)
        emit_audit_event(self.audit, build_submission_event(application))
        logger.info(f"Application {application.id} submitted for job {job_id}")
        return application

    def create_job(
        self,
        title: str,
        role_category: RoleCategory = RoleCategory.NON_TECHNICAL,
        department: Optional[str] = None,
        actor_id: Optional[str] = None,
    ) -> Job:
        """Create an active job posting; admins default to non-technical roles."""
        job = self.store.create_job(
            title=title, role_category=RoleCategory(role_category), department=department
        )
        emit_audit_event(self.audit, build_job_created_event(job, actor_id or PROCESSED_BY_ADMIN))
        return job

    # ------------------------------------------------------------------
    # Progress
    # ------------------------------------------------------------------

    def application_progress(self, application_id: int) -> Dict[str, Any]:
        """
        Build the progress timeline of an application, newest first.

        The timeline is the submission plus one entry per note; notes are
        the durable record of every transition.
        """
        application = self._require_application(application_id)

        timeline: List[Dict[str, Any]] = [
            {
                "type": "submission",
                "timestamp": application.submitted_at,
                "title": "Application Submitted",
                "description": f"Applied for {application.job_title}",
                "source": "applicant",
            }
        ]
        for note in application.notes:
            if note.action_type in _STATUS_NOTE_TYPES:
                entry_type, title = "status_change", "Status Updated"
            else:
                entry_type, title = "note", "Note Added"
            timeline.append(
                {
                    "type": entry_type,
                    "timestamp": note.added_at,
                    "title": title,
                    "description": note.text,
                    "source": note.processed_by or "system",
                }
            )

        # Stable sort keeps insertion order for equal timestamps
        timeline.sort(key=lambda entry: entry["timestamp"], reverse=True)

        return {
            "application": application.to_response(),
            "progress_timeline": timeline,
            "total_events": len(timeline),
        }

    def _require_application(self, application_id: int) -> Application:
        application = self.store.get_application(application_id)
        if application is None:
            raise create_not_found_error("Application", application_id)
        return application

    @staticmethod
    def _sync_workflow_stage(application: Application, new_status: ApplicationStatus) -> None:
        # Keep a Mimic-tracked record's stage in step with its status
        if application.workflow_stage is not None and new_status.value in _STAGE_VALUES:
            application.workflow_stage = WorkflowStage(new_status.value)
