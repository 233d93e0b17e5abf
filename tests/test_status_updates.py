"""
Tests for manual status updates, bot batches, notes, submissions and progress.
"""

import pytest

from conftest import BrokenAuditEmitter
from models.errors import ErrorCode, ToolError
from models.status import ApplicationStatus, NoteActionType, RoleCategory, WorkflowStage
from utils.status_policy import NON_TECHNICAL_HANDLED_MANUALLY, TECHNICAL_HANDLED_AUTOMATICALLY
from utils.status_updates import (
    ADMIN_ONLY_NOTES,
    JOB_UNAVAILABLE,
    NOT_A_TECHNICAL_ROLE,
    StatusUpdateService,
)


class TestUpdateStatus:
    """Tests for StatusUpdateService.update_status."""

    def test_admin_accepts_shortlisted_technical(
        self, service, store, audit, technical_job, make_application
    ):
        application = make_application(technical_job, status="shortlisted")

        outcome = service.update_status(application.id, "admin", "accepted")

        assert outcome.action == "updated"
        assert outcome.old_status == ApplicationStatus.SHORTLISTED
        reloaded = store.get_application(application.id)
        assert reloaded.status == ApplicationStatus.ACCEPTED
        assert reloaded.is_terminal
        assert reloaded.notes[-1].text == "Admin Update: shortlisted -> accepted"
        assert reloaded.notes[-1].action_type == NoteActionType.STATUS_CHANGE
        assert audit.actions() == ["APPLICATION_STATUS_CHANGE"]

        # Terminal now absorbs any further move
        with pytest.raises(ToolError) as exc_info:
            service.update_status(application.id, "admin", "rejected")
        assert exc_info.value.code == ErrorCode.POLICY_DENIED
        assert "terminal" in exc_info.value.message

    def test_bot_denied_on_non_technical(
        self, service, store, audit, non_technical_job, make_application
    ):
        application = make_application(non_technical_job)

        with pytest.raises(ToolError) as exc_info:
            service.update_status(application.id, "bot", "reviewing")

        assert exc_info.value.code == ErrorCode.POLICY_DENIED
        assert exc_info.value.message == NON_TECHNICAL_HANDLED_MANUALLY
        reloaded = store.get_application(application.id)
        assert reloaded.status == ApplicationStatus.PENDING
        assert reloaded.notes == []
        assert audit.events == []

    def test_admin_denied_on_pending_technical(self, service, technical_job, make_application):
        application = make_application(technical_job)

        with pytest.raises(ToolError) as exc_info:
            service.update_status(application.id, "admin", "accepted")

        assert exc_info.value.message == TECHNICAL_HANDLED_AUTOMATICALLY

    def test_comment_is_carried_into_note_and_audit(
        self, service, store, audit, non_technical_job, make_application
    ):
        application = make_application(non_technical_job)

        service.update_status(
            application.id, "admin", "reviewing", comment="  Strong CV  ", actor_id="admin-7"
        )

        note = store.get_application(application.id).notes[-1]
        assert note.text == "Admin Update: pending -> reviewing - Strong CV"
        assert note.added_by == "admin-7"
        assert note.processed_by == "admin"
        assert note.action_type == NoteActionType.STATUS_CHANGE_WITH_COMMENT
        assert audit.events[0]["actor"] == "admin-7"
        assert audit.events[0]["details"]["comment"] == "Strong CV"

    def test_noop_writes_nothing(self, service, store, audit, non_technical_job, make_application):
        application = make_application(non_technical_job, status="reviewing")
        before = store.get_application(application.id)

        outcome = service.update_status(application.id, "admin", "reviewing")

        assert outcome.is_noop
        after = store.get_application(application.id)
        assert after.notes == []
        assert after.last_updated == before.last_updated
        assert audit.events == []

    def test_unknown_application(self, service):
        with pytest.raises(ToolError) as exc_info:
            service.update_status(999, "admin", "reviewing")
        assert exc_info.value.code == ErrorCode.NOT_FOUND
        assert exc_info.value.message == "Application not found: 999"

    def test_bot_keeps_workflow_stage_in_step(
        self, service, store, technical_job, make_application
    ):
        application = make_application(technical_job, status="applied", workflow_stage="applied")

        service.update_status(application.id, "bot", "reviewed")

        reloaded = store.get_application(application.id)
        assert reloaded.status == ApplicationStatus.REVIEWED
        assert reloaded.workflow_stage == WorkflowStage.REVIEWED
        assert reloaded.notes[-1].text == "Bot Update: applied -> reviewed"

    def test_notes_are_append_only(self, service, store, non_technical_job, make_application):
        application = make_application(non_technical_job)

        service.update_status(application.id, "admin", "reviewing")
        first_notes = store.get_application(application.id).notes
        service.update_status(application.id, "admin", "shortlisted")
        second_notes = store.get_application(application.id).notes

        assert len(second_notes) == len(first_notes) + 1
        assert second_notes[: len(first_notes)] == first_notes

    def test_raising_audit_emitter_does_not_fail_the_update(
        self, store, locks, non_technical_job, make_application, caplog
    ):
        application = make_application(non_technical_job)
        service = StatusUpdateService(store, BrokenAuditEmitter(), locks)

        outcome = service.update_status(application.id, "admin", "reviewing")

        assert outcome.action == "updated"
        reloaded = store.get_application(application.id)
        assert reloaded.status == ApplicationStatus.REVIEWING
        assert len(reloaded.notes) == 1
        assert "audit sink offline" in caplog.text


class TestBotBatch:
    """Tests for StatusUpdateService.process_bot_batch."""

    def test_ladder_and_per_item_errors(
        self, service, store, audit, technical_job, non_technical_job, make_application
    ):
        pending = make_application(technical_job)
        shortlisted = make_application(technical_job, status="shortlisted")
        accepted = make_application(technical_job, status="accepted")
        interview = make_application(technical_job, status="interview", workflow_stage="interview")
        manual = make_application(non_technical_job)

        result = service.process_bot_batch(
            [pending.id, shortlisted.id, accepted.id, interview.id, manual.id, 999]
        )

        assert [app.id for app in result.applications] == [pending.id, shortlisted.id]
        assert store.get_application(pending.id).status == ApplicationStatus.REVIEWING
        assert store.get_application(shortlisted.id).status == ApplicationStatus.ACCEPTED

        errors = {item["application_id"]: item["error"] for item in result.errors}
        assert "terminal" in errors[accepted.id]
        assert errors[interview.id] == "No automated next status from 'interview'"
        assert errors[manual.id] == NOT_A_TECHNICAL_ROLE
        assert errors[999] == "Application not found: 999"
        assert store.get_application(manual.id).status == ApplicationStatus.PENDING
        assert len(audit.events) == 2

    def test_bot_note_text(self, service, store, technical_job, make_application):
        application = make_application(technical_job)

        data = service.process_bot_batch([application.id]).to_dict()

        assert data["processed"] == 1
        assert data["errors"] == []
        note = store.get_application(application.id).notes[-1]
        assert note.text == "Automated processing: Status updated to reviewing by bot system"
        assert note.action_type == NoteActionType.BOT_PROCESSING


class TestAddNote:
    """Tests for admin notes."""

    def test_admin_note(self, service, store, audit, technical_job, make_application):
        application = make_application(technical_job)

        service.add_note(application.id, "admin", "  Call back on Monday ", actor_id="admin-1")

        reloaded = store.get_application(application.id)
        assert reloaded.status == ApplicationStatus.PENDING
        assert reloaded.notes[-1].text == "Admin Note: Call back on Monday"
        assert reloaded.notes[-1].action_type == NoteActionType.ADMIN_NOTE
        assert audit.actions() == ["APPLICATION_NOTE_ADDED"]

    def test_short_note_rejected(self, service, technical_job, make_application):
        application = make_application(technical_job)
        with pytest.raises(ToolError) as exc_info:
            service.add_note(application.id, "admin", " ok ")
        assert exc_info.value.code == ErrorCode.VALIDATION_ERROR

    def test_non_admin_rejected(self, service, technical_job, make_application):
        application = make_application(technical_job)
        with pytest.raises(ToolError) as exc_info:
            service.add_note(application.id, "bot", "Looks promising")
        assert exc_info.value.code == ErrorCode.POLICY_DENIED
        assert exc_info.value.message == ADMIN_ONLY_NOTES


class TestSubmitAndCreateJob:
    """Tests for submissions and job creation."""

    def test_submit_creates_pending_application(self, service, audit, technical_job):
        application = service.submit_application(technical_job.id, "applicant-9", "Hi there")

        assert application.status == ApplicationStatus.PENDING
        assert application.workflow_stage is None
        assert application.notes == []
        assert audit.actions() == ["APPLICATION_SUBMIT"]

    def test_duplicate_submission(self, service, technical_job):
        service.submit_application(technical_job.id, "applicant-9")
        with pytest.raises(ToolError) as exc_info:
            service.submit_application(technical_job.id, "applicant-9")
        assert exc_info.value.code == ErrorCode.DUPLICATE_APPLICATION

    def test_inactive_or_missing_job(self, service, store):
        closed = store.create_job("Closed Role", RoleCategory.TECHNICAL, is_active=False)

        for job_id in (closed.id, 999):
            with pytest.raises(ToolError) as exc_info:
                service.submit_application(job_id, "applicant-1")
            assert exc_info.value.code == ErrorCode.NOT_FOUND
            assert exc_info.value.message == JOB_UNAVAILABLE

    def test_create_job_defaults_to_non_technical(self, service, audit):
        job = service.create_job("Receptionist")

        assert job.role_category == RoleCategory.NON_TECHNICAL
        assert job.is_active is True
        assert audit.actions() == ["JOB_CREATE"]


class TestApplicationProgress:
    """Tests for the progress timeline."""

    def test_timeline_newest_first(self, service, store, non_technical_job, make_application):
        application = make_application(non_technical_job, submitted_at="2020-01-01T00:00:00.000Z")
        service.update_status(application.id, "admin", "reviewing")
        service.add_note(application.id, "admin", "Second interview booked")

        progress = service.application_progress(application.id)

        timeline = progress["progress_timeline"]
        assert progress["total_events"] == 3
        assert timeline[-1]["type"] == "submission"
        assert timeline[-1]["source"] == "applicant"
        assert timeline[-1]["description"] == "Applied for Office Manager"
        assert {entry["type"] for entry in timeline[:2]} == {"status_change", "note"}
        timestamps = [entry["timestamp"] for entry in timeline]
        assert timestamps == sorted(timestamps, reverse=True)

    def test_unknown_application(self, service):
        with pytest.raises(ToolError) as exc_info:
            service.application_progress(12345)
        assert exc_info.value.code == ErrorCode.NOT_FOUND
