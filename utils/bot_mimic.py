"""
Bot Mimic: staged, human-like progression of technical applications.

Each pass queries every non-terminal technical application, skips some of
them at random, and advances the rest one stage along the workflow with a
canned reviewer comment.
"""

import logging
from typing import Optional

from db.application_store import ApplicationStore
from db.audit_writer import AuditEmitter, emit_audit_event
from models.errors import ToolError
from models.status import (
    ActorRole,
    ApplicationStatus,
    NoteActionType,
    PROCESSED_BY_BOT_MIMIC,
    RoleCategory,
    WorkflowStage,
)
from utils.application_locks import ApplicationLocks
from utils.audit_events import build_workflow_progression_event
from utils.pass_result import PassResult
from utils.random_source import RandomSource
from utils.status_policy import check_transition_or_raise
from utils.validation import get_current_utc_timestamp
from utils.workflow_stages import (
    MIMIC_ELIGIBLE_STATUSES,
    SKIP_PROBABILITY,
    entry_stage,
    get_next_stage,
    pick_comment,
)

logger = logging.getLogger(__name__)

NOTE_PREFIX = "Bot Mimic: "


class BotMimicProcessor:
    """
    Runs Bot Mimic passes against the application store.

    Usage:
        processor = BotMimicProcessor(store, audit, rng, locks)
        result = processor.run_pass()
    """

    kind = "mimic"

    def __init__(
        self,
        store: ApplicationStore,
        audit: AuditEmitter,
        rng: RandomSource,
        locks: ApplicationLocks,
    ):
        self.store = store
        self.audit = audit
        self.rng = rng
        self.locks = locks

    def run_pass(self) -> PassResult:
        """
        Process every eligible technical application once.

        Draw order per application: skip draw, then (inside progression) the
        rejection draw and the comment choice.

        Returns:
            PassResult with processed, skipped and failed counts

        Raises:
            ToolError: If the eligibility query itself fails
        """
        candidates = self.store.find_by_status_and_category(
            MIMIC_ELIGIBLE_STATUSES, RoleCategory.TECHNICAL
        )
        result = PassResult(self.kind, eligible_count=len(candidates))

        for candidate in candidates:
            if self.rng.random() < SKIP_PROBABILITY:
                result.skipped_count += 1
                continue

            try:
                new_stage = self.progress_application(candidate.id)
            except ToolError as e:
                logger.error(
                    f"Bot Mimic failed on application {candidate.id}: {e.code.value} {e.message}"
                )
                result.failed_count += 1
                continue

            if new_stage is None:
                result.skipped_count += 1
            else:
                result.processed_count += 1

        if result.processed_count > 0:
            logger.info(
                f"Bot Mimic processed {result.processed_count} technical applications"
            )
        return result

    def progress_application(self, application_id: int) -> Optional[WorkflowStage]:
        """
        Advance one application by a single stage.

        The record is re-read under its lock; if another writer already moved
        it out of the Mimic's reach, nothing happens.

        Args:
            application_id: Application to progress

        Returns:
            The stage entered, or None if the application was no longer eligible

        Raises:
            ToolError: On store failure or if the policy denies the move
        """
        with self.locks.hold(application_id):
            application = self.store.get_application(application_id)
            if application is None or application.role_category != RoleCategory.TECHNICAL:
                return None
            if application.status not in MIMIC_ELIGIBLE_STATUSES:
                return None

            from_stage = entry_stage(application.status)
            next_stage = get_next_stage(from_stage, self.rng)
            if next_stage is None:
                return None

            new_status = ApplicationStatus(next_stage.value)
            check_transition_or_raise(
                ActorRole.BOT, application.role_category, application.status, new_status
            )

            comment = pick_comment(next_stage, self.rng)
            timestamp = get_current_utc_timestamp()

            application.status = new_status
            application.workflow_stage = next_stage
            application.append_note(
                text=f"{NOTE_PREFIX}{comment}",
                added_by=PROCESSED_BY_BOT_MIMIC,
                added_at=timestamp,
                processed_by=PROCESSED_BY_BOT_MIMIC,
                action_type=NoteActionType.WORKFLOW_PROGRESSION,
            )
            self.store.save(application, timestamp=timestamp)

            emit_audit_event(
                self.audit,
                build_workflow_progression_event(
                    application, from_stage, next_stage, comment, timestamp
                )
            )

        logger.info(
            f"Bot Mimic: {application.job_title} - {from_stage.value} -> {next_stage.value}"
        )
        return next_stage
