"""
Bot Automation: flat random processing of pending technical applications.

Unlike Bot Mimic there is no stage concept; each pending technical
application jumps directly to one uniformly drawn outcome.
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
    PROCESSED_BY_BOT,
    RoleCategory,
)
from utils.application_locks import ApplicationLocks
from utils.audit_events import build_status_change_event
from utils.pass_result import PassResult
from utils.random_source import RandomSource
from utils.status_policy import check_transition_or_raise
from utils.validation import get_current_utc_timestamp

logger = logging.getLogger(__name__)

AUTOMATION_OUTCOMES = (
    ApplicationStatus.REVIEWING,
    ApplicationStatus.SHORTLISTED,
    ApplicationStatus.REJECTED,
    ApplicationStatus.ACCEPTED,
)

AUTOMATION_ACTOR = "bot-automation"
NOTE_PREFIX = "Auto-processed: "


class BotAutomationProcessor:
    """
    Runs Bot Automation passes against the application store.

    Usage:
        processor = BotAutomationProcessor(store, audit, rng, locks)
        result = processor.run_pass()
    """

    kind = "automation"

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
        Process every pending technical application once.

        Returns:
            PassResult with processed, skipped and failed counts

        Raises:
            ToolError: If the eligibility query itself fails
        """
        candidates = self.store.find_by_status_and_category(
            [ApplicationStatus.PENDING], RoleCategory.TECHNICAL
        )
        result = PassResult(self.kind, eligible_count=len(candidates))

        for candidate in candidates:
            try:
                outcome = self.process_application(candidate.id)
            except ToolError as e:
                logger.error(
                    f"Bot Automation failed on application {candidate.id}: "
                    f"{e.code.value} {e.message}"
                )
                result.failed_count += 1
                continue

            if outcome is None:
                # Another writer moved it after the query
                result.skipped_count += 1
            else:
                result.processed_count += 1

        if result.processed_count > 0:
            logger.info(
                f"Auto-processed {result.processed_count} technical applications"
            )
        return result

    def process_application(self, application_id: int) -> Optional[ApplicationStatus]:
        """
        Apply one random outcome to a pending technical application.

        Returns:
            The new status, or None if the application is no longer pending

        Raises:
            ToolError: On store failure or if the policy denies the move
        """
        with self.locks.hold(application_id):
            application = self.store.get_application(application_id)
            if application is None or application.role_category != RoleCategory.TECHNICAL:
                return None
            if application.status != ApplicationStatus.PENDING:
                return None

            outcome = self.rng.choice(AUTOMATION_OUTCOMES)
            old_status = application.status
            check_transition_or_raise(
                ActorRole.BOT, application.role_category, old_status, outcome
            )

            timestamp = get_current_utc_timestamp()
            application.status = outcome
            application.append_note(
                text=f"{NOTE_PREFIX}{outcome.value}",
                added_by=PROCESSED_BY_BOT,
                added_at=timestamp,
                processed_by=PROCESSED_BY_BOT,
                action_type=NoteActionType.AUTO_PROCESSING,
            )
            self.store.save(application, timestamp=timestamp)

            emit_audit_event(
                self.audit,
                build_status_change_event(
                    application,
                    old_status,
                    outcome,
                    processed_by=PROCESSED_BY_BOT,
                    actor=AUTOMATION_ACTOR,
                    timestamp=timestamp,
                )
            )

        return outcome
