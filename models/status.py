"""
Centralized, type-safe vocabularies for the application workflow engine.

This module is the single source of truth for the status, stage, category and
role values used across the server. Every Enum inherits from ``(str, Enum)``
so members compare equal to plain strings and serialize naturally to JSON at
tool boundaries.

- ``ApplicationStatus``: values stored in ``applications.status``.
- ``WorkflowStage``: finer-grained Bot Mimic positions stored in
  ``applications.workflow_stage``.
- ``RoleCategory``: the job partition that routes an application to automated
  (technical) or manual (non-technical) handling.
- ``ActorRole``: who is asking for a transition.
"""

from enum import Enum


class ApplicationStatus(str, Enum):
    """Enum for statuses stored in the 'applications' table.

    Canonical statuses:
        pending -> reviewing | shortlisted | rejected | accepted
        reviewing -> shortlisted | rejected | accepted
        shortlisted -> accepted | rejected

    Bot Mimic writes its stage into ``status`` as well, so the stage values
    are valid statuses too:
        applied -> reviewed -> interview -> offer -> accepted
        (rejected reachable from every stage)
    """

    PENDING = "pending"
    REVIEWING = "reviewing"
    SHORTLISTED = "shortlisted"
    REJECTED = "rejected"
    ACCEPTED = "accepted"

    APPLIED = "applied"
    REVIEWED = "reviewed"
    INTERVIEW = "interview"
    OFFER = "offer"


class WorkflowStage(str, Enum):
    """Enum for Bot Mimic workflow stages."""

    APPLIED = "applied"
    REVIEWED = "reviewed"
    INTERVIEW = "interview"
    OFFER = "offer"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class RoleCategory(str, Enum):
    """Enum for job role categories."""

    TECHNICAL = "technical"
    NON_TECHNICAL = "non-technical"


class ActorRole(str, Enum):
    """Enum for the roles that may act on an application."""

    APPLICANT = "applicant"
    ADMIN = "admin"
    BOT = "bot"


class AuditAction(str, Enum):
    """Enum for audit event actions emitted by the workflow engine."""

    APPLICATION_SUBMIT = "APPLICATION_SUBMIT"
    APPLICATION_STATUS_CHANGE = "APPLICATION_STATUS_CHANGE"
    APPLICATION_NOTE_ADDED = "APPLICATION_NOTE_ADDED"
    BOT_MIMIC_WORKFLOW = "BOT_MIMIC_WORKFLOW"
    JOB_CREATE = "JOB_CREATE"


class NoteActionType(str, Enum):
    """Enum for the ``action_type`` tag carried by application notes."""

    STATUS_CHANGE = "status_change"
    STATUS_CHANGE_WITH_COMMENT = "status_change_with_comment"
    AUTO_PROCESSING = "auto_processing"
    WORKFLOW_PROGRESSION = "workflow_progression"
    BOT_PROCESSING = "bot_processing"
    ADMIN_NOTE = "admin_note"


# Absorbing statuses: no actor may move an application out of these.
TERMINAL_STATUSES = frozenset({ApplicationStatus.ACCEPTED, ApplicationStatus.REJECTED})

# Ordered Bot Mimic progression (terminal stages excluded).
WORKFLOW_STAGES = (
    WorkflowStage.APPLIED,
    WorkflowStage.REVIEWED,
    WorkflowStage.INTERVIEW,
    WorkflowStage.OFFER,
)

# processed_by tags written into notes and audit details
PROCESSED_BY_ADMIN = "admin"
PROCESSED_BY_BOT = "bot"
PROCESSED_BY_BOT_MIMIC = "bot-mimic"
