"""
Stage table for the Bot Mimic workflow.

Technical applications move through

    pending -> applied -> reviewed -> interview -> offer -> accepted

with a rejection chance at every non-terminal stage. Each progression is
annotated with a canned, stage-appropriate comment.
"""

from typing import Dict, Optional, Tuple, Union

from models.status import ApplicationStatus, WORKFLOW_STAGES, WorkflowStage
from utils.random_source import RandomSource

# Chance an eligible application is left alone for one pass
SKIP_PROBABILITY = 0.3

# Chance a non-terminal stage ends in rejection instead of progressing
REJECTION_PROBABILITY = 0.2

DEFAULT_COMMENT = "Status updated"

STAGE_COMMENTS: Dict[WorkflowStage, Tuple[str, ...]] = {
    WorkflowStage.APPLIED: (
        "Application received and initial screening completed",
        "Resume reviewed - meets basic requirements",
        "Application forwarded to technical team",
    ),
    WorkflowStage.REVIEWED: (
        "Technical skills assessment completed",
        "Code review passed initial evaluation",
        "Experience matches job requirements",
        "Moving to interview stage",
    ),
    WorkflowStage.INTERVIEW: (
        "Technical interview scheduled",
        "Interview completed - positive feedback",
        "Candidate demonstrated strong problem-solving skills",
        "Reference checks in progress",
    ),
    WorkflowStage.OFFER: (
        "Offer package being prepared",
        "Salary negotiation in progress",
        "Final approval from management",
        "Offer letter ready for dispatch",
    ),
    WorkflowStage.ACCEPTED: (
        "Candidate accepted the offer",
        "Welcome package sent",
        "Onboarding process initiated",
    ),
    WorkflowStage.REJECTED: (
        "Position filled by another candidate",
        "Skills not aligned with current requirements",
        "Thank you for your interest",
    ),
}

# Statuses the Mimic pass picks up: pending plus every non-terminal stage
MIMIC_ELIGIBLE_STATUSES = frozenset(
    {ApplicationStatus.PENDING} | {ApplicationStatus(stage.value) for stage in WORKFLOW_STAGES}
)


def entry_stage(status: Union[ApplicationStatus, str]) -> Optional[WorkflowStage]:
    """
    Map an application's status to the stage the Mimic pass starts from.

    ``pending`` is treated as ``applied``; statuses outside the stage list
    (terminal or canonical-only ones such as ``reviewing``) map to None.
    """
    value = ApplicationStatus(status)
    if value == ApplicationStatus.PENDING:
        return WorkflowStage.APPLIED
    try:
        stage = WorkflowStage(value.value)
    except ValueError:
        return None
    return stage if stage in WORKFLOW_STAGES else None


def get_next_stage(
    current: Union[WorkflowStage, ApplicationStatus, str], rng: RandomSource
) -> Optional[WorkflowStage]:
    """
    Pick the stage following ``current``.

    - ``pending`` always becomes ``applied`` without drawing
    - terminal or unknown stages return None
    - otherwise one draw decides: below REJECTION_PROBABILITY rejects,
      anything else advances (``offer`` advances to ``accepted``)

    Examples:
        >>> class Fixed:
        ...     def __init__(self, r): self.r = r
        ...     def random(self): return self.r
        ...     def choice(self, seq): return seq[0]
        >>> get_next_stage("pending", Fixed(0.0))
        <WorkflowStage.APPLIED: 'applied'>
        >>> get_next_stage("offer", Fixed(0.5))
        <WorkflowStage.ACCEPTED: 'accepted'>
        >>> get_next_stage("interview", Fixed(0.19))
        <WorkflowStage.REJECTED: 'rejected'>
    """
    value = current.value if hasattr(current, "value") else str(current)
    if value == ApplicationStatus.PENDING.value:
        return WorkflowStage.APPLIED

    try:
        stage = WorkflowStage(value)
    except ValueError:
        return None
    if stage not in WORKFLOW_STAGES:
        return None

    if rng.random() < REJECTION_PROBABILITY:
        return WorkflowStage.REJECTED

    index = WORKFLOW_STAGES.index(stage)
    if index < len(WORKFLOW_STAGES) - 1:
        return WORKFLOW_STAGES[index + 1]
    return WorkflowStage.ACCEPTED


def pick_comment(stage: WorkflowStage, rng: RandomSource) -> str:
    """Draw a canned comment for the stage just entered."""
    pool = STAGE_COMMENTS.get(WorkflowStage(stage))
    if not pool:
        return DEFAULT_COMMENT
    return rng.choice(pool)
