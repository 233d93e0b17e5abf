"""
Status transition policy for application status changes.

This module decides who may move an application between statuses:
- Terminal statuses (accepted, rejected) absorb every transition
- Authority is partitioned by (actor role, job role category):
    technical jobs are handled by the bot,
    non-technical jobs are handled by an admin
- Admins get one window on technical jobs: shortlisted -> accepted | rejected
- Noop when an authorised actor requests the current status
- Every permitted move must follow the forward transition graph
"""

from typing import Dict, FrozenSet, Optional, Tuple

from models.errors import create_policy_denied_error
from models.status import (
    ActorRole,
    ApplicationStatus,
    RoleCategory,
    TERMINAL_STATUSES,
)

S = ApplicationStatus

# Forward transition graph: current_status -> statuses reachable in one move
TRANSITIONS: Dict[ApplicationStatus, FrozenSet[ApplicationStatus]] = {
    S.PENDING: frozenset(
        {S.APPLIED, S.REVIEWED, S.REVIEWING, S.SHORTLISTED, S.REJECTED, S.ACCEPTED}
    ),
    S.REVIEWING: frozenset({S.SHORTLISTED, S.REJECTED, S.ACCEPTED}),
    S.SHORTLISTED: frozenset({S.REJECTED, S.ACCEPTED}),
    S.APPLIED: frozenset({S.REVIEWED, S.REJECTED}),
    S.REVIEWED: frozenset({S.INTERVIEW, S.REJECTED}),
    S.INTERVIEW: frozenset({S.OFFER, S.REJECTED}),
    S.OFFER: frozenset({S.ACCEPTED, S.REJECTED}),
    S.ACCEPTED: frozenset(),
    S.REJECTED: frozenset(),
}

# Admin window on technical applications
SHORTLIST_GATE_SOURCE = S.SHORTLISTED
SHORTLIST_GATE_TARGETS = frozenset({S.ACCEPTED, S.REJECTED})

TECHNICAL_HANDLED_AUTOMATICALLY = (
    "Technical roles are handled automatically. "
    "Technical applications must be shortlisted by bot before admin can accept/reject"
)
TECHNICAL_ADMIN_TARGETS_ONLY = "Technical roles can only be accepted or rejected by admin"
NON_TECHNICAL_HANDLED_MANUALLY = "Non-technical roles must be handled manually by an admin"
APPLICANT_CANNOT_CHANGE_STATUS = "Applicants cannot change application status"

# Authority table: (actor, category) -> (grant, denial reason)
#   "full"      - any move along the forward graph
#   "shortlist" - only the admin shortlist gate
#   None        - no authority
AUTHORITY: Dict[Tuple[ActorRole, RoleCategory], Tuple[Optional[str], Optional[str]]] = {
    (ActorRole.BOT, RoleCategory.TECHNICAL): ("full", None),
    (ActorRole.BOT, RoleCategory.NON_TECHNICAL): (None, NON_TECHNICAL_HANDLED_MANUALLY),
    (ActorRole.ADMIN, RoleCategory.TECHNICAL): ("shortlist", TECHNICAL_HANDLED_AUTOMATICALLY),
    (ActorRole.ADMIN, RoleCategory.NON_TECHNICAL): ("full", None),
    (ActorRole.APPLICANT, RoleCategory.TECHNICAL): (None, APPLICANT_CANNOT_CHANGE_STATUS),
    (ActorRole.APPLICANT, RoleCategory.NON_TECHNICAL): (None, APPLICANT_CANNOT_CHANGE_STATUS),
}


class PolicyDecision:
    """Result of a status policy check."""

    def __init__(
        self,
        allowed: bool,
        is_noop: bool = False,
        reason: Optional[str] = None,
    ):
        """
        Initialize a policy decision.

        Args:
            allowed: Whether the transition is allowed
            is_noop: Whether this is a no-op (requested == current)
            reason: Denial reason if the transition is rejected
        """
        self.allowed = allowed
        self.is_noop = is_noop
        self.reason = reason

    def to_dict(self) -> Dict[str, object]:
        """Convert decision to dictionary format."""
        result: Dict[str, object] = {"allowed": self.allowed, "is_noop": self.is_noop}
        if self.reason:
            result["reason"] = self.reason
        return result

    def __repr__(self) -> str:
        return f"PolicyDecision(allowed={self.allowed}, is_noop={self.is_noop}, reason={self.reason!r})"


def allowed_targets(
    actor_role: ActorRole, role_category: RoleCategory, current_status: ApplicationStatus
) -> FrozenSet[ApplicationStatus]:
    """
    Return the statuses ``actor_role`` may move an application to next.

    Args:
        actor_role: Role of the actor requesting the change
        role_category: Category of the application's job
        current_status: The application's current status

    Returns:
        Frozen set of reachable statuses (empty when the actor has no authority)
    """
    current = ApplicationStatus(current_status)
    if current in TERMINAL_STATUSES:
        return frozenset()

    grant, _ = AUTHORITY[(ActorRole(actor_role), RoleCategory(role_category))]
    if grant == "full":
        return TRANSITIONS[current]
    if grant == "shortlist" and current == SHORTLIST_GATE_SOURCE:
        return TRANSITIONS[current] & SHORTLIST_GATE_TARGETS
    return frozenset()


def evaluate_transition(
    actor_role: ActorRole,
    role_category: RoleCategory,
    current_status: ApplicationStatus,
    requested_status: ApplicationStatus,
) -> PolicyDecision:
    """
    Decide whether an actor may move an application to ``requested_status``.

    Policy rules, checked in order:
    1. Terminal statuses (accepted, rejected) accept no further transition
    2. The (actor, category) authority table must grant the actor authority
    3. Admins on technical jobs may only act on shortlisted applications
    4. requested == current is a noop
    5. The admin shortlist gate only leads to accepted or rejected
    6. The move must follow the forward transition graph

    Args:
        actor_role: Role of the actor requesting the change
        role_category: Category of the application's job
        current_status: The application's current status
        requested_status: The desired status

    Returns:
        PolicyDecision describing the outcome

    Examples:
        >>> evaluate_transition("admin", "technical", "pending", "accepted").allowed
        False
        >>> evaluate_transition("admin", "technical", "shortlisted", "accepted").allowed
        True
        >>> evaluate_transition("bot", "non-technical", "pending", "reviewing").reason
        'Non-technical roles must be handled manually by an admin'
    """
    actor = ActorRole(actor_role)
    category = RoleCategory(role_category)
    current = ApplicationStatus(current_status)
    requested = ApplicationStatus(requested_status)

    # Rule 1: terminal absorption
    if current in TERMINAL_STATUSES:
        return PolicyDecision(
            allowed=False,
            reason=(
                f"Application is in terminal status '{current.value}' "
                "and cannot transition further"
            ),
        )

    # Rule 2: authority table
    grant, denial_reason = AUTHORITY[(actor, category)]
    if grant is None:
        return PolicyDecision(allowed=False, reason=denial_reason)

    # Rule 3: shortlist gate source
    if grant == "shortlist" and current != SHORTLIST_GATE_SOURCE:
        return PolicyDecision(allowed=False, reason=denial_reason)

    # Rule 4: noop
    if requested == current:
        return PolicyDecision(allowed=True, is_noop=True)

    # Rule 5: shortlist gate targets
    if grant == "shortlist" and requested not in SHORTLIST_GATE_TARGETS:
        return PolicyDecision(allowed=False, reason=TECHNICAL_ADMIN_TARGETS_ONLY)

    # Rule 6: forward graph
    targets = allowed_targets(actor, category, current)
    if requested not in targets:
        allowed_list = ", ".join(f"'{s.value}'" for s in sorted(targets, key=lambda s: s.value))
        return PolicyDecision(
            allowed=False,
            reason=(
                f"Transition from '{current.value}' to '{requested.value}' is not allowed. "
                f"Allowed transitions from '{current.value}': {allowed_list or 'none'}"
            ),
        )

    return PolicyDecision(allowed=True)


def check_transition_or_raise(
    actor_role: ActorRole,
    role_category: RoleCategory,
    current_status: ApplicationStatus,
    requested_status: ApplicationStatus,
) -> PolicyDecision:
    """
    Evaluate a transition and raise ToolError if it is denied.

    Returns:
        PolicyDecision if the transition is allowed (including noop)

    Raises:
        ToolError: With POLICY_DENIED code if the transition is denied
    """
    decision = evaluate_transition(actor_role, role_category, current_status, requested_status)

    if not decision.allowed:
        raise create_policy_denied_error(decision.reason)

    return decision
