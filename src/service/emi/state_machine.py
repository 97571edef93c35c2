"""
EMI plan status state machine.

    active    -> locked      something is overdue
    locked    -> active      nothing is overdue any more
    active    -> completed   every installment paid
    locked    -> completed   every installment paid
    active    -> cancelled   set externally
    locked    -> cancelled   set externally
    completed, cancelled     terminal

Completion takes precedence over unlocking: a locked plan whose last
installments are paid goes straight to completed.
"""

from typing import Dict, FrozenSet

from src.domain.entities import AccessStatus, PlanStatus
from src.domain.exceptions import InvalidPlanTransitionException

from .classifier import EmiStatusSnapshot

ALLOWED_TRANSITIONS: Dict[PlanStatus, FrozenSet[PlanStatus]] = {
    PlanStatus.ACTIVE: frozenset(
        {PlanStatus.LOCKED, PlanStatus.COMPLETED, PlanStatus.CANCELLED}
    ),
    PlanStatus.LOCKED: frozenset(
        {PlanStatus.ACTIVE, PlanStatus.COMPLETED, PlanStatus.CANCELLED}
    ),
    PlanStatus.COMPLETED: frozenset(),
    PlanStatus.CANCELLED: frozenset(),
}


def is_terminal(status: PlanStatus) -> bool:
    return not ALLOWED_TRANSITIONS[status]


def can_transition(current: PlanStatus, target: PlanStatus) -> bool:
    return target in ALLOWED_TRANSITIONS[current]


def ensure_transition(current: PlanStatus, target: PlanStatus) -> None:
    """
    Raises:
        InvalidPlanTransitionException: If ``current -> target`` is not allowed
    """
    if not can_transition(current, target):
        raise InvalidPlanTransitionException(current.value, target.value)


def next_status(current: PlanStatus, snapshot: EmiStatusSnapshot) -> PlanStatus:
    """
    Status the plan should hold given a fresh classification.

    Returns ``current`` when no transition applies. ``cancelled`` is
    never produced here.
    """
    if is_terminal(current):
        return current

    if snapshot.is_fully_paid:
        target = PlanStatus.COMPLETED
    elif current == PlanStatus.ACTIVE and snapshot.has_overdue_payments:
        target = PlanStatus.LOCKED
    elif current == PlanStatus.LOCKED and not snapshot.has_overdue_payments:
        target = PlanStatus.ACTIVE
    else:
        return current

    ensure_transition(current, target)
    return target


def effective_access_status(plan_status: PlanStatus, snapshot: EmiStatusSnapshot) -> AccessStatus:
    """Access the enrollment cache should mirror for this plan."""
    if plan_status == PlanStatus.COMPLETED:
        return AccessStatus.ACTIVE
    if plan_status == PlanStatus.ACTIVE and snapshot.is_current_on_payments:
        return AccessStatus.ACTIVE
    return AccessStatus.LOCKED
