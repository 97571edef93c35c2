"""
Installment Status Classifier.

Derives a point-in-time summary of an EMI plan from its installment
states and an injected ``now``. Pure: recompute on every read because
``now`` moves.

Timing categories for unpaid (pending or late) installments:
    overdue       now > grace_period_end
    grace period  due_date <= now <= grace_period_end
    upcoming      due_date > now
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Iterable, List, Optional, Tuple

from src.domain.entities import EmiPlan, Installment, InstallmentStatus, PlanStatus


class InstallmentTiming(str, Enum):
    PAID = "paid"
    OVERDUE = "overdue"
    GRACE_PERIOD = "grace_period"
    UPCOMING = "upcoming"


@dataclass(frozen=True)
class EmiStatusSnapshot:
    """Counts, amounts and flags for one plan at one instant."""

    plan_status: PlanStatus
    total_emis: int
    paid_count: int
    pending_count: int
    late_count: int
    overdue_count: int
    grace_period_count: int
    upcoming_count: int
    total_amount_paise: int
    total_paid_paise: int
    total_overdue_paise: int
    total_remaining_paise: int
    next_due_amount_paise: int
    next_due_date: Optional[datetime]
    has_overdue_payments: bool
    is_current_on_payments: bool
    has_access_to_content: bool
    overdue: Tuple[Installment, ...]
    grace_period: Tuple[Installment, ...]
    upcoming: Tuple[Installment, ...]
    paid: Tuple[Installment, ...]

    @property
    def unpaid_count(self) -> int:
        return self.pending_count + self.late_count

    @property
    def is_fully_paid(self) -> bool:
        return self.total_emis > 0 and self.unpaid_count == 0


def priority_key(installment: Installment) -> Tuple[datetime, int]:
    """Ordering key: due date ascending, ties broken by sequence number."""
    return (installment.due_date, installment.sequence_number)


def classify_installment(installment: Installment, now: datetime) -> InstallmentTiming:
    if installment.status == InstallmentStatus.PAID:
        return InstallmentTiming.PAID
    if now > installment.grace_period_end:
        return InstallmentTiming.OVERDUE
    if installment.due_date <= now:
        return InstallmentTiming.GRACE_PERIOD
    return InstallmentTiming.UPCOMING


def _total(installments: Iterable[Installment]) -> int:
    return sum(inst.amount_paise for inst in installments)


def calculate_emi_status(plan: EmiPlan, now: datetime) -> EmiStatusSnapshot:
    """
    Classify every installment of ``plan`` against ``now``.

    Args:
        plan: The plan with its full installment list
        now: Current time (naive UTC)

    Returns:
        EmiStatusSnapshot for this instant
    """
    buckets: dict[InstallmentTiming, List[Installment]] = {
        timing: [] for timing in InstallmentTiming
    }
    for installment in sorted(plan.installments, key=priority_key):
        buckets[classify_installment(installment, now)].append(installment)

    paid = buckets[InstallmentTiming.PAID]
    overdue = buckets[InstallmentTiming.OVERDUE]
    grace = buckets[InstallmentTiming.GRACE_PERIOD]
    upcoming = buckets[InstallmentTiming.UPCOMING]

    pending_count = sum(
        1 for inst in plan.installments if inst.status == InstallmentStatus.PENDING
    )
    late_count = sum(
        1 for inst in plan.installments if inst.status == InstallmentStatus.LATE
    )

    unpaid = sorted(overdue + grace + upcoming, key=priority_key)
    next_due = unpaid[0] if unpaid else None

    has_overdue = bool(overdue)
    is_current = not has_overdue

    return EmiStatusSnapshot(
        plan_status=plan.status,
        total_emis=len(plan.installments),
        paid_count=len(paid),
        pending_count=pending_count,
        late_count=late_count,
        overdue_count=len(overdue),
        grace_period_count=len(grace),
        upcoming_count=len(upcoming),
        total_amount_paise=plan.total_amount_paise,
        total_paid_paise=_total(paid),
        total_overdue_paise=_total(overdue),
        total_remaining_paise=_total(unpaid),
        next_due_amount_paise=next_due.amount_paise if next_due else 0,
        next_due_date=next_due.due_date if next_due else None,
        has_overdue_payments=has_overdue,
        is_current_on_payments=is_current,
        has_access_to_content=is_current and plan.status == PlanStatus.ACTIVE,
        overdue=tuple(overdue),
        grace_period=tuple(grace),
        upcoming=tuple(upcoming),
        paid=tuple(paid),
    )
