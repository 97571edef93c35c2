"""
Payment Allocator.

Maps a tendered amount onto unpaid installments, oldest debt first:
overdue, then grace period, then upcoming, each by due date. Only exact
matches are accepted; the amount must equal a prefix sum of that queue.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import List, Tuple

from src.domain.entities import EmiPlan, Installment

from .classifier import InstallmentTiming, calculate_emi_status


@dataclass(frozen=True)
class AllocatedInstallment:
    installment_id: str
    sequence_number: int
    period_label: str
    amount_paise: int
    due_date: datetime
    is_overdue: bool
    is_in_grace_period: bool


@dataclass(frozen=True)
class PaymentAllocation:
    """
    Result of matching an amount to installments.

    ``is_valid_amount=False`` is a normal outcome, not an error: the
    caller should offer ``suggested_amount_paise`` (or the lower valid
    sum ``total_allocated_paise``) instead.
    """

    amount_paise: int
    is_valid_amount: bool
    installments: Tuple[AllocatedInstallment, ...]
    total_allocated_paise: int
    remaining_paise: int
    suggested_amount_paise: int
    next_installment_amount_paise: int

    @property
    def installment_ids(self) -> List[str]:
        return [inst.installment_id for inst in self.installments]

    @property
    def suggested_installment_count(self) -> int:
        return len(self.installments) + (1 if self.next_installment_amount_paise else 0)

    @property
    def clears_overdue(self) -> bool:
        return any(inst.is_overdue for inst in self.installments)


def payment_queue(plan: EmiPlan, now: datetime) -> List[Tuple[Installment, InstallmentTiming]]:
    """Unpaid installments in settlement priority order."""
    snapshot = calculate_emi_status(plan, now)
    return (
        [(inst, InstallmentTiming.OVERDUE) for inst in snapshot.overdue]
        + [(inst, InstallmentTiming.GRACE_PERIOD) for inst in snapshot.grace_period]
        + [(inst, InstallmentTiming.UPCOMING) for inst in snapshot.upcoming]
    )


def prefix_sums(plan: EmiPlan, now: datetime) -> List[int]:
    """Every amount the allocator would accept, smallest first."""
    sums = []
    running = 0
    for inst, _ in payment_queue(plan, now):
        running += inst.amount_paise
        sums.append(running)
    return sums


def calculate_payment_allocation(
    plan: EmiPlan,
    amount_paise: int,
    now: datetime,
) -> PaymentAllocation:
    """
    Greedily allocate ``amount_paise`` across the priority queue.

    Args:
        plan: The plan to allocate against
        amount_paise: Tendered amount in paise
        now: Current time (naive UTC)

    Returns:
        PaymentAllocation; valid only when the remainder is exactly zero
    """
    queue = payment_queue(plan, now)

    allocated: List[AllocatedInstallment] = []
    remaining = amount_paise
    for inst, timing in queue:
        if remaining < inst.amount_paise:
            break
        remaining -= inst.amount_paise
        allocated.append(
            AllocatedInstallment(
                installment_id=str(inst.id),
                sequence_number=inst.sequence_number,
                period_label=inst.period_label,
                amount_paise=inst.amount_paise,
                due_date=inst.due_date,
                is_overdue=timing == InstallmentTiming.OVERDUE,
                is_in_grace_period=timing == InstallmentTiming.GRACE_PERIOD,
            )
        )

    suggested_count = min(len(allocated) + 1, len(queue))
    suggested = sum(inst.amount_paise for inst, _ in queue[:suggested_count])
    next_amount = queue[len(allocated)][0].amount_paise if len(allocated) < len(queue) else 0

    return PaymentAllocation(
        amount_paise=amount_paise,
        is_valid_amount=amount_paise > 0 and bool(allocated) and remaining == 0,
        installments=tuple(allocated),
        total_allocated_paise=amount_paise - remaining,
        remaining_paise=remaining,
        suggested_amount_paise=suggested,
        next_installment_amount_paise=next_amount,
    )
