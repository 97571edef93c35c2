"""Data transfer objects for EMI status and payment operations."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Tuple

from src.domain.entities import (
    EmiPlan,
    Installment,
    LockRecord,
    OutboundNotification,
)
from src.service.emi import (
    AllocatedInstallment,
    EmiStatusSnapshot,
    classify_installment,
)


@dataclass(frozen=True)
class InstallmentDTO:
    """Single installment with its timing relative to ``now``."""

    installment_id: str
    sequence_number: int
    period_label: str
    due_date: datetime
    grace_period_end: datetime
    amount_paise: int
    status: str
    timing: str
    days_from_due: int
    paid_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, installment: Installment, now: datetime) -> "InstallmentDTO":
        return cls(
            installment_id=str(installment.id),
            sequence_number=installment.sequence_number,
            period_label=installment.period_label,
            due_date=installment.due_date,
            grace_period_end=installment.grace_period_end,
            amount_paise=installment.amount_paise,
            status=installment.status.value,
            timing=classify_installment(installment, now).value,
            days_from_due=(now - installment.due_date).days,
            paid_at=installment.paid_at,
        )


@dataclass(frozen=True)
class LockRecordDTO:
    locked_at: datetime
    unlocked_at: Optional[datetime]
    overdue_count: int
    reason: str
    locked_by: str

    @classmethod
    def from_entity(cls, record: LockRecord) -> "LockRecordDTO":
        return cls(
            locked_at=record.locked_at,
            unlocked_at=record.unlocked_at,
            overdue_count=record.overdue_count,
            reason=record.reason,
            locked_by=record.locked_by,
        )


@dataclass(frozen=True)
class EmiStatusDTO:
    """Flattened classifier snapshot."""

    plan_status: str
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

    @classmethod
    def from_snapshot(cls, snapshot: EmiStatusSnapshot) -> "EmiStatusDTO":
        return cls(
            plan_status=snapshot.plan_status.value,
            total_emis=snapshot.total_emis,
            paid_count=snapshot.paid_count,
            pending_count=snapshot.pending_count,
            late_count=snapshot.late_count,
            overdue_count=snapshot.overdue_count,
            grace_period_count=snapshot.grace_period_count,
            upcoming_count=snapshot.upcoming_count,
            total_amount_paise=snapshot.total_amount_paise,
            total_paid_paise=snapshot.total_paid_paise,
            total_overdue_paise=snapshot.total_overdue_paise,
            total_remaining_paise=snapshot.total_remaining_paise,
            next_due_amount_paise=snapshot.next_due_amount_paise,
            next_due_date=snapshot.next_due_date,
            has_overdue_payments=snapshot.has_overdue_payments,
            is_current_on_payments=snapshot.is_current_on_payments,
            has_access_to_content=snapshot.has_access_to_content,
        )


@dataclass(frozen=True)
class EmiPlanStatusResponse:
    """Response data for GET /emi/status/{course_id}."""

    course_id: str
    payment_type: str
    has_access: bool
    message: str
    plan_id: Optional[str] = None
    months: Optional[int] = None
    due_day: Optional[int] = None
    monthly_amount_paise: Optional[int] = None
    is_access_locked: bool = False
    status: Optional[EmiStatusDTO] = None
    overdue: List[InstallmentDTO] = field(default_factory=list)
    grace_period: List[InstallmentDTO] = field(default_factory=list)
    installments: List[InstallmentDTO] = field(default_factory=list)
    lock_history: List[LockRecordDTO] = field(default_factory=list)

    @classmethod
    def full_payment(cls, course_id: str) -> "EmiPlanStatusResponse":
        return cls(
            course_id=course_id,
            payment_type="full",
            has_access=True,
            message="Course is fully paid",
        )

    @classmethod
    def from_plan(
        cls,
        plan: EmiPlan,
        snapshot: EmiStatusSnapshot,
        now: datetime,
        has_access: bool,
    ) -> "EmiPlanStatusResponse":
        if snapshot.has_overdue_payments:
            message = f"{snapshot.overdue_count} EMI(s) overdue; access is locked until they are paid"
        elif snapshot.grace_period_count:
            message = f"{snapshot.grace_period_count} EMI(s) due within the grace period"
        elif snapshot.is_fully_paid:
            message = "All EMIs paid"
        else:
            message = "EMI payments are up to date"

        return cls(
            course_id=str(plan.course_id),
            payment_type="emi",
            has_access=has_access,
            message=message,
            plan_id=str(plan.id),
            months=plan.months,
            due_day=plan.due_day,
            monthly_amount_paise=plan.monthly_amount_paise,
            is_access_locked=not has_access,
            status=EmiStatusDTO.from_snapshot(snapshot),
            overdue=[InstallmentDTO.from_entity(i, now) for i in snapshot.overdue],
            grace_period=[InstallmentDTO.from_entity(i, now) for i in snapshot.grace_period],
            installments=[
                InstallmentDTO.from_entity(i, now)
                for i in sorted(plan.installments, key=lambda i: i.sequence_number)
            ],
            lock_history=[LockRecordDTO.from_entity(r) for r in plan.lock_history],
        )


@dataclass(frozen=True)
class PaymentOptionDTO:
    kind: str
    label: str
    amount_paise: int
    installment_count: int
    clears_overdue: bool
    will_unlock_access: bool


@dataclass(frozen=True)
class DueAmountsResponse:
    """Exact amounts the allocator will accept for a plan right now."""

    course_id: str
    plan_id: str
    plan_status: str
    overdue_count: int
    total_overdue_paise: int
    next_due_amount_paise: int
    next_due_date: Optional[datetime]
    options: List[PaymentOptionDTO]
    recommended: Optional[str]


@dataclass(frozen=True)
class PlanDueDTO:
    plan_id: str
    course_id: str
    course_title: str
    plan_status: str
    sequence_number: int
    period_label: str
    due_date: datetime
    amount_paise: int


@dataclass(frozen=True)
class UserEmiSummaryResponse:
    """Dashboard across every plan of a user."""

    user_id: str
    total_plans: int
    active_plans: int
    locked_plans: int
    completed_plans: int
    total_overdue_paise: int
    total_remaining_paise: int
    overdue_payments: List[PlanDueDTO]
    upcoming_payments: List[PlanDueDTO]
    quick_actions: List[str]


@dataclass(frozen=True)
class AllocatedInstallmentDTO:
    installment_id: str
    sequence_number: int
    period_label: str
    amount_paise: int
    due_date: datetime
    is_overdue: bool
    is_in_grace_period: bool

    @classmethod
    def from_allocation(cls, item: AllocatedInstallment) -> "AllocatedInstallmentDTO":
        return cls(
            installment_id=item.installment_id,
            sequence_number=item.sequence_number,
            period_label=item.period_label,
            amount_paise=item.amount_paise,
            due_date=item.due_date,
            is_overdue=item.is_overdue,
            is_in_grace_period=item.is_in_grace_period,
        )


@dataclass(frozen=True)
class InstallmentOrderResponse:
    """Gateway order created for one or more installments."""

    order_id: str
    receipt: str
    amount_paise: int
    currency: str
    gateway_key_id: str
    plan_id: str
    course_id: str
    installments: List[AllocatedInstallmentDTO]
    will_unlock_access: bool


@dataclass(frozen=True)
class InstallmentPaymentResult:
    """Outcome of verifying an installment payment."""

    order_id: str
    payment_id: str
    plan_id: str
    already_processed: bool
    updated_installments: int
    installment_ids: List[str]
    previous_status: str
    plan_status: str
    access_restored: bool
    status: EmiStatusDTO
    notifications: Tuple[OutboundNotification, ...] = ()
