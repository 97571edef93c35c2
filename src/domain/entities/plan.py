"""EMI plan domain entities."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional
from uuid import UUID, uuid4

from src.core.clock import utcnow


class InstallmentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    LATE = "late"


class PlanStatus(str, Enum):
    ACTIVE = "active"
    LOCKED = "locked"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


@dataclass
class Installment:
    """One monthly installment within an EMI plan."""

    plan_id: UUID
    sequence_number: int
    period_label: str
    due_date: datetime
    grace_period_end: datetime
    amount_paise: int
    id: UUID = field(default_factory=uuid4)
    status: InstallmentStatus = InstallmentStatus.PENDING
    paid_at: Optional[datetime] = None
    gateway_order_id: Optional[str] = None
    gateway_payment_id: Optional[str] = None
    gateway_signature: Optional[str] = None

    @property
    def is_paid(self) -> bool:
        return self.status == InstallmentStatus.PAID

    def to_dict(self) -> dict:
        return {
            "installment_id": str(self.id),
            "sequence_number": self.sequence_number,
            "period_label": self.period_label,
            "due_date": self.due_date.isoformat(),
            "grace_period_end": self.grace_period_end.isoformat(),
            "amount_paise": self.amount_paise,
            "status": self.status.value,
            "paid_at": self.paid_at.isoformat() if self.paid_at else None,
        }


@dataclass
class LockRecord:
    """Audit entry for one locked period of a plan."""

    plan_id: UUID
    locked_at: datetime
    overdue_count: int
    reason: str
    locked_by: str = "system"
    unlocked_at: Optional[datetime] = None
    id: UUID = field(default_factory=uuid4)

    @property
    def is_open(self) -> bool:
        return self.unlocked_at is None


@dataclass
class EmiPlan:
    """
    Installment plan for one (user, course) pair.

    The installment list is fixed at creation; only installment payment
    fields, the plan status and the lock history change afterwards.
    """

    user_id: str
    course_id: UUID
    total_amount_paise: int
    months: int
    due_day: int
    start_date: datetime
    installments: List[Installment] = field(default_factory=list)
    lock_history: List[LockRecord] = field(default_factory=list)
    status: PlanStatus = PlanStatus.ACTIVE
    course_title: str = ""
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=utcnow)

    @property
    def open_lock(self) -> Optional[LockRecord]:
        for record in self.lock_history:
            if record.is_open:
                return record
        return None

    @property
    def monthly_amount_paise(self) -> int:
        if not self.installments:
            return 0
        return self.installments[-1].amount_paise

    def to_dict(self) -> dict:
        return {
            "plan_id": str(self.id),
            "user_id": self.user_id,
            "course_id": str(self.course_id),
            "status": self.status.value,
            "total_amount_paise": self.total_amount_paise,
            "months": self.months,
            "due_day": self.due_day,
            "installments": [inst.to_dict() for inst in self.installments],
        }
