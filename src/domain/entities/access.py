"""Course access decision value object."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class AccessType(str, Enum):
    FULL = "full"
    LIMITED = "limited"


class AccessReason(str, Enum):
    FULL_PAYMENT = "full_payment"
    EMI_ACTIVE = "emi_active"
    EMI_COMPLETED = "emi_completed"
    EMI_OVERDUE = "emi_overdue"
    EMI_LOCKED = "emi_locked"
    PAYMENT_REQUIRED = "payment_required"


@dataclass(frozen=True)
class CourseAccessDecision:
    """
    Outcome of the access gate for one (user, course) pair.

    Never a hard deny: ``limited`` callers still decide how much
    content to reveal.
    """

    user_id: str
    course_id: str
    has_access: bool
    access_type: AccessType
    reason: AccessReason
    payment_type: str
    plan_status: Optional[str] = None
    overdue_count: int = 0
    total_overdue_paise: int = 0
    next_due_amount_paise: int = 0
    next_due_date: Optional[datetime] = None
