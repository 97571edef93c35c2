"""Data transfer objects for course purchase and payment ledger operations."""

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Tuple

from src.domain.entities import OutboundNotification, Payment
from src.service.emi import EmiDetails


@dataclass(frozen=True)
class CourseOrderRequest:
    """Request data for creating a course purchase order."""

    user_id: str
    course_id: str
    payment_type: str
    amount_paise: int
    emi_due_day: Optional[int] = None

    def validate(self, min_due_day: int = 1, max_due_day: int = 31) -> List[str]:
        errors = []

        if self.payment_type not in ("full", "emi"):
            errors.append("payment_type must be 'full' or 'emi'")

        if self.amount_paise <= 0:
            errors.append("amount_paise must be positive")

        if self.payment_type == "emi":
            if self.emi_due_day is None:
                errors.append("emi_due_day is required for EMI payments")
            elif not min_due_day <= self.emi_due_day <= max_due_day:
                errors.append(
                    f"emi_due_day must be an integer between {min_due_day} and {max_due_day}"
                )

        return errors


@dataclass(frozen=True)
class EmiDetailsDTO:
    course_id: str
    eligible: bool
    months: int
    monthly_amount_paise: int
    total_amount_paise: int
    notes: str
    reason: Optional[str]

    @classmethod
    def from_details(cls, course_id: str, details: EmiDetails) -> "EmiDetailsDTO":
        return cls(
            course_id=course_id,
            eligible=details.eligible,
            months=details.months,
            monthly_amount_paise=details.monthly_amount_paise,
            total_amount_paise=details.total_amount_paise,
            notes=details.notes,
            reason=details.reason,
        )


@dataclass(frozen=True)
class CourseOrderResponse:
    order_id: str
    receipt: str
    amount_paise: int
    currency: str
    gateway_key_id: str
    course_id: str
    payment_type: str
    emi_due_day: Optional[int] = None


@dataclass(frozen=True)
class CourseVerificationResult:
    order_id: str
    payment_id: str
    course_id: str
    payment_type: str
    already_processed: bool
    access_status: str
    method: Optional[str] = None
    plan_id: Optional[str] = None
    notifications: Tuple[OutboundNotification, ...] = ()


@dataclass(frozen=True)
class PaymentRecordDTO:
    payment_id: str
    transaction_id: str
    payment_type: str
    status: str
    amount_paise: int
    currency: str
    method: Optional[str]
    gateway_order_id: str
    gateway_payment_id: Optional[str]
    installment_sequence_numbers: List[int]
    created_at: datetime
    completed_at: Optional[datetime]

    @classmethod
    def from_entity(cls, payment: Payment) -> "PaymentRecordDTO":
        return cls(
            payment_id=str(payment.id),
            transaction_id=payment.transaction_id,
            payment_type=payment.payment_type.value,
            status=payment.status.value,
            amount_paise=payment.amount_paise,
            currency=payment.currency,
            method=payment.method.value if payment.method else None,
            gateway_order_id=payment.gateway_order_id,
            gateway_payment_id=payment.gateway_payment_id,
            installment_sequence_numbers=[i.sequence_number for i in payment.installments],
            created_at=payment.created_at,
            completed_at=payment.completed_at,
        )


@dataclass(frozen=True)
class PaymentStatusResponse:
    """How a user is paying for a course: ``full``, ``emi`` or ``none``."""

    course_id: str
    payment_type: str
    enrolled: bool
    access_status: Optional[str]
    payments: List[PaymentRecordDTO]
