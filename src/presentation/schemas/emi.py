"""EMI status and installment payment schemas."""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class InstallmentSchema(BaseModel):
    """Schema for an installment in EMI responses."""

    model_config = ConfigDict(from_attributes=True)

    installment_id: str = Field(..., description="UUID of the installment")
    sequence_number: int = Field(..., ge=1, examples=[2])
    period_label: str = Field(..., description="Billing month", examples=["March 2026"])
    due_date: datetime
    grace_period_end: datetime
    amount_paise: int = Field(..., gt=0, examples=[150000])
    status: str = Field(..., description="pending, paid or late", examples=["pending"])
    timing: str = Field(
        ...,
        description="paid, overdue, grace_period or upcoming at request time",
        examples=["upcoming"],
    )
    days_from_due: int = Field(
        ...,
        description="Days since the due date; negative while still upcoming",
    )
    paid_at: Optional[datetime] = None


class LockRecordSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    locked_at: datetime
    unlocked_at: Optional[datetime] = None
    overdue_count: int
    reason: str
    locked_by: str


class EmiStatusSchema(BaseModel):
    """Derived status of a plan at request time."""

    model_config = ConfigDict(from_attributes=True)

    plan_status: str = Field(..., examples=["active"])
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
    next_due_date: Optional[datetime] = None
    has_overdue_payments: bool
    is_current_on_payments: bool
    has_access_to_content: bool


class EmiPlanStatusSchema(BaseModel):
    """Schema for GET /v1/emi/status/{course_id} response."""

    model_config = ConfigDict(from_attributes=True)

    course_id: str
    payment_type: str = Field(..., description="full or emi", examples=["emi"])
    has_access: bool
    message: str
    plan_id: Optional[str] = None
    months: Optional[int] = None
    due_day: Optional[int] = None
    monthly_amount_paise: Optional[int] = None
    is_access_locked: bool = False
    status: Optional[EmiStatusSchema] = None
    overdue: List[InstallmentSchema] = Field(default_factory=list)
    grace_period: List[InstallmentSchema] = Field(default_factory=list)
    installments: List[InstallmentSchema] = Field(default_factory=list)
    lock_history: List[LockRecordSchema] = Field(default_factory=list)


class PaymentOptionSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    kind: str = Field(
        ...,
        description="single_emi, all_overdue, multiple_emis or full_remaining",
        examples=["all_overdue"],
    )
    label: str
    amount_paise: int = Field(..., gt=0, description="Exact amount the allocator accepts")
    installment_count: int = Field(..., ge=1)
    clears_overdue: bool
    will_unlock_access: bool


class DueAmountsSchema(BaseModel):
    """Schema for GET /v1/emi/due-amounts/{course_id} response."""

    model_config = ConfigDict(from_attributes=True)

    course_id: str
    plan_id: str
    plan_status: str
    overdue_count: int
    total_overdue_paise: int
    next_due_amount_paise: int
    next_due_date: Optional[datetime] = None
    options: List[PaymentOptionSchema]
    recommended: Optional[str] = Field(None, description="Kind of the suggested option")


class PlanDueSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    plan_id: str
    course_id: str
    course_title: str
    plan_status: str
    sequence_number: int
    period_label: str
    due_date: datetime
    amount_paise: int


class UserEmiSummarySchema(BaseModel):
    """Schema for GET /v1/emi/summary response."""

    model_config = ConfigDict(from_attributes=True)

    user_id: str
    total_plans: int
    active_plans: int
    locked_plans: int
    completed_plans: int
    total_overdue_paise: int
    total_remaining_paise: int
    overdue_payments: List[PlanDueSchema]
    upcoming_payments: List[PlanDueSchema]
    quick_actions: List[str]


class InstallmentPaymentSchema(BaseModel):
    """Schema for POST /v1/emi/pay-overdue and /v1/emi/pay-monthly request body."""

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "course_id": "550e8400-e29b-41d4-a716-446655440000",
                    "amount_paise": 300000,
                }
            ]
        }
    )

    course_id: UUID = Field(..., description="UUID of the course the plan belongs to")
    amount_paise: int = Field(
        ...,
        description="Must equal an exact prefix sum of the installments due",
        examples=[300000],
    )


class AllocatedInstallmentSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    installment_id: str
    sequence_number: int
    period_label: str
    amount_paise: int
    due_date: datetime
    is_overdue: bool
    is_in_grace_period: bool


class InstallmentOrderSchema(BaseModel):
    """Gateway order covering one or more installments."""

    model_config = ConfigDict(from_attributes=True)

    order_id: str
    receipt: str
    amount_paise: int
    currency: str
    gateway_key_id: str
    plan_id: str
    course_id: str
    installments: List[AllocatedInstallmentSchema]
    will_unlock_access: bool = Field(
        ...,
        description="Whether paying this order clears every overdue installment of a locked plan",
    )


class InstallmentPaymentResultSchema(BaseModel):
    """Schema for POST /v1/emi/verify-payment response."""

    model_config = ConfigDict(from_attributes=True)

    order_id: str
    payment_id: str
    plan_id: str
    already_processed: bool
    updated_installments: int = Field(..., ge=0, description="Installments marked paid by this call")
    installment_ids: List[str]
    previous_status: str
    plan_status: str
    access_restored: bool
    status: EmiStatusSchema
