"""Course purchase and payment ledger schemas."""

from datetime import datetime
from typing import List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CreateCourseOrderSchema(BaseModel):
    """Schema for POST /v1/payments/order request body."""

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "course_id": "550e8400-e29b-41d4-a716-446655440000",
                    "payment_type": "emi",
                    "amount_paise": 150000,
                    "emi_due_day": 5,
                }
            ]
        }
    )

    course_id: UUID = Field(..., description="UUID of the course to buy")
    payment_type: Literal["full", "emi"] = Field(
        ...,
        description="Pay the full price now or the first of the monthly installments",
    )
    amount_paise: int = Field(
        ...,
        gt=0,
        description="Full price, or the monthly amount for EMI",
        examples=[150000],
    )
    emi_due_day: Optional[int] = Field(
        None,
        description="Day of month installments fall due (required for EMI)",
        examples=[5],
    )


class VerifyPaymentSchema(BaseModel):
    """Gateway checkout callback fields."""

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "razorpay_order_id": "order_N5z9k2L1mQ",
                    "razorpay_payment_id": "pay_N5zA0b3Xc",
                    "razorpay_signature": "3f1c...",
                }
            ]
        }
    )

    razorpay_order_id: str = Field(..., min_length=1, max_length=255)
    razorpay_payment_id: str = Field(..., min_length=1, max_length=255)
    razorpay_signature: str = Field(..., min_length=1, max_length=255)

    @field_validator("razorpay_order_id", "razorpay_payment_id", "razorpay_signature")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        """Reject whitespace-only identifiers."""
        if not v.strip():
            raise ValueError("value cannot be empty or whitespace")
        return v.strip()


class CourseOrderSchema(BaseModel):
    """Schema for POST /v1/payments/order response."""

    model_config = ConfigDict(from_attributes=True)

    order_id: str = Field(..., description="Gateway order id to open checkout with")
    receipt: str
    amount_paise: int
    currency: str = Field(..., examples=["INR"])
    gateway_key_id: str = Field(..., description="Public gateway key for the checkout widget")
    course_id: str
    payment_type: str
    emi_due_day: Optional[int] = None


class CourseVerificationSchema(BaseModel):
    """Schema for POST /v1/payments/verify response."""

    model_config = ConfigDict(from_attributes=True)

    order_id: str
    payment_id: str
    course_id: str
    payment_type: str
    already_processed: bool = Field(
        ...,
        description="True when this payment was verified by an earlier request",
    )
    access_status: str = Field(..., examples=["active"])
    method: Optional[str] = Field(None, examples=["upi"])
    plan_id: Optional[str] = None


class PaymentRecordSchema(BaseModel):
    """Single ledger row."""

    model_config = ConfigDict(from_attributes=True)

    payment_id: str
    transaction_id: str
    payment_type: str
    status: str
    amount_paise: int
    currency: str
    method: Optional[str] = None
    gateway_order_id: str
    gateway_payment_id: Optional[str] = None
    installment_sequence_numbers: List[int] = Field(default_factory=list)
    created_at: datetime
    completed_at: Optional[datetime] = None


class PaymentStatusSchema(BaseModel):
    """Schema for GET /v1/payments/status/{course_id} response."""

    model_config = ConfigDict(from_attributes=True)

    course_id: str
    payment_type: str = Field(..., description="full, emi or none", examples=["emi"])
    enrolled: bool
    access_status: Optional[str] = None
    payments: List[PaymentRecordSchema]
