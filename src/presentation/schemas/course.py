"""Course catalog and access schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class EmiDetailsSchema(BaseModel):
    """Schema for GET /v1/courses/{course_id}/emi-details response."""

    model_config = ConfigDict(from_attributes=True)

    course_id: str = Field(..., description="UUID of the course")
    eligible: bool = Field(..., description="Whether the course can be bought on EMI")
    months: int = Field(..., ge=0, description="Number of monthly installments", examples=[6])
    monthly_amount_paise: int = Field(
        ...,
        ge=0,
        description="Amount of each installment in paise",
        examples=[150000],
    )
    total_amount_paise: int = Field(
        ...,
        ge=0,
        description="Sum of all installments in paise",
        examples=[900000],
    )
    notes: str = Field("", description="Free-form EMI terms shown at checkout")
    reason: Optional[str] = Field(None, description="Why EMI is unavailable, if it is")


class CourseAccessSchema(BaseModel):
    """Schema for GET /v1/courses/{course_id}/access response."""

    model_config = ConfigDict(from_attributes=True)

    user_id: str
    course_id: str
    has_access: bool = Field(..., description="Whether full course content is unlocked")
    access_type: str = Field(..., description="full or limited", examples=["full"])
    reason: str = Field(..., description="Why access was granted or limited", examples=["emi_active"])
    payment_type: Optional[str] = Field(None, description="full or emi", examples=["emi"])
    plan_status: Optional[str] = Field(None, examples=["active"])
    overdue_count: int = Field(0, ge=0)
    total_overdue_paise: int = Field(0, ge=0)
    next_due_amount_paise: int = Field(0, ge=0)
    next_due_date: Optional[datetime] = None
