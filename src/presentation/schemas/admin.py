"""Operator endpoint schemas for sweeps and repairs."""

from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from .emi import EmiStatusSchema


class PlanFailureSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    plan_id: str
    error: str


class SweepSummarySchema(BaseModel):
    """Schema for POST /v1/admin/emi/sweep response."""

    model_config = ConfigDict(from_attributes=True)

    total: int = Field(..., ge=0, description="Plans examined")
    succeeded: int = Field(..., ge=0)
    locked: int = Field(..., ge=0)
    unlocked: int = Field(..., ge=0)
    completed: int = Field(..., ge=0)
    unchanged: int = Field(..., ge=0)
    marked_late: int = Field(..., ge=0, description="Installments newly marked late")
    failed: int = Field(..., ge=0)
    errors: List[PlanFailureSchema]


class ReminderSummarySchema(BaseModel):
    """Schema for POST /v1/admin/emi/reminders response."""

    model_config = ConfigDict(from_attributes=True)

    sent: int = Field(..., ge=0)
    failed: int = Field(..., ge=0)
    lookahead_days: int
    window_end: Optional[str] = None


class RepairRequestSchema(BaseModel):
    """Schema for POST /v1/admin/emi/repair request body."""

    user_id: str = Field(..., min_length=1, max_length=255, examples=["user_123"])
    course_id: UUID


class RepairResultSchema(BaseModel):
    """Schema for POST /v1/admin/emi/repair response."""

    model_config = ConfigDict(from_attributes=True)

    plan_id: str
    plan_updated: bool
    user_updated: bool
    marked_late: int
    previous_status: str
    plan_status: str
    access_status: str
    status: EmiStatusSchema


class RepairSummarySchema(BaseModel):
    """Schema for POST /v1/admin/emi/repair-all response."""

    model_config = ConfigDict(from_attributes=True)

    total: int
    fixed: int
    errors: List[PlanFailureSchema]
