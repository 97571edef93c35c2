"""Pydantic schemas for API request/response validation."""

from .admin import (
    PlanFailureSchema,
    ReminderSummarySchema,
    RepairRequestSchema,
    RepairResultSchema,
    RepairSummarySchema,
    SweepSummarySchema,
)
from .course import CourseAccessSchema, EmiDetailsSchema
from .emi import (
    AllocatedInstallmentSchema,
    DueAmountsSchema,
    EmiPlanStatusSchema,
    EmiStatusSchema,
    InstallmentOrderSchema,
    InstallmentPaymentResultSchema,
    InstallmentPaymentSchema,
    InstallmentSchema,
    LockRecordSchema,
    PaymentOptionSchema,
    PlanDueSchema,
    UserEmiSummarySchema,
)
from .error import ErrorResponseSchema
from .payment import (
    CourseOrderSchema,
    CourseVerificationSchema,
    CreateCourseOrderSchema,
    PaymentRecordSchema,
    PaymentStatusSchema,
    VerifyPaymentSchema,
)

__all__ = [
    "PlanFailureSchema",
    "ReminderSummarySchema",
    "RepairRequestSchema",
    "RepairResultSchema",
    "RepairSummarySchema",
    "SweepSummarySchema",
    "CourseAccessSchema",
    "EmiDetailsSchema",
    "AllocatedInstallmentSchema",
    "DueAmountsSchema",
    "EmiPlanStatusSchema",
    "EmiStatusSchema",
    "InstallmentOrderSchema",
    "InstallmentPaymentResultSchema",
    "InstallmentPaymentSchema",
    "InstallmentSchema",
    "LockRecordSchema",
    "PaymentOptionSchema",
    "PlanDueSchema",
    "UserEmiSummarySchema",
    "ErrorResponseSchema",
    "CourseOrderSchema",
    "CourseVerificationSchema",
    "CreateCourseOrderSchema",
    "PaymentRecordSchema",
    "PaymentStatusSchema",
    "VerifyPaymentSchema",
]
