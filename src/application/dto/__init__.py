"""Data Transfer Objects."""

from .emi import (
    AllocatedInstallmentDTO,
    DueAmountsResponse,
    EmiPlanStatusResponse,
    EmiStatusDTO,
    InstallmentDTO,
    InstallmentOrderResponse,
    InstallmentPaymentResult,
    LockRecordDTO,
    PaymentOptionDTO,
    PlanDueDTO,
    UserEmiSummaryResponse,
)
from .payment import (
    CourseOrderRequest,
    CourseOrderResponse,
    CourseVerificationResult,
    EmiDetailsDTO,
    PaymentRecordDTO,
    PaymentStatusResponse,
)
from .sweep import (
    PlanFailure,
    ReminderSummary,
    RepairResult,
    RepairSummary,
    SweepSummary,
)

__all__ = [
    "AllocatedInstallmentDTO",
    "DueAmountsResponse",
    "EmiPlanStatusResponse",
    "EmiStatusDTO",
    "InstallmentDTO",
    "InstallmentOrderResponse",
    "InstallmentPaymentResult",
    "LockRecordDTO",
    "PaymentOptionDTO",
    "PlanDueDTO",
    "UserEmiSummaryResponse",
    "CourseOrderRequest",
    "CourseOrderResponse",
    "CourseVerificationResult",
    "EmiDetailsDTO",
    "PaymentRecordDTO",
    "PaymentStatusResponse",
    "PlanFailure",
    "ReminderSummary",
    "RepairResult",
    "RepairSummary",
    "SweepSummary",
]
