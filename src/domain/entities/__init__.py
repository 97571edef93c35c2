"""Domain Entities - Core business objects."""

from .access import AccessReason, AccessType, CourseAccessDecision
from .course import Course
from .notification import NotificationType, OutboundNotification
from .payment import (
    GatewayCorrelation,
    GatewayOrder,
    GatewayPayment,
    Payment,
    PaymentMethod,
    PaymentStatus,
    PaymentType,
    SettledInstallment,
)
from .plan import EmiPlan, Installment, InstallmentStatus, LockRecord, PlanStatus
from .user import AccessStatus, Enrollment, User

__all__ = [
    "AccessReason",
    "AccessType",
    "CourseAccessDecision",
    "Course",
    "NotificationType",
    "OutboundNotification",
    "GatewayCorrelation",
    "GatewayOrder",
    "GatewayPayment",
    "Payment",
    "PaymentMethod",
    "PaymentStatus",
    "PaymentType",
    "SettledInstallment",
    "EmiPlan",
    "Installment",
    "InstallmentStatus",
    "LockRecord",
    "PlanStatus",
    "AccessStatus",
    "Enrollment",
    "User",
]
