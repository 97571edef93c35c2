"""Application Services - Use case orchestration."""

from .access_service import CourseAccessService
from .emi_service import EmiService
from .enrollment_service import EnrollmentService
from .notifications import send_notification, send_notifications
from .plan_mutator import PaymentApplication, PlanMutator
from .reconciler import PlanReconciler, ReconcileOutcome
from .sweeper import EmiSweeper, PlanStore, PlanStoreScope

__all__ = [
    "CourseAccessService",
    "EmiService",
    "EnrollmentService",
    "send_notification",
    "send_notifications",
    "PaymentApplication",
    "PlanMutator",
    "PlanReconciler",
    "ReconcileOutcome",
    "EmiSweeper",
    "PlanStore",
    "PlanStoreScope",
]
