"""
EMI Engine Module.

Pure functions for installment scheduling, status classification,
payment allocation and plan status transitions. Nothing here performs
I/O; every time-dependent function takes ``now`` explicitly.
"""

from .allocator import (
    AllocatedInstallment,
    PaymentAllocation,
    calculate_payment_allocation,
    payment_queue,
    prefix_sums,
)
from .classifier import (
    EmiStatusSnapshot,
    InstallmentTiming,
    calculate_emi_status,
    classify_installment,
)
from .eligibility import EmiDetails, get_emi_details, validate_course_for_emi
from .schedule import build_installments, next_due_date, period_label
from .settings import EmiSettings, emi_settings, get_emi_settings
from .state_machine import (
    ALLOWED_TRANSITIONS,
    can_transition,
    effective_access_status,
    ensure_transition,
    is_terminal,
    next_status,
)

__all__ = [
    # Allocator
    "AllocatedInstallment",
    "PaymentAllocation",
    "calculate_payment_allocation",
    "payment_queue",
    "prefix_sums",
    # Classifier
    "EmiStatusSnapshot",
    "InstallmentTiming",
    "calculate_emi_status",
    "classify_installment",
    # Eligibility
    "EmiDetails",
    "get_emi_details",
    "validate_course_for_emi",
    # Schedule
    "build_installments",
    "next_due_date",
    "period_label",
    # Settings
    "EmiSettings",
    "emi_settings",
    "get_emi_settings",
    # State machine
    "ALLOWED_TRANSITIONS",
    "can_transition",
    "effective_access_status",
    "ensure_transition",
    "is_terminal",
    "next_status",
]
