"""EMI plan-related domain exceptions."""

from .base import DomainException


class EmiPlanNotFoundException(DomainException):
    """Raised when no EMI plan exists for a user and course."""

    def __init__(self, user_id: str, course_id: str):
        super().__init__(
            message=f"No EMI plan found for user {user_id} and course {course_id}",
            code="EMI_PLAN_NOT_FOUND",
        )
        self.user_id = user_id
        self.course_id = course_id


class InvalidPlanTransitionException(DomainException):
    """Raised when a plan status change is not allowed by the state machine."""

    def __init__(self, from_status: str, to_status: str):
        super().__init__(
            message=f"Plan cannot move from {from_status} to {to_status}",
            code="INVALID_PLAN_TRANSITION",
        )
        self.from_status = from_status
        self.to_status = to_status


class PlanNotPayableException(DomainException):
    """Raised when a payment is attempted against a closed plan."""

    def __init__(self, status: str):
        super().__init__(
            message=f"EMI plan is {status}; no further installments can be paid",
            code="PLAN_NOT_PAYABLE",
        )
        self.status = status


class NoDuesException(DomainException):
    """Raised when an overdue payment is requested but nothing is due."""

    def __init__(self):
        super().__init__(
            message="No overdue or grace-period installments to pay",
            code="NO_DUES",
        )
