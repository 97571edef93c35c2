"""Domain Exceptions - Business rule violations and domain errors."""

from .base import DomainException
from .catalog import (
    CourseNotFoundException,
    EmiNotAvailableException,
    MissingUserIdentityException,
    UserNotFoundException,
)
from .gateway import PaymentGatewayException, PaymentGatewayTimeoutException
from .payment import (
    AlreadyEnrolledException,
    CourseFullyPaidException,
    InvalidPaymentAmountException,
    InvalidPaymentRequestException,
    InvalidPaymentSignatureException,
    PaymentConflictException,
    PaymentNotCapturedException,
    PaymentNotFoundException,
)
from .plan import (
    EmiPlanNotFoundException,
    InvalidPlanTransitionException,
    NoDuesException,
    PlanNotPayableException,
)

NOT_FOUND_EXCEPTIONS = (
    EmiPlanNotFoundException,
    CourseNotFoundException,
    UserNotFoundException,
    PaymentNotFoundException,
)

__all__ = [
    "DomainException",
    "CourseNotFoundException",
    "EmiNotAvailableException",
    "MissingUserIdentityException",
    "UserNotFoundException",
    "PaymentGatewayException",
    "PaymentGatewayTimeoutException",
    "AlreadyEnrolledException",
    "CourseFullyPaidException",
    "InvalidPaymentAmountException",
    "InvalidPaymentRequestException",
    "InvalidPaymentSignatureException",
    "PaymentConflictException",
    "PaymentNotCapturedException",
    "PaymentNotFoundException",
    "EmiPlanNotFoundException",
    "InvalidPlanTransitionException",
    "NoDuesException",
    "PlanNotPayableException",
    "NOT_FOUND_EXCEPTIONS",
]
