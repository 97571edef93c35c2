"""Payment-related domain exceptions."""

from typing import Optional

from .base import DomainException


class InvalidPaymentAmountException(DomainException):
    """
    Raised when a tendered amount matches no prefix sum of the unpaid queue.

    Carries the corrective amounts so the caller can retry.
    """

    def __init__(
        self,
        amount_paise: int,
        suggested_amount_paise: int,
        next_installment_amount_paise: int = 0,
        nearest_lower_amount_paise: int = 0,
        suggested_installments: int = 0,
        message: Optional[str] = None,
    ):
        super().__init__(
            message=message
            or (
                f"Payment amount {amount_paise} is not valid. "
                f"You can pay {suggested_amount_paise} to clear "
                f"{suggested_installments} EMI(s)."
            ),
            code="INVALID_PAYMENT_AMOUNT",
        )
        self.amount_paise = amount_paise
        self.suggested_amount_paise = suggested_amount_paise
        self.next_installment_amount_paise = next_installment_amount_paise
        self.nearest_lower_amount_paise = nearest_lower_amount_paise
        self.suggested_installments = suggested_installments

    @property
    def details(self) -> dict:
        return {
            "amount_paise": self.amount_paise,
            "suggested_amount_paise": self.suggested_amount_paise,
            "next_installment_amount_paise": self.next_installment_amount_paise,
            "nearest_lower_amount_paise": self.nearest_lower_amount_paise,
            "suggested_installments": self.suggested_installments,
        }


class InvalidPaymentRequestException(DomainException):
    """Raised when a payment request fails validation."""

    def __init__(self, message: str):
        super().__init__(
            message=message,
            code="INVALID_PAYMENT_REQUEST",
        )


class PaymentNotFoundException(DomainException):
    """Raised when no ledger row matches a gateway order."""

    def __init__(self, order_id: str):
        super().__init__(
            message=f"Payment not found for order: {order_id}",
            code="PAYMENT_NOT_FOUND",
        )
        self.order_id = order_id


class InvalidPaymentSignatureException(DomainException):
    """Raised when the gateway signature does not verify."""

    def __init__(self, order_id: str):
        super().__init__(
            message="Payment signature verification failed",
            code="INVALID_PAYMENT_SIGNATURE",
        )
        self.order_id = order_id


class PaymentNotCapturedException(DomainException):
    """Raised when the gateway reports the payment as not captured."""

    def __init__(self, payment_id: str, status: str):
        super().__init__(
            message=f"Payment {payment_id} is not captured (status: {status})",
            code="PAYMENT_NOT_CAPTURED",
        )
        self.payment_id = payment_id
        self.status = status


class PaymentConflictException(DomainException):
    """Raised when a payment can no longer be applied as ordered."""

    def __init__(self, message: str):
        super().__init__(
            message=message,
            code="PAYMENT_CONFLICT",
        )


class AlreadyEnrolledException(DomainException):
    """Raised when a user tries to buy a course they are enrolled in."""

    def __init__(self, user_id: str, course_id: str):
        super().__init__(
            message=f"User {user_id} is already enrolled in course {course_id}",
            code="ALREADY_ENROLLED",
        )
        self.user_id = user_id
        self.course_id = course_id


class CourseFullyPaidException(DomainException):
    """Raised when an installment payment targets a fully paid course."""

    def __init__(self, course_id: str):
        super().__init__(
            message=f"Course {course_id} is already fully paid",
            code="COURSE_FULLY_PAID",
        )
        self.course_id = course_id
