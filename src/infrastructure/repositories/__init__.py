"""Repository implementations."""

from .course_repository import PostgresCourseRepository
from .payment_repository import PostgresPaymentRepository
from .plan_repository import PostgresEmiPlanRepository
from .user_repository import PostgresUserRepository

__all__ = [
    "PostgresCourseRepository",
    "PostgresPaymentRepository",
    "PostgresEmiPlanRepository",
    "PostgresUserRepository",
]
