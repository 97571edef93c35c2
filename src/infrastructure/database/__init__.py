"""Database infrastructure."""

from .connection import (
    DatabaseSessionManager,
    db_manager,
    get_db_session,
    to_async_url,
)
from .models import (
    Base,
    CourseModel,
    EmiInstallmentModel,
    EmiPlanModel,
    EnrollmentModel,
    LockHistoryModel,
    PaymentModel,
    UserModel,
)

__all__ = [
    "DatabaseSessionManager",
    "db_manager",
    "get_db_session",
    "to_async_url",
    "Base",
    "CourseModel",
    "EmiInstallmentModel",
    "EmiPlanModel",
    "EnrollmentModel",
    "LockHistoryModel",
    "PaymentModel",
    "UserModel",
]
