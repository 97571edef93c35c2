"""
Domain Interfaces (Ports)
"""

from .repositories import (
    CourseRepository,
    EmiPlanRepository,
    PaymentRepository,
    UserRepository,
)
from .clients import NotificationSender, PaymentGateway

__all__ = [
    "CourseRepository",
    "EmiPlanRepository",
    "PaymentRepository",
    "UserRepository",
    "NotificationSender",
    "PaymentGateway",
]
