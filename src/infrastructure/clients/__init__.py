"""External client implementations."""

from .notification_client import HttpNotificationSender
from .razorpay_client import RazorpayGatewayClient, compute_signature

__all__ = [
    "HttpNotificationSender",
    "RazorpayGatewayClient",
    "compute_signature",
]
