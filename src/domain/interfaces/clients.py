"""External client interfaces."""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from src.domain.entities import GatewayOrder, GatewayPayment, NotificationType


class PaymentGateway(ABC):
    """
    Abstract client for the payment gateway.

    Creates orders, verifies checkout signatures and fetches payments.
    """

    @abstractmethod
    async def create_order(
        self,
        amount_paise: int,
        currency: str,
        receipt: str,
        notes: Optional[Dict[str, Any]] = None,
    ) -> GatewayOrder:
        """
        Create a payment order.

        Args:
            amount_paise: Amount to collect in paise
            currency: ISO currency code
            receipt: Our transaction reference
            notes: Metadata stored with the order

        Returns:
            The created order

        Raises:
            PaymentGatewayException: If the gateway returns an error
            PaymentGatewayTimeoutException: If the request times out
        """
        ...

    @abstractmethod
    def verify_signature(self, order_id: str, payment_id: str, signature: str) -> bool:
        """
        Check a checkout signature.

        Args:
            order_id: Gateway order id
            payment_id: Gateway payment id
            signature: Signature returned to the client at checkout

        Returns:
            True if the signature is authentic
        """
        ...

    @abstractmethod
    async def fetch_payment(self, payment_id: str) -> GatewayPayment:
        """
        Fetch a payment. Safe to retry.

        Args:
            payment_id: Gateway payment id

        Returns:
            The payment with status and method

        Raises:
            PaymentGatewayException: If the gateway returns an error
            PaymentGatewayTimeoutException: If the request times out
        """
        ...


class NotificationSender(ABC):
    """
    Abstract notification sender.

    Best effort: implementations never raise.
    """

    @abstractmethod
    async def notify(
        self,
        user_id: str,
        notification_type: NotificationType,
        payload: Dict[str, Any],
    ) -> bool:
        """
        Send a notification to a user.

        Args:
            user_id: Recipient
            notification_type: Event type
            payload: Event data for the template

        Returns:
            True if the notification was delivered

        Note:
            Failures are logged and reported as False, never raised.
        """
        ...
