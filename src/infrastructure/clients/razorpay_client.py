"""HTTP implementation of PaymentGateway for Razorpay."""

import asyncio
import hashlib
import hmac
from typing import Any, Dict, Optional

import httpx
import structlog

from src.core.config import settings
from src.core.metrics import (
    record_gateway_failure,
    record_gateway_success,
    track_gateway_latency,
)
from src.domain.entities import GatewayOrder, GatewayPayment
from src.domain.exceptions import (
    PaymentGatewayException,
    PaymentGatewayTimeoutException,
)
from src.domain.interfaces import PaymentGateway

logger = structlog.get_logger(__name__)


def compute_signature(order_id: str, payment_id: str, secret: str) -> str:
    """HMAC-SHA256 of ``order_id|payment_id``, hex encoded."""
    message = f"{order_id}|{payment_id}".encode()
    return hmac.new(secret.encode(), message, hashlib.sha256).hexdigest()


class RazorpayGatewayClient(PaymentGateway):
    """
    HTTP client for the Razorpay Orders and Payments APIs.

    Every call has a bounded timeout. Only ``fetch_payment`` is retried;
    creating an order twice would create two orders.
    """

    def __init__(
        self,
        base_url: str | None = None,
        key_id: str | None = None,
        key_secret: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
    ):
        self._base_url = (base_url or settings.razorpay_api_url).rstrip("/")
        self._key_id = key_id or settings.razorpay_key_id
        self._key_secret = key_secret or settings.razorpay_key_secret
        self._timeout = timeout or settings.payment_gateway_timeout
        self._max_retries = max_retries or settings.payment_gateway_max_retries

    async def create_order(
        self,
        amount_paise: int,
        currency: str,
        receipt: str,
        notes: Optional[Dict[str, Any]] = None,
    ) -> GatewayOrder:
        payload = {
            "amount": amount_paise,
            "currency": currency,
            "receipt": receipt,
            "notes": {k: str(v) for k, v in (notes or {}).items()},
        }

        data = await self._request("POST", "/orders", "create_order", json=payload, retries=1)

        logger.info(
            "gateway_order_created",
            order_id=data.get("id"),
            amount_paise=amount_paise,
            receipt=receipt,
        )

        return GatewayOrder(
            order_id=data["id"],
            amount_paise=int(data.get("amount", amount_paise)),
            currency=data.get("currency", currency),
            receipt=data.get("receipt", receipt),
            status=data.get("status", "created"),
        )

    def verify_signature(self, order_id: str, payment_id: str, signature: str) -> bool:
        expected = compute_signature(order_id, payment_id, self._key_secret)
        return hmac.compare_digest(expected, signature or "")

    async def fetch_payment(self, payment_id: str) -> GatewayPayment:
        data = await self._request(
            "GET",
            f"/payments/{payment_id}",
            "fetch_payment",
            retries=self._max_retries,
        )

        details = {
            key: data[key]
            for key in ("bank", "wallet", "vpa", "card_id", "email", "contact")
            if data.get(key) is not None
        }

        return GatewayPayment(
            payment_id=data.get("id", payment_id),
            order_id=data.get("order_id"),
            status=data.get("status", "unknown"),
            method=data.get("method"),
            amount_paise=int(data.get("amount", 0)),
            details=details,
        )

    async def _request(
        self,
        method: str,
        path: str,
        operation: str,
        retries: int,
        json: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Issue a request with retry on timeouts and 5xx responses.

        Uses exponential backoff: 0.1s, 0.2s, 0.4s
        """
        url = f"{self._base_url}{path}"
        last_exception: PaymentGatewayException | None = None

        for attempt in range(retries):
            try:
                with track_gateway_latency(operation):
                    async with httpx.AsyncClient(
                        timeout=self._timeout,
                        auth=(self._key_id, self._key_secret),
                    ) as client:
                        response = await client.request(method, url, json=json)

                if response.status_code >= 500:
                    record_gateway_failure(operation, "error")
                    last_exception = PaymentGatewayException(
                        message=f"Payment gateway error: {response.text[:200]}",
                        status_code=response.status_code,
                    )
                    logger.warning(
                        "gateway_server_error",
                        operation=operation,
                        status_code=response.status_code,
                        attempt=attempt + 1,
                    )
                elif response.status_code >= 400:
                    record_gateway_failure(operation, "error")
                    raise PaymentGatewayException(
                        message=f"Payment gateway rejected request: {response.text[:200]}",
                        status_code=response.status_code,
                    )
                else:
                    record_gateway_success(operation)
                    return response.json()

            except httpx.TimeoutException:
                record_gateway_failure(operation, "timeout")
                last_exception = PaymentGatewayTimeoutException()
                logger.warning(
                    "gateway_timeout",
                    operation=operation,
                    attempt=attempt + 1,
                    max_retries=retries,
                )
            except PaymentGatewayException:
                raise
            except httpx.HTTPError as e:
                record_gateway_failure(operation, "error")
                last_exception = PaymentGatewayException(
                    message=f"Payment gateway unreachable: {str(e)}",
                )
                logger.error(
                    "gateway_error",
                    operation=operation,
                    attempt=attempt + 1,
                    error=str(e),
                )

            # Exponential backoff
            if attempt < retries - 1:
                await asyncio.sleep(2**attempt * 0.1)

        raise last_exception or PaymentGatewayException(f"Payment gateway {operation} failed")
