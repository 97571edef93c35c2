"""HTTP implementation of NotificationSender."""

import asyncio
from typing import Any, Dict

import httpx
import structlog

from src.core.clock import utcnow
from src.core.config import settings
from src.core.metrics import record_notification
from src.domain.entities import NotificationType
from src.domain.interfaces import NotificationSender

logger = structlog.get_logger(__name__)


class HttpNotificationSender(NotificationSender):
    """
    Posts notification events to the delivery service.

    Retries with exponential backoff and reports failure as ``False``;
    callers never see an exception.
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
    ):
        self._base_url = base_url or settings.notification_url
        self._timeout = timeout or settings.notification_timeout
        self._max_retries = max_retries or settings.notification_max_retries

    async def notify(
        self,
        user_id: str,
        notification_type: NotificationType,
        payload: Dict[str, Any],
    ) -> bool:
        body = {
            "event": notification_type.value,
            "user_id": user_id,
            "payload": payload,
            "sent_at": utcnow().isoformat() + "Z",
        }

        for attempt in range(self._max_retries):
            try:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.post(self._base_url, json=body)

                if response.status_code < 400:
                    logger.info(
                        "notification_sent",
                        user_id=user_id,
                        notification_type=notification_type.value,
                    )
                    record_notification(notification_type.value, True)
                    return True

                logger.warning(
                    "notification_rejected",
                    user_id=user_id,
                    notification_type=notification_type.value,
                    status_code=response.status_code,
                    attempt=attempt + 1,
                )

            except httpx.HTTPError as e:
                logger.warning(
                    "notification_error",
                    user_id=user_id,
                    notification_type=notification_type.value,
                    error=str(e),
                    attempt=attempt + 1,
                )

            if attempt < self._max_retries - 1:
                await asyncio.sleep(2**attempt * 0.1)

        logger.error(
            "notification_failed",
            user_id=user_id,
            notification_type=notification_type.value,
            max_retries=self._max_retries,
        )
        record_notification(notification_type.value, False)
        return False
