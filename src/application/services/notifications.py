"""Best-effort delivery of outbound notifications."""

from typing import Iterable

import structlog

from src.domain.entities import OutboundNotification
from src.domain.interfaces import NotificationSender

logger = structlog.get_logger(__name__)


async def send_notification(
    notifier: NotificationSender,
    notification: OutboundNotification,
) -> bool:
    """Send one notification; failures are logged and reported as False."""
    try:
        return await notifier.notify(
            notification.user_id,
            notification.notification_type,
            notification.payload,
        )
    except Exception as e:
        logger.warning(
            "notification_dispatch_failed",
            user_id=notification.user_id,
            notification_type=notification.notification_type.value,
            error=str(e),
        )
        return False


async def send_notifications(
    notifier: NotificationSender,
    notifications: Iterable[OutboundNotification],
) -> int:
    """Send notifications in order; returns how many were delivered."""
    delivered = 0
    for notification in notifications:
        if await send_notification(notifier, notification):
            delivered += 1
    return delivered
