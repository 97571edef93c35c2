"""Notification event types."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict


class NotificationType(str, Enum):
    WELCOME = "welcome"
    REMINDER = "reminder"
    LATE = "late"
    LOCK = "lock"
    UNLOCK = "unlock"


@dataclass(frozen=True)
class OutboundNotification:
    """A notification to send once the surrounding transaction commits."""

    user_id: str
    notification_type: NotificationType
    payload: Dict[str, Any] = field(default_factory=dict)
