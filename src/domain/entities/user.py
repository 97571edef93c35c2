"""User and enrollment entities."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID

from src.core.clock import utcnow


class AccessStatus(str, Enum):
    ACTIVE = "active"
    LOCKED = "locked"


@dataclass
class User:
    id: str
    name: str
    email: str
    phone: Optional[str] = None
    created_at: datetime = field(default_factory=utcnow)


@dataclass
class Enrollment:
    """
    A user's enrollment in a course.

    ``access_status`` mirrors the plan-derived access and is only a cache;
    the plan and its classification remain the source of truth.
    """

    user_id: str
    course_id: UUID
    payment_type: str
    access_status: AccessStatus = AccessStatus.ACTIVE
    plan_id: Optional[UUID] = None
    enrolled_at: datetime = field(default_factory=utcnow)
