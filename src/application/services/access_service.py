"""Course access gate - read-only access decisions for course content."""

from datetime import datetime
from uuid import UUID

import structlog

from src.domain.entities import (
    AccessReason,
    AccessType,
    CourseAccessDecision,
    PlanStatus,
)
from src.domain.interfaces import EmiPlanRepository, PaymentRepository
from src.service.emi import calculate_emi_status

logger = structlog.get_logger(__name__)


class CourseAccessService:
    """
    Decides how much of a course a user may see.

    A completed full payment always grants full access, whatever state
    an EMI plan for the same course is in. This service never writes;
    corrections belong to the sweeper and the plan mutator.
    """

    def __init__(
        self,
        payment_repository: PaymentRepository,
        plan_repository: EmiPlanRepository,
    ):
        self._payment_repo = payment_repository
        self._plan_repo = plan_repository

    async def check_course_access(
        self,
        user_id: str,
        course_id: UUID,
        now: datetime,
    ) -> CourseAccessDecision:
        """
        Evaluate access for a user and course.

        Args:
            user_id: The user's identifier
            course_id: The course's identifier
            now: Current time (naive UTC)

        Returns:
            CourseAccessDecision; ``limited`` rather than a hard deny
        """
        full_payment = await self._payment_repo.find_completed_full_payment(user_id, course_id)
        if full_payment is not None:
            return CourseAccessDecision(
                user_id=user_id,
                course_id=str(course_id),
                has_access=True,
                access_type=AccessType.FULL,
                reason=AccessReason.FULL_PAYMENT,
                payment_type="full",
            )

        plan = await self._plan_repo.get_by_user_and_course(user_id, course_id)
        if plan is None:
            return CourseAccessDecision(
                user_id=user_id,
                course_id=str(course_id),
                has_access=False,
                access_type=AccessType.LIMITED,
                reason=AccessReason.PAYMENT_REQUIRED,
                payment_type="none",
            )

        snapshot = calculate_emi_status(plan, now)

        if snapshot.has_access_to_content:
            reason = AccessReason.EMI_ACTIVE
        elif plan.status == PlanStatus.COMPLETED:
            reason = AccessReason.EMI_COMPLETED
        elif snapshot.has_overdue_payments:
            reason = AccessReason.EMI_OVERDUE
        else:
            reason = AccessReason.EMI_LOCKED

        has_access = reason in (AccessReason.EMI_ACTIVE, AccessReason.EMI_COMPLETED)

        if not has_access:
            logger.info(
                "course_access_limited",
                user_id=user_id,
                course_id=str(course_id),
                reason=reason.value,
                plan_status=plan.status.value,
                overdue_count=snapshot.overdue_count,
            )

        return CourseAccessDecision(
            user_id=user_id,
            course_id=str(course_id),
            has_access=has_access,
            access_type=AccessType.FULL if has_access else AccessType.LIMITED,
            reason=reason,
            payment_type="emi",
            plan_status=plan.status.value,
            overdue_count=snapshot.overdue_count,
            total_overdue_paise=snapshot.total_overdue_paise,
            next_due_amount_paise=snapshot.next_due_amount_paise,
            next_due_date=snapshot.next_due_date,
        )
