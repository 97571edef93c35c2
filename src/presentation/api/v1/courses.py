"""Course EMI offer and access-gate endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Path

from src.application.services import EnrollmentService
from src.core.dependencies import get_enrollment_service, require_course_access
from src.domain.entities import CourseAccessDecision
from src.presentation.schemas import (
    CourseAccessSchema,
    EmiDetailsSchema,
    ErrorResponseSchema,
)

courses_router = APIRouter(
    prefix="/courses",
    responses={
        404: {"model": ErrorResponseSchema, "description": "Course not found"},
    },
)


@courses_router.get(
    "/{course_id}/emi-details",
    response_model=EmiDetailsSchema,
    summary="Get EMI Offer",
    description="""
    Describe whether a course can be bought on monthly installments,
    and for how many months at what monthly amount.
    """,
)
async def get_emi_details(
    course_id: Annotated[UUID, Path(description="UUID of the course")],
    enrollment_service: Annotated[EnrollmentService, Depends(get_enrollment_service)],
) -> EmiDetailsSchema:
    details = await enrollment_service.get_emi_details(course_id)
    return EmiDetailsSchema.model_validate(details)


@courses_router.get(
    "/{course_id}/access",
    response_model=CourseAccessSchema,
    summary="Check Course Access",
    description="""
    Evaluate the caller's access to a course's content.

    A completed full payment always grants full access. Otherwise access
    follows the EMI plan: full while current, limited while overdue or
    locked, and limited with reason `payment_required` when the course
    has not been bought.
    """,
    responses={
        401: {"model": ErrorResponseSchema, "description": "Missing X-User-ID header"},
    },
)
async def get_course_access(
    decision: Annotated[CourseAccessDecision, Depends(require_course_access)],
) -> CourseAccessSchema:
    return CourseAccessSchema(
        user_id=decision.user_id,
        course_id=decision.course_id,
        has_access=decision.has_access,
        access_type=decision.access_type.value,
        reason=decision.reason.value,
        payment_type=decision.payment_type,
        plan_status=decision.plan_status,
        overdue_count=decision.overdue_count,
        total_overdue_paise=decision.total_overdue_paise,
        next_due_amount_paise=decision.next_due_amount_paise,
        next_due_date=decision.next_due_date,
    )
