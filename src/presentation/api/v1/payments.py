"""Course purchase endpoints: order, verify and payment status."""

from datetime import datetime
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from src.application.dto import CourseOrderRequest
from src.application.services import EnrollmentService, send_notifications
from src.core.dependencies import (
    get_current_user_id,
    get_enrollment_service,
    get_notification_sender,
    get_now,
)
from src.domain.entities import GatewayCorrelation
from src.domain.interfaces import NotificationSender
from src.infrastructure.database import get_db_session
from src.presentation.schemas import (
    CourseOrderSchema,
    CourseVerificationSchema,
    CreateCourseOrderSchema,
    ErrorResponseSchema,
    PaymentStatusSchema,
    VerifyPaymentSchema,
)

payments_router = APIRouter(
    prefix="/payments",
    responses={
        400: {"model": ErrorResponseSchema, "description": "Invalid request"},
        401: {"model": ErrorResponseSchema, "description": "Missing X-User-ID header"},
        404: {"model": ErrorResponseSchema, "description": "Course, user or order not found"},
        409: {"model": ErrorResponseSchema, "description": "Already enrolled through another order"},
        502: {"model": ErrorResponseSchema, "description": "Payment gateway error"},
        504: {"model": ErrorResponseSchema, "description": "Payment gateway timeout"},
    },
)


@payments_router.post(
    "/order",
    response_model=CourseOrderSchema,
    status_code=200,
    summary="Create Course Order",
    description="""
    Create a gateway order to buy a course, either at full price or as
    the first of its monthly installments.
    """,
)
async def create_course_order(
    request: CreateCourseOrderSchema,
    user_id: Annotated[str, Depends(get_current_user_id)],
    enrollment_service: Annotated[EnrollmentService, Depends(get_enrollment_service)],
    now: Annotated[datetime, Depends(get_now)],
) -> CourseOrderSchema:
    dto = CourseOrderRequest(
        user_id=user_id,
        course_id=str(request.course_id),
        payment_type=request.payment_type,
        amount_paise=request.amount_paise,
        emi_due_day=request.emi_due_day,
    )

    response = await enrollment_service.create_course_order(dto, now)
    return CourseOrderSchema.model_validate(response)


@payments_router.post(
    "/verify",
    response_model=CourseVerificationSchema,
    summary="Verify Course Payment",
    description="""
    Verify a checkout callback, enroll the caller and, for EMI purchases,
    create the installment plan with the first installment paid.

    Safe to retry: a payment that was already verified is reported with
    `already_processed` set.
    """,
)
async def verify_course_payment(
    request: VerifyPaymentSchema,
    background_tasks: BackgroundTasks,
    user_id: Annotated[str, Depends(get_current_user_id)],
    enrollment_service: Annotated[EnrollmentService, Depends(get_enrollment_service)],
    notifier: Annotated[NotificationSender, Depends(get_notification_sender)],
    session: Annotated[AsyncSession, Depends(get_db_session)],
    now: Annotated[datetime, Depends(get_now)],
) -> CourseVerificationSchema:
    correlation = GatewayCorrelation(
        order_id=request.razorpay_order_id,
        payment_id=request.razorpay_payment_id,
        signature=request.razorpay_signature,
    )

    result = await enrollment_service.verify_course_payment(user_id, correlation, now)

    # Notifications go out only once the enrollment is durable
    await session.commit()
    background_tasks.add_task(send_notifications, notifier, result.notifications)

    return CourseVerificationSchema.model_validate(result)


@payments_router.get(
    "/status/{course_id}",
    response_model=PaymentStatusSchema,
    summary="Get Payment Status",
    description="Report whether the caller paid for a course in full, on EMI, or not at all.",
)
async def get_payment_status(
    course_id: Annotated[UUID, Path(description="UUID of the course")],
    user_id: Annotated[str, Depends(get_current_user_id)],
    enrollment_service: Annotated[EnrollmentService, Depends(get_enrollment_service)],
) -> PaymentStatusSchema:
    response = await enrollment_service.get_payment_status(user_id, course_id)
    return PaymentStatusSchema.model_validate(response)
