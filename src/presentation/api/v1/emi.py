"""EMI endpoints: status, payment options, and installment payments."""

from datetime import datetime
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from src.application.services import EmiService, send_notifications
from src.core.dependencies import (
    get_current_user_id,
    get_emi_service,
    get_notification_sender,
    get_now,
)
from src.domain.entities import GatewayCorrelation
from src.domain.interfaces import NotificationSender
from src.infrastructure.database import get_db_session
from src.presentation.schemas import (
    DueAmountsSchema,
    EmiPlanStatusSchema,
    ErrorResponseSchema,
    InstallmentOrderSchema,
    InstallmentPaymentResultSchema,
    InstallmentPaymentSchema,
    UserEmiSummarySchema,
    VerifyPaymentSchema,
)

emi_router = APIRouter(
    prefix="/emi",
    responses={
        401: {"model": ErrorResponseSchema, "description": "Missing X-User-ID header"},
        404: {"model": ErrorResponseSchema, "description": "EMI plan not found"},
    },
)

_payment_errors = {
    400: {
        "model": ErrorResponseSchema,
        "description": "Amount matches no combination of due installments; see details",
    },
    502: {"model": ErrorResponseSchema, "description": "Payment gateway error"},
    504: {"model": ErrorResponseSchema, "description": "Payment gateway timeout"},
}


@emi_router.get(
    "/status/{course_id}",
    response_model=EmiPlanStatusSchema,
    summary="Get EMI Status",
    description="""
    Classify every installment of the caller's plan as paid, overdue,
    in its grace period, or upcoming, and report whether access is locked.
    """,
)
async def get_emi_status(
    course_id: Annotated[UUID, Path(description="UUID of the course")],
    user_id: Annotated[str, Depends(get_current_user_id)],
    emi_service: Annotated[EmiService, Depends(get_emi_service)],
    now: Annotated[datetime, Depends(get_now)],
) -> EmiPlanStatusSchema:
    response = await emi_service.get_emi_status(user_id, course_id, now)
    return EmiPlanStatusSchema.model_validate(response)


@emi_router.get(
    "/due-amounts/{course_id}",
    response_model=DueAmountsSchema,
    summary="Get Payable Amounts",
    description="List the exact amounts that settle whole installments right now.",
)
async def get_due_amounts(
    course_id: Annotated[UUID, Path(description="UUID of the course")],
    user_id: Annotated[str, Depends(get_current_user_id)],
    emi_service: Annotated[EmiService, Depends(get_emi_service)],
    now: Annotated[datetime, Depends(get_now)],
) -> DueAmountsSchema:
    response = await emi_service.get_due_amounts(user_id, course_id, now)
    return DueAmountsSchema.model_validate(response)


@emi_router.get(
    "/summary",
    response_model=UserEmiSummarySchema,
    summary="Get EMI Dashboard",
    description="Summarise every EMI plan the caller holds.",
)
async def get_emi_summary(
    user_id: Annotated[str, Depends(get_current_user_id)],
    emi_service: Annotated[EmiService, Depends(get_emi_service)],
    now: Annotated[datetime, Depends(get_now)],
) -> UserEmiSummarySchema:
    response = await emi_service.get_user_summary(user_id, now)
    return UserEmiSummarySchema.model_validate(response)


@emi_router.post(
    "/pay-overdue",
    response_model=InstallmentOrderSchema,
    summary="Pay Overdue EMIs",
    description="""
    Create a gateway order for overdue installments. The amount must
    equal the sum of the oldest unpaid installments exactly.
    """,
    responses=_payment_errors,
)
async def pay_overdue(
    request: InstallmentPaymentSchema,
    user_id: Annotated[str, Depends(get_current_user_id)],
    emi_service: Annotated[EmiService, Depends(get_emi_service)],
    now: Annotated[datetime, Depends(get_now)],
) -> InstallmentOrderSchema:
    response = await emi_service.create_overdue_order(
        user_id, request.course_id, request.amount_paise, now
    )
    return InstallmentOrderSchema.model_validate(response)


@emi_router.post(
    "/pay-monthly",
    response_model=InstallmentOrderSchema,
    summary="Pay Monthly EMI",
    description="""
    Create a gateway order for the next installment(s), overdue ones
    first. The amount must equal an exact prefix sum of the queue.
    """,
    responses=_payment_errors,
)
async def pay_monthly(
    request: InstallmentPaymentSchema,
    user_id: Annotated[str, Depends(get_current_user_id)],
    emi_service: Annotated[EmiService, Depends(get_emi_service)],
    now: Annotated[datetime, Depends(get_now)],
) -> InstallmentOrderSchema:
    response = await emi_service.create_monthly_order(
        user_id, request.course_id, request.amount_paise, now
    )
    return InstallmentOrderSchema.model_validate(response)


@emi_router.post(
    "/verify-payment",
    response_model=InstallmentPaymentResultSchema,
    summary="Verify EMI Payment",
    description="""
    Verify a checkout callback for an installment order, mark the
    covered installments paid and unlock the plan once nothing is overdue.

    Safe to retry: a second call reports zero installments updated.
    """,
    responses={
        409: {"model": ErrorResponseSchema, "description": "Plan changed since the order was created"},
        **_payment_errors,
    },
)
async def verify_payment(
    request: VerifyPaymentSchema,
    background_tasks: BackgroundTasks,
    user_id: Annotated[str, Depends(get_current_user_id)],
    emi_service: Annotated[EmiService, Depends(get_emi_service)],
    notifier: Annotated[NotificationSender, Depends(get_notification_sender)],
    session: Annotated[AsyncSession, Depends(get_db_session)],
    now: Annotated[datetime, Depends(get_now)],
) -> InstallmentPaymentResultSchema:
    correlation = GatewayCorrelation(
        order_id=request.razorpay_order_id,
        payment_id=request.razorpay_payment_id,
        signature=request.razorpay_signature,
    )

    result = await emi_service.verify_installment_payment(user_id, correlation, now)

    await session.commit()
    background_tasks.add_task(send_notifications, notifier, result.notifications)

    return InstallmentPaymentResultSchema.model_validate(result)
