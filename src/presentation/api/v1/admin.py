"""Operator endpoints for the overdue sweep, reminders and repairs."""

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends

from src.application.services import EmiSweeper, PlanMutator
from src.core.dependencies import get_emi_sweeper, get_now, get_plan_mutator
from src.presentation.schemas import (
    ErrorResponseSchema,
    ReminderSummarySchema,
    RepairRequestSchema,
    RepairResultSchema,
    RepairSummarySchema,
    SweepSummarySchema,
)

admin_router = APIRouter(prefix="/admin/emi")


@admin_router.post(
    "/sweep",
    response_model=SweepSummarySchema,
    summary="Run Overdue Sweep",
    description="""
    Mark installments past their grace period late, then lock plans that
    have fallen behind and unlock plans that have caught up. Each plan is
    processed in its own transaction; failures are reported per plan.
    """,
)
async def run_overdue_sweep(
    sweeper: Annotated[EmiSweeper, Depends(get_emi_sweeper)],
    now: Annotated[datetime, Depends(get_now)],
) -> SweepSummarySchema:
    summary = await sweeper.process_overdue_emis(now)
    return SweepSummarySchema.model_validate(summary)


@admin_router.post(
    "/reminders",
    response_model=ReminderSummarySchema,
    summary="Send Payment Reminders",
    description="Notify payers of installments falling due within the reminder window.",
)
async def send_payment_reminders(
    sweeper: Annotated[EmiSweeper, Depends(get_emi_sweeper)],
    now: Annotated[datetime, Depends(get_now)],
) -> ReminderSummarySchema:
    summary = await sweeper.send_payment_reminders(now)
    return ReminderSummarySchema.model_validate(summary)


@admin_router.post(
    "/repair",
    response_model=RepairResultSchema,
    summary="Repair One Plan",
    description="""
    Recompute a user's plan for a course from its installments and
    correct the plan status and cached access flag. Idempotent.
    """,
    responses={
        404: {"model": ErrorResponseSchema, "description": "EMI plan not found"},
    },
)
async def repair_plan(
    request: RepairRequestSchema,
    plan_mutator: Annotated[PlanMutator, Depends(get_plan_mutator)],
    now: Annotated[datetime, Depends(get_now)],
) -> RepairResultSchema:
    result = await plan_mutator.fix_emi_status_for_user(request.user_id, request.course_id, now)
    return RepairResultSchema.model_validate(result)


@admin_router.post(
    "/repair-all",
    response_model=RepairSummarySchema,
    summary="Repair All Plans",
    description="Run the single-plan repair over every active and locked plan.",
)
async def repair_all_plans(
    sweeper: Annotated[EmiSweeper, Depends(get_emi_sweeper)],
    now: Annotated[datetime, Depends(get_now)],
) -> RepairSummarySchema:
    summary = await sweeper.fix_all_emi_status_inconsistencies(now)
    return RepairSummarySchema.model_validate(summary)
