"""Plan mutator - applies payments to installments and repairs plan state."""

from dataclasses import dataclass
from datetime import datetime
from typing import Tuple
from uuid import UUID

import structlog

from src.application.dto import EmiStatusDTO, RepairResult
from src.domain.entities import EmiPlan, GatewayCorrelation, PlanStatus
from src.domain.exceptions import EmiPlanNotFoundException
from src.domain.interfaces import EmiPlanRepository, UserRepository
from src.service.emi import EmiStatusSnapshot, PaymentAllocation, is_terminal

from .reconciler import PlanReconciler

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class PaymentApplication:
    """Result of applying an allocation to a plan."""

    updated_count: int
    updated_installment_ids: Tuple[str, ...]
    previous_status: PlanStatus
    new_status: PlanStatus
    emi_status: EmiStatusSnapshot
    plan: EmiPlan


class PlanMutator:
    """
    Writes payment outcomes to installments, then reconciles the plan.

    Installment updates are conditional on the installment not being
    paid yet, so a retried or racing payment settles nothing twice.
    """

    def __init__(
        self,
        plan_repository: EmiPlanRepository,
        user_repository: UserRepository,
    ):
        self._plan_repo = plan_repository
        self._reconciler = PlanReconciler(plan_repository, user_repository)

    async def update_emi_after_payment(
        self,
        plan: EmiPlan,
        allocation: PaymentAllocation,
        correlation: GatewayCorrelation,
        now: datetime,
    ) -> PaymentApplication:
        """
        Mark allocated installments paid and reconcile the plan.

        Args:
            plan: The plan the allocation was computed against
            allocation: Allocator output (must be valid)
            correlation: Gateway identifiers for the payment
            now: Payment time (naive UTC)

        Returns:
            PaymentApplication; ``updated_count`` is 0 when every
            installment was already paid
        """
        updated = []
        for item in allocation.installments:
            changed = await self._plan_repo.mark_installment_paid(
                plan.id,
                UUID(item.installment_id),
                now,
                correlation,
            )
            if changed:
                updated.append(item.installment_id)

        outcome = await self._reconciler.reconcile(plan, now, actor="payment")

        logger.info(
            "emi_payment_applied",
            plan_id=str(plan.id),
            user_id=plan.user_id,
            order_id=correlation.order_id,
            requested=len(allocation.installments),
            updated=len(updated),
            previous_status=outcome.previous_status.value,
            new_status=outcome.new_status.value,
        )

        return PaymentApplication(
            updated_count=len(updated),
            updated_installment_ids=tuple(updated),
            previous_status=outcome.previous_status,
            new_status=outcome.new_status,
            emi_status=outcome.snapshot,
            plan=outcome.plan,
        )

    async def fix_emi_status_for_user(
        self,
        user_id: str,
        course_id: UUID,
        now: datetime,
        actor: str = "repair",
    ) -> RepairResult:
        """
        Recompute a user's plan from scratch and correct any drift.

        Safe to run repeatedly; a second run changes nothing.

        Raises:
            EmiPlanNotFoundException: If the user has no plan for the course
        """
        plan = await self._plan_repo.get_by_user_and_course(user_id, course_id)
        if plan is None:
            raise EmiPlanNotFoundException(user_id, str(course_id))

        return await self.repair_plan(plan, now, actor=actor)

    async def repair_plan(self, plan: EmiPlan, now: datetime, actor: str = "repair") -> RepairResult:
        marked = []
        if not is_terminal(plan.status):
            marked = await self._plan_repo.mark_overdue_installments_late(plan.id, now)

        outcome = await self._reconciler.reconcile(plan, now, actor=actor)
        plan_updated = bool(marked) or outcome.transitioned

        if plan_updated or outcome.access_changed:
            logger.info(
                "emi_plan_repaired",
                plan_id=str(plan.id),
                user_id=plan.user_id,
                marked_late=len(marked),
                previous_status=outcome.previous_status.value,
                new_status=outcome.new_status.value,
                access_status=outcome.access_status.value,
            )

        return RepairResult(
            plan_id=str(plan.id),
            plan_updated=plan_updated,
            user_updated=outcome.access_changed,
            marked_late=len(marked),
            previous_status=outcome.previous_status.value,
            plan_status=outcome.new_status.value,
            access_status=outcome.access_status.value,
            status=EmiStatusDTO.from_snapshot(outcome.snapshot),
        )
