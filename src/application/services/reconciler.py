"""Plan reconciliation - aligns plan status and access with a fresh classification."""

from dataclasses import dataclass
from datetime import datetime

import structlog

from src.core.metrics import record_plan_transition
from src.domain.entities import AccessStatus, EmiPlan, PlanStatus
from src.domain.interfaces import EmiPlanRepository, UserRepository
from src.service.emi import (
    EmiStatusSnapshot,
    calculate_emi_status,
    effective_access_status,
    next_status,
)

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ReconcileOutcome:
    plan: EmiPlan
    snapshot: EmiStatusSnapshot
    previous_status: PlanStatus
    access_status: AccessStatus
    access_changed: bool

    @property
    def new_status(self) -> PlanStatus:
        return self.plan.status

    @property
    def transitioned(self) -> bool:
        return self.previous_status != self.plan.status


class PlanReconciler:
    """
    Re-reads a plan, classifies it and applies the resulting transition.

    Decisions are always made from data read inside the current
    transaction, never from a snapshot the caller loaded earlier.
    """

    def __init__(
        self,
        plan_repository: EmiPlanRepository,
        user_repository: UserRepository,
    ):
        self._plan_repo = plan_repository
        self._user_repo = user_repository

    async def reconcile(
        self,
        plan: EmiPlan,
        now: datetime,
        reason: str | None = None,
        actor: str = "system",
    ) -> ReconcileOutcome:
        """
        Bring a plan's status and its enrollment access in line with ``now``.

        Args:
            plan: The plan to reconcile (only its id is trusted)
            now: Current time (naive UTC)
            reason: Lock reason to record if the plan locks
            actor: Who triggered the change, stored on lock entries

        Returns:
            ReconcileOutcome with the fresh plan and snapshot
        """
        fresh = await self._plan_repo.get_by_id(plan.id) or plan
        previous = fresh.status
        snapshot = calculate_emi_status(fresh, now)
        target = next_status(previous, snapshot)

        if target != previous:
            moved = await self._plan_repo.transition_status(
                fresh.id,
                previous,
                target,
                now,
                overdue_count=snapshot.overdue_count,
                reason=reason or f"Auto-locked: {snapshot.overdue_count} overdue EMI(s)",
                actor=actor,
            )
            if moved:
                record_plan_transition(previous.value, target.value)
                logger.info(
                    "emi_plan_transitioned",
                    plan_id=str(fresh.id),
                    user_id=fresh.user_id,
                    from_status=previous.value,
                    to_status=target.value,
                    overdue_count=snapshot.overdue_count,
                    actor=actor,
                )
            else:
                logger.info(
                    "emi_plan_transition_lost_race",
                    plan_id=str(fresh.id),
                    from_status=previous.value,
                    to_status=target.value,
                )

            fresh = await self._plan_repo.get_by_id(fresh.id) or fresh
            snapshot = calculate_emi_status(fresh, now)

        access = effective_access_status(fresh.status, snapshot)
        access_changed = await self._user_repo.set_access_status(
            fresh.user_id,
            fresh.course_id,
            access,
        )
        if access_changed:
            logger.info(
                "enrollment_access_updated",
                plan_id=str(fresh.id),
                user_id=fresh.user_id,
                course_id=str(fresh.course_id),
                access_status=access.value,
            )

        return ReconcileOutcome(
            plan=fresh,
            snapshot=snapshot,
            previous_status=previous,
            access_status=access,
            access_changed=access_changed,
        )
