"""
EMI sweeper - batch jobs that apply time-based plan transitions.

Each plan is processed in its own transaction so one failing plan
cannot roll back or abort the others. Notifications go out only after
that plan's transaction has committed.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import AsyncContextManager, Callable, List
from uuid import UUID

import structlog

from src.application.dto import (
    PlanFailure,
    ReminderSummary,
    RepairSummary,
    SweepSummary,
)
from src.core.metrics import record_sweep_plan, track_sweep
from src.domain.entities import (
    Installment,
    NotificationType,
    OutboundNotification,
    PlanStatus,
)
from src.domain.interfaces import EmiPlanRepository, NotificationSender, UserRepository
from src.service.emi import EmiSettings, emi_settings, is_terminal

from .notifications import send_notification, send_notifications
from .plan_mutator import PlanMutator
from .reconciler import PlanReconciler

logger = structlog.get_logger(__name__)

SWEPT_STATUSES = (PlanStatus.ACTIVE, PlanStatus.LOCKED)


@dataclass(frozen=True)
class PlanStore:
    """Repositories bound to one transaction."""

    plans: EmiPlanRepository
    users: UserRepository


PlanStoreScope = Callable[[], AsyncContextManager[PlanStore]]


@dataclass(frozen=True)
class _PlanSweepResult:
    result: str
    marked_late: int
    notifications: List[OutboundNotification]


class EmiSweeper:
    """
    Runs the overdue sweep, the reminder sweep and the bulk repair.

    Args:
        store_scope: Opens a transaction and yields repositories bound to
            it; commits on clean exit, rolls back on error
        notifier: Best-effort notification sender
    """

    def __init__(
        self,
        store_scope: PlanStoreScope,
        notifier: NotificationSender,
        config: EmiSettings | None = None,
    ):
        self._store_scope = store_scope
        self._notifier = notifier
        self._config = config or emi_settings

    async def process_overdue_emis(self, now: datetime) -> SweepSummary:
        """
        Mark expired installments late and lock or unlock plans.

        Args:
            now: Sweep time (naive UTC)

        Returns:
            SweepSummary with per-outcome counts and per-plan failures
        """
        summary = SweepSummary()

        with track_sweep("overdue"):
            plan_ids = await self._list_plan_ids(SWEPT_STATUSES)
            summary.total = len(plan_ids)

            for plan_id in plan_ids:
                try:
                    outcome = await self._sweep_plan(plan_id, now)
                except Exception as e:
                    summary.failed += 1
                    summary.errors.append(PlanFailure(plan_id=str(plan_id), error=str(e)))
                    record_sweep_plan("failed")
                    logger.exception(
                        "emi_sweep_plan_failed",
                        plan_id=str(plan_id),
                        error=str(e),
                    )
                    continue

                summary.marked_late += outcome.marked_late
                if outcome.result == "locked":
                    summary.locked += 1
                elif outcome.result == "unlocked":
                    summary.unlocked += 1
                elif outcome.result == "completed":
                    summary.completed += 1
                else:
                    summary.unchanged += 1
                record_sweep_plan(outcome.result)

                await send_notifications(self._notifier, outcome.notifications)

        logger.info(
            "emi_sweep_completed",
            total=summary.total,
            locked=summary.locked,
            unlocked=summary.unlocked,
            completed=summary.completed,
            marked_late=summary.marked_late,
            failed=summary.failed,
        )
        return summary

    async def send_payment_reminders(self, now: datetime) -> ReminderSummary:
        """
        Remind payers of installments due within the lookahead window.

        Read-only apart from the notifications themselves.
        """
        window_end = now + timedelta(days=self._config.reminder_lookahead_days)

        with track_sweep("reminders"):
            async with self._store_scope() as store:
                due = await store.plans.find_installments_due_between(now, window_end)

            sent = 0
            failed = 0
            for plan, installment in due:
                delivered = await send_notification(
                    self._notifier,
                    OutboundNotification(
                        user_id=plan.user_id,
                        notification_type=NotificationType.REMINDER,
                        payload={
                            **self._installment_payload(plan.course_title, installment),
                            "course_id": str(plan.course_id),
                            "days_until_due": (installment.due_date - now).days,
                        },
                    )
                )
                if delivered:
                    sent += 1
                else:
                    failed += 1

        logger.info(
            "emi_reminders_sent",
            candidates=len(due),
            sent=sent,
            failed=failed,
            window_end=window_end.isoformat(),
        )
        return ReminderSummary(
            sent=sent,
            failed=failed,
            lookahead_days=self._config.reminder_lookahead_days,
            window_end=window_end.isoformat(),
        )

    async def fix_all_emi_status_inconsistencies(self, now: datetime) -> RepairSummary:
        """Run the per-plan repair over every non-terminal plan."""
        summary = RepairSummary()

        with track_sweep("repair"):
            plan_ids = await self._list_plan_ids(SWEPT_STATUSES)
            summary.total = len(plan_ids)

            for plan_id in plan_ids:
                try:
                    async with self._store_scope() as store:
                        plan = await store.plans.get_by_id(plan_id)
                        if plan is None:
                            continue
                        result = await PlanMutator(store.plans, store.users).repair_plan(
                            plan, now, actor="repair"
                        )
                except Exception as e:
                    summary.errors.append(PlanFailure(plan_id=str(plan_id), error=str(e)))
                    logger.exception("emi_repair_plan_failed", plan_id=str(plan_id), error=str(e))
                    continue

                if result.plan_updated or result.user_updated:
                    summary.fixed += 1

        logger.info(
            "emi_repair_completed",
            total=summary.total,
            fixed=summary.fixed,
            errors=len(summary.errors),
        )
        return summary

    async def _list_plan_ids(self, statuses) -> List[UUID]:
        async with self._store_scope() as store:
            return await store.plans.list_ids_by_status(statuses)

    async def _sweep_plan(self, plan_id: UUID, now: datetime) -> _PlanSweepResult:
        async with self._store_scope() as store:
            plan = await store.plans.get_by_id(plan_id)
            if plan is None or is_terminal(plan.status):
                return _PlanSweepResult("unchanged", 0, [])

            marked = await store.plans.mark_overdue_installments_late(plan_id, now)
            outcome = await PlanReconciler(store.plans, store.users).reconcile(
                plan, now, actor="system"
            )

        notifications = [
            OutboundNotification(
                user_id=plan.user_id,
                notification_type=NotificationType.LATE,
                payload={
                    **self._installment_payload(plan.course_title, installment),
                    "course_id": str(plan.course_id),
                },
            )
            for installment in marked
        ]

        result = "unchanged"
        if outcome.transitioned:
            payload = {
                "course_id": str(plan.course_id),
                "course_title": plan.course_title,
                "overdue_count": outcome.snapshot.overdue_count,
                "total_overdue_paise": outcome.snapshot.total_overdue_paise,
            }
            if outcome.new_status == PlanStatus.LOCKED:
                result = "locked"
                notifications.append(
                    OutboundNotification(plan.user_id, NotificationType.LOCK, payload)
                )
            elif outcome.new_status == PlanStatus.ACTIVE:
                result = "unlocked"
                notifications.append(
                    OutboundNotification(plan.user_id, NotificationType.UNLOCK, payload)
                )
            elif outcome.new_status == PlanStatus.COMPLETED:
                result = "completed"

        return _PlanSweepResult(result, len(marked), notifications)

    @staticmethod
    def _installment_payload(course_title: str, installment: Installment) -> dict:
        return {
            "course_title": course_title,
            "sequence_number": installment.sequence_number,
            "period_label": installment.period_label,
            "amount_paise": installment.amount_paise,
            "due_date": installment.due_date.isoformat(),
        }
