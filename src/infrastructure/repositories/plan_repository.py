"""PostgreSQL repository implementation for EMI plans."""

from datetime import datetime
from typing import List, Optional, Sequence, Tuple
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from src.domain.entities import (
    EmiPlan,
    GatewayCorrelation,
    Installment,
    InstallmentStatus,
    LockRecord,
    PlanStatus,
)
from src.domain.interfaces import EmiPlanRepository
from src.infrastructure.database.models import (
    EmiInstallmentModel,
    EmiPlanModel,
    LockHistoryModel,
)


class PostgresEmiPlanRepository(EmiPlanRepository):
    """PostgreSQL-backed EMI plan repository."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def save(self, plan: EmiPlan) -> EmiPlan:
        model = EmiPlanModel(
            id=str(plan.id),
            user_id=plan.user_id,
            course_id=str(plan.course_id),
            course_title=plan.course_title,
            total_amount_paise=plan.total_amount_paise,
            months=plan.months,
            due_day=plan.due_day,
            start_date=plan.start_date,
            status=plan.status.value,
            created_at=plan.created_at,
        )

        for installment in plan.installments:
            model.installments.append(
                EmiInstallmentModel(
                    id=str(installment.id),
                    plan_id=str(plan.id),
                    sequence_number=installment.sequence_number,
                    period_label=installment.period_label,
                    due_date=installment.due_date,
                    grace_period_end=installment.grace_period_end,
                    amount_paise=installment.amount_paise,
                    status=installment.status.value,
                    paid_at=installment.paid_at,
                    gateway_order_id=installment.gateway_order_id,
                    gateway_payment_id=installment.gateway_payment_id,
                    gateway_signature=installment.gateway_signature,
                )
            )

        for record in plan.lock_history:
            model.lock_history.append(
                LockHistoryModel(
                    id=str(record.id),
                    plan_id=str(plan.id),
                    locked_at=record.locked_at,
                    unlocked_at=record.unlocked_at,
                    overdue_count=record.overdue_count,
                    reason=record.reason,
                    locked_by=record.locked_by,
                )
            )

        self._session.add(model)
        await self._session.flush()

        return plan

    def _plan_query(self):
        # populate_existing: conditional updates bypass the identity map
        return (
            select(EmiPlanModel)
            .options(
                selectinload(EmiPlanModel.installments),
                selectinload(EmiPlanModel.lock_history),
            )
            .execution_options(populate_existing=True)
        )

    async def get_by_id(self, plan_id: UUID) -> Optional[EmiPlan]:
        stmt = self._plan_query().where(EmiPlanModel.id == str(plan_id))
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if model is None:
            return None

        return self._to_entity(model)

    async def get_by_user_and_course(self, user_id: str, course_id: UUID) -> Optional[EmiPlan]:
        stmt = self._plan_query().where(
            EmiPlanModel.user_id == user_id,
            EmiPlanModel.course_id == str(course_id),
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if model is None:
            return None

        return self._to_entity(model)

    async def get_by_user_id(self, user_id: str) -> List[EmiPlan]:
        stmt = (
            self._plan_query()
            .where(EmiPlanModel.user_id == user_id)
            .order_by(EmiPlanModel.created_at.desc())
        )
        result = await self._session.execute(stmt)

        return [self._to_entity(model) for model in result.scalars().all()]

    async def list_ids_by_status(self, statuses: Sequence[PlanStatus]) -> List[UUID]:
        stmt = (
            select(EmiPlanModel.id)
            .where(EmiPlanModel.status.in_([s.value for s in statuses]))
            .order_by(EmiPlanModel.created_at)
        )
        result = await self._session.execute(stmt)

        return [UUID(plan_id) for plan_id in result.scalars().all()]

    async def mark_installment_paid(
        self,
        plan_id: UUID,
        installment_id: UUID,
        paid_at: datetime,
        correlation: GatewayCorrelation,
    ) -> bool:
        stmt = (
            update(EmiInstallmentModel)
            .where(
                EmiInstallmentModel.id == str(installment_id),
                EmiInstallmentModel.plan_id == str(plan_id),
                EmiInstallmentModel.status != InstallmentStatus.PAID.value,
            )
            .values(
                status=InstallmentStatus.PAID.value,
                paid_at=paid_at,
                gateway_order_id=correlation.order_id,
                gateway_payment_id=correlation.payment_id,
                gateway_signature=correlation.signature,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)

        return result.rowcount == 1

    async def mark_overdue_installments_late(self, plan_id: UUID, now: datetime) -> List[Installment]:
        stmt = select(EmiInstallmentModel).where(
            EmiInstallmentModel.plan_id == str(plan_id),
            EmiInstallmentModel.status == InstallmentStatus.PENDING.value,
            EmiInstallmentModel.grace_period_end < now,
        ).execution_options(populate_existing=True)
        result = await self._session.execute(stmt)
        candidates = result.scalars().all()

        marked = []
        for model in candidates:
            changed = await self._session.execute(
                update(EmiInstallmentModel)
                .where(
                    EmiInstallmentModel.id == model.id,
                    EmiInstallmentModel.status == InstallmentStatus.PENDING.value,
                )
                .values(status=InstallmentStatus.LATE.value)
                .execution_options(synchronize_session=False)
            )
            if changed.rowcount == 1:
                installment = self._installment_to_entity(model)
                installment.status = InstallmentStatus.LATE
                marked.append(installment)

        return marked

    async def transition_status(
        self,
        plan_id: UUID,
        from_status: PlanStatus,
        to_status: PlanStatus,
        now: datetime,
        overdue_count: int = 0,
        reason: str = "",
        actor: str = "system",
    ) -> bool:
        result = await self._session.execute(
            update(EmiPlanModel)
            .where(
                EmiPlanModel.id == str(plan_id),
                EmiPlanModel.status == from_status.value,
            )
            .values(status=to_status.value, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            return False

        if from_status == PlanStatus.LOCKED:
            await self._session.execute(
                update(LockHistoryModel)
                .where(
                    LockHistoryModel.plan_id == str(plan_id),
                    LockHistoryModel.unlocked_at.is_(None),
                )
                .values(unlocked_at=now)
                .execution_options(synchronize_session=False)
            )

        if to_status == PlanStatus.LOCKED:
            self._session.add(
                LockHistoryModel(
                    plan_id=str(plan_id),
                    locked_at=now,
                    overdue_count=overdue_count,
                    reason=reason,
                    locked_by=actor,
                )
            )

        await self._session.flush()
        return True

    async def find_installments_due_between(
        self,
        start: datetime,
        end: datetime,
        plan_status: PlanStatus = PlanStatus.ACTIVE,
    ) -> List[Tuple[EmiPlan, Installment]]:
        stmt = (
            select(EmiInstallmentModel.plan_id, EmiInstallmentModel.id)
            .join(EmiPlanModel, EmiPlanModel.id == EmiInstallmentModel.plan_id)
            .where(
                EmiPlanModel.status == plan_status.value,
                EmiInstallmentModel.status == InstallmentStatus.PENDING.value,
                EmiInstallmentModel.due_date >= start,
                EmiInstallmentModel.due_date <= end,
            )
            .order_by(EmiInstallmentModel.due_date)
        )
        result = await self._session.execute(stmt)
        rows = result.all()

        plans: dict[str, EmiPlan] = {}
        matches = []
        for plan_id, installment_id in rows:
            if plan_id not in plans:
                plan = await self.get_by_id(UUID(plan_id))
                if plan is None:
                    continue
                plans[plan_id] = plan
            plan = plans[plan_id]
            for installment in plan.installments:
                if str(installment.id) == installment_id:
                    matches.append((plan, installment))

        return matches

    def _installment_to_entity(self, model: EmiInstallmentModel) -> Installment:
        return Installment(
            id=UUID(model.id),
            plan_id=UUID(model.plan_id),
            sequence_number=model.sequence_number,
            period_label=model.period_label,
            due_date=model.due_date,
            grace_period_end=model.grace_period_end,
            amount_paise=model.amount_paise,
            status=InstallmentStatus(model.status),
            paid_at=model.paid_at,
            gateway_order_id=model.gateway_order_id,
            gateway_payment_id=model.gateway_payment_id,
            gateway_signature=model.gateway_signature,
        )

    def _to_entity(self, model: EmiPlanModel) -> EmiPlan:
        return EmiPlan(
            id=UUID(model.id),
            user_id=model.user_id,
            course_id=UUID(model.course_id),
            course_title=model.course_title,
            total_amount_paise=model.total_amount_paise,
            months=model.months,
            due_day=model.due_day,
            start_date=model.start_date,
            status=PlanStatus(model.status),
            created_at=model.created_at,
            installments=[self._installment_to_entity(inst) for inst in model.installments],
            lock_history=[
                LockRecord(
                    id=UUID(record.id),
                    plan_id=UUID(record.plan_id),
                    locked_at=record.locked_at,
                    unlocked_at=record.unlocked_at,
                    overdue_count=record.overdue_count,
                    reason=record.reason,
                    locked_by=record.locked_by,
                )
                for record in model.lock_history
            ],
        )
