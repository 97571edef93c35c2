"""PostgreSQL repository implementation for the payment ledger."""

from datetime import datetime
from typing import List, Optional, Sequence
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.domain.entities import (
    GatewayCorrelation,
    Payment,
    PaymentMethod,
    PaymentStatus,
    PaymentType,
    SettledInstallment,
)
from src.domain.interfaces import PaymentRepository
from src.infrastructure.database.models import PaymentModel


class PostgresPaymentRepository(PaymentRepository):
    """PostgreSQL-backed payment ledger."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def save(self, payment: Payment) -> Payment:
        model = PaymentModel(
            id=str(payment.id),
            user_id=payment.user_id,
            course_id=str(payment.course_id),
            plan_id=str(payment.plan_id) if payment.plan_id else None,
            transaction_id=payment.transaction_id,
            amount_paise=payment.amount_paise,
            currency=payment.currency,
            payment_type=payment.payment_type.value,
            status=payment.status.value,
            method=payment.method.value if payment.method else None,
            emi_due_day=payment.emi_due_day,
            gateway_order_id=payment.gateway_order_id,
            gateway_payment_id=payment.gateway_payment_id,
            gateway_signature=payment.gateway_signature,
            installments=[inst.to_dict() for inst in payment.installments],
            created_at=payment.created_at,
            completed_at=payment.completed_at,
        )

        self._session.add(model)
        await self._session.flush()

        return payment

    async def get_by_order_id(self, order_id: str) -> Optional[Payment]:
        stmt = (
            select(PaymentModel)
            .where(PaymentModel.gateway_order_id == order_id)
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if model is None:
            return None

        return self._to_entity(model)

    async def find_completed_full_payment(self, user_id: str, course_id: UUID) -> Optional[Payment]:
        stmt = (
            select(PaymentModel)
            .where(
                PaymentModel.user_id == user_id,
                PaymentModel.course_id == str(course_id),
                PaymentModel.payment_type == PaymentType.FULL.value,
                PaymentModel.status == PaymentStatus.COMPLETED.value,
            )
            .order_by(PaymentModel.completed_at.desc())
            .limit(1)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if model is None:
            return None

        return self._to_entity(model)

    async def list_by_user_and_course(self, user_id: str, course_id: UUID) -> List[Payment]:
        stmt = (
            select(PaymentModel)
            .where(
                PaymentModel.user_id == user_id,
                PaymentModel.course_id == str(course_id),
            )
            .order_by(PaymentModel.created_at.desc())
        )
        result = await self._session.execute(stmt)

        return [self._to_entity(model) for model in result.scalars().all()]

    async def mark_completed(
        self,
        payment_id: UUID,
        correlation: GatewayCorrelation,
        method: PaymentMethod,
        completed_at: datetime,
        installments: Sequence[SettledInstallment] = (),
        plan_id: Optional[UUID] = None,
    ) -> bool:
        values = {
            "status": PaymentStatus.COMPLETED.value,
            "gateway_payment_id": correlation.payment_id,
            "gateway_signature": correlation.signature,
            "method": method.value,
            "completed_at": completed_at,
            "installments": [inst.to_dict() for inst in installments],
        }
        if plan_id is not None:
            values["plan_id"] = str(plan_id)

        result = await self._session.execute(
            update(PaymentModel)
            .where(
                PaymentModel.id == str(payment_id),
                PaymentModel.status == PaymentStatus.PENDING.value,
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )

        return result.rowcount == 1

    def _to_entity(self, model: PaymentModel) -> Payment:
        return Payment(
            id=UUID(model.id),
            user_id=model.user_id,
            course_id=UUID(model.course_id),
            plan_id=UUID(model.plan_id) if model.plan_id else None,
            transaction_id=model.transaction_id,
            amount_paise=model.amount_paise,
            currency=model.currency,
            payment_type=PaymentType(model.payment_type),
            status=PaymentStatus(model.status),
            method=PaymentMethod(model.method) if model.method else None,
            emi_due_day=model.emi_due_day,
            gateway_order_id=model.gateway_order_id,
            gateway_payment_id=model.gateway_payment_id,
            gateway_signature=model.gateway_signature,
            installments=[
                SettledInstallment(
                    installment_id=item["installment_id"],
                    sequence_number=item["sequence_number"],
                    amount_paise=item["amount_paise"],
                    was_overdue=item["was_overdue"],
                )
                for item in (model.installments or [])
            ],
            created_at=model.created_at,
            completed_at=model.completed_at,
        )
