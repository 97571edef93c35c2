"""EMI service - status, payment options and installment payment use cases."""

from datetime import datetime
from typing import Dict, List
from uuid import UUID, uuid4

import structlog

from src.application.dto import (
    AllocatedInstallmentDTO,
    DueAmountsResponse,
    EmiPlanStatusResponse,
    EmiStatusDTO,
    InstallmentOrderResponse,
    InstallmentPaymentResult,
    PaymentOptionDTO,
    PlanDueDTO,
    UserEmiSummaryResponse,
)
from src.core.config import settings
from src.core.metrics import record_allocation_rejected, record_payment_applied
from src.domain.entities import (
    AccessStatus,
    EmiPlan,
    GatewayCorrelation,
    Installment,
    NotificationType,
    OutboundNotification,
    Payment,
    PaymentMethod,
    PaymentType,
    PlanStatus,
    SettledInstallment,
)
from src.domain.exceptions import (
    CourseFullyPaidException,
    EmiPlanNotFoundException,
    InvalidPaymentAmountException,
    InvalidPaymentSignatureException,
    NoDuesException,
    PaymentConflictException,
    PaymentNotCapturedException,
    PaymentNotFoundException,
    PlanNotPayableException,
)
from src.domain.interfaces import (
    EmiPlanRepository,
    PaymentGateway,
    PaymentRepository,
    UserRepository,
)
from src.service.emi import (
    EmiSettings,
    calculate_emi_status,
    calculate_payment_allocation,
    effective_access_status,
    emi_settings,
    is_terminal,
    payment_queue,
)

from .plan_mutator import PlanMutator

logger = structlog.get_logger(__name__)

OVERDUE_SOURCE = "overdue"
MONTHLY_SOURCE = "monthly"


class EmiService:
    """
    Application service for EMI plan use cases.

    Handles status reads, payment option discovery, installment order
    creation and installment payment verification.
    """

    def __init__(
        self,
        plan_repository: EmiPlanRepository,
        payment_repository: PaymentRepository,
        user_repository: UserRepository,
        payment_gateway: PaymentGateway,
        config: EmiSettings | None = None,
    ):
        self._plan_repo = plan_repository
        self._payment_repo = payment_repository
        self._gateway = payment_gateway
        self._mutator = PlanMutator(plan_repository, user_repository)
        self._config = config or emi_settings

    # =========================================================================
    # Reads
    # =========================================================================

    async def get_emi_status(
        self,
        user_id: str,
        course_id: UUID,
        now: datetime,
    ) -> EmiPlanStatusResponse:
        """
        Get the EMI status of a user's course.

        Returns:
            Full-payment summary if the course is fully paid, otherwise
            the classified plan

        Raises:
            EmiPlanNotFoundException: If there is neither a full payment
                nor a plan
        """
        if await self._payment_repo.find_completed_full_payment(user_id, course_id):
            return EmiPlanStatusResponse.full_payment(str(course_id))

        plan = await self._require_plan(user_id, course_id)
        snapshot = calculate_emi_status(plan, now)
        has_access = effective_access_status(plan.status, snapshot) == AccessStatus.ACTIVE

        return EmiPlanStatusResponse.from_plan(plan, snapshot, now, has_access)

    async def get_due_amounts(
        self,
        user_id: str,
        course_id: UUID,
        now: datetime,
    ) -> DueAmountsResponse:
        """
        List the exact amounts that would be accepted right now.

        Every option is a prefix sum of the settlement queue, so each one
        passes the exact-match check.

        Raises:
            EmiPlanNotFoundException: If the user has no plan
        """
        plan = await self._require_plan(user_id, course_id)
        snapshot = calculate_emi_status(plan, now)
        queue = [inst for inst, _ in payment_queue(plan, now)]

        sums: List[int] = []
        running = 0
        for inst in queue:
            running += inst.amount_paise
            sums.append(running)

        overdue_count = snapshot.overdue_count
        options: Dict[int, PaymentOptionDTO] = {}

        def add_option(kind: str, label: str, count: int) -> None:
            if count < 1 or count > len(queue) or count in options:
                return
            clears_overdue = overdue_count > 0 and count >= overdue_count
            options[count] = PaymentOptionDTO(
                kind=kind,
                label=label,
                amount_paise=sums[count - 1],
                installment_count=count,
                clears_overdue=clears_overdue,
                will_unlock_access=plan.status == PlanStatus.LOCKED
                and (count >= overdue_count),
            )

        if queue and not is_terminal(plan.status):
            if overdue_count:
                add_option("all_overdue", f"Pay all {overdue_count} overdue EMI(s)", overdue_count)
            add_option("single_emi", "Pay next EMI", 1)
            for months in self._config.advance_payment_months:
                add_option("multiple_emis", f"Pay {months} EMIs", months)
            if len(queue) <= self._config.max_full_remaining_installments:
                add_option("full_remaining", "Pay all remaining EMIs", len(queue))

        ordered = sorted(options.values(), key=lambda option: option.installment_count)
        recommended = None
        if ordered:
            recommended = "all_overdue" if overdue_count else "single_emi"

        return DueAmountsResponse(
            course_id=str(course_id),
            plan_id=str(plan.id),
            plan_status=plan.status.value,
            overdue_count=overdue_count,
            total_overdue_paise=snapshot.total_overdue_paise,
            next_due_amount_paise=snapshot.next_due_amount_paise,
            next_due_date=snapshot.next_due_date,
            options=ordered,
            recommended=recommended,
        )

    async def get_user_summary(self, user_id: str, now: datetime) -> UserEmiSummaryResponse:
        """Summarise every plan a user holds."""
        plans = await self._plan_repo.get_by_user_id(user_id)

        overdue: List[PlanDueDTO] = []
        upcoming: List[PlanDueDTO] = []
        counts = {status: 0 for status in PlanStatus}
        total_overdue = 0
        total_remaining = 0

        for plan in plans:
            counts[plan.status] += 1
            snapshot = calculate_emi_status(plan, now)
            total_overdue += snapshot.total_overdue_paise
            total_remaining += snapshot.total_remaining_paise
            overdue.extend(self._due_item(plan, inst) for inst in snapshot.overdue)
            pending_soon = snapshot.grace_period + snapshot.upcoming[:1]
            upcoming.extend(self._due_item(plan, inst) for inst in pending_soon)

        quick_actions = []
        if overdue:
            quick_actions.append("pay_overdue")
        if upcoming:
            quick_actions.append("pay_next_emi")
        if counts[PlanStatus.LOCKED]:
            quick_actions.append("unlock_course")

        return UserEmiSummaryResponse(
            user_id=user_id,
            total_plans=len(plans),
            active_plans=counts[PlanStatus.ACTIVE],
            locked_plans=counts[PlanStatus.LOCKED],
            completed_plans=counts[PlanStatus.COMPLETED],
            total_overdue_paise=total_overdue,
            total_remaining_paise=total_remaining,
            overdue_payments=sorted(overdue, key=lambda d: d.due_date),
            upcoming_payments=sorted(upcoming, key=lambda d: d.due_date),
            quick_actions=quick_actions,
        )

    # =========================================================================
    # Installment payments
    # =========================================================================

    async def create_overdue_order(
        self,
        user_id: str,
        course_id: UUID,
        amount_paise: int,
        now: datetime,
    ) -> InstallmentOrderResponse:
        """
        Create a gateway order to clear overdue or grace-period installments.

        Raises:
            NoDuesException: If nothing is overdue or in its grace period
            InvalidPaymentAmountException: If the amount is not an exact
                prefix sum of the settlement queue
        """
        return await self._create_installment_order(
            user_id, course_id, amount_paise, now, source=OVERDUE_SOURCE
        )

    async def create_monthly_order(
        self,
        user_id: str,
        course_id: UUID,
        amount_paise: int,
        now: datetime,
    ) -> InstallmentOrderResponse:
        """
        Create a gateway order for the next installment(s).

        Raises:
            InvalidPaymentAmountException: If the amount is not an exact
                prefix sum of the settlement queue
        """
        return await self._create_installment_order(
            user_id, course_id, amount_paise, now, source=MONTHLY_SOURCE
        )

    async def _create_installment_order(
        self,
        user_id: str,
        course_id: UUID,
        amount_paise: int,
        now: datetime,
        source: str,
    ) -> InstallmentOrderResponse:
        if await self._payment_repo.find_completed_full_payment(user_id, course_id):
            raise CourseFullyPaidException(str(course_id))

        plan = await self._require_plan(user_id, course_id)
        if is_terminal(plan.status):
            raise PlanNotPayableException(plan.status.value)

        snapshot = calculate_emi_status(plan, now)
        if source == OVERDUE_SOURCE and not (snapshot.overdue_count or snapshot.grace_period_count):
            raise NoDuesException()

        allocation = calculate_payment_allocation(plan, amount_paise, now)
        if not allocation.is_valid_amount:
            record_allocation_rejected()
            logger.info(
                "emi_allocation_rejected",
                plan_id=str(plan.id),
                user_id=user_id,
                amount_paise=amount_paise,
                suggested_amount_paise=allocation.suggested_amount_paise,
            )
            raise InvalidPaymentAmountException(
                amount_paise=amount_paise,
                suggested_amount_paise=allocation.suggested_amount_paise,
                next_installment_amount_paise=allocation.next_installment_amount_paise,
                nearest_lower_amount_paise=allocation.total_allocated_paise,
                suggested_installments=allocation.suggested_installment_count,
            )

        receipt = f"emi_{plan.id.hex[:8]}_{uuid4().hex[:12]}"
        order = await self._gateway.create_order(
            amount_paise=amount_paise,
            currency=self._config.currency,
            receipt=receipt,
            notes={
                "user_id": user_id,
                "course_id": str(course_id),
                "plan_id": str(plan.id),
                "payment_type": PaymentType.EMI_INSTALLMENT.value,
                "source": source,
                "installments": ",".join(
                    str(item.sequence_number) for item in allocation.installments
                ),
            },
        )

        await self._payment_repo.save(
            Payment(
                user_id=user_id,
                course_id=course_id,
                plan_id=plan.id,
                amount_paise=amount_paise,
                currency=order.currency,
                payment_type=PaymentType.EMI_INSTALLMENT,
                gateway_order_id=order.order_id,
                transaction_id=receipt,
                created_at=now,
            )
        )

        overdue_settled = sum(1 for item in allocation.installments if item.is_overdue)
        will_unlock = plan.status == PlanStatus.LOCKED and overdue_settled == snapshot.overdue_count

        logger.info(
            "emi_order_created",
            plan_id=str(plan.id),
            user_id=user_id,
            order_id=order.order_id,
            amount_paise=amount_paise,
            installments=len(allocation.installments),
            source=source,
        )

        return InstallmentOrderResponse(
            order_id=order.order_id,
            receipt=receipt,
            amount_paise=amount_paise,
            currency=order.currency,
            gateway_key_id=settings.razorpay_key_id,
            plan_id=str(plan.id),
            course_id=str(course_id),
            installments=[
                AllocatedInstallmentDTO.from_allocation(item) for item in allocation.installments
            ],
            will_unlock_access=will_unlock,
        )

    async def verify_installment_payment(
        self,
        user_id: str,
        correlation: GatewayCorrelation,
        now: datetime,
    ) -> InstallmentPaymentResult:
        """
        Verify a checkout and settle the installments it paid for.

        Runs inside the caller's transaction: the ledger row and the
        installment, plan and access writes commit together or not at
        all. Retrying a verified order returns the current status and
        settles nothing.

        Raises:
            InvalidPaymentSignatureException: If the signature is forged
            PaymentNotFoundException: If the order is unknown for this user
            PaymentNotCapturedException: If the gateway has not captured it
            PaymentConflictException: If the amount no longer matches the
                outstanding installments
            PaymentGatewayException: If the gateway cannot be reached
        """
        if not self._gateway.verify_signature(
            correlation.order_id, correlation.payment_id, correlation.signature
        ):
            logger.warning(
                "emi_payment_signature_invalid",
                user_id=user_id,
                order_id=correlation.order_id,
            )
            raise InvalidPaymentSignatureException(correlation.order_id)

        payment = await self._payment_repo.get_by_order_id(correlation.order_id)
        if (
            payment is None
            or payment.user_id != user_id
            or payment.payment_type != PaymentType.EMI_INSTALLMENT
            or payment.plan_id is None
        ):
            raise PaymentNotFoundException(correlation.order_id)

        plan = await self._plan_repo.get_by_id(payment.plan_id)
        if plan is None:
            raise EmiPlanNotFoundException(user_id, str(payment.course_id))

        if payment.is_completed:
            return self._already_processed(plan, correlation, now)

        gateway_payment = await self._gateway.fetch_payment(correlation.payment_id)
        if not gateway_payment.is_captured:
            raise PaymentNotCapturedException(correlation.payment_id, gateway_payment.status)
        if gateway_payment.order_id and gateway_payment.order_id != correlation.order_id:
            raise PaymentConflictException("Payment does not belong to this order")

        allocation = calculate_payment_allocation(plan, payment.amount_paise, now)
        if not allocation.is_valid_amount:
            raise PaymentConflictException(
                "Paid amount no longer matches the outstanding installments; "
                "the payment will be reconciled manually"
            )

        completed = await self._payment_repo.mark_completed(
            payment.id,
            correlation,
            PaymentMethod.from_gateway(gateway_payment.method),
            now,
            installments=[
                SettledInstallment(
                    installment_id=item.installment_id,
                    sequence_number=item.sequence_number,
                    amount_paise=item.amount_paise,
                    was_overdue=item.is_overdue,
                )
                for item in allocation.installments
            ],
        )
        if not completed:
            return self._already_processed(plan, correlation, now)

        application = await self._mutator.update_emi_after_payment(
            plan, allocation, correlation, now
        )

        source = OVERDUE_SOURCE if allocation.clears_overdue else MONTHLY_SOURCE
        record_payment_applied(source, application.updated_count)

        access_restored = (
            application.previous_status == PlanStatus.LOCKED
            and application.new_status != PlanStatus.LOCKED
        )
        notifications = ()
        if access_restored:
            notifications = (
                OutboundNotification(
                    user_id=user_id,
                    notification_type=NotificationType.UNLOCK,
                    payload={
                        "course_id": str(plan.course_id),
                        "course_title": plan.course_title,
                        "plan_status": application.new_status.value,
                    },
                ),
            )

        return InstallmentPaymentResult(
            order_id=correlation.order_id,
            payment_id=correlation.payment_id,
            plan_id=str(plan.id),
            already_processed=False,
            updated_installments=application.updated_count,
            installment_ids=list(application.updated_installment_ids),
            previous_status=application.previous_status.value,
            plan_status=application.new_status.value,
            access_restored=access_restored,
            status=EmiStatusDTO.from_snapshot(application.emi_status),
            notifications=notifications,
        )

    # =========================================================================
    # Helpers
    # =========================================================================

    async def _require_plan(self, user_id: str, course_id: UUID) -> EmiPlan:
        plan = await self._plan_repo.get_by_user_and_course(user_id, course_id)
        if plan is None:
            raise EmiPlanNotFoundException(user_id, str(course_id))
        return plan

    def _already_processed(
        self,
        plan: EmiPlan,
        correlation: GatewayCorrelation,
        now: datetime,
    ) -> InstallmentPaymentResult:
        logger.info(
            "emi_payment_already_processed",
            plan_id=str(plan.id),
            order_id=correlation.order_id,
        )
        snapshot = calculate_emi_status(plan, now)
        return InstallmentPaymentResult(
            order_id=correlation.order_id,
            payment_id=correlation.payment_id,
            plan_id=str(plan.id),
            already_processed=True,
            updated_installments=0,
            installment_ids=[],
            previous_status=plan.status.value,
            plan_status=plan.status.value,
            access_restored=False,
            status=EmiStatusDTO.from_snapshot(snapshot),
        )

    @staticmethod
    def _due_item(plan: EmiPlan, installment: Installment) -> PlanDueDTO:
        return PlanDueDTO(
            plan_id=str(plan.id),
            course_id=str(plan.course_id),
            course_title=plan.course_title,
            plan_status=plan.status.value,
            sequence_number=installment.sequence_number,
            period_label=installment.period_label,
            due_date=installment.due_date,
            amount_paise=installment.amount_paise,
        )
