"""Enrollment service - course purchase orders, verification and plan creation."""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

import structlog

from src.application.dto import (
    CourseOrderRequest,
    CourseOrderResponse,
    CourseVerificationResult,
    EmiDetailsDTO,
    PaymentRecordDTO,
    PaymentStatusResponse,
)
from src.core.config import settings
from src.core.metrics import record_course_order
from src.domain.entities import (
    AccessStatus,
    Course,
    EmiPlan,
    Enrollment,
    GatewayCorrelation,
    NotificationType,
    OutboundNotification,
    Payment,
    PaymentMethod,
    PaymentType,
    SettledInstallment,
)
from src.domain.exceptions import (
    AlreadyEnrolledException,
    CourseNotFoundException,
    InvalidPaymentAmountException,
    InvalidPaymentRequestException,
    InvalidPaymentSignatureException,
    PaymentConflictException,
    PaymentNotCapturedException,
    PaymentNotFoundException,
    UserNotFoundException,
)
from src.domain.interfaces import (
    CourseRepository,
    EmiPlanRepository,
    PaymentGateway,
    PaymentRepository,
    UserRepository,
)
from src.service.emi import (
    EmiSettings,
    build_installments,
    emi_settings,
    get_emi_details,
    validate_course_for_emi,
)

logger = structlog.get_logger(__name__)


class EnrollmentService:
    """
    Application service for buying a course.

    A course is bought either outright (``full``) or on installments
    (``emi``). For EMI the first installment is the purchase payment and
    the plan is created when that payment is verified.
    """

    def __init__(
        self,
        course_repository: CourseRepository,
        user_repository: UserRepository,
        plan_repository: EmiPlanRepository,
        payment_repository: PaymentRepository,
        payment_gateway: PaymentGateway,
        config: EmiSettings | None = None,
    ):
        self._course_repo = course_repository
        self._user_repo = user_repository
        self._plan_repo = plan_repository
        self._payment_repo = payment_repository
        self._gateway = payment_gateway
        self._config = config or emi_settings

    async def get_emi_details(self, course_id: UUID) -> EmiDetailsDTO:
        """
        Describe a course's EMI offer.

        Raises:
            CourseNotFoundException: If the course doesn't exist
        """
        course = await self._require_course(course_id)
        return EmiDetailsDTO.from_details(str(course.id), get_emi_details(course))

    async def create_course_order(
        self,
        request: CourseOrderRequest,
        now: datetime,
    ) -> CourseOrderResponse:
        """
        Create a gateway order for a course purchase.

        Args:
            request: Purchase request (full price or first installment)
            now: Current time (naive UTC)

        Returns:
            CourseOrderResponse with the gateway order to check out

        Raises:
            InvalidPaymentRequestException: If request validation fails
            UserNotFoundException: If the user doesn't exist
            CourseNotFoundException: If the course doesn't exist
            AlreadyEnrolledException: If the user is already enrolled
            EmiNotAvailableException: If EMI was chosen but is not offered
            InvalidPaymentAmountException: If the amount is not the price
                (full) or the monthly amount (emi)
        """
        errors = request.validate(self._config.min_due_day, self._config.max_due_day)
        if errors:
            raise InvalidPaymentRequestException("; ".join(errors))

        course_id = UUID(request.course_id)
        log = logger.bind(
            user_id=request.user_id,
            course_id=request.course_id,
            payment_type=request.payment_type,
        )

        if await self._user_repo.get_by_id(request.user_id) is None:
            raise UserNotFoundException(request.user_id)

        course = await self._require_course(course_id)

        if await self._user_repo.get_enrollment(request.user_id, course_id) is not None:
            raise AlreadyEnrolledException(request.user_id, request.course_id)

        payment_type = PaymentType(request.payment_type)
        if payment_type == PaymentType.EMI:
            details = validate_course_for_emi(course, self._config)
            expected = details.monthly_amount_paise
            label = "EMI payment must equal the monthly amount"
        else:
            expected = course.price_paise
            label = "Payment must equal the course price"

        if request.amount_paise != expected:
            raise InvalidPaymentAmountException(
                amount_paise=request.amount_paise,
                suggested_amount_paise=expected,
                next_installment_amount_paise=expected,
                suggested_installments=1 if payment_type == PaymentType.EMI else 0,
                message=f"{label} {expected}",
            )

        receipt = f"course_{course.id.hex[:8]}_{uuid4().hex[:12]}"
        order = await self._gateway.create_order(
            amount_paise=expected,
            currency=self._config.currency,
            receipt=receipt,
            notes={
                "user_id": request.user_id,
                "course_id": request.course_id,
                "payment_type": payment_type.value,
                "emi_due_day": request.emi_due_day or "",
            },
        )

        await self._payment_repo.save(
            Payment(
                user_id=request.user_id,
                course_id=course_id,
                amount_paise=expected,
                currency=order.currency,
                payment_type=payment_type,
                gateway_order_id=order.order_id,
                transaction_id=receipt,
                emi_due_day=request.emi_due_day if payment_type == PaymentType.EMI else None,
                created_at=now,
            )
        )
        record_course_order(payment_type.value)
        log.info("course_order_created", order_id=order.order_id, amount_paise=expected)

        return CourseOrderResponse(
            order_id=order.order_id,
            receipt=receipt,
            amount_paise=expected,
            currency=order.currency,
            gateway_key_id=settings.razorpay_key_id,
            course_id=request.course_id,
            payment_type=payment_type.value,
            emi_due_day=request.emi_due_day if payment_type == PaymentType.EMI else None,
        )

    async def verify_course_payment(
        self,
        user_id: str,
        correlation: GatewayCorrelation,
        now: datetime,
    ) -> CourseVerificationResult:
        """
        Verify a course purchase and enroll the user.

        The ledger update, plan creation and enrollment commit together.
        The welcome notification is returned for sending after commit.

        Raises:
            InvalidPaymentSignatureException: If the signature is forged
            PaymentNotFoundException: If the order is unknown for this user
            PaymentNotCapturedException: If the gateway has not captured it
            PaymentConflictException: If the user enrolled through another order
            PaymentGatewayException: If the gateway cannot be reached
        """
        if not self._gateway.verify_signature(
            correlation.order_id, correlation.payment_id, correlation.signature
        ):
            logger.warning(
                "course_payment_signature_invalid",
                user_id=user_id,
                order_id=correlation.order_id,
            )
            raise InvalidPaymentSignatureException(correlation.order_id)

        payment = await self._payment_repo.get_by_order_id(correlation.order_id)
        if (
            payment is None
            or payment.user_id != user_id
            or payment.payment_type not in (PaymentType.FULL, PaymentType.EMI)
        ):
            raise PaymentNotFoundException(correlation.order_id)

        if payment.is_completed:
            return await self._already_processed(payment, correlation)

        gateway_payment = await self._gateway.fetch_payment(correlation.payment_id)
        if not gateway_payment.is_captured:
            raise PaymentNotCapturedException(correlation.payment_id, gateway_payment.status)

        method = PaymentMethod.from_gateway(gateway_payment.method)
        course = await self._require_course(payment.course_id)

        enrollment = await self._user_repo.get_enrollment(user_id, payment.course_id)
        if enrollment is not None:
            return await self._settle_for_enrolled(
                payment, enrollment, course, correlation, method, now
            )

        plan: Optional[EmiPlan] = None
        settled = []
        if payment.payment_type == PaymentType.EMI:
            plan = self._build_plan(user_id, course, payment, correlation, now)
            first = plan.installments[0]
            settled = [
                SettledInstallment(
                    installment_id=str(first.id),
                    sequence_number=first.sequence_number,
                    amount_paise=first.amount_paise,
                    was_overdue=False,
                )
            ]

        completed = await self._payment_repo.mark_completed(
            payment.id,
            correlation,
            method,
            now,
            installments=settled,
            plan_id=plan.id if plan else None,
        )
        if not completed:
            return await self._already_processed(payment, correlation)

        if plan is not None:
            await self._plan_repo.save(plan)

        await self._user_repo.add_enrollment(
            Enrollment(
                user_id=user_id,
                course_id=payment.course_id,
                payment_type=payment.payment_type.value,
                access_status=AccessStatus.ACTIVE,
                plan_id=plan.id if plan else None,
                enrolled_at=now,
            )
        )

        logger.info(
            "course_payment_verified",
            user_id=user_id,
            course_id=str(payment.course_id),
            order_id=correlation.order_id,
            payment_type=payment.payment_type.value,
            method=method.value,
            plan_id=str(plan.id) if plan else None,
        )

        welcome = OutboundNotification(
            user_id=user_id,
            notification_type=NotificationType.WELCOME,
            payload={
                "course_id": str(course.id),
                "course_title": course.title,
                "payment_type": payment.payment_type.value,
                "plan_id": str(plan.id) if plan else None,
            },
        )

        return CourseVerificationResult(
            order_id=correlation.order_id,
            payment_id=correlation.payment_id,
            course_id=str(payment.course_id),
            payment_type=payment.payment_type.value,
            already_processed=False,
            access_status=AccessStatus.ACTIVE.value,
            method=method.value,
            plan_id=str(plan.id) if plan else None,
            notifications=(welcome,),
        )

    async def get_payment_status(self, user_id: str, course_id: UUID) -> PaymentStatusResponse:
        """Report whether a course is paid in full, on EMI, or not at all."""
        payments = await self._payment_repo.list_by_user_and_course(user_id, course_id)
        enrollment = await self._user_repo.get_enrollment(user_id, course_id)

        completed_types = {p.payment_type for p in payments if p.is_completed}
        if PaymentType.FULL in completed_types:
            payment_type = "full"
        elif completed_types & {PaymentType.EMI, PaymentType.EMI_INSTALLMENT}:
            payment_type = "emi"
        else:
            payment_type = "none"

        return PaymentStatusResponse(
            course_id=str(course_id),
            payment_type=payment_type,
            enrolled=enrollment is not None,
            access_status=enrollment.access_status.value if enrollment else None,
            payments=[PaymentRecordDTO.from_entity(p) for p in payments],
        )

    async def _settle_for_enrolled(
        self,
        payment: Payment,
        enrollment: Enrollment,
        course: Course,
        correlation: GatewayCorrelation,
        method: PaymentMethod,
        now: datetime,
    ) -> CourseVerificationResult:
        """
        Settle a captured purchase for a user who enrolled through another order.

        A full payment on top of an EMI enrollment upgrades it; the plan is
        left as it is. Anything else is a duplicate purchase.

        Raises:
            PaymentConflictException: If the purchase duplicates the enrollment
        """
        upgrade = (
            payment.payment_type == PaymentType.FULL
            and enrollment.payment_type == PaymentType.EMI.value
        )
        if not upgrade:
            logger.warning(
                "course_payment_duplicate_capture",
                user_id=payment.user_id,
                course_id=str(payment.course_id),
                order_id=correlation.order_id,
                payment_id=correlation.payment_id,
                amount_paise=payment.amount_paise,
                payment_type=payment.payment_type.value,
                enrolled_as=enrollment.payment_type,
            )
            raise PaymentConflictException(
                f"Already enrolled in course {payment.course_id}; "
                f"payment {correlation.payment_id} was not applied and is due for refund"
            )

        completed = await self._payment_repo.mark_completed(payment.id, correlation, method, now)
        if not completed:
            return await self._already_processed(payment, correlation)

        await self._user_repo.upgrade_to_full_payment(payment.user_id, payment.course_id)

        logger.info(
            "course_payment_upgraded",
            user_id=payment.user_id,
            course_id=str(payment.course_id),
            order_id=correlation.order_id,
            method=method.value,
            plan_id=str(enrollment.plan_id) if enrollment.plan_id else None,
        )

        confirmation = OutboundNotification(
            user_id=payment.user_id,
            notification_type=NotificationType.WELCOME,
            payload={
                "course_id": str(course.id),
                "course_title": course.title,
                "payment_type": PaymentType.FULL.value,
                "plan_id": None,
            },
        )

        return CourseVerificationResult(
            order_id=correlation.order_id,
            payment_id=correlation.payment_id,
            course_id=str(payment.course_id),
            payment_type=PaymentType.FULL.value,
            already_processed=False,
            access_status=AccessStatus.ACTIVE.value,
            method=method.value,
            plan_id=None,
            notifications=(confirmation,),
        )

    def _build_plan(
        self,
        user_id: str,
        course: Course,
        payment: Payment,
        correlation: GatewayCorrelation,
        now: datetime,
    ) -> EmiPlan:
        details = validate_course_for_emi(course, self._config)
        plan = EmiPlan(
            user_id=user_id,
            course_id=course.id,
            course_title=course.title,
            total_amount_paise=details.total_amount_paise,
            months=details.months,
            due_day=payment.emi_due_day or now.day,
            start_date=now,
            created_at=now,
        )
        plan.installments = build_installments(
            plan_id=plan.id,
            monthly_amount_paise=details.monthly_amount_paise,
            months=details.months,
            due_day=plan.due_day,
            now=now,
            grace_days=self._config.grace_period_days,
            first_payment=correlation,
        )
        return plan

    async def _already_processed(
        self,
        payment: Payment,
        correlation: GatewayCorrelation,
    ) -> CourseVerificationResult:
        enrollment = await self._user_repo.get_enrollment(payment.user_id, payment.course_id)
        return CourseVerificationResult(
            order_id=correlation.order_id,
            payment_id=correlation.payment_id,
            course_id=str(payment.course_id),
            payment_type=payment.payment_type.value,
            already_processed=True,
            access_status=(
                enrollment.access_status.value if enrollment else AccessStatus.LOCKED.value
            ),
            method=payment.method.value if payment.method else None,
            plan_id=str(payment.plan_id) if payment.plan_id else None,
        )

    async def _require_course(self, course_id: UUID) -> Course:
        course = await self._course_repo.get_by_id(course_id)
        if course is None:
            raise CourseNotFoundException(str(course_id))
        return course
