"""Repository interfaces for data persistence."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional, Sequence, Tuple
from uuid import UUID

from src.domain.entities import (
    AccessStatus,
    Course,
    EmiPlan,
    Enrollment,
    GatewayCorrelation,
    Installment,
    Payment,
    PaymentMethod,
    PlanStatus,
    SettledInstallment,
    User,
)


class EmiPlanRepository(ABC):
    """
    Abstract repository for EMI plan persistence.

    Write methods are conditional updates: they only change rows still in
    the expected state and report how much actually changed, so retried
    or concurrent writers cannot apply the same change twice.
    """

    @abstractmethod
    async def save(self, plan: EmiPlan) -> EmiPlan:
        """
        Persist a new plan with its installments.

        Args:
            plan: The plan to save

        Returns:
            The saved plan
        """
        ...

    @abstractmethod
    async def get_by_id(self, plan_id: UUID) -> Optional[EmiPlan]:
        """
        Retrieve a plan with installments and lock history, read fresh
        from the store.

        Args:
            plan_id: The plan's unique identifier

        Returns:
            The plan if found, None otherwise
        """
        ...

    @abstractmethod
    async def get_by_user_and_course(self, user_id: str, course_id: UUID) -> Optional[EmiPlan]:
        """
        Retrieve the single plan for a (user, course) pair.

        Returns:
            The plan if found, None otherwise
        """
        ...

    @abstractmethod
    async def get_by_user_id(self, user_id: str) -> List[EmiPlan]:
        """Retrieve all plans for a user, newest first."""
        ...

    @abstractmethod
    async def list_ids_by_status(self, statuses: Sequence[PlanStatus]) -> List[UUID]:
        """List identifiers of plans whose status is in ``statuses``."""
        ...

    @abstractmethod
    async def mark_installment_paid(
        self,
        plan_id: UUID,
        installment_id: UUID,
        paid_at: datetime,
        correlation: GatewayCorrelation,
    ) -> bool:
        """
        Set an installment to paid unless it already is.

        Args:
            plan_id: Owning plan
            installment_id: Installment to settle
            paid_at: Payment timestamp
            correlation: Gateway identifiers to store

        Returns:
            True if this call changed the row, False if it was already paid
        """
        ...

    @abstractmethod
    async def mark_overdue_installments_late(self, plan_id: UUID, now: datetime) -> List[Installment]:
        """
        Flip pending installments whose grace period ended before ``now``
        to late.

        Returns:
            The installments this call changed
        """
        ...

    @abstractmethod
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
        """
        Move a plan from ``from_status`` to ``to_status``.

        Entering ``locked`` opens a lock-history entry; leaving ``locked``
        closes the open one.

        Returns:
            True if the plan was still in ``from_status`` and moved,
            False if another writer got there first
        """
        ...

    @abstractmethod
    async def find_installments_due_between(
        self,
        start: datetime,
        end: datetime,
        plan_status: PlanStatus = PlanStatus.ACTIVE,
    ) -> List[Tuple[EmiPlan, Installment]]:
        """
        Find pending installments due in ``[start, end]`` on plans with
        ``plan_status``.
        """
        ...


class PaymentRepository(ABC):
    """Abstract repository for the payment ledger."""

    @abstractmethod
    async def save(self, payment: Payment) -> Payment:
        """Persist a new (pending) ledger row."""
        ...

    @abstractmethod
    async def get_by_order_id(self, order_id: str) -> Optional[Payment]:
        """
        Retrieve the ledger row for a gateway order.

        Returns:
            The payment if found, None otherwise
        """
        ...

    @abstractmethod
    async def find_completed_full_payment(self, user_id: str, course_id: UUID) -> Optional[Payment]:
        """Retrieve a completed full (non-EMI) payment for a course."""
        ...

    @abstractmethod
    async def list_by_user_and_course(self, user_id: str, course_id: UUID) -> List[Payment]:
        """List ledger rows for a (user, course) pair, newest first."""
        ...

    @abstractmethod
    async def mark_completed(
        self,
        payment_id: UUID,
        correlation: GatewayCorrelation,
        method: PaymentMethod,
        completed_at: datetime,
        installments: Sequence[SettledInstallment] = (),
        plan_id: Optional[UUID] = None,
    ) -> bool:
        """
        Complete a pending ledger row.

        Returns:
            True if the row was pending and is now completed, False if it
            had already been completed
        """
        ...


class CourseRepository(ABC):
    """Abstract repository for course lookups."""

    @abstractmethod
    async def save(self, course: Course) -> Course:
        ...

    @abstractmethod
    async def get_by_id(self, course_id: UUID) -> Optional[Course]:
        ...


class UserRepository(ABC):
    """
    Abstract repository for users and their enrollments.

    ``set_access_status`` is the only writer of the access cache on EMI
    enrollments; ``upgrade_to_full_payment`` moves an enrollment off EMI
    for good.
    """

    @abstractmethod
    async def save(self, user: User) -> User:
        ...

    @abstractmethod
    async def get_by_id(self, user_id: str) -> Optional[User]:
        ...

    @abstractmethod
    async def get_enrollment(self, user_id: str, course_id: UUID) -> Optional[Enrollment]:
        ...

    @abstractmethod
    async def add_enrollment(self, enrollment: Enrollment) -> Enrollment:
        ...

    @abstractmethod
    async def set_access_status(
        self,
        user_id: str,
        course_id: UUID,
        access_status: AccessStatus,
    ) -> bool:
        """
        Align the enrollment access cache with the plan.

        Returns:
            True if the stored value changed
        """
        ...

    @abstractmethod
    async def upgrade_to_full_payment(self, user_id: str, course_id: UUID) -> bool:
        """
        Mark an EMI enrollment as paid in full and restore access.

        Returns:
            True if an EMI enrollment was upgraded
        """
        ...
