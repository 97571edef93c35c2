"""Dependency injection for FastAPI."""

from contextlib import asynccontextmanager
from datetime import datetime
from typing import Annotated, AsyncGenerator, Optional
from uuid import UUID

from fastapi import Depends, Header, Path
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.clock import utcnow
from src.domain.entities import CourseAccessDecision
from src.domain.exceptions import MissingUserIdentityException
from src.infrastructure.database import db_manager, get_db_session
from src.infrastructure.repositories import (
    PostgresCourseRepository,
    PostgresEmiPlanRepository,
    PostgresPaymentRepository,
    PostgresUserRepository,
)
from src.infrastructure.clients import (
    HttpNotificationSender,
    RazorpayGatewayClient,
)
from src.application.services import (
    CourseAccessService,
    EmiService,
    EmiSweeper,
    EnrollmentService,
    PlanMutator,
    PlanStore,
)


# Request clock
def get_now() -> datetime:
    """Current time (naive UTC) for the request."""
    return utcnow()


# Caller identity
async def get_current_user_id(
    x_user_id: Annotated[Optional[str], Header(description="Authenticated user id")] = None,
) -> str:
    """Caller identity, set by the upstream auth layer."""
    if not x_user_id or not x_user_id.strip():
        raise MissingUserIdentityException()
    return x_user_id.strip()


# Repository dependencies
async def get_plan_repository(
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> PostgresEmiPlanRepository:
    """Get an EmiPlanRepository instance."""
    return PostgresEmiPlanRepository(session)


async def get_payment_repository(
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> PostgresPaymentRepository:
    """Get a PaymentRepository instance."""
    return PostgresPaymentRepository(session)


async def get_course_repository(
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> PostgresCourseRepository:
    """Get a CourseRepository instance."""
    return PostgresCourseRepository(session)


async def get_user_repository(
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> PostgresUserRepository:
    """Get a UserRepository instance."""
    return PostgresUserRepository(session)


# External client dependencies
def get_payment_gateway() -> RazorpayGatewayClient:
    """Get a PaymentGateway instance."""
    return RazorpayGatewayClient()


def get_notification_sender() -> HttpNotificationSender:
    """Get a NotificationSender instance."""
    return HttpNotificationSender()


@asynccontextmanager
async def plan_store_scope() -> AsyncGenerator[PlanStore, None]:
    """One transaction with plan and user repositories bound to it."""
    async with db_manager.session() as session:
        yield PlanStore(
            plans=PostgresEmiPlanRepository(session),
            users=PostgresUserRepository(session),
        )


def get_plan_store_scope():
    """Get the per-plan transaction factory used by batch sweeps."""
    return plan_store_scope


# Service dependencies
async def get_emi_service(
    plan_repo: Annotated[PostgresEmiPlanRepository, Depends(get_plan_repository)],
    payment_repo: Annotated[PostgresPaymentRepository, Depends(get_payment_repository)],
    user_repo: Annotated[PostgresUserRepository, Depends(get_user_repository)],
    gateway: Annotated[RazorpayGatewayClient, Depends(get_payment_gateway)],
) -> EmiService:
    """Get an EmiService instance with all dependencies."""
    return EmiService(
        plan_repository=plan_repo,
        payment_repository=payment_repo,
        user_repository=user_repo,
        payment_gateway=gateway,
    )


async def get_enrollment_service(
    course_repo: Annotated[PostgresCourseRepository, Depends(get_course_repository)],
    user_repo: Annotated[PostgresUserRepository, Depends(get_user_repository)],
    plan_repo: Annotated[PostgresEmiPlanRepository, Depends(get_plan_repository)],
    payment_repo: Annotated[PostgresPaymentRepository, Depends(get_payment_repository)],
    gateway: Annotated[RazorpayGatewayClient, Depends(get_payment_gateway)],
) -> EnrollmentService:
    """Get an EnrollmentService instance with all dependencies."""
    return EnrollmentService(
        course_repository=course_repo,
        user_repository=user_repo,
        plan_repository=plan_repo,
        payment_repository=payment_repo,
        payment_gateway=gateway,
    )


async def get_access_service(
    payment_repo: Annotated[PostgresPaymentRepository, Depends(get_payment_repository)],
    plan_repo: Annotated[PostgresEmiPlanRepository, Depends(get_plan_repository)],
) -> CourseAccessService:
    """Get a CourseAccessService instance."""
    return CourseAccessService(payment_repository=payment_repo, plan_repository=plan_repo)


async def get_plan_mutator(
    plan_repo: Annotated[PostgresEmiPlanRepository, Depends(get_plan_repository)],
    user_repo: Annotated[PostgresUserRepository, Depends(get_user_repository)],
) -> PlanMutator:
    """Get a PlanMutator instance."""
    return PlanMutator(plan_repository=plan_repo, user_repository=user_repo)


def get_emi_sweeper(
    store_scope=Depends(get_plan_store_scope),
    notifier: HttpNotificationSender = Depends(get_notification_sender),
) -> EmiSweeper:
    """Get an EmiSweeper instance."""
    return EmiSweeper(store_scope=store_scope, notifier=notifier)


# Access gate
async def require_course_access(
    course_id: Annotated[UUID, Path(description="UUID of the course")],
    user_id: Annotated[str, Depends(get_current_user_id)],
    access_service: Annotated[CourseAccessService, Depends(get_access_service)],
    now: Annotated[datetime, Depends(get_now)],
) -> CourseAccessDecision:
    """
    Guard for course-content routes.

    Attaches the access decision for the handler to branch on; it never
    rejects the request itself.
    """
    return await access_service.check_course_access(user_id, course_id, now)
