"""PostgreSQL repository implementation for users and enrollments."""

from typing import Optional
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.domain.entities import AccessStatus, Enrollment, PaymentType, User
from src.domain.interfaces import UserRepository
from src.infrastructure.database.models import EnrollmentModel, UserModel


class PostgresUserRepository(UserRepository):
    """PostgreSQL-backed user and enrollment repository."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def save(self, user: User) -> User:
        self._session.add(
            UserModel(
                id=user.id,
                name=user.name,
                email=user.email,
                phone=user.phone,
                created_at=user.created_at,
            )
        )
        await self._session.flush()

        return user

    async def get_by_id(self, user_id: str) -> Optional[User]:
        result = await self._session.execute(
            select(UserModel).where(UserModel.id == user_id)
        )
        model = result.scalar_one_or_none()

        if model is None:
            return None

        return User(
            id=model.id,
            name=model.name,
            email=model.email,
            phone=model.phone,
            created_at=model.created_at,
        )

    async def get_enrollment(self, user_id: str, course_id: UUID) -> Optional[Enrollment]:
        result = await self._session.execute(
            select(EnrollmentModel)
            .where(
                EnrollmentModel.user_id == user_id,
                EnrollmentModel.course_id == str(course_id),
            )
            .execution_options(populate_existing=True)
        )
        model = result.scalar_one_or_none()

        if model is None:
            return None

        return Enrollment(
            user_id=model.user_id,
            course_id=UUID(model.course_id),
            payment_type=model.payment_type,
            access_status=AccessStatus(model.access_status),
            plan_id=UUID(model.plan_id) if model.plan_id else None,
            enrolled_at=model.enrolled_at,
        )

    async def add_enrollment(self, enrollment: Enrollment) -> Enrollment:
        self._session.add(
            EnrollmentModel(
                user_id=enrollment.user_id,
                course_id=str(enrollment.course_id),
                payment_type=enrollment.payment_type,
                access_status=enrollment.access_status.value,
                plan_id=str(enrollment.plan_id) if enrollment.plan_id else None,
                enrolled_at=enrollment.enrolled_at,
            )
        )
        await self._session.flush()

        return enrollment

    async def set_access_status(
        self,
        user_id: str,
        course_id: UUID,
        access_status: AccessStatus,
    ) -> bool:
        result = await self._session.execute(
            update(EnrollmentModel)
            .where(
                EnrollmentModel.user_id == user_id,
                EnrollmentModel.course_id == str(course_id),
                EnrollmentModel.payment_type == PaymentType.EMI.value,
                EnrollmentModel.access_status != access_status.value,
            )
            .values(access_status=access_status.value)
            .execution_options(synchronize_session=False)
        )

        return result.rowcount == 1

    async def upgrade_to_full_payment(self, user_id: str, course_id: UUID) -> bool:
        result = await self._session.execute(
            update(EnrollmentModel)
            .where(
                EnrollmentModel.user_id == user_id,
                EnrollmentModel.course_id == str(course_id),
                EnrollmentModel.payment_type == PaymentType.EMI.value,
            )
            .values(
                payment_type=PaymentType.FULL.value,
                access_status=AccessStatus.ACTIVE.value,
            )
            .execution_options(synchronize_session=False)
        )

        return result.rowcount == 1
