"""PostgreSQL repository implementation for courses."""

from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.domain.entities import Course
from src.domain.interfaces import CourseRepository
from src.infrastructure.database.models import CourseModel


class PostgresCourseRepository(CourseRepository):
    """PostgreSQL-backed course repository."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def save(self, course: Course) -> Course:
        self._session.add(
            CourseModel(
                id=str(course.id),
                title=course.title,
                price_paise=course.price_paise,
                emi_enabled=course.emi_enabled,
                emi_months=course.emi_months,
                emi_monthly_amount_paise=course.emi_monthly_amount_paise,
                emi_notes=course.emi_notes,
                created_at=course.created_at,
            )
        )
        await self._session.flush()

        return course

    async def get_by_id(self, course_id: UUID) -> Optional[Course]:
        result = await self._session.execute(
            select(CourseModel).where(CourseModel.id == str(course_id))
        )
        model = result.scalar_one_or_none()

        if model is None:
            return None

        return Course(
            id=UUID(model.id),
            title=model.title,
            price_paise=model.price_paise,
            emi_enabled=model.emi_enabled,
            emi_months=model.emi_months,
            emi_monthly_amount_paise=model.emi_monthly_amount_paise,
            emi_notes=model.emi_notes,
            created_at=model.created_at,
        )
