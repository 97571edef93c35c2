"""SQLAlchemy ORM models for EMI billing entities.

Timestamps are stored as naive UTC.
"""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    JSON,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from src.core.clock import utcnow


class Base(DeclarativeBase):
    pass


class CourseModel(Base):
    """Course with its optional EMI offer."""

    __tablename__ = "courses"

    id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    price_paise: Mapped[int] = mapped_column(Integer, nullable=False)
    emi_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    emi_months: Mapped[int | None] = mapped_column(Integer, nullable=True)
    emi_monthly_amount_paise: Mapped[int | None] = mapped_column(Integer, nullable=True)
    emi_notes: Mapped[str] = mapped_column(Text, nullable=False, default="")
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)


class UserModel(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    phone: Mapped[str | None] = mapped_column(String(32), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)

    enrollments: Mapped[list["EnrollmentModel"]] = relationship(
        "EnrollmentModel",
        back_populates="user",
        cascade="all, delete-orphan",
    )


class EnrollmentModel(Base):
    """A user's enrollment; ``access_status`` caches plan-derived access."""

    __tablename__ = "enrollments"
    __table_args__ = (
        UniqueConstraint("user_id", "course_id", name="uq_enrollment_user_course"),
    )

    id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    user_id: Mapped[str] = mapped_column(
        String(255),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    course_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        ForeignKey("courses.id"),
        nullable=False,
    )
    payment_type: Mapped[str] = mapped_column(String(50), nullable=False)
    access_status: Mapped[str] = mapped_column(String(50), nullable=False, default="active")
    plan_id: Mapped[str | None] = mapped_column(
        Uuid(as_uuid=False),
        ForeignKey("emi_plans.id"),
        nullable=True,
    )
    enrolled_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)

    user: Mapped["UserModel"] = relationship("UserModel", back_populates="enrollments")


class EmiPlanModel(Base):
    """Installment plan, one per (user, course)."""

    __tablename__ = "emi_plans"
    __table_args__ = (
        UniqueConstraint("user_id", "course_id", name="uq_emi_plan_user_course"),
        Index("ix_emi_plans_status", "status"),
    )

    id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    user_id: Mapped[str] = mapped_column(String(255), nullable=False)
    course_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        ForeignKey("courses.id"),
        nullable=False,
    )
    course_title: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    total_amount_paise: Mapped[int] = mapped_column(Integer, nullable=False)
    months: Mapped[int] = mapped_column(Integer, nullable=False)
    due_day: Mapped[int] = mapped_column(Integer, nullable=False)
    start_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    status: Mapped[str] = mapped_column(String(50), nullable=False, default="active")
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )

    installments: Mapped[list["EmiInstallmentModel"]] = relationship(
        "EmiInstallmentModel",
        back_populates="plan",
        cascade="all, delete-orphan",
        order_by="EmiInstallmentModel.sequence_number",
    )
    lock_history: Mapped[list["LockHistoryModel"]] = relationship(
        "LockHistoryModel",
        back_populates="plan",
        cascade="all, delete-orphan",
        order_by="LockHistoryModel.locked_at",
    )


class EmiInstallmentModel(Base):
    """One installment within a plan."""

    __tablename__ = "emi_installments"
    __table_args__ = (
        UniqueConstraint("plan_id", "sequence_number", name="uq_installment_plan_sequence"),
        Index("ix_emi_installments_due_date", "due_date"),
    )

    id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    plan_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        ForeignKey("emi_plans.id", ondelete="CASCADE"),
        nullable=False,
    )
    sequence_number: Mapped[int] = mapped_column(Integer, nullable=False)
    period_label: Mapped[str] = mapped_column(String(20), nullable=False)
    due_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    grace_period_end: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    amount_paise: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
    paid_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    gateway_order_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    gateway_payment_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    gateway_signature: Mapped[str | None] = mapped_column(String(255), nullable=True)

    plan: Mapped["EmiPlanModel"] = relationship(
        "EmiPlanModel",
        back_populates="installments",
    )


class LockHistoryModel(Base):
    """Append-only audit of lock periods; ``unlocked_at`` closes an entry."""

    __tablename__ = "emi_lock_history"

    id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    plan_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        ForeignKey("emi_plans.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    locked_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    unlocked_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    overdue_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    reason: Mapped[str] = mapped_column(Text, nullable=False, default="")
    locked_by: Mapped[str] = mapped_column(String(100), nullable=False, default="system")

    plan: Mapped["EmiPlanModel"] = relationship(
        "EmiPlanModel",
        back_populates="lock_history",
    )


class PaymentModel(Base):
    """Payment ledger row."""

    __tablename__ = "payments"
    __table_args__ = (
        Index("ix_payments_user_course", "user_id", "course_id"),
    )

    id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    user_id: Mapped[str] = mapped_column(String(255), nullable=False)
    course_id: Mapped[str] = mapped_column(Uuid(as_uuid=False), nullable=False)
    plan_id: Mapped[str | None] = mapped_column(Uuid(as_uuid=False), nullable=True)
    transaction_id: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    amount_paise: Mapped[int] = mapped_column(Integer, nullable=False)
    currency: Mapped[str] = mapped_column(String(8), nullable=False, default="INR")
    payment_type: Mapped[str] = mapped_column(String(50), nullable=False)
    status: Mapped[str] = mapped_column(String(50), nullable=False, default="pending")
    method: Mapped[str | None] = mapped_column(String(50), nullable=True)
    emi_due_day: Mapped[int | None] = mapped_column(Integer, nullable=True)
    gateway_order_id: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    gateway_payment_id: Mapped[str | None] = mapped_column(String(255), nullable=True, unique=True)
    gateway_signature: Mapped[str | None] = mapped_column(String(255), nullable=True)
    installments: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
