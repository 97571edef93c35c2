"""
Fixtures for integration tests.

Provides:
- In-memory SQLite database bound to the shared session manager
- Mock payment gateway and notification sender
- A controllable request clock
- Seeding helpers for courses, users and EMI plans
- Test client for FastAPI app
"""

from dataclasses import dataclass
from datetime import datetime
from typing import AsyncGenerator, Dict, List, Optional
from uuid import uuid4

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from src.main import app
from src.core.dependencies import (
    get_notification_sender,
    get_now,
    get_payment_gateway,
)
from src.domain.entities import (
    AccessStatus,
    Course,
    EmiPlan,
    Enrollment,
    GatewayOrder,
    GatewayPayment,
    NotificationType,
    Payment,
    PaymentMethod,
    PaymentStatus,
    PaymentType,
    PlanStatus,
    User,
)
from src.domain.exceptions import PaymentGatewayException
from src.domain.interfaces import NotificationSender, PaymentGateway
from src.infrastructure.clients import compute_signature
from src.infrastructure.database import Base, db_manager
from src.infrastructure.repositories import (
    PostgresCourseRepository,
    PostgresEmiPlanRepository,
    PostgresPaymentRepository,
    PostgresUserRepository,
)
from src.service.emi import build_installments


# =============================================================================
# Test Data
# =============================================================================

# Purchase time for seeded plans; due day 5 gives installment 2 on
# 2026-02-05 09:00 with its grace period ending 2026-02-08 09:00.
PURCHASED_AT = datetime(2026, 1, 10, 9, 0)
ON_TIME = datetime(2026, 1, 20, 9, 0)
LAPSED = datetime(2026, 2, 10, 9, 0)
CATCH_UP = datetime(2026, 3, 10, 9, 0)

MONTHLY = 150000
MONTHS = 6
PRICE = MONTHLY * MONTHS
USER_ID = "user_123"
GATEWAY_SECRET = "test_gateway_secret"


def user_headers(user_id: str = USER_ID) -> Dict[str, str]:
    return {"X-User-ID": user_id}


# =============================================================================
# Mock Clients
# =============================================================================

class MockPaymentGateway(PaymentGateway):
    """In-memory gateway; checkouts are simulated with ``checkout``."""

    def __init__(
        self,
        fail_mode: bool = False,
        capture_status: str = "captured",
        method: str = "upi",
    ):
        self.fail_mode = fail_mode
        self.capture_status = capture_status
        self.method = method
        self.orders: Dict[str, GatewayOrder] = {}
        self.payments: Dict[str, str] = {}
        self.fetch_count = 0

    async def create_order(
        self,
        amount_paise: int,
        currency: str,
        receipt: str,
        notes: Optional[Dict[str, object]] = None,
    ) -> GatewayOrder:
        if self.fail_mode:
            raise PaymentGatewayException(message="Gateway unavailable", status_code=500)

        order = GatewayOrder(
            order_id=f"order_{uuid4().hex[:14]}",
            amount_paise=amount_paise,
            currency=currency,
            receipt=receipt,
        )
        self.orders[order.order_id] = order
        return order

    def verify_signature(self, order_id: str, payment_id: str, signature: str) -> bool:
        return compute_signature(order_id, payment_id, GATEWAY_SECRET) == signature

    async def fetch_payment(self, payment_id: str) -> GatewayPayment:
        self.fetch_count += 1
        if self.fail_mode:
            raise PaymentGatewayException(message="Gateway unavailable", status_code=500)

        order_id = self.payments.get(payment_id)
        order = self.orders.get(order_id) if order_id else None
        return GatewayPayment(
            payment_id=payment_id,
            order_id=order_id,
            status=self.capture_status,
            method=self.method,
            amount_paise=order.amount_paise if order else 0,
        )

    def checkout(self, order_id: str) -> Dict[str, str]:
        """Pay an order and return the callback body the client would post."""
        payment_id = f"pay_{uuid4().hex[:14]}"
        self.payments[payment_id] = order_id
        return {
            "razorpay_order_id": order_id,
            "razorpay_payment_id": payment_id,
            "razorpay_signature": compute_signature(order_id, payment_id, GATEWAY_SECRET),
        }


class MockNotificationSender(NotificationSender):
    """Records notifications; optionally fails or raises."""

    def __init__(self, fail_mode: bool = False, raise_mode: bool = False):
        self.fail_mode = fail_mode
        self.raise_mode = raise_mode
        self.call_count = 0
        self.sent: List[dict] = []

    async def notify(
        self,
        user_id: str,
        notification_type: NotificationType,
        payload: Dict[str, object],
    ) -> bool:
        self.call_count += 1

        if self.raise_mode:
            raise RuntimeError("notification service exploded")
        if self.fail_mode:
            return False

        self.sent.append({
            "user_id": user_id,
            "type": notification_type.value,
            "payload": payload,
        })
        return True

    def of_type(self, notification_type: NotificationType) -> List[dict]:
        return [n for n in self.sent if n["type"] == notification_type.value]


@dataclass
class MutableClock:
    """Request clock that tests can move."""

    now: datetime = ON_TIME


# =============================================================================
# Seeding Helpers
# =============================================================================

async def seed_user(user_id: str = USER_ID) -> User:
    user = User(id=user_id, name="Asha Rao", email=f"{user_id}@example.com")
    async with db_manager.session() as session:
        await PostgresUserRepository(session).save(user)
    return user


async def seed_course(
    emi_enabled: bool = True,
    months: int = MONTHS,
    monthly_amount_paise: int = MONTHLY,
    price_paise: Optional[int] = None,
    title: str = "Full Stack Web Development",
) -> Course:
    course = Course(
        title=title,
        price_paise=price_paise if price_paise is not None else months * monthly_amount_paise,
        emi_enabled=emi_enabled,
        emi_months=months if emi_enabled else None,
        emi_monthly_amount_paise=monthly_amount_paise if emi_enabled else None,
        emi_notes="No-cost EMI" if emi_enabled else "",
    )
    async with db_manager.session() as session:
        await PostgresCourseRepository(session).save(course)
    return course


async def seed_emi_plan(
    course: Course,
    user_id: str = USER_ID,
    purchased_at: datetime = PURCHASED_AT,
    due_day: int = 5,
    status: PlanStatus = PlanStatus.ACTIVE,
    access_status: AccessStatus = AccessStatus.ACTIVE,
) -> EmiPlan:
    """Store a plan as if the EMI purchase had been verified at ``purchased_at``."""
    plan = EmiPlan(
        user_id=user_id,
        course_id=course.id,
        course_title=course.title,
        total_amount_paise=course.emi_total_paise,
        months=course.emi_months,
        due_day=due_day,
        start_date=purchased_at,
        status=status,
        created_at=purchased_at,
    )
    plan.installments = build_installments(
        plan.id,
        course.emi_monthly_amount_paise,
        course.emi_months,
        due_day,
        purchased_at,
        grace_days=3,
    )

    async with db_manager.session() as session:
        await PostgresEmiPlanRepository(session).save(plan)
        await PostgresUserRepository(session).add_enrollment(
            Enrollment(
                user_id=user_id,
                course_id=course.id,
                payment_type="emi",
                access_status=access_status,
                plan_id=plan.id,
                enrolled_at=purchased_at,
            )
        )
    return plan


async def seed_full_payment(course: Course, user_id: str = USER_ID) -> Payment:
    payment = Payment(
        user_id=user_id,
        course_id=course.id,
        amount_paise=course.price_paise,
        payment_type=PaymentType.FULL,
        gateway_order_id=f"order_{uuid4().hex[:14]}",
        gateway_payment_id=f"pay_{uuid4().hex[:14]}",
        transaction_id=f"course_{uuid4().hex[:12]}",
        status=PaymentStatus.COMPLETED,
        method=PaymentMethod.CARD,
        created_at=PURCHASED_AT,
        completed_at=PURCHASED_AT,
    )
    async with db_manager.session() as session:
        await PostgresPaymentRepository(session).save(payment)
    return payment


async def load_plan(plan_id) -> EmiPlan:
    async with db_manager.session() as session:
        return await PostgresEmiPlanRepository(session).get_by_id(plan_id)


async def load_enrollment(course_id, user_id: str = USER_ID) -> Optional[Enrollment]:
    async with db_manager.session() as session:
        return await PostgresUserRepository(session).get_enrollment(user_id, course_id)


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest_asyncio.fixture
async def test_engine():
    """Create an in-memory SQLite async engine bound to the session manager."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    db_manager.bind(engine)

    yield engine

    await db_manager.close()


@pytest_asyncio.fixture
async def user(test_engine) -> User:
    return await seed_user()


@pytest_asyncio.fixture
async def emi_course(test_engine) -> Course:
    return await seed_course()


@pytest_asyncio.fixture
async def emi_plan(emi_course: Course, user: User) -> EmiPlan:
    """Six-month plan, installment 1 paid at purchase."""
    return await seed_emi_plan(emi_course)


# =============================================================================
# Mock Client Fixtures
# =============================================================================

@pytest.fixture
def mock_gateway() -> MockPaymentGateway:
    return MockPaymentGateway()


@pytest.fixture
def mock_notifier() -> MockNotificationSender:
    return MockNotificationSender()


@pytest.fixture
def clock() -> MutableClock:
    return MutableClock()


# =============================================================================
# App Client Fixtures
# =============================================================================

@pytest_asyncio.fixture
async def client(
    test_engine,
    mock_gateway: MockPaymentGateway,
    mock_notifier: MockNotificationSender,
    clock: MutableClock,
) -> AsyncGenerator[AsyncClient, None]:
    """
    Create a test client with mocked dependencies.

    This client:
    - Uses an in-memory SQLite database
    - Mocks the payment gateway and notification sender
    - Reads the request time from ``clock``
    """
    app.dependency_overrides[get_payment_gateway] = lambda: mock_gateway
    app.dependency_overrides[get_notification_sender] = lambda: mock_notifier
    app.dependency_overrides[get_now] = lambda: clock.now

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
