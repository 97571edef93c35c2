"""
Fixtures for EMI engine unit tests.

The reference plan: bought 2026-01-10 09:00 with due day 5, six monthly
installments of 150000 paise, installment 1 paid at purchase.

    seq  due date     grace period end
    1    2026-01-10   2026-01-10 (paid)
    2    2026-02-05   2026-02-08
    3    2026-03-05   2026-03-08
    4    2026-04-05   2026-04-08
    5    2026-05-05   2026-05-08
    6    2026-06-05   2026-06-08
"""

from datetime import datetime
from typing import Callable
from uuid import uuid4

import pytest

from src.domain.entities import EmiPlan, PlanStatus
from src.service.emi import build_installments

PURCHASED_AT = datetime(2026, 1, 10, 9, 0)
MONTHLY = 150000


def make_plan(
    months: int = 6,
    monthly_amount_paise: int = MONTHLY,
    due_day: int = 5,
    start: datetime = PURCHASED_AT,
    status: PlanStatus = PlanStatus.ACTIVE,
    grace_days: int = 3,
) -> EmiPlan:
    """Build an in-memory plan with installment 1 already paid."""
    plan = EmiPlan(
        user_id="user_123",
        course_id=uuid4(),
        total_amount_paise=months * monthly_amount_paise,
        months=months,
        due_day=due_day,
        start_date=start,
        status=status,
    )
    plan.installments = build_installments(
        plan.id, monthly_amount_paise, months, due_day, start, grace_days
    )
    return plan


@pytest.fixture
def plan_factory() -> Callable[..., EmiPlan]:
    return make_plan


@pytest.fixture
def plan() -> EmiPlan:
    """Six-month plan in its initial state."""
    return make_plan()
