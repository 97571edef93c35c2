"""
Installment schedule construction.

Due dates land on the payer's chosen day of month, clamped to the last
day of shorter months (a due day of 31 falls on Feb 28/29).
"""

import calendar
from datetime import datetime, timedelta
from typing import List, Optional
from uuid import UUID

from src.domain.entities import GatewayCorrelation, Installment, InstallmentStatus

MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)


def next_due_date(start: datetime, due_day: int, months_offset: int) -> datetime:
    """
    Date ``months_offset`` calendar months after ``start`` on ``due_day``.

    The time of day is carried over from ``start``.
    """
    month_index = start.month - 1 + months_offset
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return start.replace(year=year, month=month, day=min(due_day, last_day))


def period_label(due_date: datetime) -> str:
    return MONTH_NAMES[due_date.month - 1]


def build_installments(
    plan_id: UUID,
    monthly_amount_paise: int,
    months: int,
    due_day: int,
    now: datetime,
    grace_days: int,
    first_payment: Optional[GatewayCorrelation] = None,
) -> List[Installment]:
    """
    Build the fixed installment list for a new plan.

    The first installment is paid at enrollment, so it is due ``now``,
    has no grace period and is created already ``paid``. Installments
    2..N fall due on ``due_day`` of each following month.
    """
    if months < 1:
        raise ValueError("months must be at least 1")

    first = Installment(
        plan_id=plan_id,
        sequence_number=1,
        period_label=period_label(now),
        due_date=now,
        grace_period_end=now,
        amount_paise=monthly_amount_paise,
        status=InstallmentStatus.PAID,
        paid_at=now,
    )
    if first_payment is not None:
        first.gateway_order_id = first_payment.order_id
        first.gateway_payment_id = first_payment.payment_id
        first.gateway_signature = first_payment.signature

    installments = [first]
    for sequence in range(2, months + 1):
        due = next_due_date(now, due_day, sequence - 1)
        installments.append(
            Installment(
                plan_id=plan_id,
                sequence_number=sequence,
                period_label=period_label(due),
                due_date=due,
                grace_period_end=due + timedelta(days=grace_days),
                amount_paise=monthly_amount_paise,
            )
        )

    return installments
