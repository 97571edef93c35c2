"""
Unit tests for installment schedule construction.

These tests verify:
1. Due-day clamping to month length
2. Year rollover
3. Initial installment list shape
"""

from datetime import datetime, timedelta
from uuid import uuid4

import pytest

from src.domain.entities import GatewayCorrelation, InstallmentStatus
from src.service.emi import build_installments, next_due_date, period_label


# =============================================================================
# next_due_date
# =============================================================================

class TestNextDueDate:
    """Tests for calendar month arithmetic."""

    def test_same_day_next_month(self):
        start = datetime(2026, 1, 10, 9, 0)
        assert next_due_date(start, 5, 1) == datetime(2026, 2, 5, 9, 0)

    def test_due_day_clamped_in_february(self):
        start = datetime(2026, 1, 31)
        assert next_due_date(start, 31, 1) == datetime(2026, 2, 28)

    def test_due_day_clamped_in_leap_february(self):
        start = datetime(2028, 1, 31)
        assert next_due_date(start, 31, 1) == datetime(2028, 2, 29)

    def test_clamping_does_not_stick(self):
        """A 31st due day returns to the 31st after a short month."""
        start = datetime(2026, 1, 31)
        assert next_due_date(start, 31, 2) == datetime(2026, 3, 31)

    def test_year_rollover(self):
        start = datetime(2026, 11, 20)
        assert next_due_date(start, 15, 3) == datetime(2027, 2, 15)

    def test_time_of_day_carried_over(self):
        start = datetime(2026, 1, 10, 17, 45, 12)
        assert next_due_date(start, 1, 1).time() == start.time()


# =============================================================================
# build_installments
# =============================================================================

class TestBuildInstallments:
    """Tests for the initial installment list."""

    def test_first_installment_paid_at_purchase(self):
        now = datetime(2026, 1, 10, 9, 0)
        installments = build_installments(uuid4(), 150000, 6, 5, now, 3)

        first = installments[0]
        assert first.sequence_number == 1
        assert first.status == InstallmentStatus.PAID
        assert first.paid_at == now
        assert first.due_date == now
        # No grace period for the first installment
        assert first.grace_period_end == first.due_date

    def test_remaining_installments_pending_with_grace(self):
        now = datetime(2026, 1, 10, 9, 0)
        installments = build_installments(uuid4(), 150000, 6, 5, now, 3)

        assert len(installments) == 6
        assert [i.sequence_number for i in installments] == [1, 2, 3, 4, 5, 6]

        for inst in installments[1:]:
            assert inst.status == InstallmentStatus.PENDING
            assert inst.amount_paise == 150000
            assert inst.due_date.day == 5
            assert inst.grace_period_end == inst.due_date + timedelta(days=3)

        assert installments[1].due_date == datetime(2026, 2, 5, 9, 0)
        assert installments[5].due_date == datetime(2026, 6, 5, 9, 0)

    def test_period_labels_follow_due_month(self):
        now = datetime(2026, 1, 10)
        installments = build_installments(uuid4(), 100000, 3, 5, now, 3)

        assert [i.period_label for i in installments] == ["January", "February", "March"]
        assert period_label(datetime(2026, 12, 1)) == "December"

    def test_grace_days_configurable(self):
        now = datetime(2026, 1, 10)
        installments = build_installments(uuid4(), 100000, 2, 5, now, 7)

        assert installments[1].grace_period_end - installments[1].due_date == timedelta(days=7)

    def test_first_payment_correlation_recorded(self):
        correlation = GatewayCorrelation(
            order_id="order_1",
            payment_id="pay_1",
            signature="sig_1",
        )
        installments = build_installments(
            uuid4(), 100000, 2, 5, datetime(2026, 1, 10), 3, first_payment=correlation
        )

        assert installments[0].gateway_order_id == "order_1"
        assert installments[0].gateway_payment_id == "pay_1"
        assert installments[1].gateway_order_id is None

    def test_zero_months_rejected(self):
        with pytest.raises(ValueError):
            build_installments(uuid4(), 100000, 0, 5, datetime(2026, 1, 10), 3)
