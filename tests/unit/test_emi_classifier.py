"""
Unit tests for the Installment Status Classifier.

These tests verify:
1. Timing boundaries (due date, grace period end)
2. Counts and amounts for on-time and lapsed payers
3. The access invariant: access implies nothing overdue and an active plan
"""

from datetime import datetime, timedelta

import pytest

from src.domain.entities import InstallmentStatus, PlanStatus
from src.service.emi import (
    InstallmentTiming,
    calculate_emi_status,
    classify_installment,
)


# =============================================================================
# classify_installment
# =============================================================================

class TestClassifyInstallment:
    """Tests for per-installment timing boundaries."""

    def test_upcoming_before_due_date(self, plan):
        inst = plan.installments[1]
        now = inst.due_date - timedelta(seconds=1)
        assert classify_installment(inst, now) == InstallmentTiming.UPCOMING

    def test_grace_period_on_due_date(self, plan):
        inst = plan.installments[1]
        assert classify_installment(inst, inst.due_date) == InstallmentTiming.GRACE_PERIOD

    def test_grace_period_at_grace_end(self, plan):
        """The grace period end itself is still inside the grace period."""
        inst = plan.installments[1]
        assert classify_installment(inst, inst.grace_period_end) == InstallmentTiming.GRACE_PERIOD

    def test_overdue_after_grace_end(self, plan):
        inst = plan.installments[1]
        now = inst.grace_period_end + timedelta(seconds=1)
        assert classify_installment(inst, now) == InstallmentTiming.OVERDUE

    def test_paid_regardless_of_time(self, plan):
        inst = plan.installments[0]
        assert classify_installment(inst, datetime(2030, 1, 1)) == InstallmentTiming.PAID

    def test_late_status_still_unpaid(self, plan):
        inst = plan.installments[1]
        inst.status = InstallmentStatus.LATE
        now = inst.grace_period_end + timedelta(days=1)
        assert classify_installment(inst, now) == InstallmentTiming.OVERDUE


# =============================================================================
# calculate_emi_status
# =============================================================================

class TestCalculateEmiStatus:
    """Tests for the plan-level snapshot."""

    def test_on_time_payer(self, plan):
        """Installment 1 paid, 2..6 in the future: full access, nothing overdue."""
        snapshot = calculate_emi_status(plan, datetime(2026, 1, 20))

        assert snapshot.total_emis == 6
        assert snapshot.paid_count == 1
        assert snapshot.pending_count == 5
        assert snapshot.overdue_count == 0
        assert snapshot.grace_period_count == 0
        assert snapshot.upcoming_count == 5
        assert snapshot.total_paid_paise == 150000
        assert snapshot.total_remaining_paise == 750000
        assert snapshot.next_due_amount_paise == 150000
        assert snapshot.next_due_date == datetime(2026, 2, 5, 9, 0)
        assert snapshot.has_overdue_payments is False
        assert snapshot.is_current_on_payments is True
        assert snapshot.has_access_to_content is True

    def test_grace_period_keeps_access(self, plan):
        snapshot = calculate_emi_status(plan, datetime(2026, 2, 6))

        assert snapshot.grace_period_count == 1
        assert snapshot.overdue_count == 0
        assert snapshot.has_access_to_content is True
        assert snapshot.grace_period[0].sequence_number == 2

    def test_lapsed_payer(self, plan):
        """Installment 2 past its grace period: overdue, no access."""
        snapshot = calculate_emi_status(plan, datetime(2026, 2, 10))

        assert snapshot.overdue_count == 1
        assert snapshot.total_overdue_paise == 150000
        assert snapshot.has_overdue_payments is True
        assert snapshot.is_current_on_payments is False
        assert snapshot.has_access_to_content is False
        assert snapshot.next_due_date == plan.installments[1].due_date

    def test_multiple_overdue_ordered_by_due_date(self, plan):
        snapshot = calculate_emi_status(plan, datetime(2026, 4, 20))

        assert snapshot.overdue_count == 3
        assert [i.sequence_number for i in snapshot.overdue] == [2, 3, 4]
        assert snapshot.total_overdue_paise == 450000

    def test_locked_plan_without_overdue_has_no_access(self, plan):
        """Access needs an active plan even when nothing is overdue."""
        plan.status = PlanStatus.LOCKED
        snapshot = calculate_emi_status(plan, datetime(2026, 1, 20))

        assert snapshot.has_overdue_payments is False
        assert snapshot.has_access_to_content is False

    def test_late_installments_counted(self, plan):
        plan.installments[1].status = InstallmentStatus.LATE
        snapshot = calculate_emi_status(plan, datetime(2026, 2, 10))

        assert snapshot.late_count == 1
        assert snapshot.pending_count == 4
        assert snapshot.unpaid_count == 5

    def test_fully_paid(self, plan):
        for inst in plan.installments:
            inst.status = InstallmentStatus.PAID

        snapshot = calculate_emi_status(plan, datetime(2026, 9, 1))

        assert snapshot.is_fully_paid is True
        assert snapshot.total_paid_paise == plan.total_amount_paise
        assert snapshot.total_remaining_paise == 0
        assert snapshot.next_due_date is None
        assert snapshot.next_due_amount_paise == 0

    def test_pure_for_same_inputs(self, plan):
        now = datetime(2026, 3, 6)
        assert calculate_emi_status(plan, now) == calculate_emi_status(plan, now)

    @pytest.mark.parametrize("status", list(PlanStatus))
    def test_access_implies_current_and_active(self, plan_factory, status):
        """Checked at every day across the life of the plan."""
        plan = plan_factory(status=status)
        now = datetime(2026, 1, 10)

        while now < datetime(2026, 7, 1):
            snapshot = calculate_emi_status(plan, now)
            if snapshot.has_access_to_content:
                assert snapshot.has_overdue_payments is False
                assert snapshot.plan_status == PlanStatus.ACTIVE
                assert all(now <= i.grace_period_end for i in snapshot.grace_period + snapshot.upcoming)
            now += timedelta(hours=12)
