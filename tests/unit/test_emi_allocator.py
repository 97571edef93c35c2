"""
Unit tests for the Payment Allocator.

These tests verify:
1. Priority order: overdue, then grace period, then upcoming
2. Exact-match law: valid iff the amount is a prefix sum of the queue
3. Corrective amounts offered for invalid tenders
"""

from datetime import datetime
from uuid import uuid4

import pytest

from src.domain.entities import EmiPlan, Installment, InstallmentStatus
from src.service.emi import (
    InstallmentTiming,
    calculate_payment_allocation,
    payment_queue,
    prefix_sums,
)

# Installments 2 and 3 both past their grace period
CATCH_UP_AT = datetime(2026, 3, 10)


# =============================================================================
# Priority queue
# =============================================================================

class TestPaymentQueue:
    """Tests for settlement ordering."""

    def test_overdue_before_grace_before_upcoming(self, plan):
        # 2 overdue, 3 in grace, 4..6 upcoming
        queue = payment_queue(plan, datetime(2026, 3, 6))

        assert [inst.sequence_number for inst, _ in queue] == [2, 3, 4, 5, 6]
        assert [timing for _, timing in queue[:3]] == [
            InstallmentTiming.OVERDUE,
            InstallmentTiming.GRACE_PERIOD,
            InstallmentTiming.UPCOMING,
        ]

    def test_paid_installments_excluded(self, plan):
        plan.installments[1].status = InstallmentStatus.PAID
        queue = payment_queue(plan, CATCH_UP_AT)

        assert [inst.sequence_number for inst, _ in queue] == [3, 4, 5, 6]

    def test_same_due_date_ordered_by_sequence(self):
        due = datetime(2026, 2, 5)
        plan_id = uuid4()
        plan = EmiPlan(
            user_id="user_123",
            course_id=uuid4(),
            total_amount_paise=300000,
            months=2,
            due_day=5,
            start_date=datetime(2026, 1, 5),
            id=plan_id,
            installments=[
                Installment(plan_id, 3, "February", due, due, 100000),
                Installment(plan_id, 2, "February", due, due, 200000),
            ],
        )

        queue = payment_queue(plan, datetime(2026, 2, 1))

        assert [inst.sequence_number for inst, _ in queue] == [2, 3]

    def test_prefix_sums(self, plan):
        assert prefix_sums(plan, CATCH_UP_AT) == [150000, 300000, 450000, 600000, 750000]


# =============================================================================
# calculate_payment_allocation
# =============================================================================

class TestCalculatePaymentAllocation:
    """Tests for exact-match allocation."""

    def test_catch_up_payment(self, plan):
        """Paying installments 2 and 3 together clears both."""
        allocation = calculate_payment_allocation(plan, 300000, CATCH_UP_AT)

        assert allocation.is_valid_amount is True
        assert [i.sequence_number for i in allocation.installments] == [2, 3]
        assert all(i.is_overdue for i in allocation.installments)
        assert allocation.total_allocated_paise == 300000
        assert allocation.remaining_paise == 0
        assert allocation.clears_overdue is True

    def test_single_upcoming_installment(self, plan):
        allocation = calculate_payment_allocation(plan, 150000, datetime(2026, 1, 20))

        assert allocation.is_valid_amount is True
        assert len(allocation.installments) == 1
        assert allocation.installments[0].sequence_number == 2
        assert allocation.installments[0].is_overdue is False
        assert allocation.clears_overdue is False

    def test_amount_between_prefix_sums_rejected(self, plan):
        allocation = calculate_payment_allocation(plan, 150050, CATCH_UP_AT)

        assert allocation.is_valid_amount is False
        assert allocation.total_allocated_paise == 150000
        assert allocation.remaining_paise == 50
        assert allocation.suggested_amount_paise == 300000
        assert allocation.next_installment_amount_paise == 150000
        assert allocation.suggested_installment_count == 2

    def test_amount_below_first_installment_rejected(self, plan):
        allocation = calculate_payment_allocation(plan, 100000, CATCH_UP_AT)

        assert allocation.is_valid_amount is False
        assert allocation.installments == ()
        assert allocation.suggested_amount_paise == 150000
        assert allocation.next_installment_amount_paise == 150000

    @pytest.mark.parametrize("amount", [0, -150000])
    def test_non_positive_amount_rejected(self, plan, amount):
        allocation = calculate_payment_allocation(plan, amount, CATCH_UP_AT)

        assert allocation.is_valid_amount is False
        assert allocation.installments == ()

    def test_overpayment_rejected(self, plan):
        allocation = calculate_payment_allocation(plan, 750001, CATCH_UP_AT)

        assert allocation.is_valid_amount is False
        assert len(allocation.installments) == 5
        assert allocation.remaining_paise == 1
        # Nothing beyond the queue can be suggested
        assert allocation.suggested_amount_paise == 750000
        assert allocation.next_installment_amount_paise == 0

    def test_paying_everything(self, plan):
        allocation = calculate_payment_allocation(plan, 750000, CATCH_UP_AT)

        assert allocation.is_valid_amount is True
        assert [i.sequence_number for i in allocation.installments] == [2, 3, 4, 5, 6]

    def test_fully_paid_plan_accepts_nothing(self, plan):
        for inst in plan.installments:
            inst.status = InstallmentStatus.PAID

        allocation = calculate_payment_allocation(plan, 150000, CATCH_UP_AT)

        assert allocation.is_valid_amount is False
        assert allocation.suggested_amount_paise == 0

    def test_deterministic(self, plan):
        first = calculate_payment_allocation(plan, 450000, CATCH_UP_AT)
        second = calculate_payment_allocation(plan, 450000, CATCH_UP_AT)

        assert first == second
        assert first.installment_ids == second.installment_ids

    def test_exact_match_law(self, plan):
        """Valid exactly when the amount is a prefix sum; sums always match."""
        valid_sums = set(prefix_sums(plan, CATCH_UP_AT))

        for amount in range(0, 800000, 25000):
            allocation = calculate_payment_allocation(plan, amount, CATCH_UP_AT)
            assert allocation.is_valid_amount == (amount in valid_sums)
            if allocation.is_valid_amount:
                assert sum(i.amount_paise for i in allocation.installments) == amount

    def test_does_not_mutate_plan(self, plan):
        calculate_payment_allocation(plan, 300000, CATCH_UP_AT)

        assert [i.status for i in plan.installments[1:]] == [InstallmentStatus.PENDING] * 5
